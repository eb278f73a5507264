"""
Fixtures partagées : base SQLite temporaire, faux notificateur,
client FastAPI branché sur cette base.
"""
import os

# avant l'import de resq.booking.api, qui crée son engine à l'import
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from resq.booking import models  # noqa: F401
from resq.booking.api import get_notifier, get_session
from resq.booking.app import app
from resq.booking.models import TIME_SLOT, Booking, Resource


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'resq.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def events():
    return []


@pytest.fixture
def notify(events):
    def _notify(event_type, payload):
        events.append((event_type, payload))
    return _notify


@pytest.fixture
def make_resource(engine):
    """Insère une ressource directement, avec un compteur arbitraire."""
    def _make(capacity=10, used=0, closed=False, kind=TIME_SLOT, name="Evacuation 08:00-10:00", **extra):
        with Session(engine) as s:
            r = Resource(kind=kind, name=name, capacity=capacity, used=used, closed=closed, **extra)
            s.add(r)
            s.commit()
            s.refresh(r)
            return r.id
    return _make


@pytest.fixture
def make_booking(engine):
    def _make(resource_id, requester_id=1, status="ACTIVE"):
        with Session(engine) as s:
            b = Booking(resource_id=resource_id, requester_id=requester_id, status=status)
            s.add(b)
            s.commit()
            s.refresh(b)
            return b.id
    return _make


@pytest.fixture
def client(engine, notify):
    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_notifier] = lambda: notify
    yield TestClient(app)
    app.dependency_overrides.clear()

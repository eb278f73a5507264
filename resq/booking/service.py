# ============================================================
# service.py — Booking Service
# ------------------------------------------------------------
# Surface publique utilisée par les routes :
#   - reserve : incrément du ledger + création du Booking,
#               dans UNE seule transaction
#   - release : annulation + décrément du ledger, idem
#   - query   : lecture seule de l'état d'une ressource
#   - close / reopen : transitions administratives
#
# La notification (RabbitMQ) est envoyée APRÈS le commit, en
# "fire-and-forget" : un échec n'annule jamais la réservation.
# ============================================================
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Union

from sqlalchemy import update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlmodel import Session, select

from .errors import NotFound, StoreUnavailable
from .ledger import CapacityLedger
from .models import Booking, ResourceSnapshot, utcnow
from .publisher import publish_event
from .repository import to_snapshot

ACTIVE = "ACTIVE"
CANCELLED = "CANCELLED"

CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
RESOURCE_CLOSED = "RESOURCE_CLOSED"

# erreurs de connexion / timeout côté base
STORE_ERRORS = (OperationalError, InterfaceError)


# Lectures : une panne de base devient StoreUnavailable (503)
@contextmanager
def store_guard(what: str):
    try:
        yield
    except STORE_ERRORS as e:
        raise StoreUnavailable(f"{what} failed: {e}") from e


@dataclass(frozen=True)
class Rejected:
    """Réservation refusée : résultat attendu sous contention, pas une faute."""
    resource_id: int
    reason: str


class BookingService:
    def __init__(self, session: Session, notify: Callable[[str, dict], None] = publish_event):
        self.session = session
        self.ledger = CapacityLedger(session)
        self.notify = notify

    # ------------------------------------------------------------
    # reserve
    # ------------------------------------------------------------
    # Pas de déduplication par demandeur : chaque appel consomme
    # une place (une famille peut réserver plusieurs places).
    # ------------------------------------------------------------
    def reserve(self, resource_id: int, requester_id: int) -> Union[Booking, Rejected]:
        try:
            inc = self.ledger.try_increment(resource_id)
            if not inc:
                self.session.rollback()
                reason = RESOURCE_CLOSED if inc.closed else CAPACITY_EXCEEDED
                print(f"[booking] rejected resource={resource_id} requester={requester_id} reason={reason}", flush=True)
                return Rejected(resource_id=resource_id, reason=reason)

            b = Booking(resource_id=resource_id, requester_id=requester_id, status=ACTIVE)
            self.session.add(b)
            self.session.commit()
            self.session.refresh(b)
        except NotFound:
            self.session.rollback()
            raise
        except STORE_ERRORS as e:
            self.session.rollback()
            raise StoreUnavailable(f"reserve on resource {resource_id} failed: {e}") from e

        print(f"[booking] reserved booking={b.id} resource={resource_id} requester={requester_id}", flush=True)
        self._notify("BookingCreated", {
            "bookingId": b.id,
            "resourceId": resource_id,
            "requesterId": requester_id,
        })
        return b

    # ------------------------------------------------------------
    # release
    # ------------------------------------------------------------
    # Le passage ACTIVE → CANCELLED est un UPDATE conditionnel :
    # deux annulations concurrentes de la même réservation ne
    # décrémentent le compteur qu'une seule fois.
    # ------------------------------------------------------------
    def release(self, booking_id: int) -> Booking:
        try:
            b = self._load_booking(booking_id)
            if b.status == CANCELLED:
                return b

            stmt = (
                update(Booking)
                .where(Booking.id == booking_id)
                .where(Booking.status == ACTIVE)
                .values(status=CANCELLED, cancelled_at=utcnow())
            )
            if self.session.connection().execute(stmt).rowcount == 1:
                self.ledger.decrement(b.resource_id)
                self.session.commit()
                released = True
            else:
                self.session.rollback()
                released = False
            b = self._load_booking(booking_id)
        except NotFound:
            self.session.rollback()
            raise
        except STORE_ERRORS as e:
            self.session.rollback()
            raise StoreUnavailable(f"release of booking {booking_id} failed: {e}") from e

        if released:
            print(f"[booking] cancelled booking={b.id} resource={b.resource_id}", flush=True)
            self._notify("BookingCancelled", {
                "bookingId": b.id,
                "resourceId": b.resource_id,
                "requesterId": b.requester_id,
            })
        return b

    def query(self, resource_id: int) -> ResourceSnapshot:
        with store_guard(f"query of resource {resource_id}"):
            return to_snapshot(self.ledger.resource(resource_id))

    def close(self, resource_id: int) -> ResourceSnapshot:
        return self._set_closed(resource_id, True, "ResourceClosed")

    def reopen(self, resource_id: int) -> ResourceSnapshot:
        return self._set_closed(resource_id, False, "ResourceReopened")

    def _set_closed(self, resource_id: int, closed: bool, event_type: str) -> ResourceSnapshot:
        try:
            self.ledger.set_closed(resource_id, closed)
            self.session.commit()
        except NotFound:
            self.session.rollback()
            raise
        except STORE_ERRORS as e:
            self.session.rollback()
            raise StoreUnavailable(f"{event_type} on resource {resource_id} failed: {e}") from e

        snap = self.query(resource_id)
        print(f"[booking] {event_type} resource={resource_id} status={snap.status}", flush=True)
        self._notify(event_type, {"resourceId": resource_id, "status": snap.status})
        return snap

    def _load_booking(self, booking_id: int) -> Booking:
        b = self.session.exec(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        ).first()
        if b is None:
            raise NotFound("booking", booking_id)
        return b

    def _notify(self, event_type: str, payload: dict):
        try:
            self.notify(event_type, payload)
        except Exception as e:
            # la réservation est déjà committée, on ne fait que tracer
            print(f"[booking] notification {event_type} failed: {e}", flush=True)

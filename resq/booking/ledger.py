# ============================================================
# ledger.py — Registre de capacité (Capacity Ledger)
# ------------------------------------------------------------
# Seul chemin de modification du couple (capacity, used).
# Chaque mutation est UNE instruction SQL conditionnelle évaluée
# par la base : jamais de lecture puis écriture séparées.
#
# Le ledger travaille dans la transaction de la Session fournie
# et ne fait jamais de commit : c'est l'appelant (BookingService)
# qui décide de la frontière transactionnelle.
# ============================================================
from dataclasses import dataclass

from sqlalchemy import case, update
from sqlmodel import Session, select

from .errors import NotFound
from .models import Resource, utcnow
from .status import project_status


@dataclass(frozen=True)
class LedgerEntry:
    capacity: int
    used: int
    status: str


@dataclass(frozen=True)
class Increment:
    """Résultat de try_increment, évaluable comme un booléen."""
    ok: bool
    closed: bool = False

    def __bool__(self):
        return self.ok


class CapacityLedger:
    def __init__(self, session: Session):
        self.session = session

    def _load(self, resource_id: int) -> Resource:
        # populate_existing : les UPDATE passent par la connexion,
        # l'objet en cache dans la Session peut être périmé
        stmt = (
            select(Resource)
            .where(Resource.id == resource_id)
            .execution_options(populate_existing=True)
        )
        r = self.session.exec(stmt).first()
        if r is None:
            raise NotFound("resource", resource_id)
        return r

    def _execute(self, stmt) -> int:
        return self.session.connection().execute(stmt).rowcount

    def get(self, resource_id: int) -> LedgerEntry:
        r = self._load(resource_id)
        return LedgerEntry(r.capacity, r.used, project_status(r.capacity, r.used, r.closed))

    # used = used + 1 seulement si used < capacity et ressource ouverte.
    # Deux appels concurrents sur la dernière place : la base
    # sérialise les UPDATE, un seul voit used < capacity.
    def try_increment(self, resource_id: int) -> Increment:
        stmt = (
            update(Resource)
            .where(Resource.id == resource_id)
            .where(Resource.used < Resource.capacity)
            .where(Resource.closed.is_(False))
            .values(used=Resource.used + 1, updated_at=utcnow())
        )
        if self._execute(stmt) == 1:
            return Increment(ok=True)
        # aucune ligne modifiée : ressource absente, pleine ou fermée
        r = self._load(resource_id)
        return Increment(ok=False, closed=r.closed)

    # used = max(used - 1, 0) : tolère les annulations en double
    def decrement(self, resource_id: int) -> None:
        stmt = (
            update(Resource)
            .where(Resource.id == resource_id)
            .values(
                used=case((Resource.used > 0, Resource.used - 1), else_=0),
                updated_at=utcnow(),
            )
        )
        if self._execute(stmt) == 0:
            raise NotFound("resource", resource_id)

    # Action administrative, ne touche jamais au compteur
    def set_closed(self, resource_id: int, closed: bool) -> None:
        stmt = (
            update(Resource)
            .where(Resource.id == resource_id)
            .values(closed=closed, updated_at=utcnow())
        )
        if self._execute(stmt) == 0:
            raise NotFound("resource", resource_id)

    def resource(self, resource_id: int) -> Resource:
        return self._load(resource_id)

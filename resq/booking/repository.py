# ============================================================
# repository.py — Accès aux données Resource / Booking
# ------------------------------------------------------------
# Ce module implémente le design pattern "Repository". Il isole
# les lectures et la création administrative des ressources de
# la couche API. Les compteurs (used) ne sont JAMAIS modifiés
# ici : c'est le rôle exclusif du ledger.
# ============================================================
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .errors import AlreadyExists
from .models import TIME_SLOT, Booking, Resource, ResourceCreate, ResourceSnapshot
from .status import AVAILABLE, CLOSED, FULL, project_status, utilization


def to_snapshot(r: Resource) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=r.id,
        kind=r.kind,
        name=r.name,
        capacity=r.capacity,
        used=r.used,
        remaining=max(r.capacity - r.used, 0),
        status=project_status(r.capacity, r.used, r.closed),
        utilization=utilization(r.capacity, r.used),
        slot_date=r.slot_date,
        time_slot=r.time_slot,
        location_type=r.location_type,
        latitude=r.latitude,
        longitude=r.longitude,
        address=r.address,
        contact_number=r.contact_number,
    )


def summarize(rows: List[ResourceSnapshot]) -> dict:
    counts = {AVAILABLE: 0, FULL: 0, CLOSED: 0}
    for s in rows:
        counts[s.status] += 1
    avg = round(sum(s.utilization for s in rows) / len(rows), 2) if rows else 0.0
    return {
        "total": len(rows),
        "available": counts[AVAILABLE],
        "full": counts[FULL],
        "closed": counts[CLOSED],
        "total_capacity": sum(s.capacity for s in rows),
        "total_used": sum(s.used for s in rows),
        "average_utilization": avg,
    }


class ResourceRepository:
    def __init__(self, session: Session):
        self.session = session

    # Création administrative : used = 0, ouverte.
    # Un créneau (kind, slot_date, time_slot) déjà présent lève
    # AlreadyExists, la contrainte d'unicité tranche les courses.
    def create(self, data: ResourceCreate) -> Resource:
        r = Resource(**data.model_dump(), used=0, closed=False)
        self.session.add(r)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise AlreadyExists(
                f"{data.kind} {data.slot_date} {data.time_slot} already exists"
            ) from e
        self.session.refresh(r)
        return r

    def get(self, resource_id: int) -> Optional[Resource]:
        return self.session.exec(select(Resource).where(Resource.id == resource_id)).first()

    def find_slot(self, slot_date: date, time_slot: str) -> Optional[Resource]:
        return self.session.exec(select(Resource).where(
            Resource.kind == TIME_SLOT,
            Resource.slot_date == slot_date,
            Resource.time_slot == time_slot,
        )).first()

    def find_by_name(self, kind: str, name: str) -> Optional[Resource]:
        return self.session.exec(select(Resource).where(
            Resource.kind == kind, Resource.name == name
        )).first()

    # Filtre sur le statut DÉRIVÉ : appliqué après lecture, puisque
    # le statut n'existe pas en base
    def list(
        self,
        kind: Optional[str] = None,
        slot_date: Optional[date] = None,
        location_type: Optional[str] = None,
        status: Optional[str] = None,
        q: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[ResourceSnapshot]:
        stmt = select(Resource)
        if kind:
            stmt = stmt.where(Resource.kind == kind)
        if slot_date:
            stmt = stmt.where(Resource.slot_date == slot_date)
        if date_from:
            stmt = stmt.where(Resource.slot_date >= date_from)
        if date_to:
            stmt = stmt.where(Resource.slot_date <= date_to)
        if location_type:
            stmt = stmt.where(Resource.location_type == location_type)
        if q:
            pattern = f"%{q}%"
            stmt = stmt.where(or_(
                Resource.name.ilike(pattern),
                Resource.address.ilike(pattern),
                Resource.location_type.ilike(pattern),
                Resource.time_slot.ilike(pattern),
            ))
        stmt = stmt.order_by(Resource.slot_date, Resource.time_slot, Resource.name)
        rows = [to_snapshot(r) for r in self.session.exec(stmt).all()]
        if status:
            rows = [s for s in rows if s.status == status]
        return rows

    # Agrégats globaux + ventilation par type de lieu et par date
    def statistics(self, kind: Optional[str] = None) -> dict:
        rows = self.list(kind=kind)
        stats = summarize(rows)
        by_type, by_date = {}, {}
        for s in rows:
            if s.location_type:
                by_type.setdefault(s.location_type, []).append(s)
            if s.slot_date:
                by_date.setdefault(s.slot_date.isoformat(), []).append(s)
        stats["by_type"] = {k: summarize(v) for k, v in sorted(by_type.items())}
        stats["by_date"] = {k: summarize(v) for k, v in sorted(by_date.items())}
        return stats


class BookingRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, booking_id: int) -> Optional[Booking]:
        return self.session.exec(select(Booking).where(Booking.id == booking_id)).first()

    def for_requester(self, requester_id: int) -> List[Booking]:
        return self.session.exec(
            select(Booking)
            .where(Booking.requester_id == requester_id)
            .order_by(Booking.id.desc())
        ).all()

# ============================================================
# models.py — Modèles de données SQLModel (Booking Service)
# ------------------------------------------------------------
# Définit les tables de la base PostgreSQL :
#   1. Resource : ressource réservable (créneau d'évacuation
#      ou lieu d'urgence) avec sa capacité et son compteur
#   2. Booking : une réservation sur une ressource
# Et les schémas (non persistés) échangés par l'API.
# ============================================================
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import date, datetime, timezone
from typing import Optional


TIME_SLOT = "time_slot"
LOCATION = "location"
KINDS = (TIME_SLOT, LOCATION)

LOCATION_TYPES = ("relief_center", "safe_zone", "rescue_team", "hospital", "shelter")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------
# Resource
# ------------------------------------------------------------
# Généralise les créneaux d'évacuation et les lieux d'urgence :
#  - capacity : nombre max de réservations / occupants
#  - used     : modifié uniquement par le ledger (0 <= used <= capacity)
#  - closed   : fermeture administrative
# Pas de colonne status : elle est toujours recalculée (status.py).
# ------------------------------------------------------------
class Resource(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("kind", "slot_date", "time_slot"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: str = Field(index=True)
    name: str
    capacity: int
    used: int = 0
    closed: bool = False

    # créneau d'évacuation
    slot_date: Optional[date] = Field(default=None, index=True)
    time_slot: Optional[str] = None

    # lieu d'urgence
    location_type: Optional[str] = Field(default=None, index=True)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ------------------------------------------------------------
# Booking
# ------------------------------------------------------------
# Cycle de vie : ACTIVE → CANCELLED (jamais supprimée, pour
# garder l'historique même si la ressource est fermée)
# ------------------------------------------------------------
class Booking(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    resource_id: int = Field(foreign_key="resource.id", index=True)
    requester_id: int = Field(index=True)
    status: str = "ACTIVE"
    created_at: datetime = Field(default_factory=utcnow)
    cancelled_at: Optional[datetime] = None


class ResourceCreate(SQLModel):
    kind: str
    name: str
    capacity: int = Field(ge=0)
    slot_date: Optional[date] = None
    time_slot: Optional[str] = None
    location_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None


class ResourceSnapshot(SQLModel):
    id: int
    kind: str
    name: str
    capacity: int
    used: int
    remaining: int
    status: str
    utilization: float
    slot_date: Optional[date] = None
    time_slot: Optional[str] = None
    location_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None


class ReserveRequest(SQLModel):
    requester_id: int

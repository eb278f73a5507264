# ============================================================
# defaults.py — Données par défaut (créneaux et lieux)
# ------------------------------------------------------------
#  - 12 créneaux d'évacuation de 2h par jour, capacité 10
#  - 5 lieux d'urgence de référence (Colombo, Galle, ...)
# Les deux fonctions de seed sont idempotentes : on peut les
# relancer à chaque démarrage sans créer de doublons.
# ============================================================
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlmodel import Session

from .errors import AlreadyExists
from .models import LOCATION, TIME_SLOT, ResourceCreate
from .repository import ResourceRepository

LOCAL_TZ = ZoneInfo(os.getenv("LOCAL_TZ", "Asia/Colombo"))
DEFAULT_SLOT_CAPACITY = int(os.getenv("DEFAULT_SLOT_CAPACITY", "10"))

DEFAULT_TIME_SLOTS = [
    "00:00-02:00",
    "02:00-04:00",
    "04:00-06:00",
    "06:00-08:00",
    "08:00-10:00",
    "10:00-12:00",
    "12:00-14:00",
    "14:00-16:00",
    "16:00-18:00",
    "18:00-20:00",
    "20:00-22:00",
    "22:00-00:00",
]

DEFAULT_LOCATIONS = [
    dict(name="Colombo Relief Center", location_type="relief_center", capacity=500,
         latitude=6.9271, longitude=79.8612, contact_number="+94112345678", address="Colombo Central"),
    dict(name="Galle Safe Zone", location_type="safe_zone", capacity=300,
         latitude=6.0535, longitude=80.2210, contact_number="+94112345679", address="Galle Fort"),
    dict(name="Kandy Rescue Team", location_type="rescue_team", capacity=50,
         latitude=7.2906, longitude=80.6337, contact_number="+94112345680", address="Kandy City"),
    dict(name="Jaffna Hospital", location_type="hospital", capacity=200,
         latitude=9.6615, longitude=80.0255, contact_number="+94112345681", address="Jaffna Central"),
    dict(name="Nuwara Eliya Shelter", location_type="shelter", capacity=150,
         latitude=6.9497, longitude=80.7891, contact_number="+94112345682", address="Nuwara Eliya Hills"),
]


def today() -> date:
    return datetime.now(LOCAL_TZ).date()


def create_default_slots(s: Session, day: date, capacity: int = DEFAULT_SLOT_CAPACITY):
    repo = ResourceRepository(s)
    created = 0
    for label in DEFAULT_TIME_SLOTS:
        if repo.find_slot(day, label):
            continue
        try:
            repo.create(ResourceCreate(
                kind=TIME_SLOT,
                name=f"Evacuation {day.isoformat()} {label}",
                capacity=capacity,
                slot_date=day,
                time_slot=label,
            ))
        except AlreadyExists:
            # créé entre-temps par un seed concurrent
            continue
        created += 1
    print(f"[seed] {created} time slots created for {day.isoformat()}", flush=True)
    return repo.list(kind=TIME_SLOT, slot_date=day)


def seed_locations(s: Session):
    repo = ResourceRepository(s)
    created = 0
    for loc in DEFAULT_LOCATIONS:
        if repo.find_by_name(LOCATION, loc["name"]):
            continue
        repo.create(ResourceCreate(kind=LOCATION, **loc))
        created += 1
    print(f"[seed] {created} emergency locations created", flush=True)
    return repo.list(kind=LOCATION)

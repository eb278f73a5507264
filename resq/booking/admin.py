# ============================================================
# admin.py — Routes d'administration
# ------------------------------------------------------------
# Actions réservées aux coordinateurs :
#  - créer une ressource (capacité fixée à la création)
#  - générer les créneaux d'évacuation par défaut d'une journée
#  - fermer / rouvrir une ressource (jamais de suppression,
#    pour garder l'historique des réservations)
# ============================================================

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session
from datetime import date
from typing import List, Optional

from .api import get_service, get_session
from .defaults import create_default_slots, today
from .errors import AlreadyExists, NotFound, StoreUnavailable
from .models import KINDS, LOCATION, LOCATION_TYPES, ResourceCreate, ResourceSnapshot
from .repository import ResourceRepository, to_snapshot
from .service import BookingService, store_guard

router = APIRouter(prefix="/v1/admin")


@router.post("/resources", response_model=ResourceSnapshot, status_code=201)
def create_resource(data: ResourceCreate, s: Session = Depends(get_session)):
    if data.kind not in KINDS:
        raise HTTPException(400, f"kind must be one of {', '.join(KINDS)}")
    if data.kind == LOCATION and data.location_type not in LOCATION_TYPES:
        raise HTTPException(400, f"location_type must be one of {', '.join(LOCATION_TYPES)}")
    try:
        with store_guard("resource creation"):
            created = ResourceRepository(s).create(data)
    except AlreadyExists as e:
        raise HTTPException(409, str(e))
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))
    print(f"[booking] resource created id={created.id} kind={created.kind} capacity={created.capacity}", flush=True)
    return to_snapshot(created)


# Idempotent : les créneaux déjà présents pour ce jour sont conservés
@router.post("/time-slots/defaults", response_model=List[ResourceSnapshot], status_code=201)
def default_slots(slot_date: Optional[date] = Query(None, alias="date"), s: Session = Depends(get_session)):
    try:
        with store_guard("default slots"):
            return create_default_slots(s, slot_date or today())
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))


@router.post("/resources/{resource_id}/close", response_model=ResourceSnapshot)
def close_resource(resource_id: int, svc: BookingService = Depends(get_service)):
    try:
        return svc.close(resource_id)
    except NotFound as e:
        raise HTTPException(404, str(e))
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))


@router.post("/resources/{resource_id}/reopen", response_model=ResourceSnapshot)
def reopen_resource(resource_id: int, svc: BookingService = Depends(get_service)):
    try:
        return svc.reopen(resource_id)
    except NotFound as e:
        raise HTTPException(404, str(e))
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))

# ============================================================
# app.py — Point d'entrée du service Booking
# ------------------------------------------------------------
# Initialise l'application FastAPI du service Booking :
#   - Crée les tables dans la base de données PostgreSQL
#   - Génère les données par défaut si SEED_DEFAULTS=1
#   - Monte les routes publiques et les routes d'administration
# ============================================================
from fastapi import FastAPI
from sqlmodel import SQLModel, Session
import os

from .api import router, engine
from .admin import router as admin_router
from .defaults import create_default_slots, seed_locations, today
from . import models  # noqa: F401  (enregistre les tables)

SEED_DEFAULTS = os.getenv("SEED_DEFAULTS", "0") == "1"

app = FastAPI(title="ResQ-LK Booking Service")

# Exécuté automatiquement par FastAPI au lancement du conteneur.
# 1. Crée les tables SQL (Resource + Booking).
# 2. Optionnel : créneaux du jour + lieux d'urgence de référence.

@app.on_event("startup")
def start():
    SQLModel.metadata.create_all(engine)
    if SEED_DEFAULTS:
        with Session(engine) as s:
            seed_locations(s)
            create_default_slots(s, today())


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(admin_router)
app.include_router(router)

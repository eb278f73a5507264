# ============================================================
# status.py — Calcul du statut affiché d'une ressource
# ------------------------------------------------------------
# Le statut n'est jamais stocké : il est dérivé à chaque
# lecture / écriture de (capacity, used, closed).
#   closed         → "closed" (prioritaire sur la capacité)
#   used >= capacity → "full"
#   sinon          → "available"
# ============================================================

AVAILABLE = "available"
FULL = "full"
CLOSED = "closed"
STATUSES = (AVAILABLE, FULL, CLOSED)


def project_status(capacity: int, used: int, closed: bool) -> str:
    if closed:
        return CLOSED
    if used >= capacity:
        return FULL
    return AVAILABLE


def utilization(capacity: int, used: int) -> float:
    # pourcentage d'occupation, 0 pour une ressource sans capacité
    if capacity <= 0:
        return 0.0
    return round(used / capacity * 100, 2)

# ============================================================
# errors.py — Erreurs métier du Booking Service
# ------------------------------------------------------------
# NotFound et StoreUnavailable remontent jusqu'aux routes qui
# les traduisent en 404 / 503. Une ressource pleine n'est PAS
# une erreur : voir Rejected dans service.py.
# ============================================================


class BookingError(Exception):
    pass


class NotFound(BookingError):
    def __init__(self, what: str, ident):
        super().__init__(f"{what} {ident} not found")
        self.what = what
        self.ident = ident


class StoreUnavailable(BookingError):
    pass


class AlreadyExists(BookingError):
    pass

# API endpoints
from . import auth, records, record_locks, locks, notifications, health

__all__ = ["auth", "records", "record_locks", "locks", "notifications", "health"]

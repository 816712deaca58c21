# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.record import Record
from app.models.record_lock import RecordLock
from app.models.lock_audit_log import LockAuditLog, LockAction
from app.models.notification import Notification, NotificationCategory, NotificationPriority

__all__ = [
    # User
    "User",
    "UserRole",
    # Records
    "Record",
    # Locking
    "RecordLock",
    "LockAuditLog",
    "LockAction",
    # Notifications
    "Notification",
    "NotificationCategory",
    "NotificationPriority",
]

from app.services.lock_audit_service import LockAuditService, lock_audit_service
from app.services.record_service import RecordService, record_service
from app.services.record_lock_service import (
    RecordLockService,
    record_lock_service,
    LockInfo,
    LockStatus,
    ReleaseResult,
    ReapResult,
)
from app.services.notification_service import NotificationService, notification_service
from app.services.lock_sweeper import LockSweeper, lock_sweeper

__all__ = [
    # Records
    "RecordService",
    "record_service",
    # Locking
    "LockAuditService",
    "lock_audit_service",
    "RecordLockService",
    "record_lock_service",
    "LockInfo",
    "LockStatus",
    "ReleaseResult",
    "ReapResult",
    "LockSweeper",
    "lock_sweeper",
    # Notifications
    "NotificationService",
    "notification_service",
]

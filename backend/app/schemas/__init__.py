# Pydantic schemas
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    Token,
    UserResponse,
    LoginResponse,
)
from app.schemas.record import (
    RecordCreate,
    RecordUpdate,
    RecordResponse,
    RecordListResponse,
)
from app.schemas.lock import (
    LockHolder,
    LockResponse,
    LockAcquireResponse,
    LockReleaseResponse,
    LockStatusResponse,
    LockAuditEntry,
    LockLogsResponse,
    MyLocksResponse,
    ReapResponse,
)
from app.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    MarkAllReadResponse,
)

__all__ = [
    # Auth
    "UserRegister",
    "UserLogin",
    "RefreshTokenRequest",
    "Token",
    "UserResponse",
    "LoginResponse",
    # Records
    "RecordCreate",
    "RecordUpdate",
    "RecordResponse",
    "RecordListResponse",
    # Locks
    "LockHolder",
    "LockResponse",
    "LockAcquireResponse",
    "LockReleaseResponse",
    "LockStatusResponse",
    "LockAuditEntry",
    "LockLogsResponse",
    "MyLocksResponse",
    "ReapResponse",
    # Notifications
    "NotificationResponse",
    "NotificationListResponse",
    "MarkAllReadResponse",
]

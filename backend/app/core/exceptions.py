"""
Custom Exceptions for the Counseling Records service
====================================================

Use these instead of generic Exception so the API layer can map each
failure to a status code and a structured body.

Usage:
    from app.core.exceptions import RecordNotFoundError, RecordLockedError

    if not record:
        raise RecordNotFoundError(record_id)

    try:
        await record_lock_service.acquire(db, record_id, actor)
    except RecordLockedError as e:
        logger.info(f"Lock conflict: {e}")
        raise
"""

from datetime import datetime
from typing import Optional, Any, Dict


class RecordsError(Exception):
    """Base exception for all service errors"""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


def _holder_details(holder: Dict[str, Any], locked_at: Optional[datetime]) -> Dict[str, Any]:
    return {
        "locked_by": {
            "user_id": holder.get("user_id"),
            "user_name": holder.get("user_name"),
            "user_role": holder.get("user_role"),
        },
        "locked_at": locked_at.isoformat() if locked_at else None,
    }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(RecordsError):
    """User authentication failed"""

    http_status = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(RecordsError):
    """User not authorized for this action"""

    http_status = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(RecordsError):
    """Base class for not found errors"""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class RecordNotFoundError(ResourceNotFoundError):
    """Record not found"""

    def __init__(self, record_id: str):
        super().__init__("Record", record_id)


class NotificationNotFoundError(ResourceNotFoundError):
    """Notification not found (or not addressed to the caller)"""

    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


# ============================================
# Record Lock Errors
# ============================================

class LockNotPermittedError(RecordsError):
    """Actor's role or ownership does not allow locking this record"""

    http_status = 403

    def __init__(self, record_id: str, reason: str):
        super().__init__(
            reason,
            code="LOCK_NOT_PERMITTED",
            details={"record_id": record_id}
        )


class RecordLockedError(RecordsError):
    """Record holds a valid lock owned by someone else"""

    http_status = 423

    def __init__(
        self,
        record_id: str,
        holder: Dict[str, Any],
        locked_at: Optional[datetime],
        message: Optional[str] = None
    ):
        super().__init__(
            message or f"Record is currently locked by {holder.get('user_name')}.",
            code="RECORD_LOCKED",
            details={"record_id": record_id, **_holder_details(holder, locked_at)}
        )
        self.holder = holder
        self.locked_at = locked_at


class NotLockOwnerError(RecordsError):
    """Release attempted by someone other than the lock holder"""

    http_status = 403

    def __init__(self, record_id: str, holder: Dict[str, Any], locked_at: Optional[datetime]):
        super().__init__(
            f"You cannot unlock this record. It is locked by {holder.get('user_name')}.",
            code="NOT_LOCK_OWNER",
            details={"record_id": record_id, **_holder_details(holder, locked_at)}
        )
        self.holder = holder
        self.locked_at = locked_at


# ============================================
# Storage Errors
# ============================================

class StoreUnavailableError(RecordsError):
    """Persistence failure; the operation's outcome must be re-queried"""

    http_status = 503

    def __init__(self, operation: str, message: str = "Database unavailable"):
        super().__init__(
            f"Failed to {operation}: {message}",
            code="STORE_UNAVAILABLE",
            details={"operation": operation}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: RecordsError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }

"""
Unit Tests for the exception hierarchy and error payloads
"""
from datetime import datetime

from app.core.exceptions import (
    RecordsError,
    RecordNotFoundError,
    LockNotPermittedError,
    RecordLockedError,
    NotLockOwnerError,
    StoreUnavailableError,
    AuthorizationError,
    error_response,
)

HOLDER = {
    "user_id": "u-1",
    "user_name": "Dana Counselor",
    "user_role": "counselor",
    "user_email": "dana@example.com",
}
LOCKED_AT = datetime(2024, 3, 1, 9, 30)


class TestStatusMapping:
    """Each error carries the HTTP status the API answers with"""

    def test_statuses(self):
        assert RecordNotFoundError("r-1").http_status == 404
        assert LockNotPermittedError("r-1", "nope").http_status == 403
        assert RecordLockedError("r-1", HOLDER, LOCKED_AT).http_status == 423
        assert NotLockOwnerError("r-1", HOLDER, LOCKED_AT).http_status == 403
        assert StoreUnavailableError("acquire lock").http_status == 503
        assert AuthorizationError().http_status == 403
        assert RecordsError("boom").http_status == 500


class TestLockErrors:
    """Lock denials always say who holds the lock and since when"""

    def test_record_locked_details(self):
        error = RecordLockedError("r-1", HOLDER, LOCKED_AT)

        assert error.code == "RECORD_LOCKED"
        assert error.message == "Record is currently locked by Dana Counselor."
        assert error.details == {
            "record_id": "r-1",
            "locked_by": {"user_id": "u-1", "user_name": "Dana Counselor", "user_role": "counselor"},
            "locked_at": "2024-03-01T09:30:00",
        }

    def test_record_locked_custom_message(self):
        error = RecordLockedError("r-1", HOLDER, LOCKED_AT, message="Editing is not allowed.")
        assert error.message == "Editing is not allowed."
        assert error.details["locked_by"]["user_id"] == "u-1"

    def test_not_lock_owner_message(self):
        error = NotLockOwnerError("r-1", HOLDER, LOCKED_AT)

        assert error.code == "NOT_LOCK_OWNER"
        assert error.message == "You cannot unlock this record. It is locked by Dana Counselor."
        assert error.details["locked_at"] == "2024-03-01T09:30:00"

    def test_lock_not_permitted_uses_reason(self):
        error = LockNotPermittedError("r-1", "You can only lock records that you created.")
        assert error.message == "You can only lock records that you created."
        assert error.details == {"record_id": "r-1"}


class TestErrorResponse:
    def test_envelope(self):
        body = error_response(RecordNotFoundError("r-9"))

        assert body["success"] is False
        assert body["error"]["code"] == "RECORD_NOT_FOUND"
        assert body["error"]["details"]["resource_id"] == "r-9"

    def test_store_unavailable_message(self):
        error = StoreUnavailableError("release lock", "connection reset")
        assert error.message == "Failed to release lock: connection reset"
        assert error.details == {"operation": "release lock"}

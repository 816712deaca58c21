from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class LockHolder(BaseModel):
    """Identity snapshot of whoever holds (or held) a lock"""
    user_id: str
    user_name: str
    user_role: str
    user_email: Optional[str] = None


class LockResponse(BaseModel):
    record_id: str
    locked_by: LockHolder
    locked_at: datetime
    expires_at: datetime


class LockAcquireResponse(BaseModel):
    success: bool = True
    message: str
    lock: LockResponse


class LockReleaseResponse(BaseModel):
    success: bool = True
    message: str
    record_id: str
    locked: bool = False


class LockStatusResponse(BaseModel):
    record_id: str
    locked: bool
    locked_by: Optional[LockHolder] = None
    locked_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    can_lock: bool
    can_unlock: bool
    is_lock_owner: bool
    can_lock_reason: Optional[str] = None


class LockAuditEntry(BaseModel):
    id: int
    action: str
    performed_by: LockHolder
    lock_owner: Optional[LockHolder] = None
    reason: Optional[str] = None
    timestamp: datetime
    metadata: Dict[str, Any] = {}


class LockLogsResponse(BaseModel):
    record_id: str
    logs: List[LockAuditEntry]
    count: int


class MyLocksResponse(BaseModel):
    locks: List[LockResponse]
    count: int


class ReapResponse(BaseModel):
    reaped: int
    record_ids: List[str]

"""
Record lock endpoints mounted under /records/{record_id}.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.lock_audit_log import LockAction, LockAuditLog
from app.modules.auth.actor import Actor
from app.modules.auth.dependencies import get_current_actor
from app.schemas.lock import (
    LockHolder,
    LockResponse,
    LockAcquireResponse,
    LockReleaseResponse,
    LockStatusResponse,
    LockAuditEntry,
    LockLogsResponse,
)
from app.services.notification_service import notification_service
from app.services.record_lock_service import record_lock_service, LockInfo
from app.services.record_service import record_service

router = APIRouter()


def lock_response(info: LockInfo) -> LockResponse:
    return LockResponse(
        record_id=info.record_id,
        locked_by=LockHolder(**info.holder),
        locked_at=info.locked_at,
        expires_at=info.expires_at,
    )


def audit_entry(entry: LockAuditLog) -> LockAuditEntry:
    return LockAuditEntry(
        id=entry.id,
        action=entry.action.value,
        performed_by=LockHolder(**entry.performed_by),
        lock_owner=LockHolder(**entry.lock_owner) if entry.lock_owner else None,
        reason=entry.reason,
        timestamp=entry.created_at,
        metadata=entry.extra_metadata or {},
    )


@router.post("/{record_id}/lock", response_model=LockAcquireResponse)
async def lock_record(
    record_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Take the edit lock on a record"""
    info = await record_lock_service.acquire(db, record_id, actor)
    await notification_service.notify_lock_change(db, record_id, actor, LockAction.LOCK)

    return LockAcquireResponse(
        message="Record locked successfully.",
        lock=lock_response(info),
    )


@router.post("/{record_id}/unlock", response_model=LockReleaseResponse)
async def unlock_record(
    record_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Release the caller's lock; releasing a free record is not an error"""
    result = await record_lock_service.release(db, record_id, actor)

    if not result.released:
        return LockReleaseResponse(message="Record is not locked.", record_id=record_id)

    await notification_service.notify_lock_change(db, record_id, actor, LockAction.UNLOCK)
    return LockReleaseResponse(message="Record unlocked successfully.", record_id=record_id)


@router.get("/{record_id}/lock-status", response_model=LockStatusResponse)
async def get_lock_status(
    record_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    lock_status = await record_lock_service.status(db, record_id, actor)
    return LockStatusResponse(
        record_id=lock_status.record_id,
        locked=lock_status.locked,
        locked_by=LockHolder(**lock_status.locked_by) if lock_status.locked_by else None,
        locked_at=lock_status.locked_at,
        expires_at=lock_status.expires_at,
        can_lock=lock_status.can_lock,
        can_unlock=lock_status.can_unlock,
        is_lock_owner=lock_status.is_lock_owner,
        can_lock_reason=lock_status.can_lock_reason,
    )


@router.get("/{record_id}/lock-logs", response_model=LockLogsResponse)
async def get_lock_logs(
    record_id: str,
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Lock history for a record, newest first"""
    await record_service.get_record(db, record_id)

    entries = await record_lock_service.history(db, record_id, limit)
    logs = [audit_entry(e) for e in entries]
    return LockLogsResponse(record_id=record_id, logs=logs, count=len(logs))

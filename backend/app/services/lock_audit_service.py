"""
Lock Audit Service - append-only history of record lock events

Entries are written after the lock state change has been committed.
Writing is best-effort: a failed insert is logged and swallowed so it can
never undo or block the lock operation that produced it.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from typing import Any, Dict, List, Optional

from app.core.logging_config import logger
from app.models.lock_audit_log import LockAuditLog, LockAction


class LockAuditService:
    """Writes and reads LockAuditLog entries"""

    async def record(
        self,
        db: AsyncSession,
        record_id: str,
        action: LockAction,
        performed_by: Dict[str, Any],
        lock_owner: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Append one audit entry and commit it.

        Returns:
            True if the entry was stored, False if the write failed
        """
        entry = LockAuditLog(
            record_id=str(record_id),
            action=action,
            performed_by=dict(performed_by),
            performed_by_user_id=str(performed_by["user_id"]),
            lock_owner=dict(lock_owner) if lock_owner else None,
            lock_owner_user_id=str(lock_owner["user_id"]) if lock_owner else None,
            reason=reason,
            extra_metadata=metadata or {},
        )
        try:
            db.add(entry)
            await db.commit()
            return True
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"[LockAudit] Failed to record {action.value} for record {record_id}: {e}",
                exc_info=True,
                extra={"event_type": "lock_audit_failure", "lock_action": action.value},
            )
            return False

    async def history(self, db: AsyncSession, record_id: str, limit: int) -> List[LockAuditLog]:
        """Most recent `limit` entries for a record, newest first"""
        result = await db.execute(
            select(LockAuditLog)
            .where(LockAuditLog.record_id == str(record_id))
            .order_by(LockAuditLog.created_at.desc(), LockAuditLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


lock_audit_service = LockAuditService()

"""
Record Lock Service - exclusive edit locks on counseling records

A lock is a row in record_locks keyed by the unique record_id. A present
row is a potentially active lock; an absent row means the record is free.
Release and expiry delete the row. The unique key makes the database the
arbiter when two actors race for the same record: the losing INSERT hits
an IntegrityError and is turned into a RecordLockedError naming the winner.

Each operation commits its own state change before writing the audit entry,
so audit failures never roll back a lock transition.

Usage:
    from app.services.record_lock_service import record_lock_service

    lock = await record_lock_service.acquire(db, record_id, actor)
    await record_lock_service.guard(db, record_id, actor)   # before edits
    await record_lock_service.release(db, record_id, actor)
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    LockNotPermittedError,
    RecordLockedError,
    NotLockOwnerError,
    StoreUnavailableError,
)
from app.core.logging_config import logger
from app.core.types import utcnow
from app.models.lock_audit_log import LockAuditLog, LockAction
from app.models.record import Record
from app.models.record_lock import RecordLock
from app.modules.auth.actor import Actor
from app.services.lock_audit_service import LockAuditService, lock_audit_service
from app.services.record_service import record_service


NOT_CREATOR_REASON = "You can only lock records that you created."
UNAUTHORIZED_ROLE_REASON = "Unauthorized to lock records."


@dataclass
class LockInfo:
    """Plain copy of a lock row, safe to use after the session moves on"""
    record_id: str
    holder: Dict[str, str]
    locked_at: datetime
    expires_at: datetime

    @classmethod
    def from_lock(cls, lock: RecordLock) -> "LockInfo":
        return cls(
            record_id=str(lock.record_id),
            holder=lock.holder,
            locked_at=lock.locked_at,
            expires_at=lock.expires_at,
        )

    @property
    def lifetime_hours(self) -> float:
        return (self.expires_at - self.locked_at).total_seconds() / 3600


@dataclass
class ReleaseResult:
    released: bool
    previous_holder: Optional[Dict[str, str]] = None


@dataclass
class LockStatus:
    record_id: str
    locked: bool
    can_lock: bool
    can_unlock: bool = False
    is_lock_owner: bool = False
    locked_by: Optional[Dict[str, str]] = None
    locked_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    can_lock_reason: Optional[str] = None


@dataclass
class ReapResult:
    reaped: int = 0
    record_ids: List[str] = field(default_factory=list)


class RecordLockService:
    """Acquire, release, inspect and expire record locks"""

    def __init__(
        self,
        audit: Optional[LockAuditService] = None,
        ttl_hours: Optional[int] = None,
    ):
        self.audit = audit or lock_audit_service
        self._ttl_hours = ttl_hours

    @property
    def ttl_hours(self) -> int:
        return self._ttl_hours if self._ttl_hours is not None else settings.LOCK_TTL_HOURS

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.ttl_hours)

    # ============================================
    # Policy
    # ============================================

    def check_eligibility(self, actor: Actor, record: Record) -> Tuple[bool, Optional[str]]:
        """
        Whether `actor` may lock `record`.

        Admins may lock any record. Counselors may lock only records they
        created. Every other role is refused.

        Returns:
            (eligible, reason) where reason is set only when refused
        """
        if actor.is_admin:
            return True, None

        if actor.is_counselor:
            if record.created_by_id and str(record.created_by_id) == actor.user_id:
                return True, None
            return False, NOT_CREATOR_REASON

        return False, UNAUTHORIZED_ROLE_REASON

    # ============================================
    # Operations
    # ============================================

    async def acquire(self, db: AsyncSession, record_id: str, actor: Actor) -> LockInfo:
        """
        Lock a record for `actor`.

        Raises:
            RecordNotFoundError: record does not exist
            LockNotPermittedError: actor may not lock this record
            RecordLockedError: someone holds a valid lock
            StoreUnavailableError: the lock store failed
        """
        record_id = str(record_id)

        async with self._store_errors(db, "acquire lock"):
            record = await record_service.get_record(db, record_id)

            eligible, reason = self.check_eligibility(actor, record)
            if not eligible:
                await self.audit.record(
                    db, record_id, LockAction.LOCK_ATTEMPT_BLOCKED,
                    performed_by=actor.to_snapshot(),
                    lock_owner=None,
                    reason=reason,
                )
                logger.log_lock_event("acquire", record_id, actor.user_id, success=False, reason=reason)
                raise LockNotPermittedError(record_id, reason)

            existing = await self._find_lock(db, record_id)
            if existing is not None:
                if existing.is_valid():
                    await self._reject_held(db, record_id, actor, LockInfo.from_lock(existing))
                await self._retire(db, existing)

            lock = RecordLock(
                record_id=record_id,
                locked_by_user_id=actor.user_id,
                locked_by_name=actor.user_name,
                locked_by_role=actor.user_role,
                locked_by_email=actor.user_email,
            )
            now = utcnow()
            lock.locked_at = now
            lock.expires_at = now + self.ttl
            db.add(lock)

            try:
                await db.commit()
            except IntegrityError:
                # Lost the race for the unique record_id
                await db.rollback()
                winner = await self._find_lock(db, record_id)
                if winner is None:
                    raise StoreUnavailableError(
                        "acquire lock",
                        "Lock changed hands during acquisition, retry"
                    )
                await self._reject_held(db, record_id, actor, LockInfo.from_lock(winner))

            info = LockInfo.from_lock(lock)

        await self.audit.record(
            db, record_id, LockAction.LOCK,
            performed_by=actor.to_snapshot(),
            lock_owner=actor.to_snapshot(),
            metadata={"expires_at": info.expires_at.isoformat()},
        )
        logger.log_lock_event("acquire", record_id, actor.user_id, expires_at=info.expires_at.isoformat())
        return info

    async def release(self, db: AsyncSession, record_id: str, actor: Actor) -> ReleaseResult:
        """
        Release the lock on a record. Releasing a free record succeeds
        with released=False.

        Raises:
            RecordNotFoundError: record does not exist
            NotLockOwnerError: lock is held by someone else
            StoreUnavailableError: the lock store failed
        """
        record_id = str(record_id)

        async with self._store_errors(db, "release lock"):
            await record_service.get_record(db, record_id)

            lock = await self._find_live_lock(db, record_id)
            if lock is None:
                logger.log_lock_event("release", record_id, actor.user_id, reason="not locked")
                return ReleaseResult(released=False)

            info = LockInfo.from_lock(lock)
            if not lock.is_held_by(actor.user_id):
                await self.audit.record(
                    db, record_id, LockAction.UNLOCK,
                    performed_by=actor.to_snapshot(),
                    lock_owner=info.holder,
                    reason=f"Attempted to unlock record locked by {info.holder['user_name']}.",
                    metadata={"denied": True},
                )
                logger.log_lock_event(
                    "release", record_id, actor.user_id, success=False,
                    reason=f"held by {info.holder['user_id']}"
                )
                raise NotLockOwnerError(record_id, info.holder, info.locked_at)

            result = await db.execute(
                delete(RecordLock).where(
                    RecordLock.id == lock.id,
                    RecordLock.locked_by_user_id == actor.user_id,
                )
            )
            await db.commit()

        if result.rowcount == 0:
            # Expired and reaped between read and delete
            return ReleaseResult(released=False)

        await self.audit.record(
            db, record_id, LockAction.UNLOCK,
            performed_by=actor.to_snapshot(),
            lock_owner=info.holder,
        )
        logger.log_lock_event("release", record_id, actor.user_id)
        return ReleaseResult(released=True, previous_holder=info.holder)

    async def status(self, db: AsyncSession, record_id: str, actor: Actor) -> LockStatus:
        """
        Current lock state of a record as seen by `actor`.

        can_lock is true only when the record is free and the actor is
        eligible; can_lock_reason explains a refusal.
        """
        record_id = str(record_id)

        async with self._store_errors(db, "read lock status"):
            record = await record_service.get_record(db, record_id)
            eligible, reason = self.check_eligibility(actor, record)
            lock = await self._find_live_lock(db, record_id)

        if lock is None:
            return LockStatus(
                record_id=record_id,
                locked=False,
                can_lock=eligible,
                can_lock_reason=reason,
            )

        is_owner = lock.is_held_by(actor.user_id)
        return LockStatus(
            record_id=record_id,
            locked=True,
            can_lock=False,
            can_unlock=is_owner,
            is_lock_owner=is_owner,
            locked_by=lock.holder,
            locked_at=lock.locked_at,
            expires_at=lock.expires_at,
            can_lock_reason=None if is_owner else f"Record is currently locked by {lock.locked_by_name}.",
        )

    async def guard(self, db: AsyncSession, record_id: str, actor: Actor) -> None:
        """
        Edit gate. Returns if `actor` may edit the record now, otherwise
        records an EDIT_ATTEMPT_BLOCKED entry and raises RecordLockedError.

        Record existence is the caller's concern.
        """
        record_id = str(record_id)

        async with self._store_errors(db, "check edit lock"):
            lock = await self._find_live_lock(db, record_id)

        if lock is None or lock.is_held_by(actor.user_id):
            return

        info = LockInfo.from_lock(lock)
        name = info.holder["user_name"]
        await self.audit.record(
            db, record_id, LockAction.EDIT_ATTEMPT_BLOCKED,
            performed_by=actor.to_snapshot(),
            lock_owner=info.holder,
            reason=f"Edit attempt blocked - record locked by {name}.",
        )
        logger.log_lock_event("edit", record_id, actor.user_id, success=False, reason=f"locked by {info.holder['user_id']}")
        raise RecordLockedError(
            record_id,
            info.holder,
            info.locked_at,
            message=f"Record is locked by {name}. Editing is not allowed.",
        )

    async def history(self, db: AsyncSession, record_id: str, limit: Optional[int] = None) -> List[LockAuditLog]:
        """Newest-first audit entries for a record; limit is clamped to the configured bounds"""
        if limit is None:
            limit = settings.LOCK_HISTORY_DEFAULT_LIMIT
        limit = max(1, min(int(limit), settings.LOCK_HISTORY_MAX_LIMIT))

        async with self._store_errors(db, "read lock history"):
            return await self.audit.history(db, str(record_id), limit)

    async def reap_expired(self, db: AsyncSession, now: Optional[datetime] = None) -> ReapResult:
        """
        Retire every expired lock, writing one LOCK_EXPIRED entry per lock.

        Safe to run concurrently with itself: each row is claimed by a
        conditional update before deletion, so only one reaper audits it.
        """
        now = now or utcnow()
        outcome = ReapResult()

        async with self._store_errors(db, "reap expired locks"):
            result = await db.execute(
                select(RecordLock)
                .where(RecordLock.expires_at <= now)
                .order_by(RecordLock.expires_at)
            )
            # Snapshot first: a failed audit write rolls back and expires the rows
            expired = [(lock.id, LockInfo.from_lock(lock), bool(lock.is_active)) for lock in result.scalars().all()]

            for lock_id, info, was_active in expired:
                if await self._retire_row(db, lock_id, info, was_active):
                    outcome.record_ids.append(info.record_id)

        outcome.reaped = len(outcome.record_ids)
        if outcome.reaped:
            logger.info(f"[RecordLock] Reaped {outcome.reaped} expired lock(s)")
        return outcome

    async def locks_held_by(self, db: AsyncSession, user_id: str) -> List[LockInfo]:
        """Valid locks currently held by a user, oldest first"""
        async with self._store_errors(db, "list held locks"):
            result = await db.execute(
                select(RecordLock)
                .where(
                    RecordLock.locked_by_user_id == str(user_id),
                    RecordLock.is_active.is_(True),
                    RecordLock.expires_at > utcnow(),
                )
                .order_by(RecordLock.locked_at)
            )
            return [LockInfo.from_lock(lock) for lock in result.scalars().all()]

    # ============================================
    # Internals
    # ============================================

    @asynccontextmanager
    async def _store_errors(self, db: AsyncSession, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            await db.rollback()
            logger.log_error_with_context(e, context=f"record lock: {operation}")
            raise StoreUnavailableError(operation) from e

    async def _find_lock(self, db: AsyncSession, record_id: str) -> Optional[RecordLock]:
        result = await db.execute(
            select(RecordLock)
            .where(RecordLock.record_id == record_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _find_live_lock(self, db: AsyncSession, record_id: str) -> Optional[RecordLock]:
        """The record's lock if still valid; an expired or stale row is retired first"""
        lock = await self._find_lock(db, record_id)
        if lock is None:
            return None
        if lock.is_valid():
            return lock
        await self._retire(db, lock)
        return None

    async def _retire(self, db: AsyncSession, lock: RecordLock) -> bool:
        """
        Delete an expired or inactive lock row.

        Active rows are first claimed by flipping is_active; the caller that
        wins the claim writes the LOCK_EXPIRED entry. Returns True if this
        call retired an active lock.
        """
        return await self._retire_row(db, lock.id, LockInfo.from_lock(lock), bool(lock.is_active))

    async def _retire_row(self, db: AsyncSession, lock_id: str, info: LockInfo, was_active: bool) -> bool:
        claimed = False
        if was_active:
            result = await db.execute(
                update(RecordLock)
                .where(RecordLock.id == lock_id, RecordLock.is_active.is_(True))
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
            claimed = result.rowcount == 1

        await db.execute(
            delete(RecordLock)
            .where(RecordLock.id == lock_id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if not claimed:
            return False

        await self.audit.record(
            db, info.record_id, LockAction.LOCK_EXPIRED,
            performed_by=info.holder,
            lock_owner=info.holder,
            reason=f"Lock expired after {info.lifetime_hours:g} hours",
            metadata={
                "locked_at": info.locked_at.isoformat(),
                "expires_at": info.expires_at.isoformat(),
            },
        )
        logger.log_lock_event("expire", info.record_id, info.holder["user_id"])
        return True

    async def _reject_held(self, db: AsyncSession, record_id: str, actor: Actor, held: LockInfo) -> None:
        name = held.holder["user_name"]
        await self.audit.record(
            db, record_id, LockAction.LOCK_ATTEMPT_BLOCKED,
            performed_by=actor.to_snapshot(),
            lock_owner=held.holder,
            reason=f"Record is currently locked by {name}.",
        )
        logger.log_lock_event("acquire", record_id, actor.user_id, success=False, reason=f"held by {held.holder['user_id']}")
        raise RecordLockedError(record_id, held.holder, held.locked_at)


record_lock_service = RecordLockService()

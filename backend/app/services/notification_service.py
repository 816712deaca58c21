"""
Notification Service - in-app alerts for lock activity

Fan-out rules when a record is locked or unlocked:
- Admin acting on a counselor's record: that counselor gets a "System Alert"
  (high priority for a lock, medium for an unlock).
- Every other active admin gets a low priority "User Activity" entry.
- The acting user is never notified about their own action.

Delivery is best-effort; failures are logged and never reach the caller.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotificationNotFoundError
from app.core.logging_config import logger
from app.models.lock_audit_log import LockAction
from app.models.notification import Notification, NotificationCategory, NotificationPriority
from app.models.record import Record
from app.models.user import User, UserRole
from app.modules.auth.actor import Actor


class NotificationService:
    """Creates and reads per-user notifications"""

    async def notify_lock_change(
        self,
        db: AsyncSession,
        record_id: str,
        actor: Actor,
        action: LockAction,
    ) -> int:
        """
        Notify interested users that `actor` locked or unlocked a record.

        Returns:
            Number of notifications created
        """
        if not settings.NOTIFICATIONS_ENABLED:
            return 0
        if action not in (LockAction.LOCK, LockAction.UNLOCK):
            return 0

        try:
            record = await db.get(Record, str(record_id))
            if record is None:
                return 0

            verb = "locked" if action == LockAction.LOCK else "unlocked"
            label = record.label
            metadata = {
                "record_id": str(record_id),
                "action": action.value,
                "performed_by": actor.to_snapshot(),
            }
            notifications = []

            if actor.is_admin:
                owner_id = await self._resolve_record_counselor(db, record)
                if owner_id and owner_id != actor.user_id:
                    notifications.append(Notification(
                        recipient_id=owner_id,
                        title=f"Record {verb.capitalize()} by Admin",
                        description=f"Your record \"{label}\" was {verb} by {actor.user_name}.",
                        category=NotificationCategory.SYSTEM_ALERT,
                        priority=NotificationPriority.HIGH if action == LockAction.LOCK else NotificationPriority.MEDIUM,
                        related_id=str(record_id),
                        related_type="record",
                        extra_metadata=metadata,
                    ))

            result = await db.execute(
                select(User.id).where(
                    User.role == UserRole.ADMIN,
                    User.is_active.is_(True),
                    User.id != actor.user_id,
                )
            )
            for admin_id in result.scalars().all():
                notifications.append(Notification(
                    recipient_id=str(admin_id),
                    title=f"Record {verb.capitalize()}",
                    description=f"{actor.user_name} ({actor.user_role}) {verb} \"{label}\".",
                    category=NotificationCategory.USER_ACTIVITY,
                    priority=NotificationPriority.LOW,
                    related_id=str(record_id),
                    related_type="record",
                    extra_metadata=metadata,
                ))

            if not notifications:
                return 0

            db.add_all(notifications)
            await db.commit()
            logger.info(f"[Notifications] Sent {len(notifications)} {action.value} notification(s) for record {record_id}")
            return len(notifications)

        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning(f"[Notifications] Failed to notify {action.value} on record {record_id}: {e}")
            return 0

    async def _resolve_record_counselor(self, db: AsyncSession, record: Record) -> Optional[str]:
        """Creator id, falling back to a counselor whose name or email matches the record's counselor label"""
        if record.created_by_id and record.created_by_role == UserRole.COUNSELOR.value:
            return str(record.created_by_id)

        if not record.counselor:
            return None

        result = await db.execute(
            select(User.id).where(
                User.role == UserRole.COUNSELOR,
                or_(User.full_name == record.counselor, User.email == record.counselor),
            ).limit(1)
        )
        user_id = result.scalar_one_or_none()
        return str(user_id) if user_id else None

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        unread_only: bool = False,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[Notification], int, int]:
        """
        Returns:
            (notifications, total, unread_count)
        """
        conditions = [Notification.recipient_id == str(user_id)]
        if unread_only:
            conditions.append(Notification.is_read.is_(False))

        total = await db.scalar(select(func.count(Notification.id)).where(and_(*conditions)))
        unread = await db.scalar(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == str(user_id),
                Notification.is_read.is_(False),
            )
        )

        result = await db.execute(
            select(Notification)
            .where(and_(*conditions))
            .order_by(Notification.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0, unread or 0

    async def mark_read(self, db: AsyncSession, user_id: str, notification_id: str) -> Notification:
        result = await db.execute(
            select(Notification).where(
                Notification.id == str(notification_id),
                Notification.recipient_id == str(user_id),
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotificationNotFoundError(str(notification_id))

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await db.commit()
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            update(Notification)
            .where(
                Notification.recipient_id == str(user_id),
                Notification.is_read.is_(False),
            )
            .values(is_read=True, read_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount or 0


notification_service = NotificationService()

"""
Record Service - counseling record CRUD

Mutations here do not check locks themselves; callers run the edit gate
(record_lock_service.guard) first.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import RecordNotFoundError, AuthorizationError
from app.core.logging_config import logger
from app.core.types import utcnow
from app.models.record import Record
from app.modules.auth.actor import Actor


# Fields a client may change through update_record
EDITABLE_FIELDS = (
    "client_name",
    "session_number",
    "session_type",
    "status",
    "date",
    "notes",
    "outcomes",
    "counselor",
)


class RecordService:
    """Service for counseling records"""

    async def get_record(self, db: AsyncSession, record_id: str) -> Record:
        """Fetch a non-deleted record or raise RecordNotFoundError"""
        result = await db.execute(
            select(Record).where(
                Record.id == str(record_id),
                Record.is_deleted.is_(False)
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise RecordNotFoundError(str(record_id))
        return record

    async def list_records(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        session_type: Optional[str] = None,
    ) -> Tuple[List[Record], int]:
        conditions = [Record.is_deleted.is_(False)]
        if search:
            conditions.append(Record.client_name.ilike(f"%{search}%"))
        if status:
            conditions.append(Record.status == status)
        if session_type:
            conditions.append(Record.session_type == session_type)

        total = await db.scalar(
            select(func.count(Record.id)).where(and_(*conditions))
        )

        offset = (page - 1) * page_size
        result = await db.execute(
            select(Record)
            .where(and_(*conditions))
            .order_by(Record.created_at.desc())
            .offset(offset)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0

    async def create_record(self, db: AsyncSession, data: Dict[str, Any], actor: Actor) -> Record:
        record = Record(
            client_name=data["client_name"],
            session_number=data.get("session_number"),
            session_type=data.get("session_type"),
            status=data.get("status") or "Ongoing",
            date=data.get("date"),
            notes=data.get("notes"),
            outcomes=data.get("outcomes"),
            counselor=data.get("counselor") or actor.user_name,
            created_by_id=actor.user_id,
            created_by_name=actor.user_name,
            created_by_role=actor.user_role,
        )
        db.add(record)
        await db.commit()
        await db.refresh(record)

        logger.info(f"[Records] {actor.user_name} ({actor.user_role}) created record {record.id}")
        return record

    def ensure_can_modify(self, record: Record, actor: Actor) -> None:
        """Admins may modify any record; counselors only their own"""
        if actor.is_admin:
            return
        if actor.is_counselor and record.created_by_id and str(record.created_by_id) == actor.user_id:
            return
        raise AuthorizationError("You can only modify records that you created.")

    async def update_record(
        self,
        db: AsyncSession,
        record: Record,
        changes: Dict[str, Any],
        actor: Actor
    ) -> Record:
        changed = []
        for field, value in changes.items():
            if field in EDITABLE_FIELDS and getattr(record, field) != value:
                setattr(record, field, value)
                changed.append(field)

        if changed:
            record.last_modified_by_id = actor.user_id
            record.last_modified_at = utcnow()
            await db.commit()
            await db.refresh(record)
            logger.info(f"[Records] {actor.user_name} updated record {record.id}: {', '.join(changed)}")

        return record

    async def delete_record(self, db: AsyncSession, record: Record, actor: Actor) -> None:
        """Soft delete; lock history stays queryable by record id"""
        record.is_deleted = True
        record.deleted_by_id = actor.user_id
        record.deleted_at = utcnow()
        await db.commit()
        logger.info(f"[Records] {actor.user_name} deleted record {record.id}")


record_service = RecordService()

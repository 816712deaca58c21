from sqlalchemy import Column, String, Boolean, DateTime, Index
from datetime import datetime, timedelta
from typing import Dict, Optional

from app.core.database import Base
from app.core.types import GUID, generate_uuid


DEFAULT_LOCK_TTL = timedelta(hours=24)


class RecordLock(Base):
    """
    Edit lock on a record.

    At most one row exists per record (unique record_id). A present row is
    a potentially active lock; an absent row means the record is free.
    Release and expiry delete the row, so is_active=False only shows up
    transiently while the sweeper is working through expired rows.
    """
    __tablename__ = "record_locks"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    record_id = Column(GUID, nullable=False, unique=True, index=True)

    # Holder snapshot taken at acquisition (survives profile changes)
    locked_by_user_id = Column(GUID, nullable=False)
    locked_by_name = Column(String(255), nullable=False)
    locked_by_role = Column(String(20), nullable=False)
    locked_by_email = Column(String(255), nullable=False)

    locked_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(
        DateTime,
        default=lambda: datetime.utcnow() + DEFAULT_LOCK_TTL,
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_record_locks_holder_active", "locked_by_user_id", "is_active"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Active and not past expires_at"""
        return bool(self.is_active) and not self.is_expired(now)

    def is_held_by(self, user_id: str) -> bool:
        return str(self.locked_by_user_id) == str(user_id)

    @property
    def holder(self) -> Dict[str, str]:
        return {
            "user_id": str(self.locked_by_user_id),
            "user_name": self.locked_by_name,
            "user_role": self.locked_by_role,
            "user_email": self.locked_by_email,
        }

    def __repr__(self):
        return f"<RecordLock {self.record_id} by {self.locked_by_name}>"

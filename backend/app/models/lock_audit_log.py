from sqlalchemy import Column, String, DateTime, Text, BigInteger, Integer, Enum as SQLEnum, Index
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, JSONDict


class LockAction(str, enum.Enum):
    """Lock audit actions"""
    LOCK = "LOCK"
    UNLOCK = "UNLOCK"
    LOCK_EXPIRED = "LOCK_EXPIRED"
    LOCK_ATTEMPT_BLOCKED = "LOCK_ATTEMPT_BLOCKED"
    EDIT_ATTEMPT_BLOCKED = "EDIT_ATTEMPT_BLOCKED"


class LockAuditLog(Base):
    """Append-only history of lock transitions and blocked attempts per record"""
    __tablename__ = "lock_audit_logs"

    # Integer key keeps insertion order stable when timestamps collide
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    record_id = Column(GUID, nullable=False)

    action = Column(SQLEnum(LockAction), nullable=False)

    # Actor and holder snapshots: {user_id, user_name, user_role, user_email}
    performed_by = Column(JSONDict, nullable=False)
    performed_by_user_id = Column(GUID, nullable=False, index=True)
    lock_owner = Column(JSONDict, nullable=True)
    lock_owner_user_id = Column(GUID, nullable=True)

    reason = Column(Text, nullable=True)
    extra_metadata = Column("metadata", JSONDict, nullable=True, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("ix_lock_audit_logs_record_created", "record_id", "created_at"),
        Index("ix_lock_audit_logs_owner_created", "lock_owner_user_id", "created_at"),
    )

    def __repr__(self):
        return f"<LockAuditLog {self.action.value if self.action else '-'} {self.record_id}>"

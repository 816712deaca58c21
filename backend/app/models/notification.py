from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, JSONDict, generate_uuid


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationCategory(str, enum.Enum):
    SYSTEM_ALERT = "System Alert"
    USER_ACTIVITY = "User Activity"


class Notification(Base):
    """In-app notification addressed to one user"""
    __tablename__ = "notifications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    recipient_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(NotificationCategory), nullable=False)
    priority = Column(SQLEnum(NotificationPriority), default=NotificationPriority.LOW, nullable=False)

    related_id = Column(GUID, nullable=True)
    related_type = Column(String(50), nullable=True)  # e.g. 'record'
    extra_metadata = Column("metadata", JSONDict, nullable=True, default=dict)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    recipient = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification {self.title} -> {self.recipient_id}>"

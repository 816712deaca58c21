from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Record(Base):
    """Counseling session record"""
    __tablename__ = "records"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Session details
    client_name = Column(String(255), nullable=False, index=True)
    session_number = Column(Integer, nullable=True)
    session_type = Column(String(100), nullable=True)
    status = Column(String(50), default="Ongoing", nullable=False)
    date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    outcomes = Column(Text, nullable=True)
    counselor = Column(String(255), nullable=True)  # Display label, not an identity

    # Creator identity (ownership check for counselor locks and edits)
    created_by_id = Column(GUID, nullable=True, index=True)
    created_by_name = Column(String(255), nullable=True)
    created_by_role = Column(String(20), nullable=True)

    last_modified_by_id = Column(GUID, nullable=True)
    last_modified_at = Column(DateTime, nullable=True)

    # Soft delete
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_by_id = Column(GUID, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def label(self) -> str:
        """Human readable name used in notifications"""
        if self.session_number:
            return f"{self.client_name} - Session {self.session_number}"
        return self.client_name

    def __repr__(self):
        return f"<Record {self.id} {self.client_name}>"

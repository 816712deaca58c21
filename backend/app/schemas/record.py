from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class RecordBase(BaseModel):
    session_number: Optional[int] = Field(None, ge=1)
    session_type: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    date: Optional[datetime] = None
    notes: Optional[str] = None
    outcomes: Optional[str] = None
    counselor: Optional[str] = Field(None, max_length=255)


class RecordCreate(RecordBase):
    client_name: str = Field(..., min_length=1, max_length=255)


class RecordUpdate(RecordBase):
    """All fields optional; only fields present in the body are applied"""
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)


class RecordResponse(BaseModel):
    id: str
    client_name: str
    session_number: Optional[int] = None
    session_type: Optional[str] = None
    status: str
    date: Optional[datetime] = None
    notes: Optional[str] = None
    outcomes: Optional[str] = None
    counselor: Optional[str] = None
    created_by_id: Optional[str] = None
    created_by_name: Optional[str] = None
    created_by_role: Optional[str] = None
    last_modified_by_id: Optional[str] = None
    last_modified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecordListResponse(BaseModel):
    items: List[RecordResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

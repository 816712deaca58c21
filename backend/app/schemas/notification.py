from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    priority: str
    related_id: Optional[str] = None
    related_type: Optional[str] = None
    metadata: Dict[str, Any] = {}
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: List[NotificationResponse]
    total: int
    unread_count: int
    page: int
    page_size: int


class MarkAllReadResponse(BaseModel):
    updated: int

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.notification import Notification
from app.modules.auth.actor import Actor
from app.modules.auth.dependencies import get_current_actor
from app.schemas.notification import NotificationResponse, NotificationListResponse, MarkAllReadResponse
from app.services.notification_service import notification_service

router = APIRouter()


def notification_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(n.id),
        title=n.title,
        description=n.description,
        category=n.category.value,
        priority=n.priority.value,
        related_id=str(n.related_id) if n.related_id else None,
        related_type=n.related_type,
        metadata=n.extra_metadata or {},
        is_read=n.is_read,
        read_at=n.read_at,
        created_at=n.created_at,
    )


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    items, total, unread = await notification_service.list_for_user(
        db, actor.user_id, unread_only=unread_only, page=page, page_size=page_size
    )
    return NotificationListResponse(
        items=[notification_response(n) for n in items],
        total=total,
        unread_count=unread,
        page=page,
        page_size=page_size,
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    updated = await notification_service.mark_all_read(db, actor.user_id)
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    notification = await notification_service.mark_read(db, actor.user_id, notification_id)
    return notification_response(notification)

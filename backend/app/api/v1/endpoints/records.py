"""
Counseling record endpoints.

Updates and deletes pass through the record lock edit gate before any
ownership check or mutation runs.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import math

from app.core.database import get_db
from app.modules.auth.actor import Actor
from app.modules.auth.dependencies import get_current_actor
from app.schemas.record import RecordCreate, RecordUpdate, RecordResponse, RecordListResponse
from app.services.record_service import record_service
from app.services.record_lock_service import record_lock_service

router = APIRouter()


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: RecordCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Create a record owned by the caller"""
    record = await record_service.create_record(db, payload.model_dump(), actor)
    return record


@router.get("", response_model=RecordListResponse)
async def list_records(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[str] = None,
    session_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """List records with filtering and pagination"""
    records, total = await record_service.list_records(
        db,
        page=page,
        page_size=page_size,
        search=search,
        status=status,
        session_type=session_type,
    )
    return RecordListResponse(
        items=[RecordResponse.model_validate(r) for r in records],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total > 0 else 1
    )


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return await record_service.get_record(db, record_id)


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: str,
    payload: RecordUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Update a record; 423 if someone else holds its lock"""
    await record_lock_service.guard(db, record_id, actor)

    record = await record_service.get_record(db, record_id)
    record_service.ensure_can_modify(record, actor)

    return await record_service.update_record(
        db, record, payload.model_dump(exclude_unset=True), actor
    )


@router.delete("/{record_id}")
async def delete_record(
    record_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Soft delete a record; 423 if someone else holds its lock"""
    await record_lock_service.guard(db, record_id, actor)

    record = await record_service.get_record(db, record_id)
    record_service.ensure_can_modify(record, actor)

    await record_service.delete_record(db, record, actor)
    return {"success": True, "message": "Record deleted", "record_id": record_id}

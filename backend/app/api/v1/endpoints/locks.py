"""
Cross-record lock endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging_config import logger
from app.models.user import User
from app.modules.auth.actor import Actor
from app.modules.auth.dependencies import get_current_actor, get_current_admin
from app.schemas.lock import MyLocksResponse, ReapResponse
from app.services.record_lock_service import record_lock_service
from app.api.v1.endpoints.record_locks import lock_response

router = APIRouter()


@router.get("/mine", response_model=MyLocksResponse)
async def get_my_locks(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Locks currently held by the caller"""
    locks = await record_lock_service.locks_held_by(db, actor.user_id)
    return MyLocksResponse(locks=[lock_response(info) for info in locks], count=len(locks))


@router.post("/reap", response_model=ReapResponse)
async def reap_expired_locks(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Retire all expired locks now instead of waiting for the sweeper"""
    result = await record_lock_service.reap_expired(db)
    logger.info(f"[Locks] Manual reap by {current_admin.email}: {result.reaped} lock(s)")
    return ReapResponse(reaped=result.reaped, record_ids=result.record_ids)

from fastapi import APIRouter
from app.api.v1.endpoints import auth, records, record_locks, locks, notifications, health

api_router = APIRouter()

# Deep health checks (use /health/ready for load balancers)
api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint"""
    return {"status": "healthy", "service": "counseling-records"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(records.router, prefix="/records", tags=["Records"])
api_router.include_router(record_locks.router, prefix="/records", tags=["Record Locks"])
api_router.include_router(locks.router, prefix="/locks", tags=["Record Locks"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

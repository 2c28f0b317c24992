from fastapi import APIRouter

from .health import router as health_router
from .s3_updates import router as s3_updates_router
from .storage import router as storage_router

public_router = APIRouter()
private_router = APIRouter()

# All public endpoints go on public_router
public_router.include_router(health_router)

# Protected endpoints authenticate per route via get_current_requester
private_router.include_router(storage_router, prefix="/storage", tags=["storage"])
private_router.include_router(s3_updates_router, prefix="/s3-updates", tags=["s3-updates"])

"""Health and readiness check routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from config import settings
from routes.deps import get_proxy
from services.proxy import OpenDataProxy

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check, no cache or upstream access."""
    return {"status": "ok", "service": "vigia-recife-proxy", "commit": settings.git_sha}


@router.get("/health")
async def health(proxy: OpenDataProxy = Depends(get_proxy)) -> dict:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": proxy.settings.version,
        "cache_stats": proxy.cache.stats(),
    }

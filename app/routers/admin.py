# app/routers/admin.py

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.auth import CurrentUser, require_admin
from app.database import get_db
from app.schemas.cache import CacheStats
from app.services.cache import Cache
from app.services.cache_factory import get_cache
from app.services.notifications_service import serialize_notification
from app.services.onboarding_service import approve_onboarding as svc_approve_onboarding
from app.services.stream_bus import publish_to_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

# Cache routes are async so they run on the event loop that owns the expiry timers.


@router.get("/stats")
async def admin_stats(_admin: CurrentUser = Depends(require_admin), cache: Cache = Depends(get_cache)):
    """GET /api/admin/stats - cache usage counters."""
    return {
        "cache": CacheStats(**cache.get_stats()).model_dump(),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.post("/cache/clear")
async def clear_cache(admin: CurrentUser = Depends(require_admin), cache: Cache = Depends(get_cache)):
    """POST /api/admin/cache/clear - drop every cached entry (counters are kept)."""
    cache.clear()
    logger.info("Cache cleared by admin %s", admin.id)
    return {"message": "Cache cleared successfully"}


@router.post("/cache/cleanup")
async def cleanup_cache(request: Request, admin: CurrentUser = Depends(require_admin)):
    """POST /api/admin/cache/cleanup - run one expiry sweep now."""
    removed = request.app.state.sweeper.run_once()
    logger.info("Cache sweep triggered by admin %s (removed=%d)", admin.id, removed)
    return {"removed": removed}


@router.post("/onboarding/{client_id}/approve")
async def approve_onboarding(
    client_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    POST /api/admin/onboarding/{client_id}/approve

    Status codes:
      - 200: Approved (repeat approvals are accepted and change nothing)
      - 404: Unknown client
    """
    client, notification = svc_approve_onboarding(db, client_id)
    if notification is not None:
        logger.info("Onboarding for client %s approved by admin %s", client.id, admin.id)
        await publish_to_user(client.id, serialize_notification(notification))
    return {
        "message": "Onboarding approved successfully",
        "client": {"id": client.id, "onboarding_complete": client.onboarding_complete},
    }

# app/routers/dashboard.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user
from app.database import get_db
from app.services.dashboard_service import get_client_dashboard, get_client_stats

# Responses under this prefix are memoized per user by ResponseCacheMiddleware (see app.main)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
def read_dashboard(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    GET /api/dashboard
    Client card, stats, recent applications, upcoming consultations and unread notifications.

    Status codes:
      - 200: Dashboard payload (cached for DASHBOARD_CACHE_TTL_SECONDS)
      - 401: No identity forwarded
      - 404: Client record missing
    """
    return get_client_dashboard(db, user.id)


@router.get("/stats")
def read_dashboard_stats(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """GET /api/dashboard/stats - the stats block of the dashboard only."""
    return get_client_stats(db, user.id)

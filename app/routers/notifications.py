# app/routers/notifications.py

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user
from app.database import get_db
from app.schemas.notification import NotificationRead
from app.services.notifications_service import list_notifications as svc_list_notifications, mark_read
from app.services.stream_bus import publish_to_user

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationRead])
def list_notifications(
    unread_only: bool = False,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """GET /api/notifications - the caller's notifications, newest first."""
    return svc_list_notifications(db, user.id, unread_only=unread_only)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    PATCH /api/notifications/{id}/read
    Marks the notification read and tells the caller's other open streams about it.
    """
    notification = mark_read(db, user.id, notification_id)
    await publish_to_user(user.id, {"type": "notification_read", "notificationId": notification.id})
    return notification

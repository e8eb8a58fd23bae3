# app/services/notifications_service.py

from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.client import utcnow
from app.models.notification import Notification
from app.schemas.notification import NotificationRead


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return NotificationRead.model_validate(notification).model_dump(mode="json")


def create_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> Notification:
    """Persist an unread notification for `user_id` and return it (committed)."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        metadata_=metadata or {},
        is_read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def list_notifications(db: Session, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
    return list(db.scalars(stmt))


def mark_read(db: Session, user_id: str, notification_id: str) -> Notification:
    """Mark one of the user's notifications as read; other users' notifications count as missing."""
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification

# app/services/dashboard_service.py

from datetime import datetime, timedelta
from typing import Any, Dict, List
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.application import Application
from app.models.client import Client, utcnow
from app.models.consultation import Consultation
from app.models.notification import Notification
from app.schemas.common import to_utc_iso
from app.services.applications_service import list_applications, serialize_application
from app.services.notifications_service import list_notifications, serialize_notification

RECENT_APPLICATIONS_LIMIT = 10
UPCOMING_CONSULTATIONS_LIMIT = 5
UNREAD_NOTIFICATIONS_LIMIT = 10


def _upcoming_consultations(db: Session, client_id: str, now: datetime) -> List[Consultation]:
    stmt = (
        select(Consultation)
        .where(Consultation.client_id == client_id, Consultation.scheduled_at >= now)
        .order_by(Consultation.scheduled_at.asc())
    )
    return list(db.scalars(stmt))


def _count_unread(db: Session, user_id: str) -> int:
    stmt = select(func.count()).select_from(Notification).where(
        Notification.user_id == user_id, Notification.is_read.is_(False)
    )
    return db.scalar(stmt) or 0


def compute_stats(
    applications: List[Application],
    upcoming_consultations: int,
    unread_notifications: int,
    now: datetime,
) -> Dict[str, Any]:
    """
    Dashboard counters for one client.

    success_rate is the share of applications that reached 'offer', as a percent
    string with one decimal ("33.3"), or 0 when there are no applications yet.
    """
    by_status: Dict[str, int] = {}
    for application in applications:
        by_status[application.status] = by_status.get(application.status, 0) + 1

    total = len(applications)
    offers = by_status.get("offer", 0)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    return {
        "total_applications": total,
        "pending_applications": by_status.get("applied", 0),
        "interviews_scheduled": by_status.get("interview", 0),
        "offers_received": offers,
        "rejected_applications": by_status.get("rejected", 0),
        "upcoming_consultations": upcoming_consultations,
        "unread_notifications": unread_notifications,
        "success_rate": f"{offers / total * 100:.1f}" if total else 0,
        "recent_activity": {
            "last_7_days": sum(1 for a in applications if a.created_at >= week_ago),
            "last_30_days": sum(1 for a in applications if a.created_at >= month_ago),
        },
    }


def get_client_stats(db: Session, client_id: str) -> Dict[str, Any]:
    now = utcnow()
    applications = list_applications(db, client_id=client_id)
    return compute_stats(
        applications,
        upcoming_consultations=len(_upcoming_consultations(db, client_id, now)),
        unread_notifications=_count_unread(db, client_id),
        now=now,
    )


def get_client_dashboard(db: Session, client_id: str) -> Dict[str, Any]:
    """
    Everything the client dashboard renders in one payload: client card, stats,
    recent applications, upcoming consultations and unread notifications.

    Raises NotFoundError when the client row does not exist.
    """
    client = db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client")

    now = utcnow()
    applications = list_applications(db, client_id=client_id)
    consultations = _upcoming_consultations(db, client_id, now)
    unread = list_notifications(db, client_id, unread_only=True, limit=UNREAD_NOTIFICATIONS_LIMIT)

    return {
        "client": {
            "id": client.id,
            "full_name": client.full_name,
            "email": client.email,
            "onboarding_complete": client.onboarding_complete,
            "resume_url": client.resume_url,
            "member_since": to_utc_iso(client.created_at),
        },
        "stats": compute_stats(applications, len(consultations), _count_unread(db, client_id), now),
        "recent_applications": [serialize_application(a) for a in applications[:RECENT_APPLICATIONS_LIMIT]],
        "upcoming_consultations": [
            {
                "id": c.id,
                "scheduled_at": to_utc_iso(c.scheduled_at),
                "status": c.status,
                "meeting_link": c.meeting_link,
            }
            for c in consultations[:UPCOMING_CONSULTATIONS_LIMIT]
        ],
        "unread_notifications": [serialize_notification(n) for n in unread],
        "generated_at": to_utc_iso(now),
    }

# app/services/applications_service.py

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.application import Application
from app.models.client import Client
from app.models.notification import Notification
from app.schemas.application import ApplicationCreate, ApplicationRead, ApplicationUpdate
from app.services.notifications_service import create_notification


def serialize_application(application: Application) -> Dict[str, Any]:
    return ApplicationRead.model_validate(application).model_dump(mode="json")


def list_applications(
    db: Session,
    client_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Application]:
    """Applications newest first, optionally narrowed to one client and/or one status."""
    stmt = select(Application)
    if client_id is not None:
        stmt = stmt.where(Application.client_id == client_id)
    if status is not None:
        stmt = stmt.where(Application.status == status)
    stmt = stmt.order_by(Application.created_at.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))


def create_application(db: Session, data: ApplicationCreate) -> Tuple[Application, Notification]:
    """
    Insert an application for an existing client and notify that client.

    Raises NotFoundError when the client does not exist.
    """
    if db.get(Client, data.client_id) is None:
        raise NotFoundError("Client")

    application = Application(**data.model_dump())
    db.add(application)
    db.commit()
    db.refresh(application)

    notification = create_notification(
        db,
        user_id=application.client_id,
        type="application_created",
        title="New Application Added",
        message=f"We applied to {application.job_title} at {application.company} for you",
        metadata={"application_id": application.id},
    )
    return application, notification


def update_application(
    db: Session, application_id: str, data: ApplicationUpdate
) -> Tuple[Application, Optional[Notification]]:
    """Apply a partial update; a status change notifies the client."""
    application = db.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    previous_status = application.status
    for field, value in changes.items():
        setattr(application, field, value)
    db.commit()
    db.refresh(application)

    notification = None
    if application.status != previous_status:
        notification = create_notification(
            db,
            user_id=application.client_id,
            type="application_status_updated",
            title="Application Status Updated",
            message=f"Your application at {application.company} moved to '{application.status}'",
            metadata={
                "application_id": application.id,
                "previous_status": previous_status,
                "status": application.status,
            },
        )
    return application, notification

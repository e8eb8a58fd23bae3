# app/services/onboarding_service.py

from typing import Optional, Tuple
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.client import Client
from app.models.notification import Notification
from app.services.notifications_service import create_notification


def approve_onboarding(db: Session, client_id: str) -> Tuple[Client, Optional[Notification]]:
    """
    Mark the client's onboarding as complete.

    Approving an already approved client is a no-op and sends no second notification.
    Raises NotFoundError when the client does not exist.
    """
    client = db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client")
    if client.onboarding_complete:
        return client, None

    client.onboarding_complete = True
    db.commit()
    db.refresh(client)

    notification = create_notification(
        db,
        user_id=client.id,
        type="onboarding_approved",
        title="Assessment Approved",
        message="Your onboarding assessment has been approved. Your account is now active!",
        metadata={"action_url": "/client/dashboard"},
    )
    return client, notification

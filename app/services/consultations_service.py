# app/services/consultations_service.py

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.client import Client
from app.models.consultation import Consultation
from app.models.notification import Notification
from app.schemas.common import to_utc_iso
from app.schemas.consultation import ConsultationCreate, ConsultationRead, ConsultationUpdate
from app.services.notifications_service import create_notification


def serialize_consultation(consultation: Consultation) -> Dict[str, Any]:
    return ConsultationRead.model_validate(consultation).model_dump(mode="json")


def list_consultations(db: Session, client_id: Optional[str] = None) -> List[Consultation]:
    """Consultations in schedule order, optionally for one client."""
    stmt = select(Consultation)
    if client_id is not None:
        stmt = stmt.where(Consultation.client_id == client_id)
    return list(db.scalars(stmt.order_by(Consultation.scheduled_at.asc())))


def create_consultation(db: Session, data: ConsultationCreate) -> Tuple[Consultation, Notification]:
    """
    Book a consultation for an existing client and notify that client.

    Raises NotFoundError when the client does not exist.
    """
    if db.get(Client, data.client_id) is None:
        raise NotFoundError("Client")

    consultation = Consultation(**data.model_dump())
    db.add(consultation)
    db.commit()
    db.refresh(consultation)

    notification = create_notification(
        db,
        user_id=consultation.client_id,
        type="consultation_scheduled",
        title="Consultation Scheduled",
        message=f"Your consultation is scheduled for {to_utc_iso(consultation.scheduled_at)}",
        metadata={"consultation_id": consultation.id},
    )
    return consultation, notification


def update_consultation(
    db: Session, consultation_id: str, data: ConsultationUpdate
) -> Tuple[Consultation, Optional[Notification]]:
    """Apply a partial update; a new time or status notifies the client."""
    consultation = db.get(Consultation, consultation_id)
    if consultation is None:
        raise NotFoundError("Consultation")

    previous = (consultation.scheduled_at, consultation.status)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(consultation, field, value)
    db.commit()
    db.refresh(consultation)

    if (consultation.scheduled_at, consultation.status) == previous:
        return consultation, None

    notification = create_notification(
        db,
        user_id=consultation.client_id,
        type="consultation_updated",
        title="Consultation Updated",
        message=f"Your consultation on {to_utc_iso(consultation.scheduled_at)} is now '{consultation.status}'",
        metadata={
            "consultation_id": consultation.id,
            "previous_status": previous[1],
            "status": consultation.status,
        },
    )
    return consultation, notification

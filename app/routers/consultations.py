# app/routers/consultations.py

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user, require_admin
from app.database import get_db
from app.schemas.consultation import ConsultationCreate, ConsultationRead, ConsultationUpdate
from app.services.consultations_service import (
    create_consultation as svc_create_consultation,
    list_consultations as svc_list_consultations,
    update_consultation as svc_update_consultation,
)
from app.services.notifications_service import serialize_notification
from app.services.stream_bus import publish_to_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/consultations", tags=["consultations"])


@router.get("", response_model=List[ConsultationRead])
def list_consultations(
    client_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """GET /api/consultations - clients see their own; admins see all or one client's."""
    if not user.is_admin:
        client_id = user.id
    return svc_list_consultations(db, client_id=client_id)


@router.post("", status_code=201, response_model=ConsultationRead)
async def create_consultation(
    data: ConsultationCreate,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    POST /api/consultations (admin)

    Status codes:
      - 201: Booked; the client is notified
      - 404: Unknown client_id
      - 422: Payload failed validation
    """
    consultation, notification = svc_create_consultation(db, data)
    logger.info("Consultation %s booked for client %s by admin %s", consultation.id, consultation.client_id, admin.id)

    await publish_to_user(consultation.client_id, serialize_notification(notification))
    return consultation


@router.patch("/{consultation_id}", response_model=ConsultationRead)
async def update_consultation(
    consultation_id: str,
    update: ConsultationUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """PATCH /api/consultations/{id} (admin) - reschedule or change status; changes notify the client."""
    consultation, notification = svc_update_consultation(db, consultation_id, update)
    if notification is not None:
        logger.info("Consultation %s updated to %s by admin %s", consultation.id, consultation.status, admin.id)
        await publish_to_user(consultation.client_id, serialize_notification(notification))
    return consultation

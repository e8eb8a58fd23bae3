# app/routers/applications.py

import json
import logging
from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from jsonschema import Draft7Validator, FormatChecker
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user, require_admin
from app.database import get_db
from app.schemas.application import ApplicationCreate, ApplicationRead, ApplicationStatus, ApplicationUpdate
from app.services.applications_service import (
    create_application as svc_create_application,
    list_applications as svc_list_applications,
    serialize_application,
    update_application as svc_update_application,
)
from app.services.notifications_service import serialize_notification
from app.services.stream_bus import publish_to_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])

# Load and prepare schema once at import time
schema_path = Path(__file__).resolve().parents[2] / "application_schema.json"
with schema_path.open("r", encoding="utf-8") as f:
    application_schema = json.load(f)

json_validator = Draft7Validator(application_schema, format_checker=FormatChecker())


@router.get("", response_model=List[ApplicationRead])
def list_applications(
    client_id: Optional[str] = None,
    status: Optional[ApplicationStatus] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    GET /api/applications
    Clients always get their own applications; admins get all of them and may
    narrow by client_id. Newest first.
    """
    if not user.is_admin:
        client_id = user.id
    return svc_list_applications(db, client_id=client_id, status=status)


@router.post("", status_code=201)
async def create_application(
    request: Request,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    POST /api/applications (admin)

    Status codes:
      - 201: Created; the client is notified
      - 400: Invalid JSON or JSON schema validation failed (validationErrors list)
      - 404: Unknown client_id
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON format")

    # Validation runs before any DB I/O
    validation_errors = sorted(json_validator.iter_errors(payload), key=lambda e: list(e.path))
    if validation_errors:
        return JSONResponse(
            status_code=400,
            content={"validationErrors": [e.message for e in validation_errors]},
        )

    application, notification = svc_create_application(db, ApplicationCreate(**payload))
    logger.info("Application %s created for client %s by admin %s", application.id, application.client_id, admin.id)

    await publish_to_user(application.client_id, serialize_notification(notification))
    return serialize_application(application)


@router.patch("/{application_id}", response_model=ApplicationRead)
async def update_application(
    application_id: str,
    update: ApplicationUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """PATCH /api/applications/{id} (admin) - status/notes update; status changes notify the client."""
    application, notification = svc_update_application(db, application_id, update)
    if notification is not None:
        logger.info("Application %s moved to %s by admin %s", application.id, application.status, admin.id)
        await publish_to_user(application.client_id, serialize_notification(notification))
    return application

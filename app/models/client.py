# models/client.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, String
from app.database import Base


def utcnow() -> datetime:
    # Stored as naive UTC so PostgreSQL and SQLite compare the same way
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class Client(Base):
    __tablename__ = "clients"

    # Same id as the authenticated user (forwarded by the gateway)
    id = Column(String(36), primary_key=True, default=new_id)

    full_name = Column(String(200), nullable=False)

    email = Column(String(320), nullable=False, unique=True)

    # Flipped by admins once the onboarding questionnaire is approved
    onboarding_complete = Column(Boolean, nullable=False, default=False)

    resume_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

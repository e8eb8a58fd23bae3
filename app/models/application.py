# models/application.py

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from app.database import Base
from app.models.client import new_id, utcnow

APPLICATION_STATUSES = ("applied", "interview", "offer", "rejected", "withdrawn")


class Application(Base):
    """A job application tracked by an admin on behalf of a client."""
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=new_id)

    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    company = Column(String(200), nullable=False)

    job_title = Column(String(200), nullable=False)

    status = Column(Enum(*APPLICATION_STATUSES, name="application_status_enum"), nullable=False, default="applied")

    job_url = Column(String(1024), nullable=True)

    # Internal notes visible to the client on their dashboard
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

# models/consultation.py

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String
from app.database import Base
from app.models.client import new_id, utcnow

CONSULTATION_STATUSES = ("pending", "confirmed", "rescheduled", "waitlisted", "completed", "cancelled")


class Consultation(Base):
    __tablename__ = "consultations"

    id = Column(String(36), primary_key=True, default=new_id)

    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    scheduled_at = Column(DateTime, nullable=False, index=True)

    status = Column(Enum(*CONSULTATION_STATUSES, name="consultation_status_enum"), nullable=False, default="pending")

    meeting_link = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

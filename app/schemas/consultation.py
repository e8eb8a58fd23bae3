# app/schemas/consultation.py

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from typing import Optional, Literal
from datetime import datetime, timezone

from app.schemas.common import to_utc_iso

ConsultationStatus = Literal["pending", "confirmed", "rescheduled", "waitlisted", "completed", "cancelled"]


def _to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    # Columns hold naive UTC; offsets in the payload are honoured before dropping tzinfo
    if v is None or v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


class ConsultationCreate(BaseModel):
    client_id: str = Field(..., description="Client the consultation is booked for")
    scheduled_at: datetime = Field(..., description="Start time (ISO8601; naive values are taken as UTC)")
    status: ConsultationStatus = Field("confirmed", description="Booking state")
    meeting_link: Optional[str] = Field(None, max_length=1024, description="Video call link")

    @field_validator("scheduled_at")
    @classmethod
    def _scheduled_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class ConsultationUpdate(BaseModel):
    scheduled_at: Optional[datetime] = None
    status: Optional[ConsultationStatus] = None
    meeting_link: Optional[str] = Field(None, max_length=1024)

    @field_validator("scheduled_at")
    @classmethod
    def _scheduled_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class ConsultationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    scheduled_at: datetime
    status: ConsultationStatus
    meeting_link: Optional[str] = None
    created_at: datetime

    @field_serializer("scheduled_at", "created_at")
    def _ser_ts(self, v: datetime) -> str:
        return to_utc_iso(v)

# app/schemas/application.py

from pydantic import BaseModel, ConfigDict, Field, constr, field_serializer
from typing import Optional, Literal
from datetime import datetime

from app.schemas.common import to_utc_iso

ApplicationStatus = Literal["applied", "interview", "offer", "rejected", "withdrawn"]


class ApplicationCreate(BaseModel):
    client_id: str = Field(..., description="Client the application is submitted for")
    company: constr(min_length=1, max_length=200) = Field(..., description="Hiring company") # pyright: ignore[reportInvalidTypeForm]
    job_title: constr(min_length=1, max_length=200) = Field(..., description="Position applied to") # pyright: ignore[reportInvalidTypeForm]
    status: ApplicationStatus = Field("applied", description="Pipeline stage")
    job_url: Optional[str] = Field(None, description="Link to the job posting")
    notes: Optional[str] = Field(None, description="Notes shared with the client")


class ApplicationUpdate(BaseModel):
    status: Optional[ApplicationStatus] = None
    notes: Optional[str] = None


class ApplicationRead(BaseModel):
    """DTO for applications as returned by the API (timestamps in UTC with 'Z')."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    company: str
    job_title: str
    status: ApplicationStatus
    job_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _ser_ts(self, v: datetime) -> str:
        return to_utc_iso(v)

# app/schemas/notification.py

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Any, Dict, Optional
from datetime import datetime

from app.schemas.common import to_utc_iso


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: str
    type: str
    title: str
    message: str
    # ORM attribute is metadata_ (metadata is reserved on declarative models)
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_")
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @field_serializer("read_at", "created_at")
    def _ser_ts(self, v: Optional[datetime]) -> Optional[str]:
        return to_utc_iso(v)

# models/notification.py

from sqlalchemy import Boolean, Column, DateTime, JSON, String
from app.database import Base
from app.models.client import new_id, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)

    # Recipient; clients and admins share the same id space
    user_id = Column(String(36), nullable=False, index=True)

    # Machine-readable kind, e.g. application_created, application_status_updated
    type = Column(String(64), nullable=False)

    title = Column(String(200), nullable=False)

    message = Column(String(1024), nullable=False)

    metadata_ = Column("metadata", JSON, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)

    read_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

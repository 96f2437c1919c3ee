"""SQLAlchemy model for Template aggregate."""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, Uuid

from notification_service.core.infrastructure.database import Base


class TemplateModel(Base):
    """Database model for notification templates."""

    __tablename__ = "templates"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    channel = Column(String(20), nullable=False)
    subject = Column(String(255), nullable=True)
    body = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_templates_channel", "channel"),
        Index("idx_templates_channel_active", "channel", "is_active"),
    )

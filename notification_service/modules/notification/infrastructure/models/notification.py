"""SQLAlchemy model for Notification aggregate."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, Uuid

from notification_service.core.infrastructure.database import Base


class NotificationModel(Base):
    """Database model for notifications.

    The recipient is stored inline as ``recipient_value`` plus ``channel``.
    Enum columns hold the enum value.
    """

    __tablename__ = "notifications"

    # Primary key
    id = Column(Uuid(as_uuid=True), primary_key=True)

    # Recipient
    recipient_value = Column(String(500), nullable=False)
    channel = Column(String(20), nullable=False)

    # Content
    content = Column(Text, nullable=False)
    subject = Column(String(255), nullable=True)

    # Lifecycle
    status = Column(String(20), nullable=False)
    priority = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    failed_at = Column(DateTime(timezone=True), nullable=True)

    # Optimistic locking
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("idx_notifications_status", "status"),
        Index("idx_notifications_scheduled_at", "scheduled_at"),
        Index("idx_notifications_status_scheduled", "status", "scheduled_at"),
    )

"""SQLAlchemy model for DeliveryAttempt entity."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from notification_service.core.infrastructure.database import Base


class DeliveryAttemptModel(Base):
    """Database model for delivery attempts."""

    __tablename__ = "delivery_attempts"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    notification_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attempt_number = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)

    attempted_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "notification_id",
            "attempt_number",
            name="uq_delivery_attempts_notification_attempt",
        ),
    )

# eduvibe/models/notification.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, TIMESTAMP, func
from sqlalchemy.orm import relationship
from eduvibe.database import Base

# In-app events raised by the session, review and admin workflows
EVENT_TYPES = (
    "session_requested",
    "session_confirmed",
    "session_cancelled",
    "session_completed",
    "review_received",
    "account_blocked",
    "account_unblocked",
    "announcement",
)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        # Unread badge and "unread only" listing
        Index("ix_notifications_recipient_unread", "recipient_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="SET NULL"), nullable=True)
    event_type = Column(String(30), nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)

    # Relationships
    recipient = relationship("User", foreign_keys=[recipient_id])
    actor = relationship("User", foreign_keys=[actor_id])
    session = relationship("Session")

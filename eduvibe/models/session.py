# eduvibe/models/session.py
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from eduvibe.database import Base

SESSION_STATUSES = ("Pending", "Confirmed", "Completed", "Cancelled")


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    scheduled_time = Column(TIMESTAMP)
    duration_minutes = Column(Integer, default=60, nullable=False)
    status = Column(String(20), default="Pending", nullable=False)
    notes = Column(String(500))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    # Relationships
    student = relationship("User", foreign_keys=[student_id], back_populates="student_sessions")
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="mentor_sessions")
    review = relationship("Review", back_populates="session", uselist=False)

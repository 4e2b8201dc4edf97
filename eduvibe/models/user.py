from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey, TIMESTAMP, JSON, Text, func
from sqlalchemy.orm import relationship
from eduvibe.database import Base


# ---------------- USER (AUTH TABLE) ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    # One of eduvibe.utils.rbac.Role values
    role = Column(String(20), nullable=False, default="student")
    avatar = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    mentor_profile = relationship(
        "MentorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    student_sessions = relationship("Session", foreign_keys="Session.student_id", back_populates="student")
    mentor_sessions = relationship("Session", foreign_keys="Session.mentor_id", back_populates="mentor")


# ---------------- STUDENT PROFILE ----------------
class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    academic_level = Column(String(50))
    field_of_study = Column(String(150))
    learning_goals = Column(Text)
    current_level = Column(String(20), default="Beginner")
    interested_subjects = Column(JSON, default=list)
    preferred_languages = Column(JSON, default=list)
    # [{"day": "Monday", "start_time": "09:00", "end_time": "11:00"}, ...]
    preferred_times = Column(JSON, default=list)
    budget_min = Column(Float)
    budget_max = Column(Float)
    location = Column(String(150))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="student_profile")


# ---------------- MENTOR PROFILE ----------------
class MentorProfile(Base):
    __tablename__ = "mentor_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    bio = Column(Text)
    subjects = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    availability = Column(JSON, default=list)
    experience_level = Column(String(20), default="Beginner")
    hourly_rate = Column(Float, default=0.0, nullable=False)
    # Average of received reviews, maintained by review_service
    rating = Column(Float, default=0.0, nullable=False)
    location = Column(String(150))
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="mentor_profile")

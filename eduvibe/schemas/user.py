from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from eduvibe.schemas.recommendation import AvailabilitySlot, ExperienceLevel


# ======================
# USER SCHEMAS
# ======================

class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    avatar: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ======================
# PROFILE SCHEMAS
# ======================

class StudentProfileOut(BaseModel):
    academic_level: Optional[str] = None
    field_of_study: Optional[str] = None
    learning_goals: Optional[str] = None
    current_level: Optional[str] = None
    interested_subjects: List[str] = Field(default_factory=list)
    preferred_languages: List[str] = Field(default_factory=list)
    preferred_times: List[AvailabilitySlot] = Field(default_factory=list)
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StudentProfileUpdate(BaseModel):
    academic_level: Optional[str] = None
    field_of_study: Optional[str] = None
    learning_goals: Optional[str] = None
    current_level: Optional[ExperienceLevel] = None
    interested_subjects: Optional[List[str]] = None
    preferred_languages: Optional[List[str]] = None
    preferred_times: Optional[List[AvailabilitySlot]] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None


class MentorProfileOut(BaseModel):
    bio: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    availability: List[AvailabilitySlot] = Field(default_factory=list)
    experience_level: Optional[str] = None
    hourly_rate: float = 0.0
    rating: float = 0.0
    location: Optional[str] = None
    is_available: bool = True

    model_config = ConfigDict(from_attributes=True)


class MentorProfileUpdate(BaseModel):
    bio: Optional[str] = None
    subjects: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    experience_level: Optional[ExperienceLevel] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    is_available: Optional[bool] = None


class MeResponse(BaseModel):
    user: UserOut
    student_profile: Optional[StudentProfileOut] = None
    mentor_profile: Optional[MentorProfileOut] = None
    permissions: List[str] = Field(default_factory=list)

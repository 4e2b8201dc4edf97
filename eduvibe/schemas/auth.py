from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional

# ======================
# TOKEN SCHEMAS
# ======================

class Token(BaseModel):
    access_token: str
    token_type: str
    role: str

class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None


# ======================
# USER AUTHENTICATION SCHEMAS
# ======================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    # Bcrypt limit is 72 bytes; max_length=72 prevents the "password too long" crash
    password: str = Field(..., min_length=6, max_length=72)
    # Self-registration is limited to student and mentor accounts
    role: str = "student"

    # Student onboarding
    academic_level: Optional[str] = None
    field_of_study: Optional[str] = None
    learning_goals: Optional[str] = None
    interested_subjects: List[str] = Field(default_factory=list)

    # Mentor onboarding
    bio: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    hourly_rate: Optional[float] = Field(None, ge=0)

    languages: List[str] = Field(default_factory=list)
    location: Optional[str] = None

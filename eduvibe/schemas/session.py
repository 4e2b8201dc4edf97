from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

# ======================
# SESSION RESPONSE MODELS
# ======================

class SessionBase(BaseModel):
    id: int
    student_id: int
    mentor_id: int
    subject: str
    scheduled_time: Optional[datetime] = None
    duration_minutes: int = 60
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionResponse(SessionBase):
    """Session row plus participant names for list endpoints."""
    student_name: Optional[str] = None
    mentor_name: Optional[str] = None
    has_review: bool = False

    model_config = ConfigDict(from_attributes=True)

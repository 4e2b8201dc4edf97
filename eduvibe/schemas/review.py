# eduvibe/schemas/review.py
"""
Review Pydantic Schemas
Request/response models with validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ReviewCreate(BaseModel):
    """Schema for creating a review"""
    session_id: int = Field(..., description="Session identifier")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, max_length=1000, description="Review comment (max 1000 chars)")

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, v):
        """Validate comment is not just whitespace"""
        if v is not None and v.strip() == "":
            raise ValueError("Comment cannot be empty or just whitespace")
        return v.strip() if v else None


class ReviewSubmitResponse(BaseModel):
    """Response after submitting a review"""
    review_id: int
    session_id: int
    rating: int
    comment: Optional[str] = None
    mentor_new_average: float = Field(..., description="Mentor's updated average rating")
    mentor_total_reviews: int = Field(..., description="Mentor's total review count")
    message: str


class ReviewDisplay(BaseModel):
    review_id: int
    session_id: int
    student_id: int
    student_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[str] = None

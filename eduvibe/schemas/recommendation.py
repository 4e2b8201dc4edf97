# eduvibe/schemas/recommendation.py
"""
Recommendation Pydantic Schemas
Request filters, mentor candidate projections and ranked responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


ExperienceLevel = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
EXPERIENCE_LEVELS = ("Beginner", "Intermediate", "Advanced", "Expert")


class AvailabilitySlot(BaseModel):
    """Weekly time window, times as HH:MM"""
    day: str = Field(..., description="Day of week, e.g. Monday")
    start_time: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", description="Start time (HH:MM)")
    end_time: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", description="End time (HH:MM)")


# ======================
# FILTERS
# ======================

class PriceRange(BaseModel):
    min: float = Field(..., ge=0, description="Minimum hourly rate")
    max: Optional[float] = Field(None, ge=0, description="Maximum hourly rate, open-ended when absent")


class RecommendationFilters(BaseModel):
    """Hard constraints; an absent field places no constraint on that dimension."""
    subjects: Optional[List[str]] = Field(None, description="Mentor must teach at least one")
    experience_level: Optional[ExperienceLevel] = None
    price_range: Optional[PriceRange] = None
    rating: Optional[float] = Field(None, ge=0, le=5, description="Minimum mentor rating")
    location: Optional[str] = Field(None, description="Case-insensitive location substring")
    language: Optional[List[str]] = Field(None, description="Mentor must speak at least one")
    limit: Optional[int] = Field(None, ge=1, le=50, description="Number of results (1-50)")

    def active_filters(self) -> dict:
        """Filters actually set, for echoing back to the client."""
        return self.model_dump(exclude_none=True, exclude={"limit"})


# ======================
# SCORER INPUTS
# ======================

class MentorCandidate(BaseModel):
    """Read-only projection of a mentor profile"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    hourly_rate: float = 0.0
    rating: float = 0.0
    total_reviews: int = 0
    total_sessions: int = 0
    experience_level: str = "Beginner"
    response_time: str = "Unknown"
    languages: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    availability: List[AvailabilitySlot] = Field(default_factory=list)


class StudentPreferences(BaseModel):
    """Student-side inputs to the soft signals"""
    model_config = ConfigDict(frozen=True)

    student_id: str
    interested_subjects: List[str] = Field(default_factory=list)
    preferred_languages: List[str] = Field(default_factory=list)
    current_level: str = "Beginner"
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_times: List[AvailabilitySlot] = Field(default_factory=list)
    learning_goals: Optional[str] = None
    location: Optional[str] = None


# ======================
# SCORER OUTPUTS
# ======================

class MentorRecommendation(MentorCandidate):
    match_score: int = Field(..., ge=0, le=100, description="Match score (0-100)")
    match_reasons: List[str] = Field(default_factory=list, description="Highest-impact reason first")


class RecommendationResult(BaseModel):
    success: bool
    recommendations: List[MentorRecommendation] = Field(default_factory=list)
    error: Optional[str] = None


class PopularSubject(BaseModel):
    subject: str
    count: int = Field(..., ge=0)


class AvailabilityResult(BaseModel):
    success: bool
    availability: List[AvailabilitySlot] = Field(default_factory=list)
    error: Optional[str] = None


# ======================
# API RESPONSES
# ======================

class RecommendationsResponse(BaseModel):
    success: bool = True
    recommendations: List[MentorRecommendation]
    filters: dict = Field(default_factory=dict)
    count: int
    popular_subjects: Optional[List[PopularSubject]] = None
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "recommendations": [
                    {
                        "id": "2",
                        "name": "Ada Lovelace",
                        "subjects": ["Math", "Physics"],
                        "hourly_rate": 40.0,
                        "rating": 4.9,
                        "total_reviews": 31,
                        "total_sessions": 120,
                        "experience_level": "Expert",
                        "response_time": "Within 2 hours",
                        "languages": ["English"],
                        "availability": [],
                        "match_score": 87,
                        "match_reasons": [
                            "Specializes in 1 of your requested subjects",
                            "Highly rated mentor (4.9 stars)",
                        ],
                    }
                ],
                "filters": {"subjects": ["Math"]},
                "count": 1,
            }
        }


class PopularSubjectsResponse(BaseModel):
    success: bool = True
    subjects: List[PopularSubject]
    count: int

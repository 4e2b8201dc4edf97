# eduvibe/schemas/__init__.py

# Auth schemas
from .auth import Token, TokenData, LoginRequest, RegisterRequest

# User schemas
from .user import UserOut, StudentProfileOut, MentorProfileOut, MeResponse

# Recommendation schemas
from .recommendation import (
    AvailabilitySlot,
    MentorCandidate,
    MentorRecommendation,
    PopularSubject,
    RecommendationFilters,
    RecommendationResult,
    StudentPreferences,
)

__all__ = [
    "Token",
    "TokenData",
    "LoginRequest",
    "RegisterRequest",
    "UserOut",
    "StudentProfileOut",
    "MentorProfileOut",
    "MeResponse",
    "AvailabilitySlot",
    "MentorCandidate",
    "MentorRecommendation",
    "PopularSubject",
    "RecommendationFilters",
    "RecommendationResult",
    "StudentPreferences",
]

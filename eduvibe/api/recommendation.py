# eduvibe/api/recommendation.py
"""
Recommendation API Router
Personalized mentor recommendations for students

Endpoints:
- GET /recommendations - Recommendations with filters from the query string
- POST /recommendations - Recommendations with filters in the JSON body, plus popular subjects
- GET /recommendations/popular-subjects - Subjects taught by the most mentors
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from eduvibe import models
from eduvibe.api.mentor import get_scorer
from eduvibe.config import settings
from eduvibe.ml.recommender import RecommendationScorer
from eduvibe.schemas.recommendation import (
    PopularSubjectsResponse,
    RecommendationFilters,
    RecommendationsResponse,
)
from eduvibe.utils.rbac import Permission, has_permission, is_student
from eduvibe.utils.security import build_access_context, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


# ======================
# HELPER FUNCTIONS
# ======================
def require_student(current_user: models.User = Depends(get_current_user)) -> models.User:
    if not is_student(current_user.role):
        raise HTTPException(status_code=403, detail="Only students can get mentor recommendations")

    if not has_permission(build_access_context(current_user), Permission.GET_RECOMMENDATIONS):
        raise HTTPException(status_code=403, detail="Permission denied")
    return current_user


def _split_csv(value: Optional[str]):
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def parse_query_filters(
    subjects: Optional[str] = None,
    experience_level: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    rating: Optional[str] = None,
    location: Optional[str] = None,
    language: Optional[str] = None,
    limit: Optional[str] = None,
) -> RecommendationFilters:
    """
    Build filters from raw query-string values.

    Raises:
        ValidationError: If any value is malformed or out of range
    """
    raw = {
        "subjects": _split_csv(subjects),
        "experience_level": experience_level or None,
        "rating": rating or None,
        "location": location or None,
        "language": _split_csv(language),
        "limit": limit or None,
    }
    if min_price or max_price:
        raw["price_range"] = {
            "min": min_price or 0,
            "max": max_price or None,
        }
    return RecommendationFilters.model_validate(raw)


def _run(
    scorer: RecommendationScorer,
    student: models.User,
    filters: RecommendationFilters,
):
    limit = filters.limit or settings.RECOMMENDATION_DEFAULT_LIMIT
    result = scorer.get_recommendations(student.id, filters, limit)
    if not result.success:
        status_code = 404 if result.error == "Student not found" else 500
        raise HTTPException(
            status_code=status_code,
            detail=result.error or "Failed to get recommendations"
        )
    return result.recommendations


# ======================
# GET RECOMMENDATIONS
# ======================
@router.get("/", response_model=RecommendationsResponse)
def get_recommendations(
    subjects: Optional[str] = Query(None, description="Comma-separated subjects"),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    rating: Optional[str] = Query(None, description="Minimum mentor rating (0-5)"),
    location: Optional[str] = Query(None),
    language: Optional[str] = Query(None, description="Comma-separated languages"),
    limit: Optional[str] = Query(None, description="Number of results (1-50)"),
    current_user: models.User = Depends(require_student),
    scorer: RecommendationScorer = Depends(get_scorer)
):
    """
    Mentor recommendations for the current student.

    Filters narrow the candidate pool; the student's profile drives the
    ranking when no subjects or languages are given.
    """
    try:
        filters = parse_query_filters(
            subjects=subjects,
            experience_level=experience_level,
            min_price=min_price,
            max_price=max_price,
            rating=rating,
            location=location,
            language=language,
            limit=limit,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Invalid filters",
                "details": e.errors(include_url=False, include_context=False),
            }
        )

    recommendations = _run(scorer, current_user, filters)
    return RecommendationsResponse(
        recommendations=recommendations,
        filters=filters.active_filters(),
        count=len(recommendations),
        message=None if recommendations else "No mentors match your criteria",
    )


@router.post("/", response_model=RecommendationsResponse)
def post_recommendations(
    filters: RecommendationFilters,
    current_user: models.User = Depends(require_student),
    scorer: RecommendationScorer = Depends(get_scorer)
):
    """Same as GET with filters in the body; also returns popular subjects."""
    recommendations = _run(scorer, current_user, filters)
    popular = scorer.get_popular_subjects(10)
    return RecommendationsResponse(
        recommendations=recommendations,
        filters=filters.active_filters(),
        count=len(recommendations),
        popular_subjects=popular,
        message=None if recommendations else "No mentors match your criteria",
    )


# ======================
# POPULAR SUBJECTS
# ======================
@router.get("/popular-subjects", response_model=PopularSubjectsResponse)
def get_popular_subjects(
    limit: int = Query(10, description="Number of subjects (1-50)"),
    current_user: models.User = Depends(get_current_user),
    scorer: RecommendationScorer = Depends(get_scorer)
):
    if limit < 1 or limit > 50:
        raise HTTPException(status_code=400, detail="Limit must be between 1 and 50")

    subjects = scorer.get_popular_subjects(limit)
    logger.debug("Popular subjects requested by user %s: %d returned", current_user.id, len(subjects))
    return PopularSubjectsResponse(subjects=subjects, count=len(subjects))

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from eduvibe import models
from eduvibe.crud.mentor import MentorDirectory
from eduvibe.database import get_db
from eduvibe.ml.recommender import RecommendationScorer, time_to_minutes
from eduvibe.schemas.recommendation import AvailabilityResult, AvailabilitySlot
from eduvibe.utils.rbac import Permission
from eduvibe.utils.security import require_permission

router = APIRouter(prefix="/mentors", tags=["Mentors"])


def get_scorer(db: Session = Depends(get_db)) -> RecommendationScorer:
    """Scorer bound to the request's DB session."""
    return RecommendationScorer(MentorDirectory(db))


# ======================
# GET: Mentor availability
# ======================
@router.get("/{mentor_id}/availability", response_model=AvailabilityResult)
def get_mentor_availability(
    mentor_id: int,
    current_user: models.User = Depends(require_permission(Permission.VIEW_MENTOR_PROFILES)),
    scorer: RecommendationScorer = Depends(get_scorer)
):
    result = scorer.get_mentor_availability(mentor_id)
    if not result.success:
        status_code = 404 if result.error == "Mentor not found" else 500
        raise HTTPException(status_code=status_code, detail=result.error)
    return result


# ======================
# PUT: Own availability
# ======================
@router.put("/me/availability", response_model=AvailabilityResult)
def set_my_availability(
    slots: List[AvailabilitySlot],
    current_user: models.User = Depends(require_permission(Permission.SET_AVAILABILITY)),
    db: Session = Depends(get_db)
):
    profile = current_user.mentor_profile
    if profile is None:
        raise HTTPException(status_code=404, detail="Mentor profile not found")

    for slot in slots:
        if time_to_minutes(slot.start_time) >= time_to_minutes(slot.end_time):
            raise HTTPException(
                status_code=400,
                detail=f"Slot on {slot.day} must start before it ends"
            )

    profile.availability = [slot.model_dump() for slot in slots]
    db.commit()

    return AvailabilityResult(success=True, availability=slots)

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from eduvibe import models
from eduvibe.crud.mentor import parse_slots
from eduvibe.database import get_db
from eduvibe.schemas.user import (
    MeResponse,
    MentorProfileOut,
    MentorProfileUpdate,
    StudentProfileOut,
    StudentProfileUpdate,
    UserOut,
)
from eduvibe.utils.rbac import Action, Permission, Resource, permissions_for
from eduvibe.utils.security import ensure_resource_access, get_current_user, require_permission

router = APIRouter(prefix="/users", tags=["Users"])


def _student_profile_out(profile: models.StudentProfile) -> StudentProfileOut:
    return StudentProfileOut(
        academic_level=profile.academic_level,
        field_of_study=profile.field_of_study,
        learning_goals=profile.learning_goals,
        current_level=profile.current_level,
        interested_subjects=profile.interested_subjects or [],
        preferred_languages=profile.preferred_languages or [],
        preferred_times=parse_slots(profile.preferred_times),
        budget_min=profile.budget_min,
        budget_max=profile.budget_max,
        location=profile.location,
    )


def _mentor_profile_out(profile: models.MentorProfile) -> MentorProfileOut:
    return MentorProfileOut(
        bio=profile.bio,
        subjects=profile.subjects or [],
        languages=profile.languages or [],
        availability=parse_slots(profile.availability),
        experience_level=profile.experience_level,
        hourly_rate=profile.hourly_rate or 0.0,
        rating=profile.rating or 0.0,
        location=profile.location,
        is_available=bool(profile.is_available),
    )


# ======================
# GET: Current user
# ======================
@router.get("/me", response_model=MeResponse)
def get_me(current_user: models.User = Depends(get_current_user)):
    return MeResponse(
        user=UserOut.model_validate(current_user),
        student_profile=(
            _student_profile_out(current_user.student_profile)
            if current_user.student_profile else None
        ),
        mentor_profile=(
            _mentor_profile_out(current_user.mentor_profile)
            if current_user.mentor_profile else None
        ),
        permissions=sorted(p.value for p in permissions_for(current_user.role)),
    )


# ======================
# PUT: Own profile
# ======================
@router.put("/me/student-profile", response_model=StudentProfileOut)
def update_student_profile(
    payload: StudentProfileUpdate,
    current_user: models.User = Depends(require_permission(Permission.EDIT_PROFILE)),
    db: Session = Depends(get_db)
):
    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.USER,
        resource_id=current_user.id, resource_owner_id=current_user.id,
    )
    profile = current_user.student_profile
    if profile is None:
        raise HTTPException(status_code=404, detail="Student profile not found")

    changes = payload.model_dump(exclude_unset=True)
    if "preferred_times" in changes and changes["preferred_times"] is not None:
        changes["preferred_times"] = [slot.model_dump() for slot in payload.preferred_times]

    low = changes.get("budget_min", profile.budget_min)
    high = changes.get("budget_max", profile.budget_max)
    if low is not None and high is not None and low > high:
        raise HTTPException(status_code=400, detail="budget_min cannot exceed budget_max")

    for field, value in changes.items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return _student_profile_out(profile)


@router.put("/me/mentor-profile", response_model=MentorProfileOut)
def update_mentor_profile(
    payload: MentorProfileUpdate,
    current_user: models.User = Depends(require_permission(Permission.EDIT_PROFILE)),
    db: Session = Depends(get_db)
):
    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.USER,
        resource_id=current_user.id, resource_owner_id=current_user.id,
    )
    profile = current_user.mentor_profile
    if profile is None:
        raise HTTPException(status_code=404, detail="Mentor profile not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("hourly_rate", "is_available"):
            # NOT NULL columns
            continue
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return _mentor_profile_out(profile)

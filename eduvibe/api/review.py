# eduvibe/api/review.py
"""
Review & Rating API Router
REST endpoints for review submission and rating display

Endpoints:
- POST /reviews/ - Submit a review
- GET /reviews/mentor/{mentor_id} - Get all reviews for a mentor
- DELETE /reviews/{review_id} - Delete a review
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from eduvibe.crud import review as review_crud
from eduvibe.database import get_db
from eduvibe.models.user import User
from eduvibe.schemas.review import ReviewCreate, ReviewDisplay, ReviewSubmitResponse
from eduvibe.services import review_service
from eduvibe.utils.rbac import Action, Permission, Resource
from eduvibe.utils.security import ensure_resource_access, get_current_user, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


# ======================
# SUBMIT REVIEW
# ======================
@router.post("/", response_model=ReviewSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit a review for a completed session.

    Requirements:
    - Session must be completed
    - User must be the student from the session
    - Only one review per session allowed
    - Rating must be 1-5
    - Comment max 1000 characters

    Returns:
        Review details with updated mentor rating
    """
    ensure_resource_access(current_user, Action.CREATE, Resource.REVIEW)

    try:
        result = review_service.submit_review(
            db=db,
            session_id=review.session_id,
            student_id=current_user.id,
            rating=review.rating,
            comment=review.comment
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return ReviewSubmitResponse(**result)


# ======================
# GET MENTOR REVIEWS
# ======================
@router.get("/mentor/{mentor_id}", response_model=List[ReviewDisplay])
def get_mentor_reviews(
    mentor_id: int,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_permission(Permission.VIEW_REVIEWS)),
    db: Session = Depends(get_db)
):
    reviews = review_service.get_mentor_reviews(db, mentor_id, limit, offset)
    return [ReviewDisplay(**r) for r in reviews]


# ======================
# DELETE REVIEW
# ======================
@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Authors delete their own reviews; admins may delete any."""
    review = review_crud.get_review_by_id(db, review_id)
    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")

    ensure_resource_access(
        current_user, Action.DELETE_OWN, Resource.REVIEW,
        resource_id=review.id, resource_owner_id=review.student_id,
    )

    return review_service.delete_review(db, review)

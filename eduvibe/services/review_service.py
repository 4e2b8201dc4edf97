# eduvibe/services/review_service.py
"""
Review Service Layer
Business logic for review submission and mentor rating maintenance
"""

import logging

from sqlalchemy.orm import Session
from typing import Optional, Dict, Any, List

from eduvibe.crud import review as review_crud
from eduvibe.models.review import Review
from eduvibe.models.session import Session as SessionModel
from eduvibe.services import notification_service

logger = logging.getLogger(__name__)


def submit_review(
    db: Session,
    session_id: int,
    student_id: int,
    rating: int,
    comment: Optional[str] = None
) -> Dict[str, Any]:
    """
    Submit a review for a completed session.

    Validates eligibility, creates review, updates the mentor rating and
    notifies the mentor.

    Raises:
        ValueError: If validation fails or rating is invalid
    """
    can_review, reason = review_crud.can_review_session(db, session_id, student_id)
    if not can_review:
        raise ValueError(reason)

    if comment and len(comment) > 1000:
        raise ValueError("Comment must be 1000 characters or less")

    session = db.query(SessionModel).filter(SessionModel.id == session_id).first()

    try:
        review = review_crud.create_review(
            db=db,
            session_id=session_id,
            student_id=student_id,
            mentor_id=session.mentor_id,
            rating=rating,
            comment=comment
        )

        avg_rating, total = review_crud.update_mentor_rating(db, session.mentor_id)

        notification_service.create_notification(
            db,
            recipient_id=session.mentor_id,
            actor_id=student_id,
            session_id=session_id,
            event_type="review_received",
            message=f"You received a {rating}-star review",
        )

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Review submission failed for session %s", session_id)
        raise

    return {
        "review_id": review.id,
        "session_id": review.session_id,
        "rating": review.rating,
        "comment": review.comment,
        "mentor_new_average": round(avg_rating, 2),
        "mentor_total_reviews": total,
        "message": "Review submitted successfully"
    }


def delete_review(db: Session, review: Review) -> Dict[str, Any]:
    """Delete a review and recompute its mentor's rating. Access is checked by the caller."""
    review_id = review.id
    mentor_id = review.mentor_id
    try:
        review_crud.delete_review(db, review_id)
        review_crud.update_mentor_rating(db, mentor_id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Review deletion failed for review %s", review_id)
        raise

    return {
        "review_id": review_id,
        "message": "Review deleted successfully"
    }


def get_mentor_reviews(
    db: Session,
    mentor_id: int,
    limit: int = 50,
    offset: int = 0
) -> List[Dict[str, Any]]:
    reviews = review_crud.get_reviews_by_mentor(db, mentor_id, limit, offset)

    return [
        {
            "review_id": r.id,
            "session_id": r.session_id,
            "student_id": r.student_id,
            "student_name": r.student.name if r.student else "Unknown",
            "rating": r.rating,
            "comment": r.comment,
            "created_at": r.created_at.isoformat() if r.created_at else None
        }
        for r in reviews
    ]

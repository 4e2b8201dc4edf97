# eduvibe/crud/review.py
"""
Review CRUD Operations
Core database operations for reviews and the mentor rating they feed
"""

from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional, List

from eduvibe.models.review import Review
from eduvibe.models.session import Session as SessionModel
from eduvibe.models.user import MentorProfile


# ======================
# REVIEW CRUD
# ======================

def create_review(
    db: Session,
    session_id: int,
    student_id: int,
    mentor_id: int,
    rating: int,
    comment: Optional[str] = None
) -> Review:
    """
    Create a new review for a completed session.

    Raises:
        ValueError: If rating is out of range
    """
    if not (1 <= rating <= 5):
        raise ValueError("Rating must be between 1 and 5")

    review = Review(
        session_id=session_id,
        student_id=student_id,
        mentor_id=mentor_id,
        rating=rating,
        comment=comment
    )

    db.add(review)
    db.flush()
    return review


def get_review_by_id(db: Session, review_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.id == review_id).first()


def get_review_by_session(db: Session, session_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.session_id == session_id).first()


def get_reviews_by_mentor(
    db: Session,
    mentor_id: int,
    limit: int = 50,
    offset: int = 0
) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.mentor_id == mentor_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def delete_review(db: Session, review_id: int) -> bool:
    review = get_review_by_id(db, review_id)
    if not review:
        return False

    db.delete(review)
    db.flush()
    return True


# ======================
# MENTOR RATING
# ======================

def calculate_mentor_rating(db: Session, mentor_id: int) -> tuple[float, int]:
    """
    Calculate average rating and total reviews for a mentor.

    Returns:
        Tuple of (average_rating, total_reviews)
    """
    result = db.query(
        func.avg(Review.rating).label('avg_rating'),
        func.count(Review.id).label('total')
    ).filter(
        Review.mentor_id == mentor_id
    ).first()

    avg_rating = float(result.avg_rating) if result.avg_rating else 0.0
    total = int(result.total) if result.total else 0

    return (avg_rating, total)


def update_mentor_rating(db: Session, mentor_id: int) -> tuple[float, int]:
    """Recalculate the mentor's average and store it on the mentor profile."""
    avg_rating, total = calculate_mentor_rating(db, mentor_id)

    profile = db.query(MentorProfile).filter(MentorProfile.user_id == mentor_id).first()
    if profile is not None:
        profile.rating = round(avg_rating, 2)
        db.flush()

    return (avg_rating, total)


# ======================
# VALIDATION HELPERS
# ======================

def can_review_session(
    db: Session,
    session_id: int,
    user_id: int
) -> tuple[bool, str]:
    """
    Check if a user can review a session.

    Returns:
        Tuple of (can_review: bool, reason: str)
    """
    session = db.query(SessionModel).filter(
        SessionModel.id == session_id
    ).first()

    if not session:
        return (False, "Session not found")

    # Must be the student participant for this session
    if session.student_id != user_id:
        return (False, "Only the student in this session can submit a review")

    if session.status != "Completed":
        return (False, "Only completed sessions can be reviewed")

    if get_review_by_session(db, session_id):
        return (False, "Review already submitted for this session")

    return (True, "Can review")

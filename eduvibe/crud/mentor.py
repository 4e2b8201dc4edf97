# eduvibe/crud/mentor.py
"""
Mentor directory: the read side the recommendation scorer depends on.

Projects mentor users, their profiles and their session/review counts into
MentorCandidate records, and student profiles into StudentPreferences.
"""

from typing import Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from eduvibe.models.review import Review
from eduvibe.models.session import Session as SessionModel
from eduvibe.models.user import MentorProfile, User
from eduvibe.schemas.recommendation import AvailabilitySlot, MentorCandidate, StudentPreferences


def response_time_label(completed_sessions: int) -> str:
    """Bucket a mentor's responsiveness from how many sessions they have completed."""
    if completed_sessions > 10:
        return "Within 2 hours"
    if completed_sessions > 5:
        return "Within 4 hours"
    return "Within 24 hours"


def parse_slots(raw) -> List[AvailabilitySlot]:
    slots = []
    for item in raw or []:
        try:
            slots.append(AvailabilitySlot.model_validate(item))
        except ValidationError:
            # Skip malformed rows written by older clients
            continue
    return slots


class MentorDirectory:
    """SQLAlchemy-backed candidate pool bound to one DB session."""

    def __init__(self, db: Session):
        self.db = db

    def _completed_session_counts(self) -> Dict[int, int]:
        rows = (
            self.db.query(SessionModel.mentor_id, func.count(SessionModel.id))
            .filter(SessionModel.status == "Completed")
            .group_by(SessionModel.mentor_id)
            .all()
        )
        return {mentor_id: count for mentor_id, count in rows}

    def _review_counts(self) -> Dict[int, int]:
        rows = (
            self.db.query(Review.mentor_id, func.count(Review.id))
            .group_by(Review.mentor_id)
            .all()
        )
        return {mentor_id: count for mentor_id, count in rows}

    def _to_candidate(self, user: User, sessions: int, reviews: int) -> MentorCandidate:
        profile = user.mentor_profile
        return MentorCandidate(
            id=str(user.id),
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            bio=profile.bio,
            subjects=list(profile.subjects or []),
            hourly_rate=float(profile.hourly_rate or 0.0),
            rating=float(profile.rating or 0.0),
            total_reviews=reviews,
            total_sessions=sessions,
            experience_level=profile.experience_level or "Beginner",
            response_time=response_time_label(sessions),
            languages=list(profile.languages or ["English"]),
            location=profile.location,
            availability=parse_slots(profile.availability),
        )

    def list_eligible_mentors(self) -> List[MentorCandidate]:
        """Active mentors currently accepting students, in id order."""
        mentors = (
            self.db.query(User)
            .join(MentorProfile, MentorProfile.user_id == User.id)
            .options(joinedload(User.mentor_profile))
            .filter(
                User.role == "mentor",
                User.is_active == True,
                MentorProfile.is_available == True,
            )
            .order_by(User.id.asc())
            .all()
        )
        if not mentors:
            return []

        session_counts = self._completed_session_counts()
        review_counts = self._review_counts()
        return [
            self._to_candidate(
                mentor,
                session_counts.get(mentor.id, 0),
                review_counts.get(mentor.id, 0),
            )
            for mentor in mentors
        ]

    def get_mentor(self, mentor_id: int) -> Optional[MentorCandidate]:
        mentor = (
            self.db.query(User)
            .options(joinedload(User.mentor_profile))
            .filter(User.id == mentor_id, User.role == "mentor")
            .first()
        )
        if not mentor or mentor.mentor_profile is None:
            return None

        sessions = self.db.query(SessionModel).filter(
            SessionModel.mentor_id == mentor.id,
            SessionModel.status == "Completed",
        ).count()
        reviews = self.db.query(Review).filter(Review.mentor_id == mentor.id).count()
        return self._to_candidate(mentor, sessions, reviews)

    def get_student_preferences(self, student_id: int) -> Optional[StudentPreferences]:
        student = (
            self.db.query(User)
            .options(joinedload(User.student_profile))
            .filter(User.id == student_id, User.role == "student")
            .first()
        )
        if not student:
            return None

        profile = student.student_profile
        if profile is None:
            return StudentPreferences(student_id=str(student.id))

        return StudentPreferences(
            student_id=str(student.id),
            interested_subjects=list(profile.interested_subjects or []),
            preferred_languages=list(profile.preferred_languages or []),
            current_level=profile.current_level or "Beginner",
            budget_min=profile.budget_min,
            budget_max=profile.budget_max,
            preferred_times=parse_slots(profile.preferred_times),
            learning_goals=profile.learning_goals,
            location=profile.location,
        )

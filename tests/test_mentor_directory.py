"""
MentorDirectory: SQL projections feeding the recommendation scorer
"""

from datetime import datetime, UTC

from conftest import create_mentor, create_student
from eduvibe.crud.mentor import MentorDirectory, parse_slots, response_time_label
from eduvibe.ml.recommender import RecommendationScorer
from eduvibe.models.review import Review
from eduvibe.models.session import Session
from eduvibe.schemas.recommendation import RecommendationFilters


def _completed_sessions(db, student, mentor, count):
    sessions = []
    for _ in range(count):
        s = Session(
            student_id=student.id,
            mentor_id=mentor.id,
            subject="Math",
            scheduled_time=datetime.now(UTC),
            status="Completed",
        )
        db.add(s)
        sessions.append(s)
    db.commit()
    return sessions


def test_response_time_label_buckets():
    assert response_time_label(0) == "Within 24 hours"
    assert response_time_label(5) == "Within 24 hours"
    assert response_time_label(6) == "Within 4 hours"
    assert response_time_label(10) == "Within 4 hours"
    assert response_time_label(11) == "Within 2 hours"


def test_parse_slots_skips_malformed_rows():
    slots = parse_slots([
        {"day": "Monday", "start_time": "09:00", "end_time": "10:00"},
        {"day": "Tuesday", "start": "9am"},
        None,
    ])
    assert len(slots) == 1
    assert slots[0].day == "Monday"
    assert parse_slots(None) == []


def test_only_active_available_mentors_are_eligible(db_session):
    create_mentor(db_session, email="a@test.edu")
    create_mentor(db_session, email="b@test.edu", is_active=False)
    create_mentor(db_session, email="c@test.edu", is_available=False)
    create_student(db_session)

    pool = MentorDirectory(db_session).list_eligible_mentors()

    assert [c.email for c in pool] == ["a@test.edu"]


def test_candidate_projection_counts(db_session):
    student = create_student(db_session)
    mentor = create_mentor(
        db_session,
        bio="Calculus and algebra",
        subjects=["Math", "Physics"],
        hourly_rate=35.0,
        rating=4.5,
        experience_level="Expert",
        availability=[{"day": "Friday", "start_time": "15:00", "end_time": "17:00"}],
    )
    sessions = _completed_sessions(db_session, student, mentor, 7)
    db_session.add(Session(student_id=student.id, mentor_id=mentor.id, subject="Math", status="Pending"))
    db_session.add(Review(session_id=sessions[0].id, student_id=student.id, mentor_id=mentor.id, rating=5))
    db_session.commit()

    [candidate] = MentorDirectory(db_session).list_eligible_mentors()

    assert candidate.id == str(mentor.id)
    assert candidate.subjects == ["Math", "Physics"]
    assert candidate.total_sessions == 7
    assert candidate.total_reviews == 1
    assert candidate.response_time == "Within 4 hours"
    assert candidate.availability[0].day == "Friday"
    assert candidate.hourly_rate == 35.0


def test_get_mentor(db_session):
    mentor = create_mentor(db_session)
    student = create_student(db_session)
    directory = MentorDirectory(db_session)

    assert directory.get_mentor(mentor.id).name == "Mentor"
    assert directory.get_mentor(student.id) is None
    assert directory.get_mentor(9999) is None


def test_student_preferences(db_session):
    student = create_student(
        db_session,
        interested_subjects=["Math"],
        preferred_languages=["Spanish"],
        current_level="Intermediate",
        budget_min=10,
        budget_max=40,
        learning_goals="Pass the calculus final",
    )
    mentor = create_mentor(db_session)
    directory = MentorDirectory(db_session)

    prefs = directory.get_student_preferences(student.id)
    assert prefs.student_id == str(student.id)
    assert prefs.interested_subjects == ["Math"]
    assert prefs.current_level == "Intermediate"
    assert prefs.budget_max == 40

    assert directory.get_student_preferences(mentor.id) is None
    assert directory.get_student_preferences(12345) is None


def test_scorer_over_database(db_session):
    student = create_student(db_session, interested_subjects=["Physics"])
    create_mentor(db_session, email="m1@test.edu", name="Math Only", subjects=["Math"], rating=4.9)
    create_mentor(db_session, email="m2@test.edu", name="Physicist", subjects=["Physics", "Math"], rating=4.0)
    create_mentor(db_session, email="m3@test.edu", name="Artist", subjects=["Art"], rating=5.0)

    scorer = RecommendationScorer(MentorDirectory(db_session))
    result = scorer.get_recommendations(student.id, RecommendationFilters(subjects=["Math"]))

    assert result.success
    assert [r.name for r in result.recommendations] == ["Math Only", "Physicist"]

    popular = scorer.get_popular_subjects(1)
    assert popular[0].subject == "Math"
    assert popular[0].count == 2

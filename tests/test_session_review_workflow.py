"""
Session lifecycle and reviews: booking, confirmation, completion, reviewing and rating upkeep
"""

import pytest

pytest.importorskip("fastapi")

from fastapi import HTTPException

from conftest import create_admin, create_mentor, create_student
from eduvibe.api.review import delete_review, get_mentor_reviews, submit_review
from eduvibe.api.session import (
    cancel_session,
    complete_session,
    confirm_session,
    create_session_request,
    get_my_sessions,
)
from eduvibe.crud import review as review_crud
from eduvibe.models.notification import Notification
from eduvibe.models.user import MentorProfile
from eduvibe.schemas.review import ReviewCreate
from eduvibe.services import review_service


@pytest.fixture
def people(db_session):
    return {
        "student": create_student(db_session),
        "other_student": create_student(db_session, email="other@test.edu", name="Other"),
        "mentor": create_mentor(db_session, subjects=["Math", "Physics"]),
        "admin": create_admin(db_session),
    }


def _book(db, student, mentor, subject="Math"):
    return create_session_request(
        mentor_id=mentor.id,
        subject=subject,
        scheduled_time="2026-03-01T10:00:00Z",
        duration_minutes=60,
        notes=None,
        current_user=student,
        db=db,
    )


def _completed_session(db, people):
    booked = _book(db, people["student"], people["mentor"])
    confirm_session(session_id=booked["session_id"], current_user=people["mentor"], db=db)
    complete_session(session_id=booked["session_id"], current_user=people["mentor"], db=db)
    return booked["session_id"]


# ======================
# BOOKING
# ======================

def test_student_books_session_and_mentor_is_notified(db_session, people):
    result = _book(db_session, people["student"], people["mentor"])

    assert result["status"] == "Pending"
    notes = db_session.query(Notification).filter(Notification.recipient_id == people["mentor"].id).all()
    assert [n.event_type for n in notes] == ["session_requested"]

    mine = get_my_sessions(status=None, current_user=people["student"], db=db_session)
    assert len(mine) == 1
    assert mine[0].mentor_name == "Mentor"
    assert mine[0].subject == "Math"


def test_mentor_cannot_book(db_session, people):
    other_mentor = create_mentor(db_session, email="m2@test.edu")
    with pytest.raises(HTTPException) as exc:
        _book(db_session, other_mentor, people["mentor"])
    assert exc.value.status_code == 403


def test_booking_validation(db_session, people):
    with pytest.raises(HTTPException) as exc:
        _book(db_session, people["student"], people["mentor"], subject="Chemistry")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        _book(db_session, people["student"], people["other_student"])
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        create_session_request(
            mentor_id=people["mentor"].id,
            subject="Math",
            scheduled_time="next tuesday",
            duration_minutes=60,
            notes=None,
            current_user=people["student"],
            db=db_session,
        )
    assert exc.value.status_code == 400


# ======================
# STATUS CHANGES
# ======================

def test_only_assigned_mentor_confirms_and_completes(db_session, people):
    booked = _book(db_session, people["student"], people["mentor"])

    with pytest.raises(HTTPException) as exc:
        confirm_session(session_id=booked["session_id"], current_user=people["student"], db=db_session)
    assert exc.value.status_code == 403

    confirm_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)

    with pytest.raises(HTTPException) as exc:
        complete_session(session_id=booked["session_id"], current_user=people["student"], db=db_session)
    assert exc.value.status_code == 403

    result = complete_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)
    assert result["status"] == "Completed"


def test_cannot_complete_pending_session(db_session, people):
    booked = _book(db_session, people["student"], people["mentor"])
    with pytest.raises(HTTPException) as exc:
        complete_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)
    assert exc.value.status_code == 400


def test_cannot_confirm_twice(db_session, people):
    booked = _book(db_session, people["student"], people["mentor"])
    confirm_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)

    with pytest.raises(HTTPException) as exc:
        confirm_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)
    assert exc.value.status_code == 400


def test_either_participant_cancels(db_session, people):
    first = _book(db_session, people["student"], people["mentor"])
    second = _book(db_session, people["student"], people["mentor"], subject="Physics")

    assert cancel_session(session_id=first["session_id"], current_user=people["student"], db=db_session)["status"] == "Cancelled"
    assert cancel_session(session_id=second["session_id"], current_user=people["mentor"], db=db_session)["status"] == "Cancelled"

    with pytest.raises(HTTPException) as exc:
        cancel_session(session_id=first["session_id"], current_user=people["student"], db=db_session)
    assert exc.value.status_code == 400


def test_outsider_cannot_cancel_but_admin_can(db_session, people):
    booked = _book(db_session, people["student"], people["mentor"])

    with pytest.raises(HTTPException) as exc:
        cancel_session(session_id=booked["session_id"], current_user=people["other_student"], db=db_session)
    assert exc.value.status_code == 403

    result = cancel_session(session_id=booked["session_id"], current_user=people["admin"], db=db_session)
    assert result["status"] == "Cancelled"


def test_missing_session_is_404(db_session, people):
    with pytest.raises(HTTPException) as exc:
        cancel_session(session_id=424242, current_user=people["student"], db=db_session)
    assert exc.value.status_code == 404


# ======================
# REVIEWS
# ======================

def test_review_updates_mentor_rating(db_session, people):
    session_id = _completed_session(db_session, people)

    response = submit_review(
        review=ReviewCreate(session_id=session_id, rating=4, comment="  Clear explanations  "),
        current_user=people["student"],
        db=db_session,
    )

    assert response.rating == 4
    assert response.comment == "Clear explanations"
    assert response.mentor_new_average == 4.0
    assert response.mentor_total_reviews == 1

    profile = db_session.query(MentorProfile).filter(MentorProfile.user_id == people["mentor"].id).one()
    assert profile.rating == 4.0

    received = db_session.query(Notification).filter(
        Notification.recipient_id == people["mentor"].id,
        Notification.event_type == "review_received",
    ).count()
    assert received == 1

    listed = get_mentor_reviews(
        mentor_id=people["mentor"].id, limit=50, offset=0, current_user=people["other_student"], db=db_session
    )
    assert [r.rating for r in listed] == [4]


def test_review_rules(db_session, people):
    booked = _book(db_session, people["student"], people["mentor"])

    # Not completed yet
    with pytest.raises(HTTPException) as exc:
        submit_review(review=ReviewCreate(session_id=booked["session_id"], rating=5), current_user=people["student"], db=db_session)
    assert exc.value.status_code == 400

    confirm_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)
    complete_session(session_id=booked["session_id"], current_user=people["mentor"], db=db_session)

    # Not a participant
    with pytest.raises(HTTPException) as exc:
        submit_review(review=ReviewCreate(session_id=booked["session_id"], rating=5), current_user=people["other_student"], db=db_session)
    assert exc.value.status_code == 400

    # Mentors do not write reviews
    with pytest.raises(HTTPException) as exc:
        submit_review(review=ReviewCreate(session_id=booked["session_id"], rating=5), current_user=people["mentor"], db=db_session)
    assert exc.value.status_code == 403

    submit_review(review=ReviewCreate(session_id=booked["session_id"], rating=5), current_user=people["student"], db=db_session)

    # Only once
    with pytest.raises(HTTPException) as exc:
        submit_review(review=ReviewCreate(session_id=booked["session_id"], rating=3), current_user=people["student"], db=db_session)
    assert exc.value.status_code == 400


def test_review_schema_validation():
    with pytest.raises(ValueError):
        ReviewCreate(session_id=1, rating=0)
    with pytest.raises(ValueError):
        ReviewCreate(session_id=1, rating=3, comment="   ")


def test_delete_review_ownership_and_rating_recompute(db_session, people):
    first_id = _completed_session(db_session, people)
    second_id = _completed_session(db_session, people)
    review_service.submit_review(db_session, first_id, people["student"].id, 5)
    review_service.submit_review(db_session, second_id, people["student"].id, 3)

    profile = db_session.query(MentorProfile).filter(MentorProfile.user_id == people["mentor"].id).one()
    assert profile.rating == 4.0

    review_id = review_crud.get_review_by_session(db_session, first_id).id
    with pytest.raises(HTTPException) as exc:
        delete_review(review_id=review_id, current_user=people["other_student"], db=db_session)
    assert exc.value.status_code == 403

    delete_review(review_id=review_id, current_user=people["student"], db=db_session)
    db_session.refresh(profile)
    assert profile.rating == 3.0

    with pytest.raises(HTTPException) as exc:
        delete_review(review_id=review_id, current_user=people["student"], db=db_session)
    assert exc.value.status_code == 404

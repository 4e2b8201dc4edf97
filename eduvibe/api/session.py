# eduvibe/api/session.py
"""
Session Management API
Booking, listing, cancelling and completing mentoring sessions
"""

import logging
from datetime import datetime, UTC
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from eduvibe.database import get_db
from eduvibe.models import session as models
from eduvibe.models.user import User
from eduvibe.schemas.session import SessionResponse
from eduvibe.services import notification_service
from eduvibe.utils.rbac import Action, Permission, Resource
from eduvibe.utils.security import ensure_resource_access, get_current_user, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

ACTIVE_STATUSES = ("Pending", "Confirmed")


# ======================
# HELPER FUNCTIONS
# ======================
def _get_counterparty_id(session: models.Session, current_user_id: int) -> int:
    """Get the other party in a session"""
    return session.mentor_id if session.student_id == current_user_id else session.student_id


def _get_session_or_404(db: Session, session_id: int) -> models.Session:
    session = db.query(models.Session).filter(models.Session.id == session_id).first()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _to_response(s: models.Session) -> SessionResponse:
    return SessionResponse(
        id=s.id,
        student_id=s.student_id,
        mentor_id=s.mentor_id,
        subject=s.subject,
        scheduled_time=s.scheduled_time,
        duration_minutes=s.duration_minutes or 60,
        status=s.status,
        notes=s.notes,
        created_at=s.created_at,
        updated_at=s.updated_at,
        student_name=s.student.name if s.student else None,
        mentor_name=s.mentor.name if s.mentor else None,
        has_review=s.review is not None,
    )


# ======================
# SESSION LISTING
# ======================
@router.get("/my", response_model=List[SessionResponse])
def get_my_sessions(
    status: Optional[str] = None,
    current_user: User = Depends(require_permission(Permission.VIEW_OWN_SESSIONS)),
    db: Session = Depends(get_db)
):
    """Get all sessions for current user, optionally filtered by status"""
    query = db.query(models.Session).filter(
        (models.Session.student_id == current_user.id) |
        (models.Session.mentor_id == current_user.id)
    )

    if status:
        query = query.filter(models.Session.status == status)

    sessions = query.order_by(models.Session.scheduled_time.desc(), models.Session.id.desc()).all()
    return [_to_response(s) for s in sessions]


# ======================
# CREATE SESSION REQUEST
# ======================
@router.post("/", status_code=201)
def create_session_request(
    mentor_id: int = Form(...),
    subject: str = Form(...),
    scheduled_time: str = Form(...),
    duration_minutes: int = Form(60),
    notes: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Book a session with a mentor. The mentor is notified."""
    ensure_resource_access(current_user, Action.CREATE, Resource.SESSION)

    # Prevent self-mentoring
    if mentor_id == current_user.id:
        raise HTTPException(
            status_code=400,
            detail="Cannot create session with yourself"
        )

    mentor = db.query(User).filter(
        User.id == mentor_id,
        User.role == "mentor",
        User.is_active == True
    ).first()
    if not mentor or mentor.mentor_profile is None:
        raise HTTPException(status_code=404, detail="Mentor not found")

    taught = {s.strip().lower() for s in mentor.mentor_profile.subjects or []}
    if subject.strip().lower() not in taught:
        raise HTTPException(
            status_code=400,
            detail="Selected mentor does not teach this subject"
        )

    if duration_minutes < 15 or duration_minutes > 240:
        raise HTTPException(status_code=400, detail="Duration must be between 15 and 240 minutes")

    try:
        scheduled_dt = datetime.fromisoformat(scheduled_time.replace('Z', '+00:00'))
        scheduled_dt = scheduled_dt.replace(microsecond=0)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="Invalid scheduled_time format. Use ISO 8601 (e.g., '2026-02-20T14:00:00')"
        )

    new_session = models.Session(
        student_id=current_user.id,
        mentor_id=mentor_id,
        subject=subject.strip(),
        scheduled_time=scheduled_dt,
        duration_minutes=duration_minutes,
        status="Pending",
        notes=notes
    )
    try:
        db.add(new_session)
        db.flush()

        notification_service.create_notification(
            db,
            recipient_id=mentor_id,
            actor_id=current_user.id,
            session_id=new_session.id,
            event_type="session_requested",
            message=f"{current_user.name} requested a {new_session.subject} session with you."
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Session request failed for student %s", current_user.id)
        raise

    db.refresh(new_session)
    return {
        "message": "Session request created successfully",
        "session_id": new_session.id,
        "status": "Pending"
    }


# ======================
# CANCEL SESSION
# ======================
@router.patch("/{session_id}/cancel")
def cancel_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Either participant may cancel an active session."""
    session = _get_session_or_404(db, session_id)

    # The caller owns the session when they are either participant
    owner_id = current_user.id if current_user.id in (session.student_id, session.mentor_id) else session.student_id
    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.SESSION,
        resource_id=session.id, resource_owner_id=owner_id,
    )

    if session.status not in ACTIVE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot cancel a session that is {session.status}"
        )

    session.status = "Cancelled"
    session.updated_at = datetime.now(UTC)
    if current_user.id in (session.student_id, session.mentor_id):
        notification_service.create_notification(
            db,
            recipient_id=_get_counterparty_id(session, current_user.id),
            actor_id=current_user.id,
            session_id=session.id,
            event_type="session_cancelled",
            message=f"{current_user.name} cancelled the {session.subject} session."
        )
    db.commit()

    return {"message": "Session cancelled", "session_id": session.id, "status": "Cancelled"}


# ======================
# CONFIRM SESSION
# ======================
@router.patch("/{session_id}/confirm")
def confirm_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The assigned mentor accepts a pending request."""
    session = _get_session_or_404(db, session_id)

    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.SESSION,
        resource_id=session.id, resource_owner_id=session.mentor_id,
    )

    if session.status != "Pending":
        raise HTTPException(status_code=400, detail="Only pending sessions can be confirmed")

    session.status = "Confirmed"
    session.updated_at = datetime.now(UTC)
    notification_service.create_notification(
        db,
        recipient_id=session.student_id,
        actor_id=current_user.id,
        session_id=session.id,
        event_type="session_confirmed",
        message=f"{current_user.name} accepted your {session.subject} session request."
    )
    db.commit()

    return {"message": "Session confirmed", "session_id": session.id, "status": "Confirmed"}


# ======================
# COMPLETE SESSION
# ======================
@router.patch("/{session_id}/complete")
def complete_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The assigned mentor marks a session as completed."""
    session = _get_session_or_404(db, session_id)

    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.SESSION,
        resource_id=session.id, resource_owner_id=session.mentor_id,
    )

    if session.status != "Confirmed":
        raise HTTPException(
            status_code=400,
            detail=f"Cannot complete a session that is {session.status}"
        )

    session.status = "Completed"
    session.updated_at = datetime.now(UTC)
    notification_service.create_notification(
        db,
        recipient_id=session.student_id,
        actor_id=current_user.id,
        session_id=session.id,
        event_type="session_completed",
        message=f"Your {session.subject} session was marked as completed. You can now leave a review."
    )
    db.commit()

    return {"message": "Session completed", "session_id": session.id, "status": "Completed"}

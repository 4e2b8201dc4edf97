# eduvibe/api/admin.py
"""
Admin Module
Admin-only endpoints for platform statistics and user moderation.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from eduvibe.database import get_db
from eduvibe.models.review import Review
from eduvibe.models.session import SESSION_STATUSES, Session as SessionModel
from eduvibe.models.user import User
from eduvibe.services import notification_service
from eduvibe.utils.rbac import Permission, has_permission, is_admin
from eduvibe.utils.security import build_access_context, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def _load_target(db: Session, admin: User, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot change your own account status")
    # Only super admins manage other admins
    if is_admin(user.role) and not has_permission(build_access_context(admin), Permission.MANAGE_ADMINS):
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return user


# ─────────────────────────────────────────
# GET /admin/stats: dashboard overview
# ─────────────────────────────────────────
@router.get("/stats")
def get_dashboard_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    users_by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    sessions_by_status = dict(
        db.query(SessionModel.status, func.count(SessionModel.id)).group_by(SessionModel.status).all()
    )
    total_reviews, average_rating = db.query(func.count(Review.id), func.avg(Review.rating)).one()

    return {
        "users": {
            "total":    sum(users_by_role.values()),
            "active":   db.query(User).filter(User.is_active == True).count(),
            "blocked":  db.query(User).filter(User.is_active == False).count(),
            "students": users_by_role.get("student", 0),
            "mentors":  users_by_role.get("mentor", 0),
        },
        "sessions": {
            "total": sum(sessions_by_status.values()),
            **{status.lower(): sessions_by_status.get(status, 0) for status in SESSION_STATUSES},
        },
        "reviews": {
            "total": int(total_reviews or 0),
            "average_rating": round(float(average_rating), 2) if average_rating is not None else None,
        },
    }


# ─────────────────────────────────────────
# GET /admin/users: list all users
# ─────────────────────────────────────────
@router.get("/users")
def get_all_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, description="Filter by active/blocked"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    query = db.query(User)

    if search:
        like = f"%{search}%"
        query = query.filter(
            (User.name.ilike(like)) | (User.email.ilike(like))
        )
    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active == is_active)

    users = query.order_by(desc(User.created_at), User.id).offset(skip).limit(limit).all()
    return [
        {
            "id":         u.id,
            "name":       u.name,
            "email":      u.email,
            "role":       u.role,
            "is_active":  u.is_active,
            "created_at": u.created_at.isoformat() if u.created_at else None,
        }
        for u in users
    ]


# ─────────────────────────────────────────
# PATCH /admin/users/{user_id}/block
# ─────────────────────────────────────────
@router.patch("/users/{user_id}/block")
def block_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _load_target(db, admin, user_id)
    if not user.is_active:
        return {"message": "User is already blocked", "user_id": user_id}

    user.is_active = False
    notification_service.create_notification(
        db,
        recipient_id=user_id,
        actor_id=admin.id,
        session_id=None,
        event_type="account_blocked",
        message="Your account has been suspended by an administrator."
    )
    db.commit()
    logger.info("Admin %s blocked user %s", admin.id, user_id)

    return {"message": f"User {user.name} has been blocked", "user_id": user_id}


# ─────────────────────────────────────────
# PATCH /admin/users/{user_id}/unblock
# ─────────────────────────────────────────
@router.patch("/users/{user_id}/unblock")
def unblock_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = _load_target(db, admin, user_id)
    if user.is_active:
        return {"message": "User is already active", "user_id": user_id}

    user.is_active = True
    notification_service.create_notification(
        db,
        recipient_id=user_id,
        actor_id=admin.id,
        session_id=None,
        event_type="account_unblocked",
        message="Your account has been reactivated."
    )
    db.commit()
    logger.info("Admin %s unblocked user %s", admin.id, user_id)

    return {"message": f"User {user.name} has been unblocked", "user_id": user_id}

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from eduvibe import models
from eduvibe.database import get_db
from eduvibe.services import notification_service
from eduvibe.utils.rbac import Action, Resource
from eduvibe.utils.security import ensure_resource_access, get_current_user

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/my")
def get_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notifications = notification_service.list_user_notifications(
        db, user_id=current_user.id, unread_only=unread_only, limit=limit
    )
    return [notification_service.serialize_notification(n) for n in notifications]


@router.get("/unread-count")
def get_unread_count(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"unread_count": notification_service.get_unread_count(db, user_id=current_user.id)}


@router.patch("/read-all")
def mark_all_notifications_read(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    count = notification_service.mark_all_notifications_read(db, user_id=current_user.id)
    return {"message": "All notifications marked as read", "updated": count}


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notification = notification_service.get_notification(db, notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    ensure_resource_access(
        current_user, Action.UPDATE_OWN, Resource.NOTIFICATION,
        resource_id=notification.id, resource_owner_id=notification.recipient_id,
    )

    notification_service.mark_notification_read(db, notification=notification)
    return {"message": "Notification marked as read", "id": notification.id}

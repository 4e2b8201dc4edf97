from __future__ import annotations

import logging
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy.orm import Session

from eduvibe.models.notification import EVENT_TYPES, Notification

logger = logging.getLogger(__name__)


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def get_notification(db: Session, notification_id: int) -> Optional[Notification]:
    return db.query(Notification).filter(Notification.id == notification_id).first()


def mark_notification_read(db: Session, *, notification: Notification) -> Notification:
    notification.is_read = True
    notification.read_at = datetime.now(UTC)
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True, "read_at": datetime.now(UTC)}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    session_id: Optional[int],
    event_type: str,
    message: str,
) -> Notification:
    """Stage a notification in the current transaction. Caller commits."""
    if event_type not in EVENT_TYPES:
        logger.warning("Unknown notification event type %r", event_type)
    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        session_id=session_id,
        event_type=event_type,
        message=message,
    )
    db.add(notification)
    db.flush()
    return notification


def serialize_notification(n: Notification) -> dict:
    return {
        "id": n.id,
        "recipient_id": n.recipient_id,
        "actor_id": n.actor_id,
        "session_id": n.session_id,
        "event_type": n.event_type,
        "message": n.message,
        "is_read": n.is_read,
        "read_at": n.read_at.isoformat() if n.read_at else None,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }

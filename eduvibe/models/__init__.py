# eduvibe/models/__init__.py
# Import models in dependency order
from .user import User, StudentProfile, MentorProfile
from .session import Session
from .review import Review
from .notification import Notification

__all__ = ["User", "StudentProfile", "MentorProfile", "Session", "Review", "Notification"]

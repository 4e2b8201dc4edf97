# eduvibe/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import auth
from . import mentor
from . import notification
from . import recommendation
from . import review
from . import session
from . import users

__all__ = [
    "admin",
    "auth",
    "users",
    "mentor",
    "session",
    "notification",
    "review",
    "recommendation",
]

"""Pytest bootstrap for project imports."""

import os
from pathlib import Path
import sys

import pytest

# Settings are read at import time; tests never touch a real database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

# Ensure project root is on sys.path so `import eduvibe` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eduvibe.database import Base
from eduvibe import models


@pytest.fixture
def db_session():
    """Fresh in-memory database per test"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


def create_student(db, email="student@test.edu", name="Student", **profile):
    user = models.User(name=name, email=email, password_hash="hash", role="student", is_active=True)
    db.add(user)
    db.flush()
    db.add(models.StudentProfile(user_id=user.id, **profile))
    db.commit()
    db.refresh(user)
    return user


def create_mentor(db, email="mentor@test.edu", name="Mentor", is_active=True, **profile):
    user = models.User(name=name, email=email, password_hash="hash", role="mentor", is_active=is_active)
    db.add(user)
    db.flush()
    profile.setdefault("subjects", ["Math"])
    profile.setdefault("languages", ["English"])
    db.add(models.MentorProfile(user_id=user.id, **profile))
    db.commit()
    db.refresh(user)
    return user


def create_admin(db, email="admin@test.edu", role="admin"):
    user = models.User(name="Admin", email=email, password_hash="hash", role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

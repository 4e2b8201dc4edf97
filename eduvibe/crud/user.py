from sqlalchemy.orm import Session
from eduvibe import models
from eduvibe.schemas.auth import RegisterRequest
from eduvibe.utils.security import get_password_hash


def create_user(db: Session, user_data: RegisterRequest, role: str):
    """Create the user row plus the profile row matching its role. Caller commits."""
    db_user = models.User(
        name=user_data.name,
        email=user_data.email.strip().lower(),
        password_hash=get_password_hash(user_data.password),
        role=role,
        is_active=True,
    )
    db.add(db_user)
    db.flush()

    if role == "mentor":
        db.add(models.MentorProfile(
            user_id=db_user.id,
            bio=user_data.bio,
            subjects=user_data.subjects,
            languages=user_data.languages or ["English"],
            hourly_rate=user_data.hourly_rate or 0.0,
            location=user_data.location,
        ))
    else:
        db.add(models.StudentProfile(
            user_id=db_user.id,
            academic_level=user_data.academic_level,
            field_of_study=user_data.field_of_study,
            learning_goals=user_data.learning_goals,
            interested_subjects=user_data.interested_subjects,
            preferred_languages=user_data.languages or ["English"],
            location=user_data.location,
        ))
    return db_user


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()

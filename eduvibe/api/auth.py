import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from eduvibe.crud import user as user_crud
from eduvibe.database import get_db
from eduvibe.schemas.auth import LoginRequest, RegisterRequest, Token
from eduvibe.utils.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Admin accounts are provisioned out of band, never self-registered
SELF_SERVICE_ROLES = {"student", "mentor"}


# ===== REGISTER ENDPOINT =====

@router.post("/register", status_code=201)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register new user and create the profile for its role"""
    requested_role = (user_data.role or "student").strip().lower()
    if requested_role not in SELF_SERVICE_ROLES:
        raise HTTPException(
            status_code=400,
            detail="Role must be one of: student, mentor"
        )

    if user_crud.get_user_by_email(db, user_data.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        new_user = user_crud.create_user(db, user_data, requested_role)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Registration failed for %s", user_data.email)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"message": "Registration successful", "user_id": new_user.id, "role": new_user.role}


# ===== LOGIN ENDPOINT =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = user_crud.get_user_by_email(db, credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role
    }

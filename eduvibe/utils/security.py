import logging
from datetime import datetime, timedelta, UTC
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from eduvibe import models
from eduvibe.config import settings
from eduvibe.database import get_db
from eduvibe.schemas.auth import TokenData
from eduvibe.utils.rbac import (
    AccessContext,
    Action,
    Permission,
    Resource,
    Role,
    can_perform,
    coerce_role,
    has_permission,
    has_role,
)

logger = logging.getLogger(__name__)


# ==========================
# AUTH CONFIG
# ==========================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)


# ==========================
# PASSWORD UTILS
# ==========================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Bcrypt max input length = 72 bytes
    Truncate safely to avoid crash
    """
    password_bytes = password.encode("utf-8")

    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
        password = password_bytes.decode("utf-8", errors="ignore")

    return pwd_context.hash(password)


# ==========================
# JWT TOKEN
# ==========================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

    return encoded_jwt


# ==========================
# AUTH HELPERS
# ==========================

def authenticate_user(db: Session, email: str, password: str):
    user = db.query(models.User).filter(
        models.User.email == email
    ).first()

    if not user:
        return False

    if not verify_password(password, user.password_hash):
        return False

    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        email: str = payload.get("sub")
        role: str = payload.get("role")

        if email is None:
            raise credentials_exception

        token_data = TokenData(email=email, role=role)

    except JWTError:
        raise credentials_exception

    user = db.query(models.User).filter(
        models.User.email == token_data.email
    ).first()

    if user is None or not user.is_active:
        raise credentials_exception

    return user


# ==========================
# ACCESS CONTROL DEPENDENCIES
# ==========================

def build_access_context(
    user: models.User,
    resource_id=None,
    resource_owner_id=None,
) -> AccessContext:
    """Per-request AccessContext for an authenticated user."""
    role = coerce_role(user.role)
    if role is None:
        logger.warning("User %s has unknown role %r", user.id, user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return AccessContext(
        user_id=user.id,
        role=role,
        resource_id=resource_id,
        resource_owner_id=resource_owner_id,
    )


def require_roles(*roles: Role):
    """Dependency factory: caller's role must be one of ``roles``."""
    def _checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if not has_role(current_user.role, roles):
            logger.info("Role check failed for user %s (role=%s)", current_user.id, current_user.role)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user
    return _checker


def require_permission(permission: Permission):
    """Dependency factory: caller's role must grant ``permission``."""
    def _checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        context = build_access_context(current_user)
        if not has_permission(context, permission):
            logger.info(
                "Permission %s denied for user %s (role=%s)",
                permission.value,
                current_user.id,
                current_user.role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied",
            )
        return current_user
    return _checker


require_admin = require_roles(Role.ADMIN, Role.SUPER_ADMIN)


def ensure_resource_access(
    user: models.User,
    action: Action,
    resource: Resource,
    resource_id=None,
    resource_owner_id=None,
) -> AccessContext:
    """
    Raise 403 unless ``user`` may perform ``action`` on the resource.

    Used inline by handlers that must load the resource first to learn its owner.
    """
    context = build_access_context(
        user,
        resource_id=resource_id,
        resource_owner_id=resource_owner_id,
    )
    if not can_perform(context, action, resource, resource_id):
        logger.info(
            "Access denied: user %s %s %s %s",
            user.id,
            action.value,
            resource.value,
            resource_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied for this resource",
        )
    return context

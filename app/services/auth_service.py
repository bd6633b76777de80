"""
Authentication business logic.

Provides:
- ``register_user`` — create an account with a bcrypt-hashed password.
- ``authenticate_user`` — credential verification against the DB.
- ``get_current_user`` — FastAPI dependency that extracts and validates
  the Bearer JWT from the ``Authorization`` header.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import ConflictError
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.utils.security import hash_password, verify_password, verify_token

logger = logging.getLogger(__name__)

# The ``tokenUrl`` must match the login endpoint path (relative to root).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def register_user(db: Session, data: RegisterRequest) -> User:
    """Create a new user account.

    Raises:
        ConflictError: ``EMAIL_EXISTS`` if the e-mail is already registered.
    """
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("El email ya está registrado.", code="EMAIL_EXISTS")

    user = User(
        email=email,
        password_hash=hash_password(data.password),
        name=data.name,
        active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("register_user: created user id=%d email='%s'", user.id, user.email)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Verify e-mail/password credentials.

    Returns ``None`` (instead of raising) for unknown users, inactive
    accounts and wrong passwords alike, so callers control the 401 response.
    """
    user: User | None = (
        db.query(User)
        .filter(User.email == email.lower(), User.active.is_(True))
        .first()
    )
    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", email)
        return None

    if not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", email)
        return None

    return user


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """FastAPI dependency that resolves the caller's identity from a JWT.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired, or
                           if the referenced user no longer exists or has
                           been deactivated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(token)
    except ValueError:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user: User | None = (
        db.query(User)
        .filter(User.id == user_id, User.active.is_(True))
        .first()
    )
    if user is None:
        raise credentials_exception

    return user


def ensure_bootstrap_user(db: Session, email: str, password: str) -> User:
    """Create the configured bootstrap account if it does not exist yet."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is not None:
        return user

    user = User(
        email=email.lower(),
        password_hash=hash_password(password),
        name="Administrador",
        active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("ensure_bootstrap_user: created '%s'", user.email)
    return user

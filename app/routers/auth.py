"""
Authentication router for the Cotizador API.

Mounts under ``/api/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /register — Create an account and receive a JWT.
    POST /login    — Authenticate with e-mail + password, receive JWT.
    POST /refresh  — Exchange a valid token for a new one (extend session).
    GET  /me       — Return the currently authenticated user's profile.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import RegisterRequest, RegisterResponse, TokenResponse, UserResponse
from app.services.auth_service import authenticate_user, get_current_user, register_user
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar usuario",
    description="Crea una cuenta nueva y retorna un JWT listo para usar.",
    responses={
        201: {"description": "Usuario creado; se incluye el token JWT."},
        409: {"description": "El email ya está registrado."},
        422: {"description": "Cuerpo de la solicitud inválido."},
    },
)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """Register a user and log them in immediately.

    Raises:
        ConflictError: ``EMAIL_EXISTS`` (rendered as 409).
    """
    user = register_user(db, body)
    token = create_access_token(user.id, {"email": user.email})
    return RegisterResponse(access_token=token, user=UserResponse.model_validate(user))


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    description=(
        "Autentica al usuario con sus credenciales (formulario OAuth2: el campo "
        "``username`` es el email) y retorna un JWT de acceso válido por el tiempo "
        "configurado en ``JWT_EXPIRATION_MINUTES``."
    ),
    responses={
        200: {"description": "Autenticación exitosa; se incluye el token JWT."},
        401: {"description": "Credenciales incorrectas o cuenta inactiva."},
        422: {"description": "Cuerpo de la solicitud inválido."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Uses the standard OAuth2 ``application/x-www-form-urlencoded`` form so
    that the Swagger UI "Authorize" button works out of the box.

    Args:
        form_data: E-mail (as ``username``) and password.
        db: Database session injected by ``get_db``.

    Returns:
        A ``TokenResponse`` containing the signed JWT and token type.

    Raises:
        HTTPException 401: If credentials are invalid or the account is inactive.
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if user is None:
        logger.warning("Failed login attempt for email='%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales incorrectas o cuenta inactiva",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(user.id, {"email": user.email})

    logger.info("Successful login for email='%s'", user.email)
    return TokenResponse(access_token=token)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Renovar token",
    description=(
        "Emite un nuevo JWT a partir de un token válido (no expirado). "
        "Permite extender la sesión sin re-autenticación."
    ),
    responses={
        200: {"description": "Token renovado exitosamente."},
        401: {"description": "Token inválido o expirado."},
    },
)
def refresh_token(
    current_user: Annotated[User, Depends(get_current_user)],
) -> TokenResponse:
    """Issue a fresh token for the caller identified by the current one."""
    new_token = create_access_token(current_user.id, {"email": current_user.email})
    logger.info("Token refreshed for email='%s'", current_user.email)
    return TokenResponse(access_token=new_token)


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Perfil del usuario autenticado",
    description=(
        "Retorna el perfil público del usuario identificado por el JWT "
        "en la cabecera ``Authorization: Bearer <token>``."
    ),
    responses={
        200: {"description": "Perfil del usuario autenticado."},
        401: {"description": "Token ausente, inválido o expirado."},
    },
)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)

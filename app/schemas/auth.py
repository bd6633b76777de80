"""
Pydantic v2 schemas for the authentication endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Payload accepted by ``POST /api/auth/register``."""

    email: EmailStr = Field(..., description="Correo electrónico, usado para iniciar sesión")
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Contraseña en texto plano (solo sobre HTTPS)",
    )
    name: str = Field(..., min_length=1, max_length=200, description="Nombre a mostrar")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jperez@constructora.pe",
                "password": "secret1234",
                "name": "Juan Pérez",
            }
        }
    )


class TokenResponse(BaseModel):
    """Response body returned after a successful login or refresh.

    Attributes:
        access_token: Signed JWT to send as ``Authorization: Bearer <token>``.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="JWT de acceso firmado")
    token_type: str = Field(default="bearer", description="Tipo de token OAuth2")


class UserResponse(BaseModel):
    """Public representation of a user. ``password_hash`` is never exposed."""

    id: int
    email: str
    name: str
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(TokenResponse):
    """Token plus the newly created user profile."""

    user: UserResponse

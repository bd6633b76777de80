"""
Pydantic v2 schemas for the Client Registry.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=300, description="Nombre o razón social.")
    email: str | None = Field(default=None, max_length=200, description="Correo de contacto.")
    phone: str | None = Field(default=None, max_length=50, description="Teléfono de contacto.")
    address: str | None = Field(default=None, max_length=500, description="Dirección.")
    ruc: str | None = Field(default=None, max_length=20, description="RUC del cliente.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Inmobiliaria Los Andes SAC",
                "email": "compras@losandes.pe",
                "phone": "+51 999 888 777",
                "address": "Av. Arequipa 1234, Lima",
                "ruc": "20512345678",
            }
        }
    )


class ClientUpdate(BaseModel):
    """Partial update: only the fields present in the body are written."""

    name: str | None = Field(default=None, min_length=1, max_length=300)
    email: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    ruc: str | None = Field(default=None, max_length=20)


class ClientResponse(BaseModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    address: str | None
    ruc: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClientSummary(BaseModel):
    """Client fields embedded in budget responses."""

    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    ruc: str | None = None

    model_config = ConfigDict(from_attributes=True)

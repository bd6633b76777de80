"""
Pydantic v2 schemas for the Resource Catalog.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.category import CategorySummary
from app.utils.constants import ResourceType


class ResourceCreate(BaseModel):
    """Payload for ``POST /api/resources``."""

    name: str = Field(..., min_length=1, max_length=300, description="Nombre del recurso.")
    description: str | None = Field(default=None, max_length=1000)
    type: ResourceType = Field(..., description="material | labor | equipment")
    unit: str = Field(..., min_length=1, max_length=50, description="Unidad de medida.")
    price: float = Field(..., ge=0, description="Precio unitario vigente.")
    category_id: int | None = Field(default=None, description="Categoría opcional.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Cemento Portland tipo I",
                "type": "material",
                "unit": "bolsa",
                "price": 28.5,
            }
        }
    )


class ResourceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=1000)
    type: ResourceType | None = None
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    price: float | None = Field(default=None, ge=0)
    category_id: int | None = None


class ResourceResponse(BaseModel):
    """Full resource with its category summary resolved (``None`` if unset or missing)."""

    id: int
    name: str
    description: str | None
    type: str
    unit: str
    price: float
    category_id: int | None
    category: CategorySummary | None = None
    last_updated: datetime
    created_at: datetime


class ResourceBrief(BaseModel):
    """Compact row used by search and by-category listings."""

    id: int
    name: str
    type: str
    unit: str
    price: float
    category_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class OutdatedResource(BaseModel):
    id: int
    name: str
    type: str
    price: float
    last_updated: datetime
    days_old: int = Field(..., ge=0, description="Días desde la última actualización.")

"""
Pydantic v2 schemas for the Category Registry.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import DEFAULT_CATEGORY_COLOR, DEFAULT_MARGIN


class CategoryCreate(BaseModel):
    """Payload for ``POST /api/categories``.

    Attributes:
        name: Unique category name.
        description: Free text.
        default_margin: Markup percentage in [0, 100].
        color: CSS colour for the UI.
        order: Display position; omitted means "after the last one".
    """

    name: str = Field(..., min_length=1, max_length=200, description="Nombre único de la categoría.")
    description: str | None = Field(default=None, max_length=500)
    default_margin: float = Field(
        default=DEFAULT_MARGIN,
        ge=0,
        le=100,
        description="Margen por defecto en porcentaje (0–100).",
    )
    color: str | None = Field(default=DEFAULT_CATEGORY_COLOR, max_length=20)
    order: int | None = Field(
        default=None,
        description="Posición de visualización. Omitir para agregar al final.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Albañilería",
                "description": "Muros, tarrajeos y asentados",
                "default_margin": 25,
                "color": "#F59E0B",
            }
        }
    )


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    default_margin: float | None = Field(default=None, ge=0, le=100)
    color: str | None = Field(default=None, max_length=20)
    order: int | None = None
    active: bool | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None
    default_margin: float
    color: str | None
    order: int
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategorySummary(BaseModel):
    """Category fields embedded in resource and composite item responses."""

    id: int
    name: str
    default_margin: float
    color: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CategoryOrder(BaseModel):
    """One entry of ``POST /api/categories/reorder``."""

    id: int
    order: int

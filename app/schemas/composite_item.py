"""
Pydantic v2 schemas for the Composite Item Engine.

``CompositeItemCalculation`` is the read model produced by the pricing
engine on every fetch; the write schemas only carry the bill of resources
and never a price.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.category import CategorySummary
from app.utils.money import round4


# ---------------------------------------------------------------------------
# Write models
# ---------------------------------------------------------------------------


class ComponentIn(BaseModel):
    resource_id: int = Field(..., description="Recurso que compone el ítem.")
    quantity: float = Field(..., gt=0, description="Cantidad del recurso por unidad del ítem.")

    @field_validator("quantity")
    @classmethod
    def _positive_at_stored_scale(cls, value: float) -> float:
        # Stored with 4 decimals
        if round4(value) <= 0:
            raise ValueError("La cantidad debe ser mayor que 0 con 4 decimales")
        return value


class CompositeItemCreate(BaseModel):
    """Payload for ``POST /api/composite-items``.

    Attributes:
        name: Display name.
        unit: Unit the item is sold in.
        category_id: Category providing the default margin.
        composition: Non-empty list of resource quantities.
        custom_margin: Optional margin overriding the category default.
    """

    name: str = Field(..., min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=1000)
    unit: str = Field(..., min_length=1, max_length=50)
    category_id: int
    composition: list[ComponentIn] = Field(..., min_length=1)
    custom_margin: float | None = Field(default=None, ge=0, le=100)
    active: bool = True

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Muro de ladrillo KK m2",
                "unit": "m2",
                "category_id": 1,
                "composition": [
                    {"resource_id": 1, "quantity": 0.25},
                    {"resource_id": 2, "quantity": 39},
                    {"resource_id": 3, "quantity": 0.8},
                ],
            }
        }
    )


class CompositeItemUpdate(BaseModel):
    """Partial update. ``composition``, when given, replaces the whole list."""

    name: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=1000)
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    category_id: int | None = None
    composition: list[ComponentIn] | None = Field(default=None, min_length=1)
    custom_margin: float | None = Field(default=None, ge=0, le=100)
    active: bool | None = None


# ---------------------------------------------------------------------------
# Read model
# ---------------------------------------------------------------------------


class ComponentResource(BaseModel):
    id: int
    name: str
    type: str
    unit: str
    price: float


class ComponentDetail(BaseModel):
    resource: ComponentResource
    quantity: float
    unit: str
    subtotal: float


class CostBreakdown(BaseModel):
    """Cost of one unit of the item split by resource type."""

    materials: float = 0.0
    labor: float = 0.0
    equipment: float = 0.0
    total: float = 0.0


class CompositeItemCalculation(BaseModel):
    id: int
    name: str
    description: str | None
    unit: str
    category: CategorySummary
    composition: list[ComponentDetail]
    cost_breakdown: CostBreakdown
    margin: float = Field(..., description="Margen efectivo aplicado (personalizado o de la categoría).")
    final_price: float = Field(..., description="Precio de venta redondeado a 2 decimales.")
    active: bool
    created_at: datetime
    updated_at: datetime


class PriceHistoryResponse(BaseModel):
    """Current price snapshot of a composite item (no past prices are stored)."""

    item_id: int
    name: str
    current_price: float
    current_cost: float
    margin: float
    last_updated: datetime

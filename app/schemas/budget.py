"""
Pydantic v2 schemas for the Budget Assembler.

Input lines only say *what* is quoted and *how much*; the unit price is
always resolved server-side and frozen into the stored line.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.client import ClientSummary
from app.utils.constants import BudgetStatus
from app.utils.money import round4


# ---------------------------------------------------------------------------
# Write models
# ---------------------------------------------------------------------------


class BudgetItemIn(BaseModel):
    """Requested budget line.

    ``item_type`` is kept as a plain string so that an unknown type reaches
    the assembler and is reported as ``INVALID_ITEM_TYPE``.
    """

    item_type: str = Field(..., description="resource | composite")
    resource_id: int | None = None
    composite_item_id: int | None = None
    description: str | None = Field(
        default=None,
        max_length=1000,
        description="Descripción a imprimir. Omitir para usar el nombre del recurso/ítem.",
    )
    quantity: float = Field(..., gt=0)

    @field_validator("quantity")
    @classmethod
    def _positive_at_stored_scale(cls, value: float) -> float:
        if round4(value) <= 0:
            raise ValueError("La cantidad debe ser mayor que 0 con 4 decimales")
        return value

    @model_validator(mode="after")
    def _check_reference(self) -> "BudgetItemIn":
        if self.item_type == "resource" and self.resource_id is None:
            raise ValueError("resource_id es requerido para ítems de tipo 'resource'")
        if self.item_type == "composite" and self.composite_item_id is None:
            raise ValueError("composite_item_id es requerido para ítems de tipo 'composite'")
        return self


class BudgetCreate(BaseModel):
    client_id: int
    project_name: str | None = Field(default=None, max_length=300)
    project_description: str | None = None
    items: list[BudgetItemIn] = Field(..., min_length=1)
    valid_until: date | None = None
    notes: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "client_id": 1,
                "project_name": "Vivienda unifamiliar Surco",
                "items": [
                    {"item_type": "composite", "composite_item_id": 1, "quantity": 120},
                    {"item_type": "resource", "resource_id": 4, "quantity": 16,
                     "description": "Operario (jornada)"},
                ],
                "valid_until": "2026-12-31",
            }
        }
    )


class BudgetUpdate(BaseModel):
    """Partial update. ``items``, when given, replaces and re-prices every line."""

    client_id: int | None = None
    project_name: str | None = Field(default=None, max_length=300)
    project_description: str | None = None
    items: list[BudgetItemIn] | None = Field(default=None, min_length=1)
    valid_until: date | None = None
    notes: str | None = None


class BudgetStatusUpdate(BaseModel):
    status: BudgetStatus


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class BudgetItemResponse(BaseModel):
    item_type: str
    resource_id: int | None
    composite_item_id: int | None
    description: str
    quantity: float
    unit_price: float
    unit: str
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class BudgetResponse(BaseModel):
    id: int
    budget_number: str
    client_id: int
    client: ClientSummary | None = Field(
        default=None,
        description="Cliente resuelto; None si fue eliminado.",
    )
    project_name: str | None
    project_description: str | None
    items: list[BudgetItemResponse]
    subtotal: float
    iva: float
    total: float
    status: str
    valid_until: date | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class StatusStat(BaseModel):
    status: str
    count: int = Field(..., ge=0)
    total_amount: float


class BudgetStatsResponse(BaseModel):
    """Aggregates returned by ``GET /api/budgets/stats``.

    Attributes:
        total: Number of budgets.
        by_status: Count and summed total per status.
        approved_revenue: Sum of ``total`` over approved budgets.
    """

    total: int = Field(..., ge=0)
    by_status: list[StatusStat]
    approved_revenue: float

"""
Shared Pydantic v2 schemas reused across multiple modules.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource.

    Returned by DELETE and bulk write operations when the caller only needs
    a confirmation, not the full updated resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information.
    """

    message: str = Field(..., description="Resumen del resultado de la operación.")
    detail: str | None = Field(
        default=None,
        description="Información adicional (contexto, sugerencia, etc.).",
    )


class PriceUpdate(BaseModel):
    """One entry of a bulk price update request."""

    id: int = Field(..., description="ID del registro a actualizar.")
    # Negative prices are accepted here and reported as failures per item
    price: float = Field(..., description="Nuevo precio unitario.")


class BulkPriceUpdateResult(BaseModel):
    """Partial result of a best-effort bulk price update.

    Every entry is written independently: a failure on one id does not
    roll back the others.

    Attributes:
        updated: Number of entries written.
        failed: Identifiers that could not be updated.
    """

    updated: int = Field(..., ge=0, description="Cantidad de precios actualizados.")
    failed: list[str] = Field(
        default_factory=list,
        description="IDs que no pudieron actualizarse.",
    )

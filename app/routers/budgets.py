"""
Budget router.

Mounts under ``/api/budgets`` (prefix set in ``main.py``).

All endpoints require a valid JWT token (``get_current_user`` dependency).

Endpoints
---------
POST   /                 — Create a draft budget with snapshot prices.
GET    /                 — List budgets, newest first.
GET    /stats            — Counts and amounts per status.
GET    /{id}             — Budget detail with client.
PUT    /{id}             — Partial update; ``items`` re-prices every line.
PATCH  /{id}/status      — Change status.
DELETE /{id}             — Delete a budget.
POST   /{id}/duplicate   — Copy as a new draft with a new number.
GET    /{id}/export/xlsx — Download the quote as Excel.
GET    /{id}/export/pdf  — Download the quote as PDF.
"""

from __future__ import annotations

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.budget import (
    BudgetCreate,
    BudgetResponse,
    BudgetStatsResponse,
    BudgetStatusUpdate,
    BudgetUpdate,
)
from app.schemas.common import MessageResponse
from app.services import budget_service
from app.services.auth_service import get_current_user
from app.utils.constants import BudgetStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Presupuestos"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str, content: bytes, media_type: str) -> StreamingResponse:
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Content-Length": str(len(content)),
    }
    return StreamingResponse(io.BytesIO(content), media_type=media_type, headers=headers)


# ---------------------------------------------------------------------------
# POST /
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear presupuesto",
    description=(
        "Resuelve cada línea (recurso o ítem compuesto) y congela su precio unitario. "
        "El presupuesto se crea en estado ``draft`` con un número ``BUD-<año>-<nnn>``."
    ),
    responses={
        201: {"description": "Presupuesto creado."},
        400: {"description": "Tipo de ítem inválido (INVALID_ITEM_TYPE)."},
        404: {
            "description": (
                "Cliente, recurso o ítem compuesto no encontrado "
                "(CLIENT_NOT_FOUND / RESOURCE_NOT_FOUND / COMPOSITE_ITEM_NOT_FOUND)."
            )
        },
        409: {"description": "No se pudo asignar un número único (BUDGET_NUMBER_CONFLICT)."},
        422: {"description": "Datos inválidos (sin ítems, cantidad ≤ 0, etc.)."},
    },
)
def create_budget(
    body: BudgetCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetResponse:
    """Create a budget.

    Args:
        body: Client, project data and requested lines.
        db: Database session.
        _current_user: Authenticated user guard.

    Returns:
        The stored budget with its totals and client summary.
    """
    logger.info("POST /budgets client_id=%d lines=%d", body.client_id, len(body.items))
    return budget_service.create_budget(db, body)


# ---------------------------------------------------------------------------
# GET / and /stats
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=list[BudgetResponse],
    summary="Listar presupuestos",
)
def list_budgets(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    status_filter: Annotated[
        BudgetStatus | None,
        Query(alias="status", description="draft | sent | approved | rejected"),
    ] = None,
    client_id: Annotated[int | None, Query(ge=1, description="ID de cliente.")] = None,
) -> list[BudgetResponse]:
    return budget_service.get_all(db, status=status_filter, client_id=client_id)


@router.get(
    "/stats",
    response_model=BudgetStatsResponse,
    summary="Estadísticas de presupuestos",
    description="Total de presupuestos, cantidad y monto por estado e ingreso aprobado.",
)
def budget_stats(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetStatsResponse:
    return budget_service.get_stats(db)


# ---------------------------------------------------------------------------
# /{budget_id}
# ---------------------------------------------------------------------------


@router.get(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Detalle de presupuesto",
    responses={404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."}},
)
def get_budget(
    budget_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetResponse:
    return budget_service.get_by_id(db, budget_id)


@router.put(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Actualizar presupuesto",
    description=(
        "Actualización parcial. Si se envía ``items`` todas las líneas se reemplazan "
        "y se vuelven a valorizar con los precios vigentes."
    ),
    responses={
        400: {"description": "Tipo de ítem inválido (INVALID_ITEM_TYPE)."},
        404: {"description": "Presupuesto, cliente o línea no encontrados."},
    },
)
def update_budget(
    budget_id: int,
    body: BudgetUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetResponse:
    return budget_service.update_budget(db, budget_id, body)


@router.patch(
    "/{budget_id}/status",
    response_model=BudgetResponse,
    summary="Cambiar estado",
    description="Se permite cualquier transición entre draft, sent, approved y rejected.",
    responses={
        404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."},
        422: {"description": "Estado no válido."},
    },
)
def update_budget_status(
    budget_id: int,
    body: BudgetStatusUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetResponse:
    return budget_service.update_status(db, budget_id, body.status)


@router.delete(
    "/{budget_id}",
    response_model=MessageResponse,
    summary="Eliminar presupuesto",
    responses={404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."}},
)
def delete_budget(
    budget_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    budget_service.delete_budget(db, budget_id)
    return MessageResponse(message="Presupuesto eliminado correctamente")


@router.post(
    "/{budget_id}/duplicate",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicar presupuesto",
    description="Copia las líneas con sus precios congelados, como borrador y con número nuevo.",
    responses={404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."}},
)
def duplicate_budget(
    budget_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BudgetResponse:
    return budget_service.duplicate_budget(db, budget_id)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------


@router.get(
    "/{budget_id}/export/xlsx",
    summary="Exportar presupuesto a Excel (.xlsx)",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Archivo Excel generado.", "content": {_XLSX_MEDIA_TYPE: {}}},
        404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."},
    },
)
def export_budget_xlsx(
    budget_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> StreamingResponse:
    filename, content = budget_service.export_xlsx(db, budget_id)
    return _attachment(filename, content, _XLSX_MEDIA_TYPE)


@router.get(
    "/{budget_id}/export/pdf",
    summary="Exportar presupuesto a PDF",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Archivo PDF generado.", "content": {"application/pdf": {}}},
        404: {"description": "Presupuesto no encontrado (BUDGET_NOT_FOUND)."},
    },
)
def export_budget_pdf(
    budget_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> StreamingResponse:
    filename, content = budget_service.export_pdf(db, budget_id)
    return _attachment(filename, content, "application/pdf")

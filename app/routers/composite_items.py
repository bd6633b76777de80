"""
Composite Item router.

Mounts under ``/api/composite-items`` (prefix set in ``main.py``).

Every response carries the cost breakdown and sale price computed from the
current resource prices and category margin; nothing price-related is
stored with the item.

Endpoints
---------
POST   /                    — Create an item from a composition of resources.
GET    /                    — List priced items (unpriceable ones are skipped).
GET    /search              — Search active items by name/description.
GET    /{id}                — Priced item detail.
GET    /{id}/price-history  — Current price snapshot.
PUT    /{id}                — Partial update (composition replaced when sent).
DELETE /{id}                — Delete an item.
POST   /{id}/duplicate      — Copy an item as "<name> (Copy)".
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.composite_item import (
    CompositeItemCalculation,
    CompositeItemCreate,
    CompositeItemUpdate,
    PriceHistoryResponse,
)
from app.services import composite_item_service
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Ítems compuestos"])

_NOT_FOUND_RESPONSES = {
    404: {
        "description": (
            "Ítem, categoría o recurso no encontrado "
            "(COMPOSITE_ITEM_NOT_FOUND / CATEGORY_NOT_FOUND / RESOURCE_NOT_FOUND)."
        )
    },
}


@router.post(
    "",
    response_model=CompositeItemCalculation,
    status_code=status.HTTP_201_CREATED,
    summary="Crear ítem compuesto",
    description=(
        "Valida la categoría y cada recurso de la composición antes de guardar. "
        "Si alguna referencia no existe no se crea nada."
    ),
    responses={
        201: {"description": "Ítem creado; se retorna con su precio calculado."},
        **_NOT_FOUND_RESPONSES,
        422: {"description": "Composición vacía, cantidad ≤ 0 o margen fuera de 0–100."},
    },
)
def create_composite_item(
    body: CompositeItemCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CompositeItemCalculation:
    return composite_item_service.create_item(db, body)


@router.get(
    "",
    response_model=list[CompositeItemCalculation],
    summary="Listar ítems compuestos",
    description=(
        "Ordenados por nombre. Los ítems cuyo precio no puede calcularse "
        "(p. ej. un recurso eliminado) se omiten del listado."
    ),
)
def list_composite_items(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    category_id: Annotated[int | None, Query(ge=1, description="ID de categoría.")] = None,
    active: Annotated[bool | None, Query(description="Filtrar por estado activo.")] = None,
) -> list[CompositeItemCalculation]:
    return composite_item_service.get_all(db, category_id=category_id, active=active)


@router.get(
    "/search",
    response_model=list[CompositeItemCalculation],
    summary="Buscar ítems compuestos activos",
)
def search_composite_items(
    q: Annotated[str, Query(min_length=1, max_length=200, description="Texto a buscar.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[CompositeItemCalculation]:
    return composite_item_service.search(db, q)


@router.get(
    "/{item_id}",
    response_model=CompositeItemCalculation,
    summary="Detalle de ítem compuesto",
    responses=_NOT_FOUND_RESPONSES,
)
def get_composite_item(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CompositeItemCalculation:
    return composite_item_service.get_by_id(db, item_id)


@router.get(
    "/{item_id}/price-history",
    response_model=PriceHistoryResponse,
    summary="Precio vigente del ítem",
    description="No se almacena historial: se retorna el precio y costo actuales.",
    responses=_NOT_FOUND_RESPONSES,
)
def get_price_history(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> PriceHistoryResponse:
    return composite_item_service.get_price_history(db, item_id)


@router.put(
    "/{item_id}",
    response_model=CompositeItemCalculation,
    summary="Actualizar ítem compuesto",
    responses=_NOT_FOUND_RESPONSES,
)
def update_composite_item(
    item_id: int,
    body: CompositeItemUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CompositeItemCalculation:
    return composite_item_service.update_item(db, item_id, body)


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    summary="Eliminar ítem compuesto",
    responses={404: {"description": "Ítem no encontrado (COMPOSITE_ITEM_NOT_FOUND)."}},
)
def delete_composite_item(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    composite_item_service.delete_item(db, item_id)
    return MessageResponse(message="Ítem compuesto eliminado correctamente")


@router.post(
    "/{item_id}/duplicate",
    response_model=CompositeItemCalculation,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicar ítem compuesto",
    responses=_NOT_FOUND_RESPONSES,
)
def duplicate_composite_item(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CompositeItemCalculation:
    return composite_item_service.duplicate_item(db, item_id)

"""
Category Registry router.

Mounts under ``/api/categories`` (prefix set in ``main.py``).

Endpoints
---------
POST   /          — Create a category (order defaults to the end of the list).
GET    /          — List categories sorted by ``order``.
POST   /reorder   — Set the display order of several categories.
GET    /{id}      — Category detail.
PUT    /{id}      — Partial update.
DELETE /{id}      — Delete a category not used by composite items.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.category import (
    CategoryCreate,
    CategoryOrder,
    CategoryResponse,
    CategoryUpdate,
)
from app.schemas.common import MessageResponse
from app.services import category_service
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Categorías"])


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear categoría",
    responses={
        201: {"description": "Categoría creada."},
        409: {"description": "Nombre duplicado (CATEGORY_NAME_EXISTS)."},
        422: {"description": "Datos inválidos (p. ej. margen fuera de 0–100)."},
    },
)
def create_category(
    body: CategoryCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(category_service.create_category(db, body))


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="Listar categorías",
    description="Ordenadas por ``order``. Las inactivas se omiten salvo ``include_inactive=true``.",
)
def list_categories(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    include_inactive: Annotated[
        bool, Query(description="Incluir categorías inactivas.")
    ] = False,
) -> list[CategoryResponse]:
    rows = category_service.get_all(db, include_inactive=include_inactive)
    return [CategoryResponse.model_validate(c) for c in rows]


@router.post(
    "/reorder",
    response_model=MessageResponse,
    summary="Reordenar categorías",
    description=(
        "Recibe una lista ``[{id, order}]`` y actualiza cada categoría por separado. "
        "Los IDs inexistentes se ignoran."
    ),
)
def reorder_categories(
    orders: Annotated[list[CategoryOrder], Body(..., embed=True)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    category_service.reorder(db, orders)
    return MessageResponse(message="Categorías reordenadas correctamente")


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Detalle de categoría",
    responses={404: {"description": "Categoría no encontrada (CATEGORY_NOT_FOUND)."}},
)
def get_category(
    category_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(category_service.get_by_id(db, category_id))


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Actualizar categoría",
    responses={
        404: {"description": "Categoría no encontrada (CATEGORY_NOT_FOUND)."},
        409: {"description": "Nombre duplicado (CATEGORY_NAME_EXISTS)."},
    },
)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> CategoryResponse:
    category = category_service.update_category(db, category_id, body)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Eliminar categoría",
    responses={
        404: {"description": "Categoría no encontrada (CATEGORY_NOT_FOUND)."},
        409: {"description": "Usada por ítems compuestos (CATEGORY_IN_USE)."},
    },
)
def delete_category(
    category_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    category_service.delete_category(db, category_id)
    return MessageResponse(message="Categoría eliminada correctamente")

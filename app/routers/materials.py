"""
Legacy Material price list router.

Mounts under ``/api/materials`` (prefix set in ``main.py``).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import BulkPriceUpdateResult, MessageResponse, PriceUpdate
from app.schemas.material import (
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    OutdatedMaterial,
)
from app.services import material_service
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Materiales"])

_NOT_FOUND = {404: {"description": "Material no encontrado (MATERIAL_NOT_FOUND)."}}


@router.post(
    "",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear material",
)
def create_material(
    body: MaterialCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MaterialResponse:
    return MaterialResponse.model_validate(material_service.create_material(db, body))


@router.get("", response_model=list[MaterialResponse], summary="Listar materiales")
def list_materials(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[MaterialResponse]:
    return [MaterialResponse.model_validate(m) for m in material_service.get_all(db)]


@router.get("/search", response_model=list[MaterialResponse], summary="Buscar materiales")
def search_materials(
    q: Annotated[str, Query(min_length=1, max_length=200, description="Texto a buscar.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[MaterialResponse]:
    return [MaterialResponse.model_validate(m) for m in material_service.search(db, q)]


@router.get(
    "/outdated",
    response_model=list[OutdatedMaterial],
    summary="Materiales con precio desactualizado",
)
def outdated_materials(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    days: Annotated[int | None, Query(ge=0, le=3650)] = None,
) -> list[OutdatedMaterial]:
    days_old = days if days is not None else get_settings().OUTDATED_DAYS_DEFAULT
    return material_service.get_outdated(db, days_old)


@router.post(
    "/bulk-update-prices",
    response_model=BulkPriceUpdateResult,
    summary="Actualización masiva de precios",
)
def bulk_update_prices(
    updates: Annotated[list[PriceUpdate], Body(..., embed=True)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BulkPriceUpdateResult:
    return material_service.bulk_update_prices(db, updates)


@router.get(
    "/category/{category}",
    response_model=list[MaterialResponse],
    summary="Materiales por categoría",
)
def materials_by_category(
    category: str,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[MaterialResponse]:
    rows = material_service.get_by_category(db, category)
    return [MaterialResponse.model_validate(m) for m in rows]


@router.get(
    "/{material_id}",
    response_model=MaterialResponse,
    summary="Detalle de material",
    responses=_NOT_FOUND,
)
def get_material(
    material_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MaterialResponse:
    return MaterialResponse.model_validate(material_service.get_by_id(db, material_id))


@router.put(
    "/{material_id}",
    response_model=MaterialResponse,
    summary="Actualizar material",
    responses=_NOT_FOUND,
)
def update_material(
    material_id: int,
    body: MaterialUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MaterialResponse:
    material = material_service.update_material(db, material_id, body)
    return MaterialResponse.model_validate(material)


@router.delete(
    "/{material_id}",
    response_model=MessageResponse,
    summary="Eliminar material",
    responses=_NOT_FOUND,
)
def delete_material(
    material_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    material_service.delete_material(db, material_id)
    return MessageResponse(message="Material eliminado correctamente")

"""
Resource Catalog router.

Mounts under ``/api/resources`` (prefix set in ``main.py``).

All endpoints require a valid JWT token (``get_current_user`` dependency).
Static paths (``/search``, ``/outdated``, ``/bulk-update-prices``,
``/category/...``, ``/type/...``) are declared before ``/{resource_id}``.

Endpoints
---------
POST   /                           — Create a resource.
GET    /                           — List, optionally filtered by type/category.
GET    /search                     — Search by name/description.
GET    /outdated                   — Resources whose price was not updated in N days.
POST   /bulk-update-prices         — Best-effort price update from a JSON list.
POST   /bulk-update-prices/import  — Same, from an uploaded ``.xlsx`` price sheet.
GET    /category/{category_id}     — Resources of one category.
GET    /type/{type}                — Resources of one type.
GET    /{id}                       — Resource detail.
PUT    /{id}                       — Partial update.
DELETE /{id}                       — Delete a resource not used by composite items.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import BulkPriceUpdateResult, MessageResponse, PriceUpdate
from app.schemas.resource import (
    OutdatedResource,
    ResourceBrief,
    ResourceCreate,
    ResourceResponse,
    ResourceUpdate,
)
from app.services import resource_service
from app.services.auth_service import get_current_user
from app.utils.constants import ResourceType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Recursos"])


# ---------------------------------------------------------------------------
# POST /
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear recurso",
    description="Crea un material, mano de obra o equipo con su precio unitario vigente.",
    responses={
        201: {"description": "Recurso creado."},
        404: {"description": "La categoría indicada no existe (CATEGORY_NOT_FOUND)."},
        422: {"description": "Datos inválidos (tipo desconocido, precio negativo, etc.)."},
    },
)
def create_resource(
    body: ResourceCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ResourceResponse:
    return resource_service.create_resource(db, body)


# ---------------------------------------------------------------------------
# GET / and static lookups
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=list[ResourceResponse],
    summary="Listar recursos",
    description="Ordenados por nombre, con la categoría resuelta.",
)
def list_resources(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    type: Annotated[
        ResourceType | None, Query(description="material | labor | equipment")
    ] = None,
    category_id: Annotated[int | None, Query(ge=1, description="ID de categoría.")] = None,
) -> list[ResourceResponse]:
    return resource_service.get_all(db, resource_type=type, category_id=category_id)


@router.get(
    "/search",
    response_model=list[ResourceBrief],
    summary="Buscar recursos",
)
def search_resources(
    q: Annotated[str, Query(min_length=1, max_length=200, description="Texto a buscar.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    type: Annotated[ResourceType | None, Query(description="Filtrar por tipo.")] = None,
) -> list[ResourceBrief]:
    return resource_service.search(db, q, resource_type=type)


@router.get(
    "/outdated",
    response_model=list[OutdatedResource],
    summary="Recursos con precio desactualizado",
    description=(
        "Recursos cuyo precio no se actualizó en los últimos ``days`` días, "
        "del más antiguo al más reciente."
    ),
)
def outdated_resources(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
    days: Annotated[int | None, Query(ge=0, le=3650, description="Antigüedad mínima en días.")] = None,
) -> list[OutdatedResource]:
    days_old = days if days is not None else get_settings().OUTDATED_DAYS_DEFAULT
    return resource_service.get_outdated(db, days_old)


# ---------------------------------------------------------------------------
# Bulk price updates
# ---------------------------------------------------------------------------


@router.post(
    "/bulk-update-prices",
    response_model=BulkPriceUpdateResult,
    summary="Actualización masiva de precios",
    description=(
        "Aplica cada ``{id, price}`` por separado. Los IDs inexistentes o con precio "
        "negativo se informan en ``failed`` sin detener el resto."
    ),
)
def bulk_update_prices(
    updates: Annotated[list[PriceUpdate], Body(..., embed=True)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BulkPriceUpdateResult:
    return resource_service.bulk_update_prices(db, updates)


@router.post(
    "/bulk-update-prices/import",
    response_model=BulkPriceUpdateResult,
    summary="Importar precios desde Excel",
    description=(
        "Recibe un archivo ``.xlsx`` cuya primera hoja tiene las columnas ``id`` y "
        "``price`` (o ``precio``) y aplica la actualización masiva."
    ),
    responses={
        400: {"description": "Archivo ilegible o sin columnas requeridas (INVALID_PRICE_SHEET)."},
    },
)
async def import_prices(
    file: Annotated[UploadFile, File(description="Planilla de precios .xlsx")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> BulkPriceUpdateResult:
    content = await file.read()
    logger.info("POST /resources/bulk-update-prices/import file='%s' bytes=%d", file.filename, len(content))
    return resource_service.import_prices(db, content)


@router.get(
    "/category/{category_id}",
    response_model=list[ResourceBrief],
    summary="Recursos por categoría",
)
def resources_by_category(
    category_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[ResourceBrief]:
    return resource_service.get_by_category(db, category_id)


@router.get(
    "/type/{resource_type}",
    response_model=list[ResourceResponse],
    summary="Recursos por tipo",
)
def resources_by_type(
    resource_type: ResourceType,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[ResourceResponse]:
    return resource_service.get_by_type(db, resource_type)


# ---------------------------------------------------------------------------
# /{resource_id}
# ---------------------------------------------------------------------------


@router.get(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Detalle de recurso",
    responses={404: {"description": "Recurso no encontrado (RESOURCE_NOT_FOUND)."}},
)
def get_resource(
    resource_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ResourceResponse:
    return resource_service.get_by_id(db, resource_id)


@router.put(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Actualizar recurso",
    description=(
        "Actualización parcial. Cambiar el precio no altera los presupuestos ya emitidos, "
        "que guardan su propio precio congelado."
    ),
    responses={404: {"description": "Recurso o categoría no encontrados."}},
)
def update_resource(
    resource_id: int,
    body: ResourceUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ResourceResponse:
    return resource_service.update_resource(db, resource_id, body)


@router.delete(
    "/{resource_id}",
    response_model=MessageResponse,
    summary="Eliminar recurso",
    responses={
        404: {"description": "Recurso no encontrado (RESOURCE_NOT_FOUND)."},
        409: {"description": "Usado por un ítem compuesto (RESOURCE_IN_USE)."},
    },
)
def delete_resource(
    resource_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    resource_service.delete_resource(db, resource_id)
    return MessageResponse(message="Recurso eliminado correctamente")

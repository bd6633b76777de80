"""
Client Registry router.

Mounts under ``/api/clients`` (prefix set in ``main.py``).

Endpoints
---------
POST   /          — Create a client.
GET    /          — List clients, newest first.
GET    /search    — Case-insensitive search by name, email or RUC.
GET    /{id}      — Client detail.
PUT    /{id}      — Partial update.
DELETE /{id}      — Delete a client without budgets.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.common import MessageResponse
from app.services import client_service
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Clientes"])


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear cliente",
    responses={
        201: {"description": "Cliente creado."},
        401: {"description": "Token JWT ausente o inválido."},
        422: {"description": "Datos inválidos."},
    },
)
def create_client(
    body: ClientCreate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ClientResponse:
    return ClientResponse.model_validate(client_service.create_client(db, body))


@router.get(
    "",
    response_model=list[ClientResponse],
    summary="Listar clientes",
    description="Retorna todos los clientes ordenados del más reciente al más antiguo.",
)
def list_clients(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[ClientResponse]:
    return [ClientResponse.model_validate(c) for c in client_service.get_all(db)]


@router.get(
    "/search",
    response_model=list[ClientResponse],
    summary="Buscar clientes",
    description="Búsqueda sin distinción de mayúsculas por nombre, email o RUC.",
)
def search_clients(
    q: Annotated[str, Query(min_length=1, max_length=200, description="Texto a buscar.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> list[ClientResponse]:
    return [ClientResponse.model_validate(c) for c in client_service.search(db, q)]


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Detalle de cliente",
    responses={404: {"description": "Cliente no encontrado (CLIENT_NOT_FOUND)."}},
)
def get_client(
    client_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ClientResponse:
    return ClientResponse.model_validate(client_service.get_by_id(db, client_id))


@router.put(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Actualizar cliente",
    description="Actualización parcial: solo se escriben los campos enviados.",
    responses={404: {"description": "Cliente no encontrado (CLIENT_NOT_FOUND)."}},
)
def update_client(
    client_id: int,
    body: ClientUpdate,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ClientResponse:
    return ClientResponse.model_validate(client_service.update_client(db, client_id, body))


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    summary="Eliminar cliente",
    responses={
        404: {"description": "Cliente no encontrado (CLIENT_NOT_FOUND)."},
        409: {"description": "El cliente tiene presupuestos (CLIENT_IN_USE)."},
    },
)
def delete_client(
    client_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    client_service.delete_client(db, client_id)
    return MessageResponse(message="Cliente eliminado correctamente")

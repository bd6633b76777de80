"""
Client Registry service layer.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError
from app.models.budget import Budget
from app.models.client import Client
from app.schemas.client import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


def _get_or_404(db: Session, client_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id).first()
    if client is None:
        raise NotFoundError("CLIENT", client_id)
    return client


def create_client(db: Session, data: ClientCreate) -> Client:
    client = Client(**data.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)

    logger.info("create_client: id=%d name='%s'", client.id, client.name)
    return client


def get_all(db: Session) -> list[Client]:
    return db.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).all()


def get_by_id(db: Session, client_id: int) -> Client:
    return _get_or_404(db, client_id)


def update_client(db: Session, client_id: int, data: ClientUpdate) -> Client:
    client = _get_or_404(db, client_id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name", "") is None:
        # name is the only required column
        del update_data["name"]
    for field, value in update_data.items():
        setattr(client, field, value)

    db.commit()
    db.refresh(client)

    logger.info("update_client: id=%d fields=%s", client_id, list(update_data.keys()))
    return client


def delete_client(db: Session, client_id: int) -> None:
    """Hard-delete a client.

    Raises:
        NotFoundError: If the client does not exist.
        ConflictError: ``CLIENT_IN_USE`` while any budget references it.
    """
    client = _get_or_404(db, client_id)

    in_use = db.query(Budget.id).filter(Budget.client_id == client_id).first()
    if in_use is not None:
        raise ConflictError(
            f"El cliente {client_id} tiene presupuestos asociados.",
            code="CLIENT_IN_USE",
        )

    db.delete(client)
    db.commit()
    logger.info("delete_client: id=%d", client_id)


def search(db: Session, query: str) -> list[Client]:
    """Case-insensitive substring search over name, email and RUC."""
    pattern = f"%{query}%"
    return (
        db.query(Client)
        .filter(
            or_(
                Client.name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.ruc.ilike(pattern),
            )
        )
        .order_by(Client.created_at.desc(), Client.id.desc())
        .all()
    )

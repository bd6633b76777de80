"""
Legacy Material price list service layer.

Flat catalog kept alongside the typed resource catalog: ``category`` is a
free-text label and nothing else references materials.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.material import Material
from app.schemas.common import BulkPriceUpdateResult, PriceUpdate
from app.schemas.material import MaterialCreate, MaterialUpdate, OutdatedMaterial
from app.utils.money import round4

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS: frozenset[str] = frozenset({"description", "category"})


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _get_or_404(db: Session, material_id: int) -> Material:
    material = db.query(Material).filter(Material.id == material_id).first()
    if material is None:
        raise NotFoundError("MATERIAL", material_id)
    return material


def create_material(db: Session, data: MaterialCreate) -> Material:
    now = _now()
    material = Material(
        name=data.name,
        description=data.description,
        unit=data.unit,
        price=round4(data.price),
        category=data.category,
        last_updated=now,
        created_at=now,
    )
    db.add(material)
    db.commit()
    db.refresh(material)

    logger.info("create_material: id=%d name='%s'", material.id, material.name)
    return material


def get_all(db: Session) -> list[Material]:
    return db.query(Material).order_by(Material.name, Material.id).all()


def get_by_id(db: Session, material_id: int) -> Material:
    return _get_or_404(db, material_id)


def get_by_category(db: Session, category: str) -> list[Material]:
    return (
        db.query(Material)
        .filter(Material.category == category)
        .order_by(Material.name, Material.id)
        .all()
    )


def update_material(db: Session, material_id: int, data: MaterialUpdate) -> Material:
    material = _get_or_404(db, material_id)

    update_data = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    if "price" in update_data:
        update_data["price"] = round4(update_data["price"])

    for field, value in update_data.items():
        setattr(material, field, value)
    material.last_updated = _now()

    db.commit()
    db.refresh(material)

    logger.info("update_material: id=%d fields=%s", material_id, list(update_data.keys()))
    return material


def delete_material(db: Session, material_id: int) -> None:
    material = _get_or_404(db, material_id)
    db.delete(material)
    db.commit()
    logger.info("delete_material: id=%d", material_id)


def search(db: Session, query: str) -> list[Material]:
    """Case-insensitive substring search over name, description and category."""
    pattern = f"%{query}%"
    return (
        db.query(Material)
        .filter(
            or_(
                Material.name.ilike(pattern),
                Material.description.ilike(pattern),
                Material.category.ilike(pattern),
            )
        )
        .order_by(Material.name, Material.id)
        .all()
    )


def get_outdated(db: Session, days_old: int) -> list[OutdatedMaterial]:
    now = _now()
    threshold = now - timedelta(days=days_old)
    rows = (
        db.query(Material)
        .filter(Material.last_updated < threshold)
        .order_by(Material.last_updated)
        .all()
    )
    return [
        OutdatedMaterial(
            id=m.id,
            name=m.name,
            price=float(m.price),
            last_updated=m.last_updated,
            days_old=max((now - m.last_updated).days, 0),
        )
        for m in rows
    ]


def bulk_update_prices(db: Session, updates: list[PriceUpdate]) -> BulkPriceUpdateResult:
    """Best-effort price update, one commit per entry."""
    result = BulkPriceUpdateResult(updated=0, failed=[])

    for update in updates:
        material = db.query(Material).filter(Material.id == update.id).first()
        if material is None or update.price < 0:
            result.failed.append(str(update.id))
            continue

        material.price = round4(update.price)
        material.last_updated = _now()
        db.commit()
        result.updated += 1

    if result.failed:
        logger.warning("bulk_update_prices: failed ids=%s", result.failed)
    logger.info("bulk_update_prices: updated=%d failed=%d", result.updated, len(result.failed))
    return result

"""
Category Registry service layer.

Design notes
------------
- ``order`` is a display hint only. A category created without one is
  appended after the current maximum (``1`` for an empty registry).
- ``reorder`` writes every entry independently and does not report
  failures: unknown ids are skipped.
- A category referenced by any composite item cannot be deleted.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError
from app.models.category import Category
from app.models.composite_item import CompositeItem
from app.schemas.category import CategoryCreate, CategoryOrder, CategoryUpdate

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS: frozenset[str] = frozenset({"description", "color"})


def _get_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if category is None:
        raise NotFoundError("CATEGORY", category_id)
    return category


def _check_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    q = db.query(Category.id).filter(Category.name == name)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(
            f"Ya existe una categoría con el nombre '{name}'.",
            code="CATEGORY_NAME_EXISTS",
        )


def _commit_named(db: Session, name: str) -> None:
    """Commit, mapping a unique-name race lost to another writer to a conflict."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("category name '%s' taken concurrently", name)
        raise ConflictError(
            f"Ya existe una categoría con el nombre '{name}'.",
            code="CATEGORY_NAME_EXISTS",
        )


def create_category(db: Session, data: CategoryCreate) -> Category:
    _check_unique_name(db, data.name)

    order = data.order
    if order is None:
        max_order = db.query(func.max(Category.order)).scalar()
        order = (max_order + 1) if max_order is not None else 1

    category = Category(
        name=data.name,
        description=data.description,
        default_margin=data.default_margin,
        color=data.color,
        order=order,
        active=True,
    )
    db.add(category)
    _commit_named(db, category.name)
    db.refresh(category)

    logger.info("create_category: id=%d name='%s' order=%d", category.id, category.name, order)
    return category


def get_all(db: Session, include_inactive: bool = False) -> list[Category]:
    q = db.query(Category)
    if not include_inactive:
        q = q.filter(Category.active.is_(True))
    return q.order_by(Category.order, Category.id).all()


def get_by_id(db: Session, category_id: int) -> Category:
    return _get_or_404(db, category_id)


def update_category(db: Session, category_id: int, data: CategoryUpdate) -> Category:
    category = _get_or_404(db, category_id)

    update_data = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    if "name" in update_data:
        _check_unique_name(db, update_data["name"], exclude_id=category_id)

    for field, value in update_data.items():
        setattr(category, field, value)

    _commit_named(db, category.name)
    db.refresh(category)

    logger.info("update_category: id=%d fields=%s", category_id, list(update_data.keys()))
    return category


def delete_category(db: Session, category_id: int) -> None:
    """Hard-delete a category.

    Raises:
        NotFoundError: If the category does not exist.
        ConflictError: ``CATEGORY_IN_USE`` while a composite item uses it.
    """
    category = _get_or_404(db, category_id)

    in_use = (
        db.query(CompositeItem.id)
        .filter(CompositeItem.category_id == category_id)
        .first()
    )
    if in_use is not None:
        raise ConflictError(
            f"La categoría {category_id} está asignada a ítems compuestos.",
            code="CATEGORY_IN_USE",
        )

    db.delete(category)
    db.commit()
    logger.info("delete_category: id=%d", category_id)


def reorder(db: Session, orders: list[CategoryOrder]) -> None:
    """Set the display ``order`` of several categories, one write each."""
    for entry in orders:
        category = db.query(Category).filter(Category.id == entry.id).first()
        if category is None:
            logger.warning("reorder: category id=%d not found, skipped", entry.id)
            continue
        category.order = entry.order
        db.commit()

    logger.info("reorder: %d categories", len(orders))

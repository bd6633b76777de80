"""
Resource Catalog service layer.

Design notes
------------
- ``last_updated`` is stamped on every write, including bulk price updates,
  and drives the "outdated prices" listing.
- ``category_id`` is an optional plain reference: it is validated on write
  and resolved to a summary on read (``None`` when the category is gone).
- ``bulk_update_prices`` is best-effort: every entry commits on
  its own and failures are collected instead of raised.
- A resource used by any composite item cannot be deleted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.models.category import Category
from app.models.composite_item import CompositeItemComponent
from app.models.resource import Resource
from app.parsers.price_sheet_parser import PriceSheetParser
from app.schemas.category import CategorySummary
from app.schemas.common import BulkPriceUpdateResult, PriceUpdate
from app.schemas.resource import (
    OutdatedResource,
    ResourceBrief,
    ResourceCreate,
    ResourceResponse,
    ResourceUpdate,
)
from app.utils.money import round4

logger = logging.getLogger(__name__)

# Columns that an update may explicitly clear with null
_NULLABLE_FIELDS: frozenset[str] = frozenset({"description", "category_id"})


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    """Naive UTC timestamp, matching the ``DateTime`` columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _get_or_404(db: Session, resource_id: int) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id).first()
    if resource is None:
        raise NotFoundError("RESOURCE", resource_id)
    return resource


def _check_category(db: Session, category_id: int | None) -> None:
    if category_id is None:
        return
    if db.query(Category.id).filter(Category.id == category_id).first() is None:
        raise NotFoundError("CATEGORY", category_id)


def _build_response(db: Session, resource: Resource) -> ResourceResponse:
    category = None
    if resource.category_id is not None:
        category = db.query(Category).filter(Category.id == resource.category_id).first()

    return ResourceResponse(
        id=resource.id,
        name=resource.name,
        description=resource.description,
        type=resource.type,
        unit=resource.unit,
        price=float(resource.price),
        category_id=resource.category_id,
        category=CategorySummary.model_validate(category) if category is not None else None,
        last_updated=resource.last_updated,
        created_at=resource.created_at,
    )


def _days_old(last_updated: datetime, now: datetime) -> int:
    return max((now - last_updated).days, 0)


# ---------------------------------------------------------------------------
# Public service functions — read operations
# ---------------------------------------------------------------------------


def get_all(
    db: Session,
    resource_type: str | None = None,
    category_id: int | None = None,
) -> list[ResourceResponse]:
    q = db.query(Resource)
    if resource_type is not None:
        q = q.filter(Resource.type == resource_type)
    if category_id is not None:
        q = q.filter(Resource.category_id == category_id)

    rows = q.order_by(Resource.name, Resource.id).all()
    logger.debug("get_all: type=%s category_id=%s -> %d", resource_type, category_id, len(rows))
    return [_build_response(db, r) for r in rows]


def get_by_id(db: Session, resource_id: int) -> ResourceResponse:
    return _build_response(db, _get_or_404(db, resource_id))


def get_by_category(db: Session, category_id: int) -> list[ResourceBrief]:
    rows = (
        db.query(Resource)
        .filter(Resource.category_id == category_id)
        .order_by(Resource.name, Resource.id)
        .all()
    )
    return [ResourceBrief.model_validate(r) for r in rows]


def get_by_type(db: Session, resource_type: str) -> list[ResourceResponse]:
    return get_all(db, resource_type=resource_type)


def search(db: Session, query: str, resource_type: str | None = None) -> list[ResourceBrief]:
    """Case-insensitive substring search over name and description."""
    pattern = f"%{query}%"
    q = db.query(Resource).filter(
        or_(Resource.name.ilike(pattern), Resource.description.ilike(pattern))
    )
    if resource_type is not None:
        q = q.filter(Resource.type == resource_type)
    rows = q.order_by(Resource.name, Resource.id).all()
    return [ResourceBrief.model_validate(r) for r in rows]


def get_outdated(db: Session, days_old: int) -> list[OutdatedResource]:
    """Resources whose price was not touched in the last ``days_old`` days, oldest first."""
    now = _now()
    threshold = now - timedelta(days=days_old)
    rows = (
        db.query(Resource)
        .filter(Resource.last_updated < threshold)
        .order_by(Resource.last_updated)
        .all()
    )
    return [
        OutdatedResource(
            id=r.id,
            name=r.name,
            type=r.type,
            price=float(r.price),
            last_updated=r.last_updated,
            days_old=_days_old(r.last_updated, now),
        )
        for r in rows
    ]


# ---------------------------------------------------------------------------
# Public service functions — write operations
# ---------------------------------------------------------------------------


def create_resource(db: Session, data: ResourceCreate) -> ResourceResponse:
    """Create a resource.

    Raises:
        NotFoundError: ``CATEGORY_NOT_FOUND`` if ``category_id`` is given
                       and does not exist.
    """
    _check_category(db, data.category_id)

    now = _now()
    resource = Resource(
        name=data.name,
        description=data.description,
        type=data.type,
        unit=data.unit,
        price=round4(data.price),
        category_id=data.category_id,
        last_updated=now,
        created_at=now,
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)

    logger.info(
        "create_resource: id=%d name='%s' type=%s price=%s",
        resource.id, resource.name, resource.type, resource.price,
    )
    return _build_response(db, resource)


def update_resource(db: Session, resource_id: int, data: ResourceUpdate) -> ResourceResponse:
    resource = _get_or_404(db, resource_id)

    update_data = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    if "category_id" in update_data:
        _check_category(db, update_data["category_id"])
    if update_data.get("price") is not None:
        update_data["price"] = round4(update_data["price"])

    for field, value in update_data.items():
        setattr(resource, field, value)
    resource.last_updated = _now()

    db.commit()
    db.refresh(resource)

    logger.info("update_resource: id=%d fields=%s", resource_id, list(update_data.keys()))
    return _build_response(db, resource)


def delete_resource(db: Session, resource_id: int) -> None:
    """Hard-delete a resource.

    Budgets are unaffected: their lines hold price snapshots.

    Raises:
        NotFoundError: If the resource does not exist.
        ConflictError: ``RESOURCE_IN_USE`` while a composite item uses it.
    """
    resource = _get_or_404(db, resource_id)

    in_use = (
        db.query(CompositeItemComponent.composite_item_id)
        .filter(CompositeItemComponent.resource_id == resource_id)
        .first()
    )
    if in_use is not None:
        raise ConflictError(
            f"El recurso {resource_id} forma parte del ítem compuesto {in_use[0]}.",
            code="RESOURCE_IN_USE",
        )

    db.delete(resource)
    db.commit()
    logger.info("delete_resource: id=%d", resource_id)


def bulk_update_prices(db: Session, updates: list[PriceUpdate]) -> BulkPriceUpdateResult:
    """Apply many price changes, each committed independently.

    A missing id or a negative price does not stop the run: the id is added
    to ``failed`` and processing continues with the next entry.
    """
    result = BulkPriceUpdateResult(updated=0, failed=[])

    for update in updates:
        if update.price < 0:
            result.failed.append(str(update.id))
            continue

        resource = db.query(Resource).filter(Resource.id == update.id).first()
        if resource is None:
            result.failed.append(str(update.id))
            continue

        resource.price = round4(update.price)
        resource.last_updated = _now()
        db.commit()
        result.updated += 1

    if result.failed:
        logger.warning("bulk_update_prices: failed ids=%s", result.failed)
    logger.info("bulk_update_prices: updated=%d failed=%d", result.updated, len(result.failed))
    return result


def import_prices(db: Session, workbook_bytes: bytes) -> BulkPriceUpdateResult:
    """Run ``bulk_update_prices`` over the rows of an uploaded price sheet.

    Raises:
        InvalidInputError: ``INVALID_PRICE_SHEET`` if the workbook cannot be
                           read or lacks the ``id``/``price`` columns.
    """
    parsed = PriceSheetParser(workbook_bytes).parse()
    if not parsed.ok:
        raise InvalidInputError("; ".join(parsed.errors), code="INVALID_PRICE_SHEET")

    updates = [PriceUpdate(**record) for record in parsed.records]
    result = bulk_update_prices(db, updates)
    result.failed.extend(parsed.rejected)
    return result

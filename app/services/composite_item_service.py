"""
Composite Item Engine — cost-plus-margin pricing of resource assemblies.

All database access for the ``/api/composite-items`` endpoints lives here,
together with ``price_of``, the pricing routine also used by the budget
assembler to snapshot composite prices.

Design notes
------------
- Cost and sale price are never persisted. ``price_of`` recomputes them
  from the live resource prices and the live category margin on every read.
- Pricing is all-or-nothing: the first unresolvable category or resource
  raises ``NotFoundError`` and no partial figure is returned.
- Effective margin: ``custom_margin`` when set, otherwise the category's
  ``default_margin``.
- ``final_price = round2(cost * (1 + margin / 100))`` on ``Decimal`` with
  ROUND_HALF_UP, so ``62.505`` becomes ``62.51``.
- List and search skip (and log) items that cannot be priced, while
  ``get_by_id`` propagates the error. Callers rely on this asymmetry.
- Mutations validate every reference before writing anything.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.category import Category
from app.models.composite_item import CompositeItem, CompositeItemComponent
from app.models.resource import Resource
from app.schemas.category import CategorySummary
from app.schemas.composite_item import (
    ComponentDetail,
    ComponentIn,
    ComponentResource,
    CompositeItemCalculation,
    CompositeItemCreate,
    CompositeItemUpdate,
    CostBreakdown,
    PriceHistoryResponse,
)
from app.utils.constants import COST_BUCKETS
from app.utils.money import apply_margin, round4, to_decimal

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS: frozenset[str] = frozenset({"description", "custom_margin"})


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


def effective_margin(item: CompositeItem, category: Category) -> Decimal:
    """Return the margin that applies to *item*: its own, else the category's."""
    if item.custom_margin is not None:
        return to_decimal(item.custom_margin)
    return to_decimal(category.default_margin)


def price_of(db: Session, item: CompositeItem) -> CompositeItemCalculation:
    """Compute the cost breakdown and sale price of a composite item.

    Args:
        db: Active SQLAlchemy session.
        item: Persisted ``CompositeItem`` with its composition loaded.

    Returns:
        The ``CompositeItemCalculation`` read model.

    Raises:
        NotFoundError: ``CATEGORY_NOT_FOUND`` if the category is gone, or
                       ``RESOURCE_NOT_FOUND`` (with the offending id) for
                       the first composition entry whose resource is gone.
    """
    category: Category | None = (
        db.query(Category).filter(Category.id == item.category_id).first()
    )
    if category is None:
        raise NotFoundError("CATEGORY", item.category_id)

    buckets: dict[str, Decimal] = {
        "materials": Decimal("0"),
        "labor": Decimal("0"),
        "equipment": Decimal("0"),
    }
    details: list[ComponentDetail] = []

    for component in item.composition:
        resource: Resource | None = (
            db.query(Resource).filter(Resource.id == component.resource_id).first()
        )
        if resource is None:
            raise NotFoundError("RESOURCE", component.resource_id)

        price = to_decimal(resource.price)
        quantity = to_decimal(component.quantity)
        subtotal = price * quantity

        bucket = COST_BUCKETS.get(resource.type)
        if bucket is not None:
            buckets[bucket] += subtotal
        else:
            logger.warning(
                "price_of: resource id=%d has unknown type '%s', not costed",
                resource.id, resource.type,
            )

        details.append(
            ComponentDetail(
                resource=ComponentResource(
                    id=resource.id,
                    name=resource.name,
                    type=resource.type,
                    unit=resource.unit,
                    price=float(price),
                ),
                quantity=float(quantity),
                unit=resource.unit,
                subtotal=float(subtotal),
            )
        )

    total = buckets["materials"] + buckets["labor"] + buckets["equipment"]
    margin = effective_margin(item, category)
    final_price = apply_margin(total, margin)

    return CompositeItemCalculation(
        id=item.id,
        name=item.name,
        description=item.description,
        unit=item.unit,
        category=CategorySummary.model_validate(category),
        composition=details,
        cost_breakdown=CostBreakdown(
            materials=float(buckets["materials"]),
            labor=float(buckets["labor"]),
            equipment=float(buckets["equipment"]),
            total=float(total),
        ),
        margin=float(margin),
        final_price=float(final_price),
        active=item.active,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _price_all(db: Session, items: list[CompositeItem]) -> list[CompositeItemCalculation]:
    """Price every item, leaving out the ones whose calculation fails."""
    calculated: list[CompositeItemCalculation] = []
    for item in items:
        try:
            calculated.append(price_of(db, item))
        except NotFoundError as exc:
            logger.warning("Skipping composite item id=%d: %s", item.id, exc.message)
    return calculated


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def get_item_or_404(db: Session, item_id: int) -> CompositeItem:
    item = db.query(CompositeItem).filter(CompositeItem.id == item_id).first()
    if item is None:
        raise NotFoundError("COMPOSITE_ITEM", item_id)
    return item


def _check_category(db: Session, category_id: int) -> None:
    if db.query(Category.id).filter(Category.id == category_id).first() is None:
        raise NotFoundError("CATEGORY", category_id)


def _check_resources(db: Session, composition: list[ComponentIn]) -> None:
    """Fail on the first composition entry whose resource does not exist."""
    for component in composition:
        exists = db.query(Resource.id).filter(Resource.id == component.resource_id).first()
        if exists is None:
            raise NotFoundError("RESOURCE", component.resource_id)


def _build_components(composition: list[ComponentIn]) -> list[CompositeItemComponent]:
    return [
        CompositeItemComponent(
            position=position,
            resource_id=component.resource_id,
            quantity=round4(component.quantity),
        )
        for position, component in enumerate(composition)
    ]


# ---------------------------------------------------------------------------
# Public service functions — read operations
# ---------------------------------------------------------------------------


def get_all(
    db: Session,
    category_id: int | None = None,
    active: bool | None = None,
) -> list[CompositeItemCalculation]:
    q = db.query(CompositeItem)
    if category_id is not None:
        q = q.filter(CompositeItem.category_id == category_id)
    if active is not None:
        q = q.filter(CompositeItem.active.is_(active))

    items = q.order_by(CompositeItem.name, CompositeItem.id).all()
    calculated = _price_all(db, items)

    logger.debug(
        "get_all: category_id=%s active=%s priced=%d/%d",
        category_id, active, len(calculated), len(items),
    )
    return calculated


def get_by_id(db: Session, item_id: int) -> CompositeItemCalculation:
    return price_of(db, get_item_or_404(db, item_id))


def search(db: Session, query: str) -> list[CompositeItemCalculation]:
    """Case-insensitive search over name and description of active items."""
    pattern = f"%{query}%"
    items = (
        db.query(CompositeItem)
        .filter(
            or_(
                CompositeItem.name.ilike(pattern),
                CompositeItem.description.ilike(pattern),
            ),
            CompositeItem.active.is_(True),
        )
        .order_by(CompositeItem.name, CompositeItem.id)
        .all()
    )
    return _price_all(db, items)


def get_price_history(db: Session, item_id: int) -> PriceHistoryResponse:
    """Return the current price snapshot. Past prices are not stored."""
    item = get_item_or_404(db, item_id)
    current = price_of(db, item)

    return PriceHistoryResponse(
        item_id=item.id,
        name=item.name,
        current_price=current.final_price,
        current_cost=current.cost_breakdown.total,
        margin=current.margin,
        last_updated=item.updated_at,
    )


# ---------------------------------------------------------------------------
# Public service functions — write operations
# ---------------------------------------------------------------------------


def create_item(db: Session, data: CompositeItemCreate) -> CompositeItemCalculation:
    """Validate references, persist the bill of resources and price it.

    Raises:
        NotFoundError: ``CATEGORY_NOT_FOUND`` or ``RESOURCE_NOT_FOUND``;
                       nothing is written in that case.
    """
    _check_category(db, data.category_id)
    _check_resources(db, data.composition)

    item = CompositeItem(
        name=data.name,
        description=data.description,
        unit=data.unit,
        category_id=data.category_id,
        custom_margin=data.custom_margin,
        active=data.active,
        composition=_build_components(data.composition),
    )
    db.add(item)
    db.commit()
    db.refresh(item)

    logger.info(
        "create_item: id=%d name='%s' components=%d",
        item.id, item.name, len(data.composition),
    )
    return price_of(db, item)


def update_item(
    db: Session,
    item_id: int,
    data: CompositeItemUpdate,
) -> CompositeItemCalculation:
    """Apply a partial update; a given ``composition`` replaces the old one.

    Raises:
        NotFoundError: ``COMPOSITE_ITEM_NOT_FOUND``, ``CATEGORY_NOT_FOUND``
                       or ``RESOURCE_NOT_FOUND``.
    """
    item = get_item_or_404(db, item_id)

    update_data = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    if "category_id" in update_data:
        _check_category(db, update_data["category_id"])
    if "composition" in update_data:
        _check_resources(db, data.composition)

    for field, value in update_data.items():
        if field == "composition":
            item.composition = _build_components(data.composition)
        else:
            setattr(item, field, value)

    db.commit()
    db.refresh(item)

    logger.info("update_item: id=%d fields=%s", item_id, list(update_data.keys()))
    return price_of(db, item)


def delete_item(db: Session, item_id: int) -> None:
    item = get_item_or_404(db, item_id)
    db.delete(item)
    db.commit()
    logger.info("delete_item: id=%d", item_id)


def duplicate_item(db: Session, item_id: int) -> CompositeItemCalculation:
    """Copy an item under the name ``"<name> (Copy)"``, always active."""
    original = get_item_or_404(db, item_id)

    duplicated = CompositeItem(
        name=f"{original.name} (Copy)",
        description=original.description,
        unit=original.unit,
        category_id=original.category_id,
        custom_margin=original.custom_margin,
        active=True,
        composition=[
            CompositeItemComponent(
                position=c.position,
                resource_id=c.resource_id,
                quantity=c.quantity,
            )
            for c in original.composition
        ],
    )
    db.add(duplicated)
    db.commit()
    db.refresh(duplicated)

    logger.info("duplicate_item: id=%d -> id=%d", item_id, duplicated.id)
    return price_of(db, duplicated)

"""
Budget Assembler — quotes built from resources and composite items.

All database access for the ``/api/budgets`` endpoints lives here.

Design notes
------------
- Every line stores a *snapshot* of its unit price, taken when the budget is
  created or its items are replaced. Later resource price changes never
  reach a stored budget.
- ``process_items`` resolves every requested line before anything is
  written: the first unresolvable reference aborts the whole operation.
- A composite line whose pricing fails for any reason (item, category or
  resource gone) is reported as ``COMPOSITE_ITEM_NOT_FOUND`` for that
  composite item id.
- Totals: ``subtotal = Σ line.subtotal``, ``iva = subtotal * IVA_RATE``,
  ``total = subtotal + iva``. Computed on ``Decimal`` without rounding.
- Budget numbers follow ``<PREFIX>-<year>-<seq>`` with ``seq`` zero padded
  to (at least) three digits. The column is unique; a collision on commit
  is rolled back and retried with a fresh number.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.exporters.excel_exporter import QuoteExcelExporter
from app.exporters.pdf_exporter import QuotePdfExporter
from app.models.budget import Budget, BudgetItem
from app.models.client import Client
from app.models.resource import Resource
from app.schemas.budget import (
    BudgetCreate,
    BudgetItemIn,
    BudgetItemResponse,
    BudgetResponse,
    BudgetStatsResponse,
    BudgetUpdate,
    StatusStat,
)
from app.schemas.client import ClientSummary
from app.services import composite_item_service
from app.utils.constants import STATUS_APPROVED
from app.utils.money import round4, to_decimal

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS: frozenset[str] = frozenset(
    {"project_name", "project_description", "valid_until", "notes"}
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_or_404(db: Session, budget_id: int) -> Budget:
    budget = db.query(Budget).filter(Budget.id == budget_id).first()
    if budget is None:
        raise NotFoundError("BUDGET", budget_id)
    return budget


def _check_client(db: Session, client_id: int) -> None:
    if db.query(Client.id).filter(Client.id == client_id).first() is None:
        raise NotFoundError("CLIENT", client_id)


def _resolve_line(db: Session, position: int, raw: BudgetItemIn) -> BudgetItem:
    """Turn one requested line into an unsaved ``BudgetItem`` with a frozen price."""
    quantity = round4(raw.quantity)

    if raw.item_type == "resource":
        resource = db.query(Resource).filter(Resource.id == raw.resource_id).first()
        if resource is None:
            raise NotFoundError("RESOURCE", raw.resource_id)
        unit_price = round4(resource.price)
        unit = resource.unit
        description = raw.description or resource.name

    elif raw.item_type == "composite":
        try:
            item = composite_item_service.get_item_or_404(db, raw.composite_item_id)
            priced = composite_item_service.price_of(db, item)
        except NotFoundError as exc:
            raise NotFoundError("COMPOSITE_ITEM", raw.composite_item_id) from exc
        unit_price = round4(priced.final_price)
        unit = item.unit
        description = raw.description or item.name

    else:
        raise InvalidInputError(
            f"Tipo de ítem inválido: '{raw.item_type}'. Use 'resource' o 'composite'.",
            code="INVALID_ITEM_TYPE",
        )

    return BudgetItem(
        position=position,
        item_type=raw.item_type,
        resource_id=raw.resource_id if raw.item_type == "resource" else None,
        composite_item_id=raw.composite_item_id if raw.item_type == "composite" else None,
        description=description,
        quantity=quantity,
        unit_price=unit_price,
        unit=unit,
        subtotal=quantity * unit_price,
    )


def process_items(db: Session, raw_items: list[BudgetItemIn]) -> list[BudgetItem]:
    """Resolve and price every requested line, in order.

    Args:
        db: Active SQLAlchemy session.
        raw_items: Lines as received from the client.

    Returns:
        Unsaved ``BudgetItem`` rows carrying their price snapshots.

    Raises:
        NotFoundError: ``RESOURCE_NOT_FOUND`` or ``COMPOSITE_ITEM_NOT_FOUND``.
        InvalidInputError: ``INVALID_ITEM_TYPE`` for an unknown ``item_type``.
    """
    return [_resolve_line(db, position, raw) for position, raw in enumerate(raw_items)]


def _copy_lines(lines: list[BudgetItem]) -> list[BudgetItem]:
    """Fresh unsaved copies of *lines*, snapshot prices included."""
    return [
        BudgetItem(
            position=line.position,
            item_type=line.item_type,
            resource_id=line.resource_id,
            composite_item_id=line.composite_item_id,
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            unit=line.unit,
            subtotal=line.subtotal,
        )
        for line in lines
    ]


def _compute_totals(budget: Budget) -> None:
    """Recompute ``subtotal``, ``iva`` and ``total`` from the budget's lines."""
    rate = to_decimal(get_settings().IVA_RATE)
    subtotal = sum((to_decimal(line.subtotal) for line in budget.items), Decimal("0"))
    iva = subtotal * rate

    budget.subtotal = subtotal
    budget.iva = iva
    budget.total = subtotal + iva


def _number_prefix() -> str:
    year = datetime.now(timezone.utc).year
    return f"{get_settings().BUDGET_NUMBER_PREFIX}-{year}-"


def _next_budget_number(db: Session) -> str:
    """Return the next free-looking number for the current year.

    The count of this year's budgets plus one is tried first; when that
    number is already taken (a budget of the year was deleted) the highest
    existing sequence plus one is used instead.
    """
    prefix = _number_prefix()
    # autoescape keeps "_" or "%" in a configured prefix literal
    of_prefix = Budget.budget_number.startswith(prefix, autoescape=True)

    count = db.query(func.count(Budget.id)).filter(of_prefix).scalar() or 0
    candidate = f"{prefix}{count + 1:03d}"

    taken = db.query(Budget.id).filter(Budget.budget_number == candidate).first()
    if taken is None:
        return candidate

    seq_pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    max_seq = 0
    for (number,) in db.query(Budget.budget_number).filter(of_prefix).all():
        match = seq_pattern.match(number)
        if match:
            max_seq = max(max_seq, int(match.group(1)))

    fallback = f"{prefix}{max_seq + 1:03d}"
    logger.warning("_next_budget_number: %s already taken, using %s", candidate, fallback)
    return fallback


def _persist_new(db: Session, build: Callable[[str], Budget]) -> Budget:
    """Insert a new budget under a freshly generated number.

    ``build`` receives the candidate number and returns an unsaved
    ``Budget``. It is called again after every unique-constraint collision,
    up to ``BUDGET_NUMBER_MAX_RETRIES`` attempts.

    Raises:
        ConflictError: ``BUDGET_NUMBER_CONFLICT`` when every attempt collided.
    """
    attempts = max(get_settings().BUDGET_NUMBER_MAX_RETRIES, 1)

    for attempt in range(1, attempts + 1):
        number = _next_budget_number(db)
        budget = build(number)
        db.add(budget)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "_persist_new: budget number %s collided (attempt %d/%d)",
                number, attempt, attempts,
            )
            continue
        db.refresh(budget)
        return budget

    raise ConflictError(
        "No se pudo generar un número de presupuesto único. Intente nuevamente.",
        code="BUDGET_NUMBER_CONFLICT",
    )


def _build_response(db: Session, budget: Budget) -> BudgetResponse:
    client = db.query(Client).filter(Client.id == budget.client_id).first()

    return BudgetResponse(
        id=budget.id,
        budget_number=budget.budget_number,
        client_id=budget.client_id,
        client=ClientSummary.model_validate(client) if client is not None else None,
        project_name=budget.project_name,
        project_description=budget.project_description,
        items=[BudgetItemResponse.model_validate(line) for line in budget.items],
        subtotal=float(budget.subtotal),
        iva=float(budget.iva),
        total=float(budget.total),
        status=budget.status,
        valid_until=budget.valid_until,
        notes=budget.notes,
        created_at=budget.created_at,
        updated_at=budget.updated_at,
    )


# ---------------------------------------------------------------------------
# Public service functions — read operations
# ---------------------------------------------------------------------------


def get_all(
    db: Session,
    status: str | None = None,
    client_id: int | None = None,
) -> list[BudgetResponse]:
    q = db.query(Budget)
    if status is not None:
        q = q.filter(Budget.status == status)
    if client_id is not None:
        q = q.filter(Budget.client_id == client_id)

    rows = q.order_by(Budget.created_at.desc(), Budget.id.desc()).all()
    logger.debug("get_all: status=%s client_id=%s -> %d", status, client_id, len(rows))
    return [_build_response(db, b) for b in rows]


def get_by_id(db: Session, budget_id: int) -> BudgetResponse:
    return _build_response(db, _get_or_404(db, budget_id))


def get_stats(db: Session) -> BudgetStatsResponse:
    """Count budgets, group them by status and sum the approved totals."""
    total = db.query(func.count(Budget.id)).scalar() or 0

    grouped = (
        db.query(Budget.status, func.count(Budget.id), func.sum(Budget.total))
        .group_by(Budget.status)
        .order_by(Budget.status)
        .all()
    )
    by_status = [
        StatusStat(status=status, count=count, total_amount=float(amount or 0))
        for status, count, amount in grouped
    ]

    approved = (
        db.query(func.sum(Budget.total))
        .filter(Budget.status == STATUS_APPROVED)
        .scalar()
    )

    return BudgetStatsResponse(
        total=total,
        by_status=by_status,
        approved_revenue=float(approved or 0),
    )


# ---------------------------------------------------------------------------
# Public service functions — write operations
# ---------------------------------------------------------------------------


def create_budget(db: Session, data: BudgetCreate) -> BudgetResponse:
    """Create a draft budget with snapshot prices.

    Raises:
        NotFoundError: ``CLIENT_NOT_FOUND``, ``RESOURCE_NOT_FOUND`` or
                       ``COMPOSITE_ITEM_NOT_FOUND``.
        InvalidInputError: ``INVALID_ITEM_TYPE``.
        ConflictError: ``BUDGET_NUMBER_CONFLICT``.
    """
    _check_client(db, data.client_id)
    lines = process_items(db, data.items)

    def build(number: str) -> Budget:
        budget = Budget(
            budget_number=number,
            client_id=data.client_id,
            project_name=data.project_name,
            project_description=data.project_description,
            status="draft",
            valid_until=data.valid_until,
            notes=data.notes,
            items=_copy_lines(lines),
        )
        _compute_totals(budget)
        return budget

    budget = _persist_new(db, build)

    logger.info(
        "create_budget: created %s (id=%d) lines=%d total=%s",
        budget.budget_number, budget.id, len(budget.items), budget.total,
    )
    return _build_response(db, budget)


def update_budget(db: Session, budget_id: int, data: BudgetUpdate) -> BudgetResponse:
    """Apply a partial update; ``items`` replaces and re-prices every line.

    Raises:
        NotFoundError: ``BUDGET_NOT_FOUND``, ``CLIENT_NOT_FOUND`` or a line
                       reference error from ``process_items``.
        InvalidInputError: ``INVALID_ITEM_TYPE``.
    """
    budget = _get_or_404(db, budget_id)

    update_data = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }

    if "client_id" in update_data and update_data["client_id"] != budget.client_id:
        _check_client(db, update_data["client_id"])

    new_items = process_items(db, data.items) if "items" in update_data else None

    for field, value in update_data.items():
        if field != "items":
            setattr(budget, field, value)
    if new_items is not None:
        budget.items = new_items

    _compute_totals(budget)
    db.commit()
    db.refresh(budget)

    logger.info("update_budget: id=%d fields=%s", budget_id, list(update_data.keys()))
    return _build_response(db, budget)


def update_status(db: Session, budget_id: int, status: str) -> BudgetResponse:
    budget = _get_or_404(db, budget_id)
    previous = budget.status
    budget.status = status

    db.commit()
    db.refresh(budget)

    logger.info("update_status: id=%d %s -> %s", budget_id, previous, status)
    return _build_response(db, budget)


def delete_budget(db: Session, budget_id: int) -> None:
    budget = _get_or_404(db, budget_id)
    number = budget.budget_number
    db.delete(budget)
    db.commit()
    logger.info("delete_budget: id=%d number=%s", budget_id, number)


def duplicate_budget(db: Session, budget_id: int) -> BudgetResponse:
    """Copy a budget, lines included, as a new draft.

    Line prices are copied verbatim, not re-priced.
    """
    original = _get_or_404(db, budget_id)
    project_name = f"{original.project_name or ''} (Copy)".strip()

    def build(number: str) -> Budget:
        budget = Budget(
            budget_number=number,
            client_id=original.client_id,
            project_name=project_name,
            project_description=original.project_description,
            status="draft",
            valid_until=original.valid_until,
            notes=original.notes,
            items=_copy_lines(original.items),
        )
        _compute_totals(budget)
        return budget

    budget = _persist_new(db, build)

    logger.info(
        "duplicate_budget: id=%d -> %s (id=%d)",
        budget_id, budget.budget_number, budget.id,
    )
    return _build_response(db, budget)


# ---------------------------------------------------------------------------
# Public export functions
# ---------------------------------------------------------------------------


def export_xlsx(db: Session, budget_id: int) -> tuple[str, bytes]:
    """Render a budget as an ``.xlsx`` quote.

    Returns:
        ``(filename, file_bytes)``.
    """
    budget = get_by_id(db, budget_id)
    file_bytes = QuoteExcelExporter(budget, iva_rate=get_settings().IVA_RATE).build()

    logger.info("export_xlsx: %s bytes=%d", budget.budget_number, len(file_bytes))
    return f"{budget.budget_number}.xlsx", file_bytes


def export_pdf(db: Session, budget_id: int) -> tuple[str, bytes]:
    """Render a budget as a ``.pdf`` quote.

    Returns:
        ``(filename, file_bytes)``.
    """
    budget = get_by_id(db, budget_id)
    file_bytes = QuotePdfExporter(budget, iva_rate=get_settings().IVA_RATE).build()

    logger.info("export_pdf: %s bytes=%d", budget.budget_number, len(file_bytes))
    return f"{budget.budget_number}.pdf", file_bytes

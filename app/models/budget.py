"""Budget models — client quotes made of frozen-price lines."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Budget(Base):
    """Quote issued to a client.

    ``subtotal``, ``iva`` and ``total`` are recomputed from the line
    subtotals whenever the budget is created or its items are replaced.

    Attributes:
        id: Primary key.
        budget_number: Unique code ``BUD-<year>-<seq>``.
        client_id: Client reference (not a DB foreign key).
        project_name: Short project title.
        project_description: Free text.
        subtotal: Sum of line subtotals.
        iva: Value-added tax on ``subtotal``.
        total: ``subtotal + iva``.
        status: ``draft`` | ``sent`` | ``approved`` | ``rejected``.
        valid_until: Offer expiry date.
        notes: Free text printed on the quote.
    """

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_number = Column(String(30), unique=True, nullable=False)
    client_id = Column(Integer, nullable=False, index=True)
    project_name = Column(String(300), nullable=True)
    project_description = Column(Text, nullable=True)
    subtotal = Column(Numeric(20, 8), nullable=False, default=0)
    iva = Column(Numeric(20, 8), nullable=False, default=0)
    total = Column(Numeric(20, 8), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft", index=True)
    valid_until = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "BudgetItem",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetItem.position",
        lazy="select",
    )


class BudgetItem(Base):
    """Frozen-price budget line.

    ``unit_price`` is copied from the resource price or the composite item's
    sale price when the line is written, and never recalculated afterwards.
    """

    __tablename__ = "budget_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_id = Column(
        Integer,
        ForeignKey("budgets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    item_type = Column(String(20), nullable=False)  # "resource" | "composite"
    resource_id = Column(Integer, nullable=True)
    composite_item_id = Column(Integer, nullable=True)
    description = Column(String(1000), nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)
    unit = Column(String(50), nullable=False)
    subtotal = Column(Numeric(20, 8), nullable=False)

    budget = relationship("Budget", back_populates="items")

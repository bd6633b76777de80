"""CompositeItem models — bill of resource quantities priced on read."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class CompositeItem(Base):
    """Named assembly of resources sold at cost plus margin.

    Cost and sale price are never stored: they are derived from the live
    resource prices every time the item is read.

    Attributes:
        id: Primary key.
        name: Display name.
        description: Free text.
        unit: Unit the assembly is sold in (``"m2"``, ``"ml"`` ...).
        category_id: Required category reference (not a DB foreign key).
        custom_margin: Optional margin overriding the category default.
        active: Inactive items are excluded from search.
        composition: Ordered resource quantities.
    """

    __tablename__ = "composite_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    unit = Column(String(50), nullable=False)
    category_id = Column(Integer, nullable=False, index=True)
    custom_margin = Column(Numeric(5, 2), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    composition = relationship(
        "CompositeItemComponent",
        back_populates="composite_item",
        cascade="all, delete-orphan",
        order_by="CompositeItemComponent.position",
        lazy="select",
    )


class CompositeItemComponent(Base):
    """One ``(resource, quantity)`` entry of a composite item.

    The same resource may appear in several entries; their costs add up.
    """

    __tablename__ = "composite_item_components"

    id = Column(Integer, primary_key=True, autoincrement=True)
    composite_item_id = Column(
        Integer,
        ForeignKey("composite_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    resource_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Numeric(14, 4), nullable=False)

    composite_item = relationship("CompositeItem", back_populates="composition")

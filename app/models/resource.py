"""Resource model — live-priced material, labor or equipment unit."""

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.database import Base


class Resource(Base):
    """Atomic priceable unit.

    The price is the single current price: there is no history. Composite
    items read it live, budget lines copy it at assembly time.

    Attributes:
        id: Primary key.
        name: Display name.
        description: Free text.
        type: ``"material"``, ``"labor"`` or ``"equipment"``.
        unit: Unit of measure (``"bag"``, ``"h"``, ``"m3"`` ...).
        price: Current unit price, never negative.
        category_id: Optional category reference (not a DB foreign key).
        last_updated: Set on every write to the resource.
    """

    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    type = Column(String(20), nullable=False, index=True)
    unit = Column(String(50), nullable=False)
    price = Column(Numeric(14, 4), nullable=False)
    category_id = Column(Integer, nullable=True, index=True)
    last_updated = Column(DateTime, default=func.now(), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

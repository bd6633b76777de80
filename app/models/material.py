"""Material model — legacy flat price list with free-text categories."""

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.database import Base


class Material(Base):
    """Price-list entry predating the typed resource catalog.

    Attributes:
        id: Primary key.
        name: Display name.
        description: Free text.
        unit: Unit of measure.
        price: Current unit price, never negative.
        category: Free-text grouping label.
        last_updated: Set on every write.
    """

    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    unit = Column(String(50), nullable=False)
    price = Column(Numeric(14, 4), nullable=False)
    category = Column(String(200), nullable=True, index=True)
    last_updated = Column(DateTime, default=func.now(), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

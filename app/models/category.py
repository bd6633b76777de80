"""Category model — groupings that carry the default sale margin."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.database import Base
from app.utils.constants import DEFAULT_CATEGORY_COLOR, DEFAULT_MARGIN


class Category(Base):
    """Named grouping of composite items and resources.

    Attributes:
        id: Primary key.
        name: Unique display name.
        description: Free text.
        default_margin: Markup percentage (0–100) applied to composite items
            of this category that do not define ``custom_margin``.
        color: CSS colour used by the UI.
        order: Display position; new categories go last.
        active: Inactive categories are hidden from the default listing.
    """

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(String(500), nullable=True)
    default_margin = Column(Numeric(5, 2), default=DEFAULT_MARGIN, nullable=False)
    color = Column(String(20), default=DEFAULT_CATEGORY_COLOR, nullable=True)
    order = Column(Integer, default=0, nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

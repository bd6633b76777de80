"""SQLAlchemy models package.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.

Usage from other modules:
    from app.models import Budget, CompositeItem
"""

# Accounts
from app.models.user import User  # noqa: F401

# Catalog
from app.models.category import Category  # noqa: F401
from app.models.resource import Resource  # noqa: F401
from app.models.material import Material  # noqa: F401
from app.models.composite_item import CompositeItem, CompositeItemComponent  # noqa: F401

# Quoting
from app.models.client import Client  # noqa: F401
from app.models.budget import Budget, BudgetItem  # noqa: F401

__all__ = [
    "User",
    "Category",
    "Resource",
    "Material",
    "CompositeItem",
    "CompositeItemComponent",
    "Client",
    "Budget",
    "BudgetItem",
]

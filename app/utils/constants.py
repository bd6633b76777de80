"""
Domain enumerations shared by models, schemas and services.
"""

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Resource types
# ---------------------------------------------------------------------------

ResourceType = Literal["material", "labor", "equipment"]

# Cost-breakdown bucket for each resource type
COST_BUCKETS: Final[dict[str, str]] = {
    "material": "materials",
    "labor": "labor",
    "equipment": "equipment",
}

# ---------------------------------------------------------------------------
# Budget states
# ---------------------------------------------------------------------------

BudgetStatus = Literal["draft", "sent", "approved", "rejected"]

# Status whose totals count as realised revenue in the stats endpoint
STATUS_APPROVED: Final[str] = "approved"

# ---------------------------------------------------------------------------
# Category defaults
# ---------------------------------------------------------------------------

DEFAULT_MARGIN: Final[float] = 20.0
DEFAULT_CATEGORY_COLOR: Final[str] = "#6B7280"

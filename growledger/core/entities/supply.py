"""Supply domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from growledger.core.entities.base import DocumentModel, utcnow


class SupplyCategory(str, Enum):
    """What a supply is used for."""

    SUBSTRATE = "substrate"
    CONTAINER = "container"
    TOOL = "tool"
    SUPPLEMENT = "supplement"
    LABOR = "labor"


# Categories whose units come back dirty after a run and get cleaned
REUSABLE_CATEGORIES = frozenset({SupplyCategory.CONTAINER, SupplyCategory.TOOL})

_CATEGORY_ALIASES = {
    "substrates": "substrate",
    "containers": "container",
    "tools": "tool",
    "supplements": "supplement",
}


class StockStatus(str, Enum):
    """Derived stock level flag."""

    EMPTY = "empty"
    LOW = "low"
    OK = "ok"


class Supply(DocumentModel):
    """A tracked consumable or reusable resource with a locked unit cost."""

    name: str
    category: SupplyCategory | None = None
    unit: str = ""
    quantity: float = Field(default=0.0, ge=0)
    unit_cost: float = Field(default=0.0, ge=0)  # locked at last purchase entry
    last_purchase_total: float | None = None
    last_purchase_quantity: float | None = None
    low_stock_threshold: float = Field(default=0.0, ge=0)
    reorder_link: str = ""
    deleted: bool = False
    deleted_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: object) -> object:
        if v is None or isinstance(v, SupplyCategory):
            return v
        key = str(v).strip().lower()
        if not key:
            return None
        return _CATEGORY_ALIASES.get(key, key)

    @property
    def is_reusable(self) -> bool:
        return self.category in REUSABLE_CATEGORIES

    @property
    def stock_status(self) -> StockStatus:
        """Empty at or below zero, low at or below a positive threshold."""
        if self.quantity <= 0:
            return StockStatus.EMPTY
        if self.low_stock_threshold > 0 and self.quantity <= self.low_stock_threshold:
            return StockStatus.LOW
        return StockStatus.OK

    @property
    def stock_value(self) -> float:
        return self.quantity * self.unit_cost

    @staticmethod
    def derive_unit_cost(total_price: float, purchased_quantity: float) -> float:
        """Per-unit cost from a purchase; the total itself when quantity is zero."""
        if purchased_quantity > 0:
            return total_price / purchased_quantity
        return total_price

"""Recipe domain entities."""

from datetime import datetime

from pydantic import BaseModel, Field

from growledger.core.entities.base import DocumentModel, utcnow


class RecipeLine(BaseModel):
    """One ingredient line, expressed per yield unit (or per batch without a yield)."""

    supply_id: str | None = None
    amount: float = 0.0
    unit: str = ""
    # Reusable units handed out per child of a batch (clean queue)
    per_child: float | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.supply_id) and self.amount > 0


class Recipe(DocumentModel):
    """A named, scalable list of supply lines with an optional declared yield."""

    name: str
    lines: list[RecipeLine] = Field(default_factory=list)
    yield_qty: float = 0.0
    yield_unit: str = ""
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def has_yield(self) -> bool:
        return self.yield_qty > 0

    def clone(self) -> "Recipe":
        """Copy without identity, suffixing the name."""
        now = utcnow()
        return Recipe(
            name=f"{self.name} (copy)",
            lines=[line.model_copy() for line in self.lines],
            yield_qty=self.yield_qty,
            yield_unit=self.yield_unit,
            notes=self.notes,
            created_at=now,
            updated_at=now,
        )


class IngredientNeed(BaseModel):
    """Computed, rounded amount of one supply required for a batch."""

    supply_id: str
    amount: float
    unit: str = ""

"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field


class CreateSupplyRequest(BaseModel):
    """First purchase entry for a supply."""

    name: str = Field(..., min_length=1, description="Supply name", examples=["Rye grain"])
    category: str | None = Field(
        default=None,
        description="substrate, container, tool, supplement or labor (plurals accepted)",
        examples=["containers"],
    )
    unit: str = Field(default="", description="Stock unit", examples=["g", "count"])
    quantity: float = Field(default=0.0, ge=0, description="Purchased quantity")
    unit_cost: float | None = Field(
        default=None, ge=0, description="Explicit per-unit cost (overrides purchase_total)"
    )
    purchase_total: float | None = Field(
        default=None, ge=0, description="Total paid; unit cost = total / quantity"
    )
    low_stock_threshold: float = Field(default=0.0, ge=0)
    reorder_link: str = Field(default="")


class EditSupplyRequest(BaseModel):
    """Inline edit. Cost is changed only through reprice."""

    name: str | None = Field(default=None, min_length=1)
    category: str | None = None
    unit: str | None = None
    quantity: float | None = Field(default=None, ge=0, description="Recounted quantity")
    low_stock_threshold: float | None = Field(default=None, ge=0)
    reorder_link: str | None = None


class RestockRequest(BaseModel):
    """Add purchased stock."""

    amount: float = Field(..., gt=0, description="Amount in the supply's unit")
    note: str = Field(default="")


class RepriceRequest(BaseModel):
    """New purchase used to re-derive the locked unit cost."""

    total_price: float = Field(..., ge=0, description="Total paid")
    purchased_quantity: float = Field(..., ge=0, description="Quantity bought")


class RecipeLineRequest(BaseModel):
    """One recipe line."""

    supply_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Amount per yield unit, or per batch")
    unit: str = Field(default="")
    per_child: float | None = Field(
        default=None, ge=0, description="Reusable units handed out per child"
    )


class SaveRecipeRequest(BaseModel):
    """Create or replace a recipe."""

    name: str = Field(..., min_length=1, examples=["Standard Grain"])
    lines: list[RecipeLineRequest] = Field(default_factory=list)
    yield_qty: float = Field(default=0.0, ge=0, description="Declared yield; 0 for none")
    yield_unit: str = Field(default="")
    notes: str = Field(default="")


class BatchParamsRequest(BaseModel):
    """Batch size of a run."""

    batch_count: int = Field(default=1, ge=1, description="Number of children")
    per_child_qty: float | None = Field(
        default=None, gt=0, description="Output per child, e.g. 500 for 500 ml"
    )
    per_child_unit: str | None = Field(default=None, examples=["ml"])


class CreateRunRequest(BaseModel):
    """Create a cultivation run, optionally consuming its recipe."""

    name: str = Field(default="")
    recipe_id: str | None = None
    batch: BatchParamsRequest = Field(default_factory=BatchParamsRequest)
    stage: str | None = Field(default=None, examples=["inoculated"])
    consume_supplies: bool = Field(
        default=True, description="Debit the recipe's needs from stock on creation"
    )


class ArchiveRunRequest(BaseModel):
    """Move a run to an archived stage."""

    stage: str = Field(default="archived", examples=["harvested", "contaminated"])


class ChangeRunRecipeRequest(BaseModel):
    """Swap a run's recipe and/or batch size, reconciling consumption."""

    recipe_id: str | None = Field(default=None, description="New recipe; null clears it")
    batch: BatchParamsRequest | None = Field(
        default=None, description="New batch size; omitted keeps the current one"
    )
    note: str = Field(default="retype reconcile")


class CleanReturnRequest(BaseModel):
    """Operator result of cleaning a supply's pending units."""

    supply_id: str = Field(..., min_length=1)
    returned_qty: int = Field(..., ge=0, description="Units cleaned and put back into stock")


class BackfillRequest(BaseModel):
    """Backfill scan options."""

    limit: int | None = Field(default=None, ge=1, description="Max runs to scan")

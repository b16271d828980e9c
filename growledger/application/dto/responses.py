"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from growledger.core.entities import (
    AuditRecord,
    CleanQueueEntry,
    IngredientNeed,
    Recipe,
    Run,
    Supply,
)


class SupplyResponse(BaseModel):
    """Supply with derived stock flags."""

    id: str
    name: str
    category: str | None = None
    unit: str = ""
    quantity: float
    unit_cost: float
    stock_value: float
    stock_status: str = Field(..., description="empty, low or ok")
    low_stock_threshold: float = 0.0
    last_purchase_total: float | None = None
    last_purchase_quantity: float | None = None
    reorder_link: str = ""
    deleted: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, supply: Supply) -> "SupplyResponse":
        return cls(
            id=supply.id,  # type: ignore[arg-type]
            name=supply.name,
            category=supply.category.value if supply.category else None,
            unit=supply.unit,
            quantity=supply.quantity,
            unit_cost=supply.unit_cost,
            stock_value=supply.stock_value,
            stock_status=supply.stock_status.value,
            low_stock_threshold=supply.low_stock_threshold,
            last_purchase_total=supply.last_purchase_total,
            last_purchase_quantity=supply.last_purchase_quantity,
            reorder_link=supply.reorder_link,
            deleted=supply.deleted,
            created_at=supply.created_at,
            updated_at=supply.updated_at,
        )


class SupplyListResponse(BaseModel):
    """Supply list with warning counts."""

    items: list[SupplyResponse]
    total: int
    low_count: int = 0
    empty_count: int = 0


class AuditRecordResponse(BaseModel):
    """One audit trail row."""

    id: str
    supply_id: str
    action: str
    amount: float
    unit: str | None = None
    unit_cost_applied: float | None = None
    total_cost_applied: float | None = None
    recipe_id: str | None = None
    recipe_name: str | None = None
    run_id: str | None = None
    note: str = ""
    balance_after: float | None = None
    timestamp: datetime

    @classmethod
    def from_entity(cls, record: AuditRecord) -> "AuditRecordResponse":
        return cls(
            id=record.id,  # type: ignore[arg-type]
            supply_id=record.supply_id,
            action=record.action.value,
            amount=record.amount,
            unit=record.unit,
            unit_cost_applied=record.unit_cost_applied,
            total_cost_applied=record.total_cost_applied,
            recipe_id=record.recipe_id,
            recipe_name=record.recipe_name,
            run_id=record.run_id,
            note=record.note,
            balance_after=record.balance_after,
            timestamp=record.timestamp,
        )


class AuditListResponse(BaseModel):
    """Audit rows, oldest first."""

    records: list[AuditRecordResponse]
    total: int


class SupplyVerificationResponse(BaseModel):
    """Audit replay consistency check for a supply."""

    supply_id: str
    stored_quantity: float
    replayed_quantity: float
    events: int
    consistent: bool


class RecipeLineResponse(BaseModel):
    supply_id: str | None = None
    amount: float
    unit: str = ""
    per_child: float | None = None


class RecipeResponse(BaseModel):
    """Recipe DTO."""

    id: str
    name: str
    lines: list[RecipeLineResponse] = Field(default_factory=list)
    yield_qty: float = 0.0
    yield_unit: str = ""
    notes: str = ""
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, recipe: Recipe) -> "RecipeResponse":
        return cls(
            id=recipe.id,  # type: ignore[arg-type]
            name=recipe.name,
            lines=[RecipeLineResponse(**line.model_dump()) for line in recipe.lines],
            yield_qty=recipe.yield_qty,
            yield_unit=recipe.yield_unit,
            notes=recipe.notes,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
        )


class IngredientNeedResponse(BaseModel):
    supply_id: str
    amount: float
    unit: str = ""

    @classmethod
    def from_entity(cls, need: IngredientNeed) -> "IngredientNeedResponse":
        return cls(supply_id=need.supply_id, amount=need.amount, unit=need.unit)


class NeedsPreviewResponse(BaseModel):
    """Scaled needs for a recipe, without touching stock."""

    recipe_id: str
    scale: float
    needs: list[IngredientNeedResponse]


class RunResponse(BaseModel):
    """Run DTO (ledger-relevant fields only)."""

    id: str
    name: str = ""
    recipe_id: str | None = None
    batch_count: int
    per_child_qty: float | None = None
    per_child_unit: str | None = None
    stage: str | None = None
    status: str | None = None
    archived: bool
    archived_at: datetime | None = None
    clean_gate: str
    clean_queued_at: datetime | None = None
    tracks_supplies: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, run: Run) -> "RunResponse":
        return cls(
            id=run.id,  # type: ignore[arg-type]
            name=run.name,
            recipe_id=run.recipe_id,
            batch_count=run.batch.batch_count,
            per_child_qty=run.batch.per_child_qty,
            per_child_unit=run.batch.per_child_unit,
            stage=run.stage,
            status=run.status,
            archived=run.is_archived,
            archived_at=run.archived_at,
            clean_gate=run.clean_gate.value,
            clean_queued_at=run.clean_queued_at,
            tracks_supplies=run.tracks_supplies,
            created_at=run.created_at,
            updated_at=run.updated_at,
        )


class CreateRunResponse(BaseModel):
    run: RunResponse
    consumed: list[IngredientNeedResponse] = Field(default_factory=list)


class ArchiveRunResponse(BaseModel):
    """Archive outcome including the clean queue enqueue."""

    run: RunResponse
    enqueued: int
    stamped: bool
    reason: str | None = None


class ChangeRunRecipeResponse(BaseModel):
    run: RunResponse
    refunded: list[IngredientNeedResponse] = Field(default_factory=list)
    consumed: list[IngredientNeedResponse] = Field(default_factory=list)


class CleanQueueEntryResponse(BaseModel):
    supply_id: str
    name: str = ""
    unit: str = ""
    pending: int
    last_run_id: str | None = None
    updated_at: datetime

    @classmethod
    def from_entity(cls, entry: CleanQueueEntry) -> "CleanQueueEntryResponse":
        return cls(
            supply_id=entry.supply_id,  # type: ignore[arg-type]
            name=entry.name,
            unit=entry.unit,
            pending=entry.pending,
            last_run_id=entry.last_run_id,
            updated_at=entry.updated_at,
        )


class CleanQueueListResponse(BaseModel):
    entries: list[CleanQueueEntryResponse]
    total_pending: int


class CleanReturnResponse(BaseModel):
    """Result of draining a supply's pending count."""

    supply_id: str
    pending_before: int
    returned: int
    destroyed: int
    quantity_after: float | None = None


class BackfillResponse(BaseModel):
    """Backfill scan breakdown."""

    scanned: int
    archived: int
    not_archived: int
    skipped_already_queued: int
    no_recipe: int
    recipe_missing: int
    skipped_not_reusable: int
    skipped_not_countish: int
    qty_zero: int
    enqueued_count: int
    affected_runs: int
    run_ids: list[str] = Field(default_factory=list)


class ProviderHealthResponse(BaseModel):
    """Health status of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None
    schema_version: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. SUPPLY_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)

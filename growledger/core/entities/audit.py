"""Audit trail entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, model_validator

from growledger.core.entities.base import DocumentModel, utcnow


class AuditAction(str, Enum):
    """Kinds of ledger mutation."""

    ADD = "add"
    RESTOCK = "restock"
    CONSUME = "consume"
    RECONCILE_REFUND = "reconcile_refund"
    EDIT = "edit"
    DELETE = "delete"
    CLEAN_RETURN = "clean_return"
    CLEAN_DESTROYED = "clean_destroyed"


class AuditRecord(DocumentModel):
    """Immutable record of one ledger mutation."""

    model_config = ConfigDict(frozen=True)

    supply_id: str
    action: AuditAction
    amount: float = 0.0
    unit: str | None = None
    unit_cost_applied: float | None = None
    total_cost_applied: float | None = None
    recipe_id: str | None = None
    recipe_name: str | None = None
    run_id: str | None = None
    note: str = ""
    balance_after: float | None = None
    timestamp: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def derive_total_cost(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("total_cost_applied") is None:
            unit_cost = data.get("unit_cost_applied")
            if unit_cost is not None:
                data = {**data, "total_cost_applied": float(unit_cost) * float(data.get("amount") or 0)}
        return data

"""
Audit trail service.

Single writer path for ledger audit records plus the read projections built
on top of them. Records are appended inside the caller's transaction so an
audit row exists exactly when its mutation was committed.
"""

from collections.abc import Iterable
from uuid import uuid4

from growledger.config import get_logger
from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.interfaces.audit_store import IAuditStore
from growledger.core.interfaces.transaction import Collection, DocumentRef, ITransaction

logger = get_logger(__name__)

# Actions that add their amount back onto the balance
_CREDIT_ACTIONS = frozenset(
    {AuditAction.RESTOCK, AuditAction.RECONCILE_REFUND, AuditAction.CLEAN_RETURN}
)


def replay_quantity(records: Iterable[AuditRecord]) -> float:
    """
    Fold an audit stream (oldest first) into the quantity it implies.

    ``add`` sets the baseline, credits add, ``consume`` subtracts with a clamp
    at zero, and ``edit`` resets to the balance it recorded. ``delete`` and
    ``clean_destroyed`` leave stock untouched.
    """
    quantity = 0.0
    for record in records:
        if record.action is AuditAction.ADD:
            quantity = record.amount
        elif record.action in _CREDIT_ACTIONS:
            quantity += record.amount
        elif record.action is AuditAction.CONSUME:
            quantity = max(0.0, quantity - record.amount)
        elif record.action is AuditAction.EDIT and record.balance_after is not None:
            quantity = record.balance_after
    return quantity


class AuditTrail:
    """Append-only audit log for supply mutations."""

    def __init__(self, audit_store: IAuditStore, recent_limit: int = 5) -> None:
        self._audit_store = audit_store
        self._recent_limit = recent_limit

    def record(
        self,
        tx: ITransaction,
        supply_id: str,
        action: AuditAction,
        amount: float = 0.0,
        unit: str | None = None,
        unit_cost_applied: float | None = None,
        recipe_id: str | None = None,
        recipe_name: str | None = None,
        run_id: str | None = None,
        note: str = "",
        balance_after: float | None = None,
    ) -> AuditRecord:
        """Append one record to the transaction's write set."""
        entry = AuditRecord(
            id=uuid4().hex,
            supply_id=supply_id,
            action=action,
            amount=amount,
            unit=unit,
            unit_cost_applied=unit_cost_applied,
            recipe_id=recipe_id,
            recipe_name=recipe_name,
            run_id=run_id,
            note=note,
            balance_after=balance_after,
        )
        tx.set_model(DocumentRef(Collection.AUDIT_RECORDS, entry.id), entry)  # type: ignore[arg-type]
        logger.debug(
            "audit_recorded",
            supply_id=supply_id,
            action=action.value,
            amount=amount,
            run_id=run_id,
        )
        return entry

    async def history(self, supply_id: str) -> list[AuditRecord]:
        """Full stream for a supply, oldest first."""
        return await self._audit_store.list_for_supply(supply_id)

    async def recent_for_supply(
        self, supply_id: str, limit: int | None = None
    ) -> list[AuditRecord]:
        """Last few events for a supply, most recent first."""
        records = await self._audit_store.list_for_supply(supply_id)
        count = limit if limit is not None else self._recent_limit
        if count <= 0:
            return []
        return list(reversed(records[-count:]))

    async def list_records(
        self,
        action: AuditAction | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[AuditRecord]:
        return await self._audit_store.list_records(action=action, limit=limit, offset=offset)

    async def consumption_rows(self, limit: int = 1000, offset: int = 0) -> list[AuditRecord]:
        """Consume-only rows, as used for consumption exports."""
        return await self._audit_store.list_records(
            action=AuditAction.CONSUME, limit=limit, offset=offset
        )

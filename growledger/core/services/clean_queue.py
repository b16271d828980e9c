"""
Reusable item clean queue.

Tracks, per reusable supply, how many units came back dirty from archived
runs. A run contributes at most once: the gate on the run is checked and
stamped in the same transaction as the pending increments, so repeated
archive calls and backfill scans cannot double count.
"""

import math
from dataclasses import dataclass, field

from growledger.config import get_logger
from growledger.core.entities.audit import AuditAction
from growledger.core.entities.base import utcnow
from growledger.core.entities.clean_queue import CleanQueueEntry
from growledger.core.entities.recipe import Recipe
from growledger.core.entities.run import CleanGate, Run
from growledger.core.entities.supply import Supply
from growledger.core.exceptions import (
    InvalidAmountError,
    ReturnExceedsPendingError,
    RunNotFoundError,
    SupplyNotFoundError,
)
from growledger.core.interfaces.clean_queue_store import ICleanQueueStore
from growledger.core.interfaces.run_store import IRunStore
from growledger.core.interfaces.transaction import (
    Collection,
    DocumentRef,
    ITransaction,
    ITransactionRunner,
)
from growledger.core.services.audit_trail import AuditTrail
from growledger.core.services.reusable_detection import is_countish, is_reusable
from growledger.core.services.supply_ledger import SupplyLedger, supply_ref

logger = get_logger(__name__)


def queue_ref(supply_id: str) -> DocumentRef:
    return DocumentRef(Collection.CLEAN_QUEUE, supply_id)


def run_ref(run_id: str) -> DocumentRef:
    return DocumentRef(Collection.RUNS, run_id)


def recipe_ref(recipe_id: str) -> DocumentRef:
    return DocumentRef(Collection.RECIPES, recipe_id)


def enqueue_quantity(per_child: float | None, batches: int) -> int:
    """Units handed out for a batch, rounded half up; one per child by default."""
    if per_child is None or not math.isfinite(per_child):
        return max(0, batches)
    return max(0, math.floor(per_child * batches + 0.5))


@dataclass
class EnqueueResult:
    """Outcome of enqueueing one run."""

    run_id: str
    enqueued: int = 0
    stamped: bool = False
    reason: str | None = None
    supplies: dict[str, int] = field(default_factory=dict)


@dataclass
class CleanReturnResult:
    """Outcome of an operator clean return."""

    supply_id: str
    pending_before: int
    returned: int
    destroyed: int
    quantity_after: float | None


@dataclass
class BackfillReport:
    """Breakdown of a backfill scan."""

    scanned: int = 0
    archived: int = 0
    not_archived: int = 0
    skipped_already_queued: int = 0
    no_recipe: int = 0
    recipe_missing: int = 0
    skipped_not_reusable: int = 0
    skipped_not_countish: int = 0
    qty_zero: int = 0
    enqueued_count: int = 0
    affected_runs: int = 0
    run_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "archived": self.archived,
            "not_archived": self.not_archived,
            "skipped_already_queued": self.skipped_already_queued,
            "no_recipe": self.no_recipe,
            "recipe_missing": self.recipe_missing,
            "skipped_not_reusable": self.skipped_not_reusable,
            "skipped_not_countish": self.skipped_not_countish,
            "qty_zero": self.qty_zero,
            "enqueued_count": self.enqueued_count,
            "affected_runs": self.affected_runs,
            "run_ids": list(self.run_ids),
        }


@dataclass
class _LineDiagnostics:
    skipped_not_reusable: int = 0
    skipped_not_countish: int = 0
    qty_zero: int = 0
    supply_missing: int = 0


class CleanQueueService:
    """
    Per-supply pending-return counters for containers and tools.

    Lifecycle of a run's contribution:
    - ungated/reset: archived run may be enqueued
    - enqueued: pending counters incremented, gate stamped, never again
    - operator clean_return drains a supply's pending count, crediting the
      returned units and recording the remainder as destroyed
    """

    def __init__(
        self,
        runner: ITransactionRunner,
        ledger: SupplyLedger,
        audit_trail: AuditTrail,
        run_store: IRunStore,
        queue_store: ICleanQueueStore,
        use_name_heuristic: bool = True,
        backfill_limit: int = 2000,
    ) -> None:
        self._runner = runner
        self._ledger = ledger
        self._audit = audit_trail
        self._run_store = run_store
        self._queue_store = queue_store
        self._use_name_heuristic = use_name_heuristic
        self._backfill_limit = backfill_limit

    # ------------------------------------------------------------------
    # Enqueue
    # ------------------------------------------------------------------

    async def _enqueue_lines(
        self,
        tx: ITransaction,
        run: Run,
        recipe: Recipe,
        diag: _LineDiagnostics,
    ) -> dict[str, int]:
        """Increment pending for each reusable, count-unit line of the recipe."""
        batches = max(1, run.batch.batch_count)
        added: dict[str, int] = {}

        for line in recipe.lines:
            if not line.supply_id:
                continue
            supply = await tx.get_model(supply_ref(line.supply_id), Supply)
            if supply is None or supply.deleted:
                diag.supply_missing += 1
                continue
            if not is_reusable(supply, self._use_name_heuristic):
                diag.skipped_not_reusable += 1
                continue
            if not is_countish(supply, self._use_name_heuristic):
                diag.skipped_not_countish += 1
                continue

            qty = enqueue_quantity(line.per_child, batches)
            if qty <= 0:
                diag.qty_zero += 1
                continue

            ref = queue_ref(line.supply_id)
            entry = await tx.get_model(ref, CleanQueueEntry) or CleanQueueEntry(
                id=line.supply_id
            )
            entry = entry.incremented(qty, run_id=run.id).model_copy(
                update={"name": supply.name, "unit": supply.unit or "count"}
            )
            tx.set_model(ref, entry)
            added[line.supply_id] = added.get(line.supply_id, 0) + qty

        return added

    async def _enqueue_in_tx(
        self, tx: ITransaction, run_id: str, diag: _LineDiagnostics
    ) -> EnqueueResult:
        run = await tx.get_model(run_ref(run_id), Run)
        if run is None:
            raise RunNotFoundError(run_id)

        # Gate first: nothing else is evaluated for an already enqueued run
        if run.clean_gate is CleanGate.ENQUEUED:
            return EnqueueResult(run_id, stamped=True, reason="already_queued")
        if not run.is_archived:
            return EnqueueResult(run_id, reason="not_archived")
        if not run.recipe_id:
            return EnqueueResult(run_id, reason="no_recipe")

        recipe = await tx.get_model(recipe_ref(run.recipe_id), Recipe)
        if recipe is None:
            return EnqueueResult(run_id, reason="recipe_missing")

        added = await self._enqueue_lines(tx, run, recipe, diag)
        total = sum(added.values())
        if total <= 0:
            return EnqueueResult(run_id, reason="nothing_reusable")

        now = utcnow()
        tx.set_model(
            run_ref(run_id),
            run.model_copy(
                update={
                    "clean_gate": CleanGate.ENQUEUED,
                    "clean_queued_at": now,
                    "updated_at": now,
                }
            ),
        )
        return EnqueueResult(run_id, enqueued=total, stamped=True, supplies=added)

    async def enqueue_for_run(self, run_id: str) -> EnqueueResult:
        """
        Enqueue an archived run's reusable items exactly once.

        Returns:
            EnqueueResult; ``enqueued`` is zero when the run was already
            gated, not archived, or has nothing reusable.
        """

        async def _enqueue(tx: ITransaction) -> EnqueueResult:
            return await self._enqueue_in_tx(tx, run_id, _LineDiagnostics())

        result = await self._runner.run(_enqueue, operation="enqueue_for_run")
        logger.info(
            "clean_queue_enqueued",
            run_id=run_id,
            enqueued=result.enqueued,
            stamped=result.stamped,
            reason=result.reason,
        )
        return result

    # ------------------------------------------------------------------
    # Operator return
    # ------------------------------------------------------------------

    async def clean_return(self, supply_id: str, returned_qty: int) -> CleanReturnResult:
        """
        Drain a supply's pending count.

        ``returned_qty`` units go back into stock; the rest of the pending
        units are recorded as destroyed. Credit, drain and audit records are
        committed in one transaction.
        """
        if isinstance(returned_qty, bool) or returned_qty < 0 or int(returned_qty) != returned_qty:
            raise InvalidAmountError("returned_qty", returned_qty, "must be a whole number >= 0")
        returned_qty = int(returned_qty)

        async def _return(tx: ITransaction) -> CleanReturnResult:
            supply = await tx.get_model(supply_ref(supply_id), Supply)
            if supply is None or supply.deleted:
                raise SupplyNotFoundError(supply_id)

            ref = queue_ref(supply_id)
            entry = await tx.get_model(ref, CleanQueueEntry)
            pending = entry.pending if entry is not None else 0
            if returned_qty > pending:
                raise ReturnExceedsPendingError(supply_id, returned_qty, pending)

            destroyed = pending - returned_qty
            quantity_after: float | None = supply.quantity

            if returned_qty > 0:
                credited = await self._ledger.apply_credit(
                    tx,
                    supply,
                    float(returned_qty),
                    AuditAction.CLEAN_RETURN,
                    note="cleaned and returned",
                )
                quantity_after = credited.quantity

            if entry is not None and pending > 0:
                tx.set_model(ref, entry.decremented(pending))

            if destroyed > 0:
                self._audit.record(
                    tx,
                    supply_id=supply_id,
                    action=AuditAction.CLEAN_DESTROYED,
                    amount=float(destroyed),
                    unit=supply.unit,
                    note="not returned from cleaning",
                    balance_after=quantity_after,
                )

            return CleanReturnResult(
                supply_id=supply_id,
                pending_before=pending,
                returned=returned_qty,
                destroyed=destroyed,
                quantity_after=quantity_after,
            )

        result = await self._runner.run(_return, operation="clean_return")
        logger.info(
            "clean_return_applied",
            supply_id=supply_id,
            pending_before=result.pending_before,
            returned=result.returned,
            destroyed=result.destroyed,
        )
        return result

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def _backfill_one(self, run_id: str):
        # Diagnostics are per attempt; retries start from zero
        async def _enqueue(tx: ITransaction) -> tuple[EnqueueResult, _LineDiagnostics]:
            diag = _LineDiagnostics()
            result = await self._enqueue_in_tx(tx, run_id, diag)
            return result, diag

        return _enqueue

    async def scan_backfill(self, limit: int | None = None) -> BackfillReport:
        """
        Enqueue archived runs the archive path missed.

        Each run is handled in its own transaction and re-checks the gate, so
        an interrupted scan can simply be started again.
        """
        report = BackfillReport()
        runs = await self._run_store.list_runs(limit=limit or self._backfill_limit)

        for listed in runs:
            report.scanned += 1
            if not listed.is_archived:
                report.not_archived += 1
                continue
            report.archived += 1
            if listed.clean_gate is CleanGate.ENQUEUED:
                report.skipped_already_queued += 1
                continue

            result, diag = await self._runner.run(
                self._backfill_one(listed.id), operation="scan_backfill"  # type: ignore[arg-type]
            )

            if result.reason == "already_queued":
                report.skipped_already_queued += 1
            elif result.reason == "no_recipe":
                report.no_recipe += 1
            elif result.reason == "recipe_missing":
                report.recipe_missing += 1

            report.skipped_not_reusable += diag.skipped_not_reusable
            report.skipped_not_countish += diag.skipped_not_countish
            report.qty_zero += diag.qty_zero

            if result.enqueued > 0:
                report.enqueued_count += result.enqueued
                report.affected_runs += 1
                report.run_ids.append(result.run_id)

        logger.info("clean_queue_scan_breakdown", **report.to_dict())
        return report

    async def reset_clean_gate(self, run_id: str) -> Run:
        """Operator override: make an enqueued run eligible for enqueue again."""

        async def _reset(tx: ITransaction) -> Run:
            run = await tx.get_model(run_ref(run_id), Run)
            if run is None:
                raise RunNotFoundError(run_id)
            if run.clean_gate is not CleanGate.ENQUEUED:
                return run
            updated = run.model_copy(
                update={"clean_gate": CleanGate.RESET, "updated_at": utcnow()}
            )
            tx.set_model(run_ref(run_id), updated)
            return updated

        run = await self._runner.run(_reset, operation="reset_clean_gate")
        logger.info("clean_gate_reset", run_id=run_id, gate=run.clean_gate.value)
        return run

    async def list_pending(self) -> list[CleanQueueEntry]:
        return await self._queue_store.list_entries(pending_only=True)

    async def get_entry(self, supply_id: str) -> CleanQueueEntry | None:
        return await self._queue_store.get(supply_id)

"""
Supply ledger service.

Owns every mutation of a supply's quantity and locked unit cost. Each public
operation is one transactional read-modify-write of a single supply document
plus its audit record. The ``apply_*`` methods do the same work inside a
caller's transaction so the clean queue can compose them atomically.
"""

import math
from dataclasses import dataclass
from uuid import uuid4

from growledger.config import get_logger
from growledger.core.entities.audit import AuditAction
from growledger.core.entities.base import utcnow
from growledger.core.entities.supply import StockStatus, Supply, SupplyCategory
from growledger.core.exceptions import InvalidAmountError, SupplyNotFoundError, ValidationError
from growledger.core.interfaces.supply_store import ISupplyStore
from growledger.core.interfaces.transaction import (
    Collection,
    DocumentRef,
    ITransaction,
    ITransactionRunner,
)
from growledger.core.services import units
from growledger.core.services.audit_trail import AuditTrail, replay_quantity

logger = get_logger(__name__)

# Tolerance for the audit replay consistency check
REPLAY_TOLERANCE = 1e-6


@dataclass
class LedgerContext:
    """What caused a consume/refund: the recipe and run it belongs to."""

    recipe_id: str | None = None
    recipe_name: str | None = None
    run_id: str | None = None
    note: str = ""


@dataclass
class SupplyVerification:
    """Stored quantity versus the quantity implied by the audit stream."""

    supply_id: str
    stored_quantity: float
    replayed_quantity: float
    events: int

    @property
    def consistent(self) -> bool:
        return abs(self.stored_quantity - self.replayed_quantity) <= REPLAY_TOLERANCE


def supply_ref(supply_id: str) -> DocumentRef:
    return DocumentRef(Collection.SUPPLIES, supply_id)


def _check_finite(field: str, value: float) -> None:
    if value is None or not math.isfinite(value):
        raise InvalidAmountError(field, value, "must be a finite number")


class SupplyLedger:
    """
    Ledger of supply quantities and locked costs.

    Consumption always applies the unit cost locked on the supply at the
    time of the operation; only ``reprice`` changes that lock.
    """

    def __init__(
        self,
        runner: ITransactionRunner,
        supply_store: ISupplyStore,
        audit_trail: AuditTrail,
        strict_units: bool = False,
    ) -> None:
        self._runner = runner
        self._supply_store = supply_store
        self._audit = audit_trail
        self._strict_units = strict_units

    # ------------------------------------------------------------------
    # Transaction-scoped primitives
    # ------------------------------------------------------------------

    async def _require(self, tx: ITransaction, supply_id: str) -> Supply:
        supply = await tx.get_model(supply_ref(supply_id), Supply)
        if supply is None or supply.deleted:
            raise SupplyNotFoundError(supply_id)
        return supply

    def _to_stock_unit(self, amount: float, unit: str | None, supply: Supply) -> float:
        if not unit:
            return amount
        return units.convert(amount, unit, supply.unit, strict=self._strict_units)

    async def apply_consume(
        self,
        tx: ITransaction,
        supply_id: str,
        amount: float,
        unit: str | None = None,
        context: LedgerContext | None = None,
    ) -> Supply | None:
        """Debit a supply inside ``tx``. Missing or deleted supplies are a no-op."""
        _check_finite("amount", amount)
        if amount < 0:
            raise InvalidAmountError("amount", amount, "must be >= 0")
        if amount == 0:
            return None

        supply = await tx.get_model(supply_ref(supply_id), Supply)
        if supply is None or supply.deleted:
            logger.info("consume_skipped_missing_supply", supply_id=supply_id)
            return None

        ctx = context or LedgerContext()
        debit = self._to_stock_unit(amount, unit, supply)
        locked_cost = supply.unit_cost
        updated = supply.model_copy(
            update={"quantity": max(0.0, supply.quantity - debit), "updated_at": utcnow()}
        )
        tx.set_model(supply_ref(supply_id), updated)

        self._audit.record(
            tx,
            supply_id=supply_id,
            action=AuditAction.CONSUME,
            amount=debit,
            unit=supply.unit,
            unit_cost_applied=locked_cost,
            recipe_id=ctx.recipe_id,
            recipe_name=ctx.recipe_name,
            run_id=ctx.run_id,
            note=ctx.note,
            balance_after=updated.quantity,
        )
        if updated.quantity == 0 and debit > supply.quantity:
            logger.warning(
                "consume_clamped_at_zero",
                supply_id=supply_id,
                requested=debit,
                available=supply.quantity,
            )
        return updated

    async def apply_refund(
        self,
        tx: ITransaction,
        supply_id: str,
        amount: float,
        unit: str | None = None,
        context: LedgerContext | None = None,
    ) -> Supply | None:
        """Credit back a previous consumption inside ``tx``."""
        _check_finite("amount", amount)
        if amount < 0:
            raise InvalidAmountError("amount", amount, "must be >= 0")
        if amount == 0:
            return None

        supply = await tx.get_model(supply_ref(supply_id), Supply)
        if supply is None or supply.deleted:
            logger.info("refund_skipped_missing_supply", supply_id=supply_id)
            return None

        ctx = context or LedgerContext()
        credit = self._to_stock_unit(amount, unit, supply)
        updated = supply.model_copy(
            update={"quantity": supply.quantity + credit, "updated_at": utcnow()}
        )
        tx.set_model(supply_ref(supply_id), updated)

        self._audit.record(
            tx,
            supply_id=supply_id,
            action=AuditAction.RECONCILE_REFUND,
            amount=credit,
            unit=supply.unit,
            unit_cost_applied=supply.unit_cost,
            recipe_id=ctx.recipe_id,
            recipe_name=ctx.recipe_name,
            run_id=ctx.run_id,
            note=ctx.note,
            balance_after=updated.quantity,
        )
        return updated

    async def apply_credit(
        self,
        tx: ITransaction,
        supply: Supply,
        amount: float,
        action: AuditAction,
        run_id: str | None = None,
        note: str = "",
    ) -> Supply:
        """Add stock to an already-loaded supply (restock, clean return)."""
        updated = supply.model_copy(
            update={"quantity": supply.quantity + amount, "updated_at": utcnow()}
        )
        tx.set_model(supply_ref(supply.id), updated)  # type: ignore[arg-type]
        self._audit.record(
            tx,
            supply_id=supply.id,  # type: ignore[arg-type]
            action=action,
            amount=amount,
            unit=supply.unit,
            unit_cost_applied=supply.unit_cost,
            run_id=run_id,
            note=note,
            balance_after=updated.quantity,
        )
        return updated

    # ------------------------------------------------------------------
    # Operator operations
    # ------------------------------------------------------------------

    async def add_supply(
        self,
        name: str,
        category: SupplyCategory | str | None = None,
        unit: str = "",
        quantity: float = 0.0,
        unit_cost: float | None = None,
        purchase_total: float | None = None,
        low_stock_threshold: float = 0.0,
        reorder_link: str = "",
    ) -> Supply:
        """
        Create a supply from its first purchase entry.

        The locked unit cost is ``unit_cost`` when given, otherwise derived
        from ``purchase_total`` over ``quantity``.
        """
        if not name or not name.strip():
            raise ValidationError("name", "must not be empty", name)
        _check_finite("quantity", quantity)
        if quantity < 0:
            raise InvalidAmountError("quantity", quantity, "must be >= 0")

        if unit_cost is None:
            unit_cost = (
                Supply.derive_unit_cost(purchase_total, quantity)
                if purchase_total is not None
                else 0.0
            )
        _check_finite("unit_cost", unit_cost)
        if unit_cost < 0:
            raise InvalidAmountError("unit_cost", unit_cost, "must be >= 0")

        supply = Supply(
            id=uuid4().hex,
            name=name.strip(),
            category=category,
            unit=units.canonicalize(unit),
            quantity=quantity,
            unit_cost=unit_cost,
            last_purchase_total=purchase_total,
            last_purchase_quantity=quantity if purchase_total is not None else None,
            low_stock_threshold=low_stock_threshold,
            reorder_link=reorder_link,
        )

        async def _add(tx: ITransaction) -> Supply:
            tx.set_model(supply_ref(supply.id), supply)  # type: ignore[arg-type]
            self._audit.record(
                tx,
                supply_id=supply.id,  # type: ignore[arg-type]
                action=AuditAction.ADD,
                amount=supply.quantity,
                unit=supply.unit,
                unit_cost_applied=supply.unit_cost,
                note="initial purchase",
                balance_after=supply.quantity,
            )
            return supply

        created = await self._runner.run(_add, operation="add_supply")
        logger.info(
            "supply_added",
            supply_id=created.id,
            name=created.name,
            quantity=created.quantity,
            unit_cost=created.unit_cost,
        )
        return created

    async def restock(self, supply_id: str, amount: float, note: str = "") -> Supply:
        """Add purchased stock. Amount must be positive."""
        _check_finite("amount", amount)
        if amount <= 0:
            raise InvalidAmountError("amount", amount)

        async def _restock(tx: ITransaction) -> Supply:
            supply = await self._require(tx, supply_id)
            return await self.apply_credit(
                tx, supply, amount, AuditAction.RESTOCK, note=note
            )

        updated = await self._runner.run(_restock, operation="restock")
        logger.info("supply_restocked", supply_id=supply_id, amount=amount, quantity=updated.quantity)
        return updated

    async def consume(
        self,
        supply_id: str,
        amount: float,
        unit: str | None = None,
        context: LedgerContext | None = None,
    ) -> Supply | None:
        """Debit stock, clamping at zero. Returns None when nothing changed."""

        async def _consume(tx: ITransaction) -> Supply | None:
            return await self.apply_consume(tx, supply_id, amount, unit=unit, context=context)

        updated = await self._runner.run(_consume, operation="consume")
        if updated is not None:
            logger.info(
                "supply_consumed",
                supply_id=supply_id,
                amount=amount,
                unit=unit,
                run_id=context.run_id if context else None,
                quantity=updated.quantity,
            )
        return updated

    async def refund(
        self,
        supply_id: str,
        amount: float,
        unit: str | None = None,
        context: LedgerContext | None = None,
    ) -> Supply | None:
        """Inverse of consume; only used by reconciliation."""

        async def _refund(tx: ITransaction) -> Supply | None:
            return await self.apply_refund(tx, supply_id, amount, unit=unit, context=context)

        updated = await self._runner.run(_refund, operation="refund")
        if updated is not None:
            logger.info(
                "supply_refunded",
                supply_id=supply_id,
                amount=amount,
                unit=unit,
                run_id=context.run_id if context else None,
                quantity=updated.quantity,
            )
        return updated

    async def reprice(
        self, supply_id: str, total_price: float, purchased_quantity: float
    ) -> Supply:
        """Re-derive the locked unit cost from a new purchase (total, quantity)."""
        _check_finite("total_price", total_price)
        _check_finite("purchased_quantity", purchased_quantity)
        if total_price < 0:
            raise InvalidAmountError("total_price", total_price, "must be >= 0")
        if purchased_quantity < 0:
            raise InvalidAmountError("purchased_quantity", purchased_quantity, "must be >= 0")

        new_cost = Supply.derive_unit_cost(total_price, purchased_quantity)

        async def _reprice(tx: ITransaction) -> Supply:
            supply = await self._require(tx, supply_id)
            updated = supply.model_copy(
                update={
                    "unit_cost": new_cost,
                    "last_purchase_total": total_price,
                    "last_purchase_quantity": purchased_quantity,
                    "updated_at": utcnow(),
                }
            )
            tx.set_model(supply_ref(supply_id), updated)
            self._audit.record(
                tx,
                supply_id=supply_id,
                action=AuditAction.EDIT,
                amount=0.0,
                unit=supply.unit,
                unit_cost_applied=new_cost,
                note=f"reprice from {supply.unit_cost:g}",
                balance_after=updated.quantity,
            )
            return updated

        updated = await self._runner.run(_reprice, operation="reprice")
        logger.info("supply_repriced", supply_id=supply_id, unit_cost=new_cost)
        return updated

    async def edit(
        self,
        supply_id: str,
        name: str | None = None,
        category: SupplyCategory | str | None = None,
        unit: str | None = None,
        quantity: float | None = None,
        low_stock_threshold: float | None = None,
        reorder_link: str | None = None,
    ) -> Supply:
        """Inline edit of descriptive fields and a quantity recount. Never touches cost."""
        if name is not None and not name.strip():
            raise ValidationError("name", "must not be empty", name)
        if quantity is not None:
            _check_finite("quantity", quantity)
            if quantity < 0:
                raise InvalidAmountError("quantity", quantity, "must be >= 0")
        if low_stock_threshold is not None and low_stock_threshold < 0:
            raise InvalidAmountError("low_stock_threshold", low_stock_threshold, "must be >= 0")

        changes: dict = {}
        if name is not None:
            changes["name"] = name.strip()
        if unit is not None:
            changes["unit"] = units.canonicalize(unit)
        if quantity is not None:
            changes["quantity"] = quantity
        if low_stock_threshold is not None:
            changes["low_stock_threshold"] = low_stock_threshold
        if reorder_link is not None:
            changes["reorder_link"] = reorder_link

        async def _edit(tx: ITransaction) -> Supply:
            supply = await self._require(tx, supply_id)
            data = supply.model_dump()
            data.update(changes)
            if category is not None:
                data["category"] = category
            data["updated_at"] = utcnow()
            # Validate through the model so category spellings get normalised
            updated = Supply.model_validate(data)
            tx.set_model(supply_ref(supply_id), updated)
            self._audit.record(
                tx,
                supply_id=supply_id,
                action=AuditAction.EDIT,
                amount=updated.quantity - supply.quantity,
                unit=updated.unit,
                note="edit",
                balance_after=updated.quantity,
            )
            return updated

        updated = await self._runner.run(_edit, operation="edit_supply")
        logger.info("supply_edited", supply_id=supply_id, fields=sorted(changes))
        return updated

    async def delete(self, supply_id: str) -> Supply:
        """Soft delete: hide from active listings, keep the audit trail."""

        async def _delete(tx: ITransaction) -> Supply:
            supply = await self._require(tx, supply_id)
            now = utcnow()
            updated = supply.model_copy(
                update={"deleted": True, "deleted_at": now, "updated_at": now}
            )
            tx.set_model(supply_ref(supply_id), updated)
            self._audit.record(
                tx,
                supply_id=supply_id,
                action=AuditAction.DELETE,
                amount=supply.quantity,
                unit=supply.unit,
                note="deleted",
                balance_after=supply.quantity,
            )
            return updated

        updated = await self._runner.run(_delete, operation="delete_supply")
        logger.info("supply_deleted", supply_id=supply_id)
        return updated

    # ------------------------------------------------------------------
    # Read projections
    # ------------------------------------------------------------------

    async def get_supply(self, supply_id: str) -> Supply:
        supply = await self._supply_store.get(supply_id)
        if supply is None:
            raise SupplyNotFoundError(supply_id)
        return supply

    async def list_supplies(self, include_deleted: bool = False) -> list[Supply]:
        return await self._supply_store.list_supplies(include_deleted=include_deleted)

    async def low_stock(self) -> list[Supply]:
        supplies = await self._supply_store.list_supplies()
        return [s for s in supplies if s.stock_status is StockStatus.LOW]

    async def empty_stock(self) -> list[Supply]:
        supplies = await self._supply_store.list_supplies()
        return [s for s in supplies if s.stock_status is StockStatus.EMPTY]

    async def verify_supply(self, supply_id: str) -> SupplyVerification:
        """Replay the audit stream and compare it with the stored quantity."""
        supply = await self.get_supply(supply_id)
        records = await self._audit.history(supply_id)
        result = SupplyVerification(
            supply_id=supply_id,
            stored_quantity=supply.quantity,
            replayed_quantity=replay_quantity(records),
            events=len(records),
        )
        if not result.consistent:
            logger.warning(
                "supply_replay_mismatch",
                supply_id=supply_id,
                stored=result.stored_quantity,
                replayed=result.replayed_quantity,
            )
        return result

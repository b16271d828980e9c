"""Tests for AuditTrail and audit replay."""

from datetime import datetime, timedelta

from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.interfaces import Collection
from growledger.core.services.audit_trail import AuditTrail, replay_quantity

T0 = datetime(2026, 1, 1, 12, 0, 0)


def _record(action: AuditAction, amount: float, balance_after: float | None = None, minutes: int = 0):
    return AuditRecord(
        id=f"{action.value}-{minutes}",
        supply_id="s1",
        action=action,
        amount=amount,
        balance_after=balance_after,
        timestamp=T0 + timedelta(minutes=minutes),
    )


class TestReplayQuantity:
    def test_empty_stream(self):
        assert replay_quantity([]) == 0

    def test_full_lifecycle(self):
        records = [
            _record(AuditAction.ADD, 10),
            _record(AuditAction.CONSUME, 4),
            _record(AuditAction.RESTOCK, 6),
            _record(AuditAction.RECONCILE_REFUND, 1),
            _record(AuditAction.CLEAN_RETURN, 2),
            _record(AuditAction.CLEAN_DESTROYED, 3),
            _record(AuditAction.DELETE, 15),
        ]
        assert replay_quantity(records) == 15

    def test_consume_clamps(self):
        records = [_record(AuditAction.ADD, 2), _record(AuditAction.CONSUME, 5)]
        assert replay_quantity(records) == 0

    def test_edit_resets_to_balance(self):
        records = [
            _record(AuditAction.ADD, 10),
            _record(AuditAction.EDIT, -3, balance_after=7),
            _record(AuditAction.CONSUME, 2),
        ]
        assert replay_quantity(records) == 5


class TestAuditTrail:
    async def test_record_is_written_through_transaction(self, runner, audit_trail):
        async def _write(tx):
            return audit_trail.record(
                tx,
                supply_id="s1",
                action=AuditAction.CONSUME,
                amount=3,
                unit="count",
                unit_cost_applied=2.0,
                run_id="run-1",
                balance_after=7,
            )

        record = await runner.run(_write)
        stored = runner.load(Collection.AUDIT_RECORDS, record.id, AuditRecord)
        assert stored.total_cost_applied == 6.0
        assert stored.run_id == "run-1"

    async def test_uncommitted_record_is_discarded(self, runner, audit_trail):
        async def _fail(tx):
            audit_trail.record(tx, supply_id="s1", action=AuditAction.RESTOCK, amount=1)
            raise RuntimeError("boom")

        try:
            await runner.run(_fail)
        except RuntimeError:
            pass
        assert await audit_trail.history("s1") == []

    async def test_recent_for_supply_newest_first(self, runner, audit_trail):
        for minute in range(7):
            runner.put(
                Collection.AUDIT_RECORDS,
                _record(AuditAction.RESTOCK, minute + 1, minutes=minute),
            )

        recent = await audit_trail.recent_for_supply("s1")
        assert [r.amount for r in recent] == [7, 6, 5, 4, 3]
        assert len(await audit_trail.recent_for_supply("s1", limit=2)) == 2
        assert await audit_trail.recent_for_supply("s1", limit=0) == []

    async def test_consumption_rows_filter(self, runner, audit_trail):
        runner.put(Collection.AUDIT_RECORDS, _record(AuditAction.ADD, 10, minutes=0))
        runner.put(Collection.AUDIT_RECORDS, _record(AuditAction.CONSUME, 2, minutes=1))

        rows = await audit_trail.consumption_rows()
        assert [r.action for r in rows] == [AuditAction.CONSUME]
        assert len(await audit_trail.list_records()) == 2

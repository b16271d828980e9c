"""Tests for run entities."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from growledger.core.entities.run import BatchParams, CleanGate, Run


class TestBatchParams:
    def test_defaults(self):
        batch = BatchParams()
        assert batch.batch_count == 1
        assert batch.per_child_qty is None

    def test_batch_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            BatchParams(batch_count=0)


class TestRun:
    def test_defaults(self):
        run = Run()
        assert run.clean_gate is CleanGate.UNGATED
        assert not run.is_archived
        assert not run.clean_queued

    def test_archived_flag(self):
        assert Run(archived=True).is_archived

    def test_archived_timestamp(self):
        assert Run(archived_at=datetime(2026, 3, 1)).is_archived

    @pytest.mark.parametrize("stage", ["Harvested", "contaminated", " archived "])
    def test_archived_stage(self, stage):
        assert Run(stage=stage).is_archived

    def test_archived_status(self):
        assert Run(stage="fruiting", status="finished").is_archived

    def test_active_stage(self):
        assert not Run(stage="colonizing").is_archived

    def test_clean_queued(self):
        assert Run(clean_gate=CleanGate.ENQUEUED).clean_queued
        assert not Run(clean_gate=CleanGate.RESET).clean_queued

"""Tests for the clean queue use cases."""

from unittest.mock import AsyncMock

import pytest

from growledger.application.dto.requests import BackfillRequest, CleanReturnRequest
from growledger.application.use_cases import ReturnCleanedItemsUseCase, ScanCleanBackfillUseCase
from growledger.core.services.clean_queue import BackfillReport, CleanReturnResult


@pytest.fixture
def mock_clean_queue():
    service = AsyncMock()
    service.clean_return.return_value = CleanReturnResult(
        supply_id="jar", pending_before=4, returned=3, destroyed=1, quantity_after=8
    )
    service.scan_backfill.return_value = BackfillReport(
        scanned=3, archived=2, enqueued_count=4, affected_runs=1, run_ids=["r1"]
    )
    return service


class TestReturnCleanedItemsUseCase:
    async def test_delegates_to_clean_queue(self, mock_clean_queue):
        use_case = ReturnCleanedItemsUseCase(clean_queue=mock_clean_queue)
        result = await use_case.execute(CleanReturnRequest(supply_id="jar", returned_qty=3))

        mock_clean_queue.clean_return.assert_awaited_once_with("jar", 3)
        response = use_case.to_response(result)
        assert response.destroyed == 1
        assert response.quantity_after == 8


class TestScanCleanBackfillUseCase:
    async def test_passes_limit(self, mock_clean_queue):
        use_case = ScanCleanBackfillUseCase(clean_queue=mock_clean_queue)
        report = await use_case.execute(BackfillRequest(limit=50))

        mock_clean_queue.scan_backfill.assert_awaited_once_with(limit=50)
        response = use_case.to_response(report)
        assert response.enqueued_count == 4
        assert response.run_ids == ["r1"]
        assert response.qty_zero == 0

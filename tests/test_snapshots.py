from unittest.mock import AsyncMock

import pytest

from helpers import days_ago, report_doc
from stockreport.errors import StoreUnavailableError
from stockreport.schemas import ReportType
from stockreport.snapshots import SnapshotIndex


class TestPreviousCountFor:
    @pytest.mark.asyncio
    async def test_no_prior_report_gives_zero(self, store):
        index = SnapshotIndex(store)

        for report_type in ReportType:
            assert await index.previous_count_for(report_type, "a") == 0

    @pytest.mark.asyncio
    async def test_reads_count_from_latest_report_of_same_type(self, store):
        store.load("reports", "r1", report_doc("inventory", {"a": 4}, days_ago(3)))
        store.load("reports", "r2", report_doc("inventory", {"a": 9}, days_ago(1)))
        store.load("reports", "t1", report_doc("tested", {"a": 2}, days_ago(0)))

        index = SnapshotIndex(store)

        assert await index.previous_count_for(ReportType.INVENTORY, "a") == 9
        assert await index.previous_count_for(ReportType.TESTED, "a") == 2

    @pytest.mark.asyncio
    async def test_product_absent_from_latest_report_gives_zero(self, store):
        store.load("reports", "r1", report_doc("inventory", {"a": 4, "b": 6}, days_ago(3)))
        store.load("reports", "r2", report_doc("inventory", {"a": 5}, days_ago(1)))

        index = SnapshotIndex(store)

        assert await index.previous_count_for(ReportType.INVENTORY, "b") == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_not_turned_into_zero(self, store):
        store.query = AsyncMock(side_effect=StoreUnavailableError("offline"))
        index = SnapshotIndex(store)

        with pytest.raises(StoreUnavailableError):
            await index.previous_count_for(ReportType.INVENTORY, "a")


class TestLatestReport:
    @pytest.mark.asyncio
    async def test_returns_none_without_reports(self, store):
        assert await SnapshotIndex(store).latest_report(ReportType.DELIVERY) is None

    @pytest.mark.asyncio
    async def test_returns_newest_by_created_at(self, store):
        store.load("reports", "old", report_doc("tested", {"a": 1}, days_ago(10)))
        store.load("reports", "new", report_doc("tested", {"a": 2}, days_ago(2)))

        report = await SnapshotIndex(store).latest_report(ReportType.TESTED)

        assert report.id == "new"
        assert report.find_item("a").current_count == 2

    @pytest.mark.asyncio
    async def test_accepts_type_name(self, store):
        store.load("reports", "inv", report_doc("inventory", {"a": 7}, days_ago(1)))
        index = SnapshotIndex(store)

        assert (await index.latest_report("inventory")).id == "inv"
        assert await index.previous_count_for("inventory", "a") == 7

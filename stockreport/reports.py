"""Listing, watching and deleting persisted reports."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from . import settings
from .errors import NotFoundError
from .schemas import Report, ReportType
from .stores import Document, DocumentStore, Query, Subscription
from .utils import same_day

logger = logging.getLogger(__name__)

ReportsCallback = Callable[[list[Report]], Any]


class ReportRepository:
    def __init__(self, store: DocumentStore, collection: str = settings.REPORTS_COLLECTION):
        self.store = store
        self.collection = collection

    def _by_type(self, report_type: ReportType | None = None) -> Query:
        query = Query(self.collection, order_by="createdAt", descending=True)
        if report_type is not None:
            query = query.where("type", ReportType(report_type).value)
        return query

    @staticmethod
    def _reports(rows: list[Document], on_day: date | None = None) -> list[Report]:
        if on_day is not None:
            rows = [row for row in rows if same_day(row.get("createdAt"), on_day)]
        return [Report.from_document(row) for row in rows]

    async def get(self, report_id: str) -> Report:
        doc = await self.store.get(self.collection, report_id)
        if doc is None:
            raise NotFoundError(self.collection, report_id)
        return Report.from_document(doc)

    async def list(self, report_type: ReportType | str, on_day: date | None = None) -> list[Report]:
        """Reports of one type, newest first, optionally only those created on `on_day`."""
        rows = await self.store.query(self._by_type(ReportType(report_type)))
        return self._reports(rows, on_day)

    async def recent(self, limit: int = settings.RECENT_LIMIT) -> list[Report]:
        query = Query(self.collection, order_by="createdAt", descending=True, limit=limit)
        return self._reports(await self.store.query(query))

    async def delete(self, report_id: str) -> None:
        """
        Operator delete. History entries pointing at the report stay as they are;
        their reportId simply no longer resolves.
        """
        await self.store.delete(self.collection, report_id)
        logger.info(f"🗑️ Report {report_id} deleted.")

    async def watch(
        self,
        report_type: ReportType | str,
        callback: ReportsCallback,
        on_day: date | None = None,
    ) -> Subscription:
        """
        Live list of one report type. `callback` gets the full, filtered list
        right away and again every time it changes. Close the returned
        subscription to stop.
        """

        async def deliver(rows: list[Document]) -> None:
            result = callback(self._reports(rows, on_day))
            if inspect.isawaitable(result):
                await result

        return await self.store.subscribe(self._by_type(ReportType(report_type)), deliver)

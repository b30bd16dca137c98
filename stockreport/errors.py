"""Exceptions shared across the reconciliation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import ReportItem


class StockReportError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(StockReportError):
    """Input refused before anything was written."""


class NotFoundError(StockReportError):
    """A referenced document no longer exists in the store."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class StoreUnavailableError(StockReportError):
    """A store read or write failed. Safe to retry by re-invoking the operation."""


class HistoryAppendError(StoreUnavailableError):
    """
    The report document was written but the history fan-out stopped early.

    `pending` holds the items whose history entries were not appended yet.
    Retry with `Finalizer.append_history(report_id, workflow, pending)`;
    the report itself must not be written again.
    """

    def __init__(self, report_id: str, pending: list[ReportItem], cause: Exception):
        super().__init__(
            f"History append stopped for report {report_id} "
            f"with {len(pending)} item(s) pending: {cause}"
        )
        self.report_id = report_id
        self.pending = pending

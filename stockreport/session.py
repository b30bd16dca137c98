"""Authoring session: one report being built or edited by one operator."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from . import settings
from .errors import HistoryAppendError, NotFoundError, ValidationError
from .finalize import FinalizeOutcome, Finalizer
from .guard import AddResult, DuplicateDetected, DuplicateGuard, validate_count
from .missing import MissingItemDetector, MissingResolution
from .notifier import Notifier
from .schemas import Product, Report, ReportItem, ReportType
from .snapshots import SnapshotIndex
from .stores import DocumentStore
from .workflow import ReportWorkflow
from .workflows import get_workflow

logger = logging.getLogger(__name__)

# Receives the missing lines and returns the operator's decision (sync or async)
MissingResolver = Callable[[list[ReportItem]], Any]


class ReportSession:
    """
    Holds the unsaved lines of a single report. Adds, overwrites, removals and
    the final commit happen one after another on this object; it is never
    shared between operators.
    """

    def __init__(
        self,
        store: DocumentStore,
        workflow: ReportWorkflow,
        report: Report | None = None,
        reports_collection: str = settings.REPORTS_COLLECTION,
        products_collection: str = settings.PRODUCTS_COLLECTION,
        notifier: Notifier | None = None,
    ):
        self.store = store
        self.workflow = workflow
        self.report = report
        self.snapshots = SnapshotIndex(store, reports_collection)
        self.detector = MissingItemDetector(self.snapshots)
        self.finalizer = Finalizer(store, reports_collection, products_collection)
        self.notifier = notifier or Notifier()
        self.guard = DuplicateGuard(report.items if report else ())
        self._notes: str | None = report.notes if report else None
        self.pending_history: HistoryAppendError | None = None

    @classmethod
    def open_new(cls, store: DocumentStore, report_type: ReportType | str, **kwargs) -> ReportSession:
        return cls(store, get_workflow(report_type), **kwargs)

    @classmethod
    async def open_edit(cls, store: DocumentStore, report_id: str, **kwargs) -> ReportSession:
        """Loads an existing report for correction. Its type cannot change."""
        collection = kwargs.get("reports_collection", settings.REPORTS_COLLECTION)
        doc = await store.get(collection, report_id)
        if doc is None:
            raise NotFoundError(collection, report_id)
        report = Report.from_document(doc)
        return cls(store, get_workflow(report.type), report=report, **kwargs)

    @property
    def report_type(self) -> ReportType:
        return self.workflow.report_type

    @property
    def is_edit(self) -> bool:
        return self.report is not None

    @property
    def items(self) -> list[ReportItem]:
        return self.guard.items

    @property
    def notes(self) -> str | None:
        return self._notes

    @notes.setter
    def notes(self, value: str | None) -> None:
        value = (value or "").strip() or None
        if value and not self.workflow.accepts_notes:
            raise ValidationError(f"{self.report_type.value} reports do not take notes")
        if value and len(value) > settings.NOTES_MAX_LENGTH:
            raise ValidationError(f"Notes are limited to {settings.NOTES_MAX_LENGTH} characters")
        self._notes = value

    async def add(self, product: Product, count: int) -> AddResult:
        """
        Adds a line for `product`. A product already on the report is refused
        with DuplicateDetected before any lookup happens. The carry-over count is
        read once, here, and never recomputed.
        """
        count = validate_count(count)
        existing = self.guard.index_of(product.id)
        if existing is not None:
            logger.info(f"{product.sku} is already on the report (line {existing + 1}).")
            return DuplicateDetected(existing)

        previous = None
        if self.workflow.tracks_previous:
            previous = await self.snapshots.previous_count_for(self.report_type, product.id)

        try:
            item = self.workflow.build_item(product, count, previous)
        except SchemaValidationError as e:
            raise ValidationError(f"Invalid line for {product.sku}: {e}") from e
        return self.guard.add(item)

    def overwrite(self, index: int, count: int) -> ReportItem:
        """The operator confirmed the duplicate: replace the count at `index`."""
        return self.guard.overwrite(index, count)

    def remove(self, index: int) -> ReportItem:
        return self.guard.remove(index)

    async def finalize(self, resolver: MissingResolver | None = None) -> FinalizeOutcome | None:
        """
        Commits the report. For a new inventory report, SKUs counted last time
        but missing now are passed to `resolver`, which returns a MissingResolution.
        Returns None if the operator cancels; nothing is written in that case.
        """
        items = self.items
        self.workflow.validate(items, self._notes)

        # --- 1. MISSING ITEMS ---
        zero_filled = 0
        if self.workflow.checks_missing and self.detector.applies(self.report_type, self.is_edit):
            missing = await self.detector.find_missing(items)
            if missing:
                if resolver is None:
                    raise ValidationError(
                        f"{len(missing)} item(s) from the previous inventory are missing; "
                        "a resolution is required"
                    )
                decision = resolver(missing)
                if inspect.isawaitable(decision):
                    decision = await decision
                decision = MissingResolution(decision)
                logger.info(f"Missing items resolution: {decision.value}")

                resolved = self.detector.resolve(items, missing, decision)
                if resolved is None:
                    logger.info("Finalize cancelled; report left unchanged.")
                    return None
                zero_filled = len(resolved) - len(items)
                items = resolved

        # --- 2. COMMIT ---
        try:
            outcome = await self.finalizer.finalize(
                self.workflow,
                items,
                report_id=self.report.id if self.report else None,
                notes=self._notes,
            )
        except HistoryAppendError as e:
            # The report is saved; only the history lines are left to retry
            self.pending_history = e
            self._reset()
            raise
        outcome.zero_filled = zero_filled

        # --- 3. NOTIFY ---
        await self.notifier.report_finalized(self.report_type.value, outcome)

        self._reset()
        return outcome

    async def retry_history(self) -> tuple[int, list[str]]:
        """
        Appends the history entries left over by a finalize that raised
        HistoryAppendError. If it stops again, only the new remainder is kept
        for the next retry.
        """
        if self.pending_history is None:
            return 0, []
        pending = self.pending_history
        try:
            result = await self.finalizer.append_history(pending.report_id, self.workflow, pending.pending)
        except HistoryAppendError as e:
            self.pending_history = e
            raise
        self.pending_history = None
        return result

    def _reset(self) -> None:
        self.guard.clear()
        self._notes = None
        self.report = None

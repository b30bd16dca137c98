import logging
from abc import ABC, abstractmethod
from typing import Optional

from . import settings
from .errors import ValidationError
from .schemas import HistoryEntry, Product, ReportItem, ReportType

logger = logging.getLogger(__name__)


class ReportWorkflow(ABC):
    """
    Abstract base class for the counting workflows (Inventory, Tested, Delivery).
    Each subclass fixes the rules of its report type; the authoring session and
    the finalizer ask the workflow instead of branching on the type themselves.
    """

    report_type: ReportType
    # Label written into every history entry this workflow produces
    action: str
    tracks_previous: bool = True
    accepts_notes: bool = False
    checks_missing: bool = False

    @abstractmethod
    def describe(self, item: ReportItem) -> str:
        """
        Responsible for the human-readable `details` text of a history entry.
        """
        pass

    def build_item(
        self, product: Product, count: int, previous_count: Optional[int] = None
    ) -> ReportItem:
        """Snapshots the product's sku and description into a new report line."""
        return ReportItem(
            product_id=product.id,
            sku=product.sku,
            description=product.description,
            current_count=count,
            previous_count=previous_count if self.tracks_previous else None,
        )

    def history_entry(self, item: ReportItem, report_id: str, date: str) -> HistoryEntry:
        return HistoryEntry(
            action=self.action,
            date=date,
            details=self.describe(item),
            report_id=report_id,
        )

    def validate(self, items: list[ReportItem], notes: Optional[str]) -> None:
        """
        Checks a report right before it is written. Raises ValidationError;
        nothing has been persisted when this fails.
        """
        if not items:
            raise ValidationError("A report needs at least one item")

        seen = set()
        for item in items:
            if item.product_id in seen:
                raise ValidationError(f"Product {item.sku} appears twice in the report")
            seen.add(item.product_id)

        if notes:
            if not self.accepts_notes:
                raise ValidationError(f"{self.report_type.value} reports do not take notes")
            if len(notes) > settings.NOTES_MAX_LENGTH:
                raise ValidationError(
                    f"Notes are limited to {settings.NOTES_MAX_LENGTH} characters"
                )

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from . import settings
from .errors import HistoryAppendError, NotFoundError, StoreUnavailableError
from .schemas import ReportItem
from .stores import SERVER_TIMESTAMP, DocumentStore
from .utils import iso_now
from .workflow import ReportWorkflow

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FinalizeOutcome:
    report_id: str
    created: bool
    total_items: int
    history_appended: int
    # Products that no longer exist; their lines are in the report but got no history entry
    skipped_products: list[str] = field(default_factory=list)
    zero_filled: int = 0


class Finalizer:
    """
    The commit point of a report: writes the report document, then appends
    one history entry per line to the matching product.

    The report write is authoritative. If the history loop stops halfway,
    nothing is rolled back; HistoryAppendError tells the caller which lines
    still need `append_history`.
    """

    def __init__(
        self,
        store: DocumentStore,
        reports_collection: str = settings.REPORTS_COLLECTION,
        products_collection: str = settings.PRODUCTS_COLLECTION,
        clock: Callable[[], str] = iso_now,
    ):
        self.store = store
        self.reports_collection = reports_collection
        self.products_collection = products_collection
        self.clock = clock

    async def finalize(
        self,
        workflow: ReportWorkflow,
        items: list[ReportItem],
        report_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> FinalizeOutcome:
        workflow.validate(items, notes)

        # --- 1. TOTALS ---
        total_items = len(items)
        item_docs = [item.to_document() for item in items]

        # --- 2. REPORT DOCUMENT ---
        created = report_id is None
        if created:
            doc = {
                "type": workflow.report_type.value,
                "items": item_docs,
                "totalItems": total_items,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            }
            if notes:
                doc["notes"] = notes
            report_id = await self.store.insert(self.reports_collection, doc)
            logger.info(f"✅ Created {workflow.report_type.value} report {report_id} ({total_items} items)")
        else:
            # type and createdAt are never rewritten
            fields = {
                "items": item_docs,
                "totalItems": total_items,
                "updatedAt": SERVER_TIMESTAMP,
            }
            if workflow.accepts_notes:
                fields["notes"] = notes or None
            await self.store.update(self.reports_collection, report_id, fields)
            logger.info(f"✅ Updated {workflow.report_type.value} report {report_id} ({total_items} items)")

        # --- 3. HISTORY FAN-OUT ---
        appended, skipped = await self.append_history(report_id, workflow, items)

        return FinalizeOutcome(
            report_id=report_id,
            created=created,
            total_items=total_items,
            history_appended=appended,
            skipped_products=skipped,
        )

    async def append_history(
        self, report_id: str, workflow: ReportWorkflow, items: list[ReportItem]
    ) -> tuple[int, list[str]]:
        """
        Appends one history entry per item, in order. Safe to call again with
        the pending items of a HistoryAppendError.
        Returns (entries appended, ids of products that were not found).
        """
        appended = 0
        skipped: list[str] = []

        for index, item in enumerate(items):
            entry = workflow.history_entry(item, report_id, date=self.clock())
            try:
                await self.store.update(
                    self.products_collection,
                    item.product_id,
                    {"updatedAt": SERVER_TIMESTAMP},
                    append={"history": [entry.to_document()]},
                )
            except NotFoundError:
                logger.warning(
                    f"  > Product {item.product_id} ({item.sku}) no longer exists; "
                    f"no history entry for report {report_id}."
                )
                skipped.append(item.product_id)
                continue
            except StoreUnavailableError as e:
                logger.error(f"❌ History append stopped at {item.sku} for report {report_id}: {e}")
                raise HistoryAppendError(report_id, items[index:], e) from e
            appended += 1

        logger.info(f"History updated for {appended} product(s) from report {report_id}.")
        return appended, skipped

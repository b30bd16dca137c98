import logging

from . import settings
from .schemas import Report, ReportType
from .stores import DocumentStore, Query

logger = logging.getLogger(__name__)


class SnapshotIndex:
    """
    Read-side lookups against the most recent report of a type.
    Store failures are never turned into a zero count; they propagate.
    """

    def __init__(self, store: DocumentStore, collection: str = settings.REPORTS_COLLECTION):
        self.store = store
        self.collection = collection

    async def latest_report(self, report_type: ReportType | str) -> Report | None:
        """Returns the newest report of this type by createdAt, or None if there is none."""
        report_type = ReportType(report_type)
        query = Query(
            self.collection,
            filters=(("type", report_type.value),),
            order_by="createdAt",
            descending=True,
            limit=1,
        )
        rows = await self.store.query(query)
        if not rows:
            return None
        return Report.from_document(rows[0])

    async def previous_count_for(self, report_type: ReportType | str, product_id: str) -> int:
        """
        Carry-over count: the product's currentCount in the latest report of the
        same type. Products absent from that report, or types with no report yet, give 0.
        """
        report = await self.latest_report(report_type)
        if report is None:
            return 0

        item = report.find_item(product_id)
        if item is None:
            return 0
        logger.debug(f"Carry-over for {product_id} from report {report.id}: {item.current_count}")
        return item.current_count

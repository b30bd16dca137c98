import logging
from enum import Enum

from .schemas import ReportItem, ReportType
from .snapshots import SnapshotIndex

logger = logging.getLogger(__name__)


class MissingResolution(str, Enum):
    ZERO_FILL = "zero_fill"
    SKIP = "skip"
    CANCEL = "cancel"


class MissingItemDetector:
    """
    Compares a new inventory count with the previous inventory report and
    finds SKUs that had stock then but were not counted now.
    """

    def __init__(self, snapshots: SnapshotIndex):
        self.snapshots = snapshots

    @staticmethod
    def applies(report_type: ReportType, is_edit: bool) -> bool:
        # Edits are corrections, not a new counting cycle
        return report_type is ReportType.INVENTORY and not is_edit

    async def find_missing(self, items: list[ReportItem]) -> list[ReportItem]:
        """
        Returns the previous report's lines (prior count in `current_count`)
        whose SKU is absent from `items` and whose prior count was positive.
        Lines for products already on the report are never missing.
        """
        previous = await self.snapshots.latest_report(ReportType.INVENTORY)
        if previous is None:
            logger.info("No previous inventory report; skipping missing-item check.")
            return []

        counted_skus = {item.sku for item in items}
        # A product re-coded since the last count is on the report under its new SKU
        counted_products = {item.product_id for item in items}
        missing = []
        for item in previous.items:
            if item.product_id in counted_products:
                continue
            if item.current_count > 0 and item.sku not in counted_skus:
                missing.append(item)
                # One line per SKU even if the old report was inconsistent
                counted_skus.add(item.sku)

        if missing:
            logger.info(
                f"⚠️ {len(missing)} SKU(s) from report {previous.id} were not counted: "
                f"{', '.join(i.sku for i in missing)}"
            )
        return missing

    @staticmethod
    def resolve(
        items: list[ReportItem], missing: list[ReportItem], resolution: MissingResolution
    ) -> list[ReportItem] | None:
        """
        Applies the operator's decision. Returns the item list to finalize,
        or None when the finalize is cancelled. `items` is never modified.
        """
        resolution = MissingResolution(resolution)
        if resolution is MissingResolution.CANCEL:
            return None
        if resolution is MissingResolution.SKIP:
            return list(items)

        # Keeps the one-line-per-product rule when called with an unfiltered missing list
        present = {item.product_id for item in items}
        zero_filled = [
            ReportItem(
                product_id=m.product_id,
                sku=m.sku,
                description=m.description,
                current_count=0,
                previous_count=m.current_count,
            )
            for m in missing
            if m.product_id not in present
        ]
        return [*items, *zero_filled]

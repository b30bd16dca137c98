from stockreport.schemas import ReportItem, ReportType
from stockreport.workflow import ReportWorkflow


class InventoryWorkflow(ReportWorkflow):
    """Periodic full stock count. New counts are checked for items that went missing."""

    report_type = ReportType.INVENTORY
    action = "Inventory Count"
    checks_missing = True

    def describe(self, item: ReportItem) -> str:
        return f"Count recorded: {item.current_count} (previous: {item.previous_count or 0})"

from stockreport.schemas import ReportItem, ReportType
from stockreport.workflow import ReportWorkflow


class DeliveryWorkflow(ReportWorkflow):
    """Goods received. There is no notion of a previous count, only the quantity delivered."""

    report_type = ReportType.DELIVERY
    action = "Delivery Receipt"
    tracks_previous = False
    accepts_notes = True

    def describe(self, item: ReportItem) -> str:
        return f"Quantity received: {item.current_count}"

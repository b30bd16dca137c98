from stockreport.schemas import ReportType
from stockreport.workflow import ReportWorkflow

from .delivery import DeliveryWorkflow
from .inventory import InventoryWorkflow
from .tested import TestedWorkflow

# --- Workflow Registry ---
# One entry per report type. A new counting workflow only needs a class and a line here.
WORKFLOW_REGISTRY: dict[ReportType, type[ReportWorkflow]] = {
    ReportType.INVENTORY: InventoryWorkflow,
    ReportType.TESTED: TestedWorkflow,
    ReportType.DELIVERY: DeliveryWorkflow,
}


def get_workflow(report_type: ReportType | str) -> ReportWorkflow:
    return WORKFLOW_REGISTRY[ReportType(report_type)]()


__all__ = [
    "WORKFLOW_REGISTRY",
    "DeliveryWorkflow",
    "InventoryWorkflow",
    "TestedWorkflow",
    "get_workflow",
]

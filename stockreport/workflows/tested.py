from stockreport.schemas import ReportItem, ReportType
from stockreport.workflow import ReportWorkflow


class TestedWorkflow(ReportWorkflow):
    report_type = ReportType.TESTED
    action = "Quality Test"

    # Keep pytest from collecting this class
    __test__ = False

    def describe(self, item: ReportItem) -> str:
        return f"Count recorded: {item.current_count} (previous: {item.previous_count or 0})"

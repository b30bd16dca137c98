import pandas as pd

from .schemas import Product, Report, ReportType

# Title used when a report is shared, per report type
REPORT_TITLES = {
    ReportType.INVENTORY: "Inventory Report",
    ReportType.TESTED: "Tested Products Report",
    ReportType.DELIVERY: "Delivery Record",
}

ITEM_COLUMNS = ["sku", "description", "previous", "current", "difference"]


def items_frame(report: Report) -> pd.DataFrame:
    """
    One row per report line, in entry order. Delivery reports have no
    previous count, so their `previous` and `difference` columns are dropped.
    """
    rows = [
        {
            "sku": item.sku,
            "description": item.description,
            "previous": item.previous_count,
            "current": item.current_count,
            "difference": item.difference,
        }
        for item in report.items
    ]
    df = pd.DataFrame(rows, columns=ITEM_COLUMNS)

    if report.type is ReportType.DELIVERY:
        return df.drop(columns=["previous", "difference"])

    # Lines entered before carry-over counts existed count as 0
    df["previous"] = df["previous"].fillna(0).astype(int)
    df["difference"] = df["current"] - df["previous"]
    return df


def dashboard_stats(product_count: int, reports: list[Report]) -> dict[str, int]:
    """Totals shown on the dashboard: products plus reports per type."""
    counts = (
        pd.Series([r.type.value for r in reports], dtype="object")
        .value_counts()
        .reindex([t.value for t in ReportType], fill_value=0)
    )
    stats = {"products": int(product_count)}
    stats.update({report_type: int(count) for report_type, count in counts.items()})
    return stats


def share_text(report: Report, sequence: int) -> str:
    """Short plain-text summary for pasting into a chat."""
    date_text = (
        report.created_at.strftime("%Y-%m-%d %H:%M") if report.created_at else "Processing..."
    )
    lines = [
        f"📊 {REPORT_TITLES[report.type]} #{sequence}",
        f"📅 Date: {date_text}",
        f"📝 Items: {report.total_items}",
    ]
    if report.notes:
        lines.append("")
        lines.append(f"📝 Notes: {report.notes}")
    return "\n".join(lines)


def history_frame(product: Product) -> pd.DataFrame:
    """The product's audit trail as a table, newest first."""
    rows = [entry.model_dump() for entry in reversed(product.history)]
    return pd.DataFrame(rows, columns=["action", "date", "details", "report_id"])

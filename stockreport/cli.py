import argparse
import asyncio
import logging
import sys
from datetime import date

from . import settings
from .catalog import ProductCatalog
from .errors import StockReportError
from .logger import setup_logger
from .notifier import Notifier
from .purge import RetentionPurge
from .reports import ReportRepository
from .schemas import ReportType
from .stores import HttpDocumentStore
from .summary import dashboard_stats, history_frame, items_frame, share_text

logger = logging.getLogger(__name__)


def ask_confirmation(message: str) -> bool:
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stockreport", description="Stock count reports.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("stats", help="Dashboard counts and recent reports")

    list_cmd = commands.add_parser("list", help="Reports of one type, newest first")
    list_cmd.add_argument("type", choices=[t.value for t in ReportType])
    list_cmd.add_argument("--day", type=date.fromisoformat, help="Only reports created on YYYY-MM-DD")

    show_cmd = commands.add_parser("show", help="Lines of one report")
    show_cmd.add_argument("report_id")

    history_cmd = commands.add_parser("history", help="Audit trail of one product")
    history_cmd.add_argument("product_id")

    for name, help_text in (
        ("purge-reports", "Delete reports older than the cutoff"),
        ("purge-history", "Trim product history older than the cutoff"),
    ):
        purge_cmd = commands.add_parser(name, help=help_text)
        purge_cmd.add_argument("--days", type=int, default=settings.PURGE_DEFAULT_DAYS)
        purge_cmd.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


async def run_command(args: argparse.Namespace, store) -> int:
    reports = ReportRepository(store)
    catalog = ProductCatalog(store)

    if args.command == "stats":
        stats = dashboard_stats(await catalog.count(), await reports.recent(limit=None))
        print("\n--- Dashboard ---")
        for key, value in stats.items():
            print(f"{key}: {value}")
        print("\n--- Recent Reports ---")
        for report in await reports.recent():
            created = report.created_at.isoformat() if report.created_at else "-"
            print(f"{report.id}  {report.type.value:<10} {created}  {report.total_items} items")

    elif args.command == "list":
        listed = await reports.list(args.type, on_day=args.day)
        for index, report in enumerate(listed):
            # Sequence numbers count up from the oldest report
            print(share_text(report, sequence=len(listed) - index))
            print(f"🆔 {report.id}\n")
        if not listed:
            print("No reports found.")

    elif args.command == "show":
        report = await reports.get(args.report_id)
        print(items_frame(report).to_string(index=False))

    elif args.command == "history":
        product = await catalog.get(args.product_id)
        print(f"{product.sku} - {product.description}")
        print(history_frame(product).to_string(index=False))

    else:
        confirm = (lambda _message: True) if args.yes else ask_confirmation
        purge = RetentionPurge(store)
        if args.command == "purge-reports":
            result = await purge.purge_reports(args.days, confirm)
        else:
            result = await purge.purge_history(args.days, confirm)
        if result.cancelled:
            return 1
        await Notifier().purge_finished(result)
        print(f"{result.succeeded} of {result.intended} document(s) changed.")
        if result.is_partial:
            print("⚠️ The purge did not finish. Run the same command again.")
            return 2

    return 0


def main(argv: list[str] | None = None) -> int:
    setup_logger("stockreport")
    args = build_parser().parse_args(argv)

    if not settings.STORE_URL:
        print("❌ STORE_URL is not set. Add it to your .env file.")
        return 1

    store = HttpDocumentStore(settings.STORE_URL, api_key=settings.STORE_API_KEY)
    try:
        return asyncio.run(run_command(args, store))
    except StockReportError as e:
        logger.error(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

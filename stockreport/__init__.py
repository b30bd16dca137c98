"""Stock count reports with carry-over counts, missing-item checks, audit history and retention purge."""

from .catalog import ProductCatalog
from .errors import (
    HistoryAppendError,
    NotFoundError,
    StockReportError,
    StoreUnavailableError,
    ValidationError,
)
from .finalize import FinalizeOutcome, Finalizer
from .guard import Accepted, DuplicateDetected, DuplicateGuard
from .missing import MissingItemDetector, MissingResolution
from .purge import PurgeResult, RetentionPurge
from .reports import ReportRepository
from .schemas import HistoryEntry, Product, ProductStatus, Report, ReportItem, ReportType
from .session import ReportSession
from .snapshots import SnapshotIndex

__version__ = "1.1.0"

__all__ = [
    "Accepted",
    "DuplicateDetected",
    "DuplicateGuard",
    "FinalizeOutcome",
    "Finalizer",
    "HistoryAppendError",
    "HistoryEntry",
    "MissingItemDetector",
    "MissingResolution",
    "NotFoundError",
    "Product",
    "ProductCatalog",
    "ProductStatus",
    "PurgeResult",
    "Report",
    "ReportItem",
    "ReportRepository",
    "ReportSession",
    "ReportType",
    "RetentionPurge",
    "SnapshotIndex",
    "StockReportError",
    "StoreUnavailableError",
    "ValidationError",
]

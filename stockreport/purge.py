import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from . import settings
from .errors import NotFoundError, StoreUnavailableError, ValidationError
from .stores import DocumentStore, Query
from .utils import cutoff_from_days, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

# Shown to the operator; must return True for the purge to start
Confirm = Callable[[str], bool]


@dataclass(slots=True)
class PurgeResult:
    """
    Outcome of one purge run. `intended` is how many documents matched the
    cutoff when the run started; `succeeded` is how many were actually changed.
    A partial run is fixed by running the same purge again.
    """

    job: str
    cutoff: datetime
    scanned: int = 0
    intended: int = 0
    succeeded: int = 0
    error: Optional[str] = None
    cancelled: bool = False

    @property
    def is_partial(self) -> bool:
        return self.succeeded < self.intended

    def as_dict(self) -> dict[str, Any]:
        return {
            "job": self.job,
            "cutoff": self.cutoff.isoformat(),
            "scanned": self.scanned,
            "intended": self.intended,
            "succeeded": self.succeeded,
            "error": self.error,
            "cancelled": self.cancelled,
        }


class RetentionPurge:
    """
    Irreversible clean-up of old data. Both jobs read their collection once,
    then write document by document; there is no transaction across documents.
    """

    def __init__(
        self,
        store: DocumentStore,
        reports_collection: str = settings.REPORTS_COLLECTION,
        products_collection: str = settings.PRODUCTS_COLLECTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.reports_collection = reports_collection
        self.products_collection = products_collection
        self.clock = clock

    def _start(self, job: str, days: int, confirm: Confirm, message: str) -> PurgeResult:
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            raise ValidationError(f"Cutoff must be a non-negative number of days, got {days!r}")

        result = PurgeResult(job=job, cutoff=cutoff_from_days(days, self.clock()))
        if not confirm(message):
            logger.info(f"Purge '{job}' cancelled by operator.")
            result.cancelled = True
        return result

    async def purge_reports(self, days: int, confirm: Confirm) -> PurgeResult:
        """Deletes every report created before now - `days`. Product history is left alone."""
        result = self._start(
            "reports",
            days,
            confirm,
            f"Delete REPORTS older than {days} days? This cannot be undone.",
        )
        if result.cancelled:
            return result

        # --- 1. SNAPSHOT ---
        documents = await self.store.query(Query(self.reports_collection))
        result.scanned = len(documents)

        # --- 2. FILTER ---
        expired = []
        for doc in documents:
            created_at = parse_timestamp(doc.get("createdAt"))
            # Reports still waiting for their server timestamp are never purged
            if created_at is not None and created_at < result.cutoff:
                expired.append(doc["id"])
        result.intended = len(expired)
        logger.info(f"🧹 Purging {result.intended} of {result.scanned} reports (cutoff {result.cutoff:%Y-%m-%d}).")

        # --- 3. DELETE ---
        for report_id in expired:
            try:
                await self.store.delete(self.reports_collection, report_id)
            except StoreUnavailableError as e:
                result.error = str(e)
                break
            result.succeeded += 1

        self._log_result(result)
        return result

    async def purge_history(self, days: int, confirm: Confirm) -> PurgeResult:
        """
        Drops product history entries dated before now - `days`. A product is
        rewritten (whole `history` field) only when something was dropped.
        """
        result = self._start(
            "history",
            days,
            confirm,
            f"Clear PRODUCT HISTORY older than {days} days? This cannot be undone.",
        )
        if result.cancelled:
            return result

        # --- 1. SNAPSHOT ---
        documents = await self.store.query(Query(self.products_collection))
        result.scanned = len(documents)

        # --- 2. FILTER ---
        trimmed: list[tuple[str, list]] = []
        for doc in documents:
            history = doc.get("history")
            if not isinstance(history, list):
                continue
            kept = [entry for entry in history if self._keep(entry, result.cutoff)]
            if len(kept) != len(history):
                trimmed.append((doc["id"], kept))
        result.intended = len(trimmed)
        logger.info(f"🧹 Trimming history of {result.intended} of {result.scanned} products (cutoff {result.cutoff:%Y-%m-%d}).")

        # --- 3. WRITE BACK ---
        for product_id, kept in trimmed:
            try:
                await self.store.update(self.products_collection, product_id, {"history": kept})
            except NotFoundError:
                # Deleted from the catalog since the scan; nothing left to trim
                result.intended -= 1
                continue
            except StoreUnavailableError as e:
                result.error = str(e)
                break
            result.succeeded += 1

        self._log_result(result)
        return result

    @staticmethod
    def _keep(entry: Any, cutoff: datetime) -> bool:
        # Entries without a readable date are treated as expired
        if not isinstance(entry, dict):
            return False
        date = parse_timestamp(entry.get("date"))
        return date is not None and date >= cutoff

    @staticmethod
    def _log_result(result: PurgeResult) -> None:
        if result.is_partial:
            logger.warning(
                f"⚠️ Purge '{result.job}' stopped after {result.succeeded} of {result.intended}: "
                f"{result.error}. Run it again to finish."
            )
        else:
            logger.info(f"✅ Purge '{result.job}' finished: {result.succeeded} document(s) changed.")

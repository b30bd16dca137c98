import asyncio
import logging
from typing import Any, Optional

import requests

from . import settings

logger = logging.getLogger(__name__)


def post_to_webhook(
    event: str, data: dict[str, Any], url: Optional[str] = settings.WEBHOOK_URL
) -> bool:
    """
    Posts an event payload to the webhook. Returns True on success.
    A missing URL or a failed post is logged and never raised.
    """
    if not url:
        logger.debug("WEBHOOK_URL not set. Skipping webhook post.")
        return False

    payload = {"event": event, "data": data}
    try:
        response = requests.post(url, json=payload, timeout=settings.WEBHOOK_TIMEOUT)
        response.raise_for_status()
        logger.info(f"🚀 '{event}' posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting '{event}' to webhook: {e}")
        return False


class Notifier:
    """Async front for the webhook; the blocking post runs in a worker thread."""

    def __init__(self, url: Optional[str] = settings.WEBHOOK_URL):
        self.url = url

    async def notify(self, event: str, data: dict[str, Any]) -> bool:
        if not self.url:
            return False
        return await asyncio.to_thread(post_to_webhook, event, data, self.url)

    async def report_finalized(self, report_type: str, outcome) -> bool:
        return await self.notify(
            "report_finalized",
            {
                "reportId": outcome.report_id,
                "type": report_type,
                "created": outcome.created,
                "totalItems": outcome.total_items,
                "historyAppended": outcome.history_appended,
                "skippedProducts": outcome.skipped_products,
            },
        )

    async def purge_finished(self, result) -> bool:
        return await self.notify("purge_finished", result.as_dict())

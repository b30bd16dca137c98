from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from stockreport.finalize import FinalizeOutcome
from stockreport.notifier import Notifier, post_to_webhook
from stockreport.purge import PurgeResult


def test_no_url_skips_post():
    with patch("stockreport.notifier.requests.post") as post:
        assert post_to_webhook("report_finalized", {}, url=None) is False
    post.assert_not_called()


def test_successful_post():
    with patch("stockreport.notifier.requests.post") as post:
        post.return_value = MagicMock()

        assert post_to_webhook("purge_finished", {"succeeded": 2}, url="https://hooks.example/x")

    assert post.call_args.kwargs["json"] == {"event": "purge_finished", "data": {"succeeded": 2}}


def test_failed_post_is_not_raised():
    with patch("stockreport.notifier.requests.post") as post:
        post.side_effect = requests.exceptions.Timeout("slow")

        assert post_to_webhook("purge_finished", {}, url="https://hooks.example/x") is False


@pytest.mark.asyncio
async def test_report_finalized_payload():
    outcome = FinalizeOutcome(
        report_id="r1", created=True, total_items=2, history_appended=1, skipped_products=["ghost"]
    )

    with patch("stockreport.notifier.post_to_webhook", return_value=True) as post:
        assert await Notifier(url="https://hooks.example/x").report_finalized("inventory", outcome)

    event, data, url = post.call_args.args
    assert event == "report_finalized"
    assert data["reportId"] == "r1"
    assert data["skippedProducts"] == ["ghost"]
    assert url == "https://hooks.example/x"


@pytest.mark.asyncio
async def test_purge_finished_payload():
    result = PurgeResult(job="history", cutoff=datetime(2026, 9, 18, tzinfo=timezone.utc), intended=3, succeeded=3)

    with patch("stockreport.notifier.post_to_webhook", return_value=True) as post:
        await Notifier(url="https://hooks.example/x").purge_finished(result)

    assert post.call_args.args[1]["cutoff"] == "2026-09-18T00:00:00+00:00"


@pytest.mark.asyncio
async def test_notifier_without_url_does_nothing():
    with patch("stockreport.notifier.post_to_webhook") as post:
        assert await Notifier(url=None).notify("x", {}) is False
    post.assert_not_called()

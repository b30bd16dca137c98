import argparse
from unittest.mock import AsyncMock, patch

import pytest

from helpers import days_ago, report_doc
from stockreport import cli


def _args(*argv: str) -> argparse.Namespace:
    return cli.build_parser().parse_args(list(argv))


def test_parser_defaults():
    args = _args("purge-history")

    assert args.days == 90
    assert args.yes is False


def test_parser_rejects_unknown_type():
    with pytest.raises(SystemExit):
        _args("list", "returns")


@pytest.mark.asyncio
async def test_stats(store, capsys):
    store.load("reports", "r1", report_doc("tested", {"a": 1}, days_ago(1)))

    assert await cli.run_command(_args("stats"), store) == 0

    out = capsys.readouterr().out
    assert "products: 5" in out
    assert "tested: 1" in out


@pytest.mark.asyncio
async def test_list_numbers_oldest_first(store, capsys):
    store.load("reports", "old", report_doc("delivery", {"a": 1}, days_ago(2)))
    store.load("reports", "new", report_doc("delivery", {"a": 1}, days_ago(1)))

    await cli.run_command(_args("list", "delivery"), store)

    out = capsys.readouterr().out
    assert out.index("#2") < out.index("#1")


@pytest.mark.asyncio
async def test_purge_with_yes(store, capsys):
    store.load("reports", "old", report_doc("inventory", {"a": 1}, days_ago(200)))

    with patch.object(cli.Notifier, "purge_finished", AsyncMock(return_value=False)):
        code = await cli.run_command(_args("purge-reports", "--days", "30", "--yes"), store)

    assert code == 0
    assert "1 of 1 document(s) changed." in capsys.readouterr().out
    assert await store.get("reports", "old") is None


@pytest.mark.asyncio
async def test_purge_declined(store, monkeypatch):
    store.load("reports", "old", report_doc("inventory", {"a": 1}, days_ago(200)))
    monkeypatch.setattr("builtins.input", lambda prompt: "n")

    assert await cli.run_command(_args("purge-reports", "--days", "30"), store) == 1
    assert await store.get("reports", "old") is not None


def test_main_requires_store_url(monkeypatch, capsys):
    monkeypatch.setattr(cli.settings, "STORE_URL", None)
    monkeypatch.setattr(cli, "setup_logger", lambda *a, **k: None)

    assert cli.main(["stats"]) == 1
    assert "STORE_URL" in capsys.readouterr().out

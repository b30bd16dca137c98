"""Behavior of the two DocumentStore implementations."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from helpers import NOW, days_ago
from stockreport.errors import NotFoundError, StoreUnavailableError
from stockreport.schemas import ReportType
from stockreport.snapshots import SnapshotIndex
from stockreport.stores import SERVER_TIMESTAMP, HttpDocumentStore, MemoryDocumentStore, Query
from stockreport.stores.http import _encode


class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_server_timestamps_strictly_increase(self):
        store = MemoryDocumentStore(clock=lambda: NOW)

        first = await store.insert("reports", {"createdAt": SERVER_TIMESTAMP})
        second = await store.insert("reports", {"createdAt": SERVER_TIMESTAMP})

        a = (await store.get("reports", first))["createdAt"]
        b = (await store.get("reports", second))["createdAt"]
        assert a == NOW
        assert b > a

    @pytest.mark.asyncio
    async def test_ordered_query_with_filter_and_limit(self):
        store = MemoryDocumentStore()
        store.load("reports", "old", {"type": "inventory", "createdAt": days_ago(3)})
        store.load("reports", "new", {"type": "inventory", "createdAt": days_ago(1)})
        store.load("reports", "other", {"type": "tested", "createdAt": days_ago(0)})
        store.load("reports", "pending", {"type": "inventory"})

        query = Query("reports", order_by="createdAt", descending=True).where("type", "inventory")
        rows = await store.query(query)
        limited = await store.query(Query("reports", (("type", "inventory"),), "createdAt", True, 1))

        assert [r["id"] for r in rows] == ["new", "old"]
        assert [r["id"] for r in limited] == ["new"]

    @pytest.mark.asyncio
    async def test_update_merges_and_appends(self):
        store = MemoryDocumentStore()
        store.load("products", "a", {"sku": "A", "history": [{"n": 1}]})

        await store.update("products", "a", {"sku": "A2"}, append={"history": [{"n": 2}]})

        doc = await store.get("products", "a")
        assert doc == {"id": "a", "sku": "A2", "history": [{"n": 1}, {"n": 2}]}

    @pytest.mark.asyncio
    async def test_update_missing_document(self):
        store = MemoryDocumentStore()

        with pytest.raises(NotFoundError):
            await store.update("products", "ghost", {"sku": "G"})

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self):
        store = MemoryDocumentStore()
        store.load("products", "a", {"history": []})

        doc = await store.get("products", "a")
        doc["history"].append("tampered")

        assert (await store.get("products", "a"))["history"] == []

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self):
        store = MemoryDocumentStore()

        await store.delete("reports", "nothing")

        assert await store.get("reports", "nothing") is None

    @pytest.mark.asyncio
    async def test_subscription_delivers_changes_until_closed(self):
        store = MemoryDocumentStore()
        seen = []

        subscription = await store.subscribe(
            Query("reports").where("type", "tested"),
            lambda rows: seen.append(sorted(r["id"] for r in rows)),
        )
        doc_id = await store.insert("reports", {"type": "tested"})
        # Unrelated writes produce no new delivery
        await store.insert("reports", {"type": "delivery"})
        subscription.close()
        await store.delete("reports", doc_id)

        assert seen == [[], [doc_id]]


def _response(status: int, body=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.content = b"{}" if body is not None else b""
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status}")
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session, headers={})


@pytest.fixture
def http_store(session):
    return HttpDocumentStore("https://store.example/api/", api_key="secret", session=session)


class TestHttpStore:
    def test_auth_header(self, http_store, session):
        assert session.headers["Authorization"] == "Bearer secret"
        assert http_store.base_url == "https://store.example/api"

    @pytest.mark.asyncio
    async def test_insert_sends_server_timestamp_marker(self, http_store, session):
        session.request.return_value = _response(200, {"id": "abc"})

        doc_id = await http_store.insert("reports", {"type": "tested", "createdAt": SERVER_TIMESTAMP})

        assert doc_id == "abc"
        method, url = session.request.call_args.args
        assert (method, url) == ("POST", "https://store.example/api/reports")
        assert session.request.call_args.kwargs["json"] == {
            "type": "tested",
            "createdAt": {"$serverTimestamp": True},
        }

    @pytest.mark.asyncio
    async def test_update_payload_and_not_found(self, http_store, session):
        session.request.return_value = _response(200, {})
        await http_store.update("products", "a", {"updatedAt": SERVER_TIMESTAMP}, append={"history": [{"n": 1}]})

        assert session.request.call_args.kwargs["json"] == {
            "set": {"updatedAt": {"$serverTimestamp": True}},
            "append": {"history": [{"n": 1}]},
        }

        session.request.return_value = _response(404)
        with pytest.raises(NotFoundError):
            await http_store.update("products", "ghost", {"sku": "G"})

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, http_store, session):
        session.request.return_value = _response(404)

        assert await http_store.get("reports", "nope") is None

    @pytest.mark.asyncio
    async def test_query_payload(self, http_store, session):
        session.request.return_value = _response(200, {"documents": [{"id": "r1"}]})

        rows = await http_store.query(Query("reports", (("type", "inventory"),), "createdAt", True, 1))

        assert rows == [{"id": "r1"}]
        method, url = session.request.call_args.args
        assert url == "https://store.example/api/reports:query"
        assert session.request.call_args.kwargs["json"] == {
            "where": [{"field": "type", "op": "==", "value": "inventory"}],
            "orderBy": {"field": "createdAt", "direction": "desc"},
            "limit": 1,
        }

    @pytest.mark.asyncio
    async def test_query_route_not_found_is_a_failure(self, http_store, session):
        session.request.return_value = _response(404)

        with pytest.raises(StoreUnavailableError):
            await http_store.query(Query("reports"))
        with pytest.raises(StoreUnavailableError):
            await SnapshotIndex(http_store).previous_count_for(ReportType.INVENTORY, "a")

    @pytest.mark.asyncio
    async def test_insert_not_found_is_a_failure(self, http_store, session):
        session.request.return_value = _response(404)

        with pytest.raises(StoreUnavailableError):
            await http_store.insert("reports", {"type": "tested"})

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, http_store, session):
        session.request.return_value = _response(404)

        await http_store.delete("reports", "gone")

    @pytest.mark.asyncio
    async def test_transport_failures_become_store_unavailable(self, http_store, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            await http_store.get("reports", "r1")

    @pytest.mark.asyncio
    async def test_server_errors_become_store_unavailable(self, http_store, session):
        session.request.return_value = _response(503)

        with pytest.raises(StoreUnavailableError):
            await http_store.delete("reports", "r1")


def test_encode_handles_nested_values():
    stamp = datetime(2026, 1, 2, 3, 4, tzinfo=timezone.utc)

    encoded = _encode({"at": stamp, "items": ({"ts": SERVER_TIMESTAMP},)})

    assert encoded == {"at": "2026-01-02T03:04:00+00:00", "items": [{"ts": {"$serverTimestamp": True}}]}


@pytest.mark.asyncio
async def test_polling_survives_a_failing_callback(session):
    store = HttpDocumentStore("https://store.example/api", session=session, poll_interval=0)
    polls = {"n": 0}

    def respond(*args, **kwargs):
        polls["n"] += 1
        documents = [{"id": "r1"}] if polls["n"] == 1 else [{"id": "r1"}, {"id": "r2"}]
        return _response(200, {"documents": documents})

    session.request.side_effect = respond
    received = asyncio.Event()
    seen = []

    def callback(rows):
        seen.append([r["id"] for r in rows])
        if len(seen) == 1:
            raise ValueError("malformed report")
        received.set()

    subscription = await store.subscribe(Query("reports"), callback)
    try:
        await asyncio.wait_for(received.wait(), timeout=5)
    finally:
        subscription.close()
        await asyncio.sleep(0)

    assert seen == [["r1"], ["r1", "r2"]]
    assert subscription.closed

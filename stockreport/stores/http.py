"""REST adapter for a remote document store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

import requests

from .. import settings
from ..errors import NotFoundError, StoreUnavailableError
from .base import SERVER_TIMESTAMP, Document, Query, ResultCallback, Subscription

logger = logging.getLogger(__name__)


def _encode(value: Any) -> Any:
    """Turns a write payload into plain JSON, marking server timestamps."""
    if value is SERVER_TIMESTAMP:
        return {"$serverTimestamp": True}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


class PollingSubscription(Subscription):
    """Re-runs the query on an interval and delivers only changed result sets."""

    def __init__(self, store: HttpDocumentStore, query: Query, callback: ResultCallback, interval: float):
        super().__init__(query, callback)
        self._store = store
        self._interval = interval
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self.closed:
            try:
                await self.deliver(await self._store.query(self.query))
            except StoreUnavailableError as e:
                # The view stays open; the next poll tries again
                logger.error(f"Live query on '{self.query.collection}' failed: {e}")
            except Exception:
                # Nothing awaits this task, so a failing callback is logged here
                logger.exception(f"Live query callback on '{self.query.collection}' failed")
            await asyncio.sleep(self._interval)

    def close(self) -> None:
        super().close()
        if self._task is not None:
            self._task.cancel()


class HttpDocumentStore:
    """
    Talks to a JSON document API with `requests`. Each blocking call runs in a
    worker thread so the event loop is never held up.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = settings.STORE_TIMEOUT,
        poll_interval: float = settings.STORE_POLL_INTERVAL,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _request(self, method: str, path: str, payload: Any = None, missing_ok: bool = False) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = self._session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise StoreUnavailableError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            # Only single-document calls may treat 404 as "no such document"
            if missing_ok:
                return None
            raise StoreUnavailableError(f"{method} {url} returned 404")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise StoreUnavailableError(f"{method} {url} returned {response.status_code}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailableError(f"{method} {url} returned a non-JSON body") from e

    async def _call(self, method: str, path: str, payload: Any = None, missing_ok: bool = False) -> Any:
        return await asyncio.to_thread(self._request, method, path, payload, missing_ok)

    async def insert(self, collection: str, doc: Document) -> str:
        body = await self._call("POST", collection, _encode(doc))
        if not body or "id" not in body:
            raise StoreUnavailableError(f"Insert into '{collection}' returned no id")
        return str(body["id"])

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Document,
        append: dict[str, list[Any]] | None = None,
    ) -> None:
        payload = {"set": _encode(fields)}
        if append:
            payload["append"] = _encode(append)
        body = await self._call("PATCH", f"{collection}/{doc_id}", payload, missing_ok=True)
        if body is None:
            raise NotFoundError(collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        # Deleting an already-deleted document is not an error
        await self._call("DELETE", f"{collection}/{doc_id}", missing_ok=True)

    async def get(self, collection: str, doc_id: str) -> Document | None:
        body = await self._call("GET", f"{collection}/{doc_id}", missing_ok=True)
        if body is None:
            return None
        return {**body, "id": body.get("id", doc_id)}

    async def query(self, query: Query) -> list[Document]:
        payload: dict[str, Any] = {
            "where": [
                {"field": field, "op": "==", "value": _encode(value)}
                for field, value in query.filters
            ]
        }
        if query.order_by:
            payload["orderBy"] = {
                "field": query.order_by,
                "direction": "desc" if query.descending else "asc",
            }
        if query.limit is not None:
            payload["limit"] = query.limit

        body = await self._call("POST", f"{query.collection}:query", payload)
        return list(body.get("documents", []))

    async def subscribe(self, query: Query, callback: ResultCallback) -> Subscription:
        subscription = PollingSubscription(self, query, callback, self.poll_interval)
        subscription.start()
        return subscription

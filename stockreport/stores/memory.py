"""In-process document store for tests and local runs."""

from __future__ import annotations

import copy
import uuid
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from ..errors import NotFoundError
from ..utils import utc_now
from .base import SERVER_TIMESTAMP, Document, Query, ResultCallback, Subscription


class MemoryDocumentStore:
    """
    Keeps every collection in a dict. Writes are applied whole, so each call
    behaves like a single-document write of a real store. Subscribers get the
    full result set of their query again after every write that changes it.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self._clock = clock
        self._last_timestamp: datetime | None = None
        self._subscriptions: list[Subscription] = []

    def _server_time(self) -> datetime:
        # Server timestamps must be strictly increasing
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _resolve(self, fields: Document) -> Document:
        resolved = copy.deepcopy({k: v for k, v in fields.items() if v is not SERVER_TIMESTAMP})
        stamped = [k for k, v in fields.items() if v is SERVER_TIMESTAMP]
        if stamped:
            now = self._server_time()
            for key in stamped:
                resolved[key] = now
        return resolved

    async def insert(self, collection: str, doc: Document) -> str:
        doc_id = uuid.uuid4().hex
        self._collections[collection][doc_id] = self._resolve(doc)
        await self._notify()
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Document,
        append: dict[str, list[Any]] | None = None,
    ) -> None:
        current = self._collections[collection].get(doc_id)
        if current is None:
            raise NotFoundError(collection, doc_id)

        current.update(self._resolve(fields))
        for field, values in (append or {}).items():
            existing = current.get(field)
            if not isinstance(existing, list):
                existing = []
            current[field] = existing + copy.deepcopy(list(values))
        await self._notify()

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._collections[collection].pop(doc_id, None) is not None:
            await self._notify()

    async def get(self, collection: str, doc_id: str) -> Document | None:
        doc = self._collections[collection].get(doc_id)
        if doc is None:
            return None
        return {"id": doc_id, **copy.deepcopy(doc)}

    async def query(self, query: Query) -> list[Document]:
        rows = [
            {"id": doc_id, **copy.deepcopy(doc)}
            for doc_id, doc in self._collections[query.collection].items()
            if all(doc.get(field) == value for field, value in query.filters)
        ]

        if query.order_by:
            # Documents without the ordering field are left out of ordered queries
            rows = [r for r in rows if r.get(query.order_by) is not None]
            rows.sort(key=lambda r: r[query.order_by], reverse=query.descending)

        if query.limit is not None:
            rows = rows[: query.limit]
        return rows

    async def subscribe(self, query: Query, callback: ResultCallback) -> Subscription:
        subscription = Subscription(query, callback)
        self._subscriptions.append(subscription)
        await subscription.deliver(await self.query(query))
        return subscription

    async def _notify(self) -> None:
        self._subscriptions = [s for s in self._subscriptions if not s.closed]
        for subscription in list(self._subscriptions):
            await subscription.deliver(await self.query(subscription.query))

    def load(self, collection: str, doc_id: str, doc: Document) -> None:
        """Places a document as-is, bypassing timestamps and subscribers. Used for seeding."""
        self._collections[collection][doc_id] = copy.deepcopy(doc)

"""Contract of the document store the engine persists to."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

Document = dict[str, Any]
# Plain functions and coroutine functions are both accepted
ResultCallback = Callable[[list[Document]], Any]


class _ServerTimestamp:
    """Placeholder replaced by the store's own clock when a write lands."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True, slots=True)
class Query:
    """Equality filters, one optional ordering field and an optional limit."""

    collection: str
    filters: tuple[tuple[str, Any], ...] = ()
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None

    def where(self, field: str, value: Any) -> Query:
        return Query(
            self.collection,
            (*self.filters, (field, value)),
            self.order_by,
            self.descending,
            self.limit,
        )


class Subscription:
    """Handle of a live query. Delivery stops after `close()`."""

    def __init__(self, query: Query, callback: ResultCallback):
        self.query = query
        self._callback = callback
        self._last: list[Document] | None = None
        self.closed = False

    async def deliver(self, documents: list[Document]) -> None:
        """Hands the full result set to the callback when it differs from the last one."""
        if self.closed or documents == self._last:
            return
        self._last = documents
        result = self._callback(documents)
        if inspect.isawaitable(result):
            await result

    def close(self) -> None:
        self.closed = True


class DocumentStore(Protocol):
    """
    Async document store. Returned documents always carry their id under "id".

    `update` merges `fields` into the document and atomically appends the
    values listed in `append` to the named array fields. Updating a missing
    document raises NotFoundError; transport failures raise
    StoreUnavailableError.
    """

    async def insert(self, collection: str, doc: Document) -> str: ...

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Document,
        append: dict[str, list[Any]] | None = None,
    ) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...

    async def get(self, collection: str, doc_id: str) -> Document | None: ...

    async def query(self, query: Query) -> list[Document]: ...

    async def subscribe(self, query: Query, callback: ResultCallback) -> Subscription: ...

from .base import SERVER_TIMESTAMP, Document, DocumentStore, Query, Subscription
from .http import HttpDocumentStore
from .memory import MemoryDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "Document",
    "DocumentStore",
    "HttpDocumentStore",
    "MemoryDocumentStore",
    "Query",
    "Subscription",
]

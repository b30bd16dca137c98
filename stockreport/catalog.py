"""Read-only view of the product catalog. Writing products belongs to the catalog screens."""

import logging

from . import settings
from .errors import NotFoundError
from .schemas import HistoryEntry, Product, ProductStatus
from .stores import DocumentStore, Query

logger = logging.getLogger(__name__)


class ProductCatalog:
    def __init__(self, store: DocumentStore, collection: str = settings.PRODUCTS_COLLECTION):
        self.store = store
        self.collection = collection

    async def get(self, product_id: str) -> Product:
        doc = await self.store.get(self.collection, product_id)
        if doc is None:
            raise NotFoundError(self.collection, product_id)
        return Product.from_document(doc)

    async def active(self) -> list[Product]:
        rows = await self.store.query(
            Query(self.collection, filters=(("status", ProductStatus.ACTIVE.value),))
        )
        return [Product.from_document(row) for row in rows]

    async def search(self, term: str, limit: int = settings.SEARCH_LIMIT) -> list[Product]:
        """Active products whose SKU or description contains `term` (case-insensitive)."""
        needle = term.strip().lower()
        if not needle:
            return []

        matches = [
            product
            for product in await self.active()
            if needle in product.sku.lower() or needle in product.description.lower()
        ]
        return matches[:limit]

    async def history(self, product_id: str) -> list[HistoryEntry]:
        """The product's audit trail, newest entry first."""
        product = await self.get(product_id)
        return list(reversed(product.history))

    async def count(self) -> int:
        return len(await self.store.query(Query(self.collection)))

"""Shared fixtures: an in-memory store seeded with a small catalog."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (str(PROJECT_ROOT), str(TESTS_DIR)):
    if path not in sys.path:
        # Ensure tests can import `stockreport` and `helpers` without package installation.
        sys.path.insert(0, path)

from helpers import product_doc  # noqa: E402
from stockreport.notifier import Notifier  # noqa: E402
from stockreport.schemas import Product  # noqa: E402
from stockreport.stores import MemoryDocumentStore  # noqa: E402


@pytest.fixture
def store() -> MemoryDocumentStore:
    store = MemoryDocumentStore()
    for product_id in ("a", "b", "c", "d"):
        store.load(
            "products",
            product_id,
            product_doc(product_id.upper(), f"Product {product_id.upper()}"),
        )
    store.load("products", "x", product_doc("X", "Retired product", status="inactive"))
    return store


@pytest.fixture
def products(store) -> dict[str, Product]:
    return {
        product_id: Product.from_document({"id": product_id, **doc})
        for product_id, doc in store._collections["products"].items()
    }


@pytest.fixture
def quiet_notifier() -> Notifier:
    return Notifier(url=None)

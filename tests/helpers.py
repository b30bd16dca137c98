"""Document builders used across the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def product_doc(sku: str, description: str, status: str = "active") -> dict:
    return {"sku": sku, "description": description, "status": status, "history": []}


def report_doc(report_type: str, counts: dict[str, int], created_at: datetime, **extra) -> dict:
    """Stored report with one line per product id in `counts` (sku = id upper-cased)."""
    items = [
        {
            "productId": product_id,
            "sku": product_id.upper(),
            "description": f"Product {product_id.upper()}",
            "currentCount": count,
            "previousCount": 0,
        }
        for product_id, count in counts.items()
    ]
    return {
        "type": report_type,
        "items": items,
        "totalItems": len(items),
        "createdAt": created_at,
        "updatedAt": created_at,
        **extra,
    }


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)

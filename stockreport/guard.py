"""The in-progress item list of one report being authored."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .errors import ValidationError
from .schemas import ReportItem


@dataclass(frozen=True, slots=True)
class Accepted:
    index: int


@dataclass(frozen=True, slots=True)
class DuplicateDetected:
    """The product is already on the report, at `existing_index`. Nothing was added."""

    existing_index: int


AddResult = Accepted | DuplicateDetected


def validate_count(count: object) -> int:
    """Counts are entered by hand; anything but a non-negative int is refused."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"Quantity must be a whole number, got {count!r}")
    if count < 0:
        raise ValidationError(f"Quantity cannot be negative, got {count}")
    return count


class DuplicateGuard:
    """
    Ordered list of report lines with at most one line per product.

    A second add of the same product is refused with `DuplicateDetected`;
    the caller decides whether to `overwrite` the existing line's count.
    """

    def __init__(self, items: Iterable[ReportItem] = ()):
        self._items: list[ReportItem] = []
        for item in items:
            if isinstance(self.add(item), DuplicateDetected):
                raise ValidationError(f"Product {item.product_id} appears twice in the report")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ReportItem]:
        return iter(self._items)

    @property
    def items(self) -> list[ReportItem]:
        return list(self._items)

    def index_of(self, product_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.product_id == product_id:
                return index
        return None

    def add(self, item: ReportItem) -> AddResult:
        existing = self.index_of(item.product_id)
        if existing is not None:
            return DuplicateDetected(existing)
        self._items.append(item)
        return Accepted(len(self._items) - 1)

    def overwrite(self, index: int, count: int) -> ReportItem:
        """Replaces only the count of the line at `index`; sku, description and previous count stay."""
        count = validate_count(count)
        try:
            item = self._items[index]
        except IndexError:
            raise ValidationError(f"No report line at position {index}") from None
        item.current_count = count
        return item

    def remove(self, index: int) -> ReportItem:
        try:
            return self._items.pop(index)
        except IndexError:
            raise ValidationError(f"No report line at position {index}") from None

    def clear(self) -> None:
        self._items.clear()

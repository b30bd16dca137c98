from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from . import settings


class ReportType(str, Enum):
    INVENTORY = "inventory"
    TESTED = "tested"
    DELIVERY = "delivery"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class StoreModel(BaseModel):
    """
    Base for everything persisted in the document store.
    Documents use camelCase keys; Python code uses the snake_case names.
    """

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, doc: dict[str, Any]):
        return cls.model_validate(doc)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"id"})


class HistoryEntry(StoreModel):
    """One line of a product's audit trail. Never modified once appended."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    action: str
    # ISO timestamp written by the client at append time
    date: str
    details: str = ""
    report_id: str | None = Field(default=None, alias="reportId")


class Product(StoreModel):
    id: str
    sku: str
    ean: str | None = None
    description: str = ""
    model: str | None = None
    status: ProductStatus = ProductStatus.ACTIVE
    history: list[HistoryEntry] = Field(default_factory=list)
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class ReportItem(StoreModel):
    """
    A line of a report. `sku` and `description` are copied from the product
    when the line is entered and stay as they were, even if the catalog changes.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    product_id: str = Field(..., alias="productId")
    sku: str
    description: str = ""
    current_count: int = Field(..., ge=0, strict=True, alias="currentCount")
    # Absent on delivery lines
    previous_count: int | None = Field(default=None, alias="previousCount")

    @property
    def difference(self) -> int | None:
        if self.previous_count is None:
            return None
        return self.current_count - self.previous_count


class Report(StoreModel):
    id: str | None = None
    type: ReportType
    items: list[ReportItem] = Field(default_factory=list)
    total_items: int = Field(default=0, ge=0, alias="totalItems")
    notes: str | None = Field(default=None, max_length=settings.NOTES_MAX_LENGTH)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def find_item(self, product_id: str) -> ReportItem | None:
        return next((i for i in self.items if i.product_id == product_id), None)

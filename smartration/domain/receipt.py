"""Data models for receipt scanning."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

# Placeholder store name used when no plausible store line is found.
UNKNOWN_STORE = "Unknown Store"


@dataclass(frozen=True)
class ReceiptLineItem:
    """A single purchased item on a receipt."""

    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "price": float(self.unit_price),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class ReceiptRecord:
    """Parsed receipt data handed to meal planning.

    `store` and `date` always hold a value. When they could not be read from
    the receipt they carry sentinel values and the matching
    `*_is_placeholder` flag is set; callers must treat those as unknown.
    """

    store: str
    date: str  # YYYY-MM-DD
    total: Decimal
    items: tuple[ReceiptLineItem, ...] = ()
    store_is_placeholder: bool = False
    date_is_placeholder: bool = False
    # True when no total line was found and the total is the item sum.
    total_is_computed: bool = False
    raw_lines: tuple[str, ...] = field(default=(), compare=False)

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-shaped record consumed by the meal-planning step."""
        return {
            "items": [item.to_payload() for item in self.items],
            "total": float(self.total),
            "store": self.store,
            "date": self.date,
        }

"""Render parsed receipts for people (CLI review) and for JSON consumers."""

import json

from smartration.domain.receipt import ReceiptRecord


def format_receipt_summary(record: ReceiptRecord) -> str:
    """Return a human-readable block describing a parsed receipt."""
    store = "UNKNOWN" if record.store_is_placeholder else record.store
    date_str = f"{record.date} (not on receipt)" if record.date_is_placeholder else record.date
    total_note = " (sum of items)" if record.total_is_computed else ""

    lines = [
        "=" * 60,
        "PARSED RECEIPT",
        "=" * 60,
        f"Store: {store}",
        f"Date: {date_str}",
        f"Total: ${record.total:.2f}{total_note}",
        "",
        f"Items ({len(record.items)}):",
    ]
    for i, item in enumerate(record.items, 1):
        qty_str = f" x{item.quantity}" if item.quantity > 1 else ""
        lines.append(f"  {i}. {item.name}{qty_str} - ${item.unit_price:.2f}")
    if not record.items:
        lines.append("  (no items found)")
    lines.append("=" * 60)
    return "\n".join(lines)


def format_receipt_json(record: ReceiptRecord, indent: int | None = 2) -> str:
    """Serialize the meal-planning payload of a receipt as JSON."""
    return json.dumps(record.to_payload(), indent=indent)

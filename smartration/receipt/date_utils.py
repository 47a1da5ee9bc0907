"""Date helpers for receipt parsing and formatting."""

from datetime import date


def placeholder_receipt_date() -> date:
    """Return the date used when a receipt shows none: today."""
    return date.today()

"""Store/date/total extraction helpers."""

import re
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from .common import (
    DATE_PATTERNS,
    TRAILING_PRICE_PATTERNS,
    expand_two_digit_year,
    has_date,
    has_price,
    last_price_in,
)

STORE_SCAN_LINES = 5
STORE_EXCLUDED_SUBSTRINGS = ("saved", "total", "tax", "payment")
EXPLICIT_TOTAL_LABELS = ("order total", "grand total")

_BARE_PRICE_LINE = re.compile(r"^\$?\s*\d+\.\d{2}\s*F?$", re.IGNORECASE)


def _extract_store(lines: Sequence[str]) -> str | None:
    """
    Return the store name: the first header line that is not metadata.

    Only the first few lines are considered. Lines that are short, mention
    totals/tax/payment/savings, or carry a date or a price are skipped.
    """
    for line in lines[:STORE_SCAN_LINES]:
        if len(line) <= 3:
            continue
        lower = line.lower()
        if any(word in lower for word in STORE_EXCLUDED_SUBSTRINGS):
            continue
        if has_date(line) or has_price(line):
            continue
        return line
    return None


def _date_from_match(pattern_name: str, groups: tuple[str, ...]) -> date:
    if pattern_name == "ymd_dash":
        year, month, day = (int(g) for g in groups)
    else:
        month, day, year = (int(g) for g in groups)
        if pattern_name == "mdy_slash_short":
            year = expand_two_digit_year(year)
    return date(year, month, day)


def _extract_date(lines: Sequence[str]) -> date | None:
    """Extract the first valid date on the receipt (None if absent).

    Matches that are not real calendar dates (e.g. "13/45/2024") are ignored.
    """
    for line in lines:
        for pattern_name, pattern in DATE_PATTERNS:
            for match in pattern.finditer(line):
                try:
                    return _date_from_match(pattern_name, match.groups())
                except ValueError:
                    continue
    return None


def _trailing_price(line: str) -> Decimal | None:
    for _, pattern in TRAILING_PRICE_PATTERNS:
        match = pattern.search(line)
        if match:
            return last_price_in(match.group(0))
    return None


def _extract_total(lines: Sequence[str]) -> Decimal | None:
    """
    Extract the explicit order/grand total.

    The amount is taken from the end of the label line, or from the next line
    when that line is a bare price (label and amount printed on two rows).
    """
    for idx, line in enumerate(lines):
        lower = line.lower()
        if not any(label in lower for label in EXPLICIT_TOTAL_LABELS):
            continue
        amount = _trailing_price(line)
        if amount is not None:
            return amount
        if idx + 1 < len(lines) and _BARE_PRICE_LINE.match(lines[idx + 1]):
            return last_price_in(lines[idx + 1])
    return None

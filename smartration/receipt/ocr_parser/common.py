"""Shared constants and helpers for OCR receipt parsing."""

import re
from decimal import Decimal, InvalidOperation

# Price-shaped number anywhere in a line: "$3.49", "12.98"
PRICE_PATTERN = re.compile(r"\$?\d+\.\d{2}")
PRICE_NUMBER_PATTERN = re.compile(r"\d+\.\d{2}")

# Trailing price forms, tried in priority order. The optional trailing "F"
# is a per-item flag some stores print after the amount.
TRAILING_PRICE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    # "2 @ 6.49/EA 12.98 F"
    (
        "qty_at_unit_price_total",
        re.compile(r"\d+\s*@\s*\$?\d+\.\d{2}\s*/\s*[A-Za-z]+\s+\$?\d+\.\d{2}\s*F?\s*$", re.IGNORECASE),
    ),
    # "2 @ 6.49 F"
    ("qty_at_price", re.compile(r"\d+\s*@\s*\$?\d+\.\d{2}\s*F?\s*$", re.IGNORECASE)),
    # "3.49 F"
    ("price", re.compile(r"\$?\d+\.\d{2}\s*F?\s*$", re.IGNORECASE)),
)

# Dates, first match wins: MM/DD/YYYY, MM/DD/YY, YYYY-MM-DD, MM-DD-YYYY
DATE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("mdy_slash_long", re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)")),
    ("mdy_slash_short", re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{2})(?!\d)")),
    ("ymd_dash", re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)")),
    ("mdy_dash", re.compile(r"(?<!\d)(\d{1,2})-(\d{1,2})-(\d{4})(?!\d)")),
)

# Two-digit years below this pivot are 20xx, the rest 19xx.
TWO_DIGIT_YEAR_PIVOT = 50


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def has_price(text: str) -> bool:
    return PRICE_PATTERN.search(text) is not None


def has_date(text: str) -> bool:
    return any(pattern.search(text) for _, pattern in DATE_PATTERNS)


def last_price_in(text: str) -> Decimal | None:
    """Return the last price-shaped number in text, or None."""
    numbers = PRICE_NUMBER_PATTERN.findall(text)
    if not numbers:
        return None
    try:
        return Decimal(numbers[-1])
    except InvalidOperation:
        return None


def match_trailing_price(text: str) -> tuple[str, re.Match[str]] | None:
    """Return (pattern_name, match) for the highest-priority trailing price form, or None."""
    for name, pattern in TRAILING_PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            return name, match
    return None


def expand_two_digit_year(year: int) -> int:
    return 2000 + year if year < TWO_DIGIT_YEAR_PIVOT else 1900 + year

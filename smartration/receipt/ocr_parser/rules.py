"""Named line/name rules used by receipt field extraction.

Each heuristic is a small named predicate or rewrite so that the answer to
"why was this line skipped?" is a rule name rather than a position in a
chain of string edits.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .common import collapse_whitespace

MIN_LINE_LENGTH = 3
MAX_ITEM_NAME_LENGTH = 50

# Receipt metadata terms (payment, totals, footer). A line containing any of
# them anywhere, in any case, is not an item.
RECEIPT_METADATA_TERMS = (
    "subtotal",
    "total",
    "tax",
    "payment",
    "change",
    "credit",
    "purchase",
    "visa",
    "auth",
    "lane",
    "cashier",
    "ref",
    "seq",
    "merchant",
    "terminal",
    "eps",
    "acct",
    "approval code",
    "trx",
    "thanks",
)


@dataclass(frozen=True)
class LineRule:
    """A named predicate over a receipt line or item name."""

    name: str
    matches: Callable[[str], bool]


@dataclass(frozen=True)
class TextTransform:
    """A named rewrite applied to an item name candidate."""

    name: str
    apply: Callable[[str], str]


def _sub(pattern: str, flags: int = 0, repl: str = "") -> Callable[[str], str]:
    compiled = re.compile(pattern, flags)

    def apply(text: str) -> str:
        return compiled.sub(repl, text)

    return apply


def _strip_edge_punctuation(text: str) -> str:
    text = re.sub(r"^[^A-Za-z0-9]+", "", text)
    return re.sub(r"[^A-Za-z0-9]+$", "", text)


def _is_receipt_metadata(text: str) -> bool:
    lower = text.lower()
    return any(term in lower for term in RECEIPT_METADATA_TERMS)


SKIP_LINE_RULES: tuple[LineRule, ...] = (
    LineRule("too_short", lambda text: len(text.strip()) < MIN_LINE_LENGTH),
    LineRule("receipt_metadata", _is_receipt_metadata),
)

# Order matters: weight and unit-price annotations are removed before the
# plain "qty @ price" form so their "/lb" suffixes do not survive.
ITEM_NAME_TRANSFORMS: tuple[TextTransform, ...] = (
    TextTransform(
        "weight_at_price",
        _sub(r"\d+(?:\.\d+)?\s*(?:lbs?|kg)\s*@\s*\$?\d+\.\d{2}\s*/\s*(?:lbs?|kg)\b", re.IGNORECASE),
    ),
    TextTransform("qty_at_unit_price", _sub(r"\d+\s*@\s*\$?\d+\.\d{2}\s*/\s*[A-Za-z]+")),
    TextTransform("qty_at_price", _sub(r"\d+\s*@\s*\$?\d+\.\d{2}")),
    TextTransform("n_for", _sub(r"\b\d+\s+FOR\b", re.IGNORECASE)),
    TextTransform("dollar_sign", _sub(r"\$")),
    TextTransform("leading_star", _sub(r"^\s*\*+\s*")),
    TextTransform("whitespace", collapse_whitespace),
    TextTransform("trailing_flag", _sub(r"\s+F$")),
    TextTransform("leading_digits", _sub(r"^\d+\s+")),
    TextTransform("edge_punctuation", _strip_edge_punctuation),
    TextTransform("final_whitespace", collapse_whitespace),
)

NAME_REJECT_RULES: tuple[LineRule, ...] = (
    LineRule("pure_digits", lambda name: name.replace(" ", "").isdigit()),
    LineRule("no_letters", lambda name: not any(ch.isalpha() for ch in name)),
    LineRule("too_long", lambda name: len(name) > MAX_ITEM_NAME_LENGTH),
)


def first_matching_rule(rules: Sequence[LineRule], text: str) -> str | None:
    """Return the name of the first rule matching `text`, or None."""
    for rule in rules:
        if rule.matches(text):
            return rule.name
    return None


def apply_transforms(transforms: Sequence[TextTransform], text: str) -> str:
    """Apply transforms in order and return the result."""
    for transform in transforms:
        text = transform.apply(text)
    return text.strip()

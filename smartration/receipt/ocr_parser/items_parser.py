"""Text-line based receipt item extraction."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from smartration.domain.receipt import ReceiptLineItem
from smartration.receipt.ocr_helpers import collapse_repeated_words
from smartration.runtime.logging import get_logger

from .common import last_price_in, match_trailing_price
from .rules import (
    ITEM_NAME_TRANSFORMS,
    NAME_REJECT_RULES,
    SKIP_LINE_RULES,
    apply_transforms,
    first_matching_rule,
)

logger = get_logger(__name__)

MAX_ITEM_PRICE = Decimal("100")
# Between this and MAX_ITEM_PRICE, an amount with no real description is read
# as the order total.
TOTAL_CANDIDATE_THRESHOLD = Decimal("50")
NEAR_EMPTY_NAME_LENGTH = 2

# "2 Bananas 1.29" -> quantity 2. Not taken when the number starts a
# "2 @ 0.50" modifier or is itself followed by an amount.
LEADING_QUANTITY = re.compile(r"^(\d{1,2})\s+(?=[^\s@$\d])")


@dataclass(frozen=True)
class SkippedLine:
    """A receipt line that produced no item, with the reason."""

    line: str
    rule: str


def _split_leading_quantity(text: str) -> tuple[int, str]:
    match = LEADING_QUANTITY.match(text)
    if match:
        quantity = int(match.group(1))
        if quantity > 0:
            return quantity, text[match.end() :]
    return 1, text


def _skip(sink: list[SkippedLine] | None, line: str, rule: str) -> None:
    logger.debug("Skipping line %r (rule: %s)", line, rule)
    if sink is not None:
        sink.append(SkippedLine(line=line, rule=rule))


def _extract_items(
    lines: Sequence[str],
    skipped_sink: list[SkippedLine] | None = None,
    *,
    collapse_repeats: bool = True,
) -> tuple[list[ReceiptLineItem], Decimal | None]:
    """
    Extract purchased items from reconstructed receipt lines.

    Args:
        lines: Cleaned receipt lines in reading order
        skipped_sink: Optional list that receives every line that produced no
            item together with the name of the rule that rejected it
        collapse_repeats: Collapse OCR-duplicated words in item names

    Returns:
        (items in receipt order, candidate total or None). A candidate total is
        a large amount printed without a real description.
    """
    items: list[ReceiptLineItem] = []
    candidate_total: Decimal | None = None

    for line in lines:
        rule = first_matching_rule(SKIP_LINE_RULES, line)
        if rule:
            _skip(skipped_sink, line, rule)
            continue

        quantity, rest = _split_leading_quantity(line.strip())

        matched = match_trailing_price(rest)
        if matched is None:
            _skip(skipped_sink, line, "no_price")
            continue
        _, match = matched

        price = last_price_in(match.group(0))
        if price is None:
            _skip(skipped_sink, line, "no_price")
            continue

        name = apply_transforms(ITEM_NAME_TRANSFORMS, rest[: match.start()])

        # Amounts of MAX_ITEM_PRICE and above are rejected below, never taken as a total.
        if TOTAL_CANDIDATE_THRESHOLD < price < MAX_ITEM_PRICE and (
            len(name) <= NEAR_EMPTY_NAME_LENGTH or "total" in name.lower()
        ):
            if candidate_total is None or price > candidate_total:
                candidate_total = price
            _skip(skipped_sink, line, "total_candidate")
            continue

        if price <= 0:
            _skip(skipped_sink, line, "non_positive_price")
            continue
        if price >= MAX_ITEM_PRICE:
            _skip(skipped_sink, line, "implausible_price")
            continue
        if not name:
            _skip(skipped_sink, line, "empty_name")
            continue

        rule = first_matching_rule(NAME_REJECT_RULES, name)
        if rule:
            _skip(skipped_sink, line, rule)
            continue

        if collapse_repeats:
            name = collapse_repeated_words(name)

        items.append(ReceiptLineItem(name=name, unit_price=price, quantity=quantity))

    return items, candidate_total

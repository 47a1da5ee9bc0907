"""Parse OCR text annotations into a structured ReceiptRecord."""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from smartration.domain.receipt import UNKNOWN_STORE, ReceiptRecord
from smartration.runtime.logging import get_logger

from .date_utils import placeholder_receipt_date
from .ocr_helpers import LINE_Y_TOLERANCE, extract_tokens, reconstruct_lines
from .ocr_parser import SkippedLine, _extract_date, _extract_items, _extract_store, _extract_total

logger = get_logger(__name__)


class NoTextDetected(ValueError):
    """Raised when the OCR response contains no annotations at all."""


def parse_receipt(
    annotations: Sequence[dict[str, Any]] | None,
    *,
    line_tolerance: float = LINE_Y_TOLERANCE,
    collapse_repeats: bool = True,
    today: date | None = None,
    skipped_sink: list[SkippedLine] | None = None,
) -> ReceiptRecord:
    """
    Parse an OCR annotation list into a ReceiptRecord.

    This is a best-effort parser: missing fields degrade to sentinel values
    rather than failing.

    Args:
        annotations: Vision-style text annotations. A leading full-text block
            annotation is detected and ignored.
        line_tolerance: Vertical distance (pixels) within which tokens share a line
        collapse_repeats: Collapse OCR-duplicated words ("Milk Milk")
        today: Fallback date when the receipt shows none. Defaults to today.
        skipped_sink: Optional list receiving lines that produced no item

    Raises:
        NoTextDetected: If `annotations` is empty.
    """
    if not annotations:
        raise NoTextDetected("No text found in the image")

    tokens = extract_tokens(annotations)
    lines = reconstruct_lines(tokens, tolerance=line_tolerance, collapse_repeats=collapse_repeats)
    logger.debug("Reconstructed %d lines from %d tokens", len(lines), len(tokens))

    return assemble_receipt(lines, collapse_repeats=collapse_repeats, today=today, skipped_sink=skipped_sink)


def assemble_receipt(
    lines: Sequence[str],
    *,
    collapse_repeats: bool = True,
    today: date | None = None,
    skipped_sink: list[SkippedLine] | None = None,
) -> ReceiptRecord:
    """Extract fields from reconstructed lines and apply fallback defaults."""
    store = _extract_store(lines)
    receipt_date = _extract_date(lines)
    items, candidate_total = _extract_items(lines, skipped_sink, collapse_repeats=collapse_repeats)

    total = candidate_total
    if total is None:
        total = _extract_total(lines)
    total_is_computed = total is None
    if total is None:
        total = sum((item.line_total for item in items), Decimal("0"))

    date_is_placeholder = receipt_date is None
    if receipt_date is None:
        receipt_date = today or placeholder_receipt_date()

    record = ReceiptRecord(
        store=store or UNKNOWN_STORE,
        date=receipt_date.isoformat(),
        total=total,
        items=tuple(items),
        store_is_placeholder=store is None,
        date_is_placeholder=date_is_placeholder,
        total_is_computed=total_is_computed,
        raw_lines=tuple(lines),
    )
    logger.debug(
        "Parsed receipt: store=%s date=%s total=%s items=%d",
        record.store,
        record.date,
        record.total,
        len(record.items),
    )
    return record

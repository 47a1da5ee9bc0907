"""Composable OCR receipt parser components."""

from .fields_parser import _extract_date, _extract_store, _extract_total
from .items_parser import SkippedLine, _extract_items
from .rules import (
    ITEM_NAME_TRANSFORMS,
    NAME_REJECT_RULES,
    SKIP_LINE_RULES,
    LineRule,
    TextTransform,
    apply_transforms,
    first_matching_rule,
)

__all__ = [
    "ITEM_NAME_TRANSFORMS",
    "NAME_REJECT_RULES",
    "SKIP_LINE_RULES",
    "LineRule",
    "SkippedLine",
    "TextTransform",
    "_extract_date",
    "_extract_items",
    "_extract_store",
    "_extract_total",
    "apply_transforms",
    "first_matching_rule",
]

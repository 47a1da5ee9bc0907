"""Core domain models for SmartRation.

This module provides the data models shared by the parser, the upload
service and the CLI:
- ReceiptLineItem: one purchased item inferred from a receipt line
- ReceiptRecord: the structured result of parsing one receipt

Usage:
    from smartration.domain import ReceiptLineItem, ReceiptRecord
"""

from smartration.domain.receipt import UNKNOWN_STORE, ReceiptLineItem, ReceiptRecord

__all__ = [
    "UNKNOWN_STORE",
    "ReceiptLineItem",
    "ReceiptRecord",
]

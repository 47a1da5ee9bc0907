"""Receipt workflows."""

from smartration.application.receipts.scan import (
    ReceiptScanRequest,
    ReceiptScanResult,
    run_cached_receipt_parse,
    run_receipt_scan,
)

__all__ = [
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_cached_receipt_parse",
    "run_receipt_scan",
]

"""Receipt command handlers used by the unified CLI."""

import argparse
import sys
from pathlib import Path

from smartration.application.receipts.scan import ReceiptScanResult
from smartration.receipt.formatter import format_receipt_json, format_receipt_summary
from smartration.runtime import get_logger

logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for receiving receipt uploads."""
    import uvicorn

    from smartration.runtime import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Upload endpoints: http://{args.host}:{args.port}/api/receipts/scan | /api/receipts/scan-base64")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def cmd_scan(args: argparse.Namespace) -> None:
    """OCR a receipt image and print the parsed record."""
    from smartration.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
    from smartration.runtime.ocr_client import OCRServiceUnavailable, create_ocr_client

    try:
        ocr_client = create_ocr_client()
    except OCRServiceUnavailable as exc:
        logger.error("%s", exc)
        print(f"OCR service unavailable: {exc}")
        sys.exit(1)

    with ocr_client:
        result = run_receipt_scan(
            ReceiptScanRequest(
                image_path=Path(args.image),
                ocr_client=ocr_client,
                save_ocr_json_to=Path(args.save_ocr) if args.save_ocr else None,
            )
        )
    _report(result, as_json=args.json)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse a cached OCR JSON file without calling the OCR service."""
    from smartration.application.receipts.scan import run_cached_receipt_parse

    result = run_cached_receipt_parse(Path(args.ocr_json))
    _report(result, as_json=args.json)


def _report(result: ReceiptScanResult, as_json: bool) -> None:
    if result.status == "file_not_found":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        sys.exit(1)

    if result.status in ("invalid_image", "invalid_ocr_json"):
        print(f"Error: {result.error}")
        sys.exit(1)

    if result.status == "ocr_unavailable":
        logger.error("%s", result.error)
        print(f"OCR service unavailable: {result.error}")
        sys.exit(1)

    if result.status == "no_text_detected":
        print("No text found in the image. Please retake the photo.")
        sys.exit(1)

    receipt = result.receipt
    if receipt is None:
        print("Scan failed: missing receipt output.")
        sys.exit(1)

    if as_json:
        print(format_receipt_json(receipt))
    else:
        print(format_receipt_summary(receipt))

    if result.ocr_json_path is not None and not as_json:
        print(f"\nOCR JSON: {result.ocr_json_path}")

"""Receipt scan workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from smartration.receipt.ocr_result_parser import NoTextDetected, parse_receipt
from smartration.runtime.ocr_client import OCRServiceUnavailable, TextAnnotationSource
from smartration.runtime.receipt_pipeline import (
    InvalidReceiptImage,
    extract_receipt_data,
    load_ocr_json,
    save_ocr_json,
)
from smartration.runtime.settings import Settings, get_settings

if TYPE_CHECKING:
    from smartration.domain.receipt import ReceiptRecord

ScanStatus = Literal[
    "file_not_found",
    "invalid_image",
    "ocr_unavailable",
    "no_text_detected",
    "invalid_ocr_json",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running receipt scan workflow."""

    image_path: Path
    ocr_client: TextAnnotationSource
    save_ocr_json_to: Path | None = None
    settings: Settings | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from receipt scan workflow."""

    status: ScanStatus
    receipt: ReceiptRecord | None = None
    error: str | None = None
    ocr_json_path: Path | None = None


def run_receipt_scan(request: ReceiptScanRequest) -> ReceiptScanResult:
    """Run scan flow: read image -> OCR -> optionally cache OCR JSON -> parse."""
    if not request.image_path.exists():
        return ReceiptScanResult(
            status="file_not_found",
            error=f"Receipt file not found: {request.image_path}",
        )

    settings = request.settings or get_settings()
    annotations: list[dict[str, Any]] = []
    ocr_json_path = None
    try:
        receipt = extract_receipt_data(
            request.image_path.read_bytes(),
            request.ocr_client,
            settings,
            annotations_sink=annotations,
        )
    except InvalidReceiptImage as exc:
        return ReceiptScanResult(status="invalid_image", error=str(exc))
    except OCRServiceUnavailable as exc:
        return ReceiptScanResult(status="ocr_unavailable", error=str(exc))
    except NoTextDetected as exc:
        return ReceiptScanResult(status="no_text_detected", error=str(exc))
    finally:
        if request.save_ocr_json_to is not None and annotations:
            ocr_json_path = save_ocr_json(annotations, request.save_ocr_json_to)

    return ReceiptScanResult(status="parsed", receipt=receipt, ocr_json_path=ocr_json_path)


def run_cached_receipt_parse(ocr_json_path: Path, settings: Settings | None = None) -> ReceiptScanResult:
    """Re-parse annotations previously saved with `save_ocr_json`."""
    if not ocr_json_path.exists():
        return ReceiptScanResult(status="file_not_found", error=f"OCR JSON not found: {ocr_json_path}")

    settings = settings or get_settings()
    try:
        annotations = load_ocr_json(ocr_json_path)
    except ValueError as exc:
        return ReceiptScanResult(status="invalid_ocr_json", error=str(exc), ocr_json_path=ocr_json_path)

    try:
        receipt = parse_receipt(
            annotations,
            line_tolerance=settings.line_tolerance,
            collapse_repeats=settings.collapse_repeats,
        )
    except NoTextDetected as exc:
        return ReceiptScanResult(status="no_text_detected", error=str(exc), ocr_json_path=ocr_json_path)

    return ReceiptScanResult(status="parsed", receipt=receipt, ocr_json_path=ocr_json_path)

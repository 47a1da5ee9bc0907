import io
import json
from decimal import Decimal
from pathlib import Path

import pytest
from PIL import Image
from smartration.application.receipts import (
    ReceiptScanRequest,
    run_cached_receipt_parse,
    run_receipt_scan,
)
from smartration.runtime.ocr_client import OCRServiceUnavailable
from smartration.runtime.settings import Settings


def _annotation(text: str, x0: int, y0: int, x1: int, y1: int) -> dict:
    return {
        "description": text,
        "boundingPoly": {"vertices": [{"x": x0, "y": y0}, {"x": x1, "y": y0}, {"x": x1, "y": y1}, {"x": x0, "y": y1}]},
    }


EGGS_ANNOTATIONS = [_annotation("Eggs", 10, 10, 60, 30), _annotation("4.00", 300, 10, 350, 30)]


class FakeOCRClient:
    def __init__(self, annotations: list[dict] | None = None, error: Exception | None = None) -> None:
        self.annotations = annotations or []
        self.error = error

    def annotate(self, image_bytes: bytes) -> list[dict]:
        if self.error is not None:
            raise self.error
        return self.annotations


def _write_image(path: Path) -> Path:
    buffer = io.BytesIO()
    Image.new("RGB", (64, 32), "white").save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


def test_run_receipt_scan_parses_and_caches_ocr(tmp_path: Path) -> None:
    image = _write_image(tmp_path / "receipt.png")
    cache = tmp_path / "receipt.ocr.json"

    result = run_receipt_scan(
        ReceiptScanRequest(
            image_path=image,
            ocr_client=FakeOCRClient(EGGS_ANNOTATIONS),
            save_ocr_json_to=cache,
            settings=Settings(),
        )
    )

    assert result.status == "parsed"
    assert result.receipt is not None
    assert result.receipt.total == Decimal("4.00")
    assert result.ocr_json_path == cache
    assert json.loads(cache.read_text()) == {"textAnnotations": EGGS_ANNOTATIONS}


def test_run_receipt_scan_missing_file(tmp_path: Path) -> None:
    result = run_receipt_scan(ReceiptScanRequest(image_path=tmp_path / "nope.jpg", ocr_client=FakeOCRClient()))

    assert result.status == "file_not_found"
    assert result.receipt is None


def test_run_receipt_scan_reports_failures(tmp_path: Path) -> None:
    image = _write_image(tmp_path / "receipt.png")
    not_image = tmp_path / "notes.txt"
    not_image.write_text("hello")

    unavailable = run_receipt_scan(
        ReceiptScanRequest(image, FakeOCRClient(error=OCRServiceUnavailable("down")), settings=Settings())
    )
    no_text = run_receipt_scan(ReceiptScanRequest(image, FakeOCRClient([]), settings=Settings()))
    invalid = run_receipt_scan(ReceiptScanRequest(not_image, FakeOCRClient(EGGS_ANNOTATIONS), settings=Settings()))

    assert (unavailable.status, unavailable.error) == ("ocr_unavailable", "down")
    assert no_text.status == "no_text_detected"
    assert invalid.status == "invalid_image"


def test_run_cached_receipt_parse(tmp_path: Path) -> None:
    cache = tmp_path / "receipt.ocr.json"
    cache.write_text(json.dumps({"textAnnotations": EGGS_ANNOTATIONS}))

    result = run_cached_receipt_parse(cache, Settings())

    assert result.status == "parsed"
    assert result.receipt is not None
    assert [item.name for item in result.receipt.items] == ["Eggs"]
    assert run_cached_receipt_parse(tmp_path / "missing.json").status == "file_not_found"


def test_run_cached_receipt_parse_empty_cache(tmp_path: Path) -> None:
    cache = tmp_path / "empty.ocr.json"
    cache.write_text(json.dumps({"textAnnotations": []}))

    assert run_cached_receipt_parse(cache, Settings()).status == "no_text_detected"


@pytest.mark.parametrize("content", ["not json at all", "42", '{"responses": ["oops"]}'])
def test_run_cached_receipt_parse_malformed_cache(tmp_path: Path, content: str) -> None:
    cache = tmp_path / "broken.ocr.json"
    cache.write_text(content)

    result = run_cached_receipt_parse(cache, Settings())

    assert result.status == "invalid_ocr_json"
    assert result.receipt is None
    assert result.error

"""Regression receipts, replayed from cached OCR or sent to live Vision.

Cases live in tests/receipts_e2e/ and are keyed by name:
  - <name>.expected.json   required; store/date/total/items to check
  - <name>.ocr.json        cached Vision annotations (cached mode)
  - <name>.jpg             receipt photo (live mode, needs GOOGLE_VISION_API_KEY)

Select the mode with ``pytest --smartration-e2e-mode cached|live|both``.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, NamedTuple

import pytest
from smartration.domain.receipt import UNKNOWN_STORE, ReceiptRecord
from smartration.receipt.formatter import format_receipt_json, format_receipt_summary
from smartration.receipt.ocr_result_parser import parse_receipt
from smartration.runtime.ocr_client import create_ocr_client
from smartration.runtime.receipt_pipeline import extract_receipt_data, load_ocr_json
from smartration.runtime.settings import get_settings

CASES_DIR = Path(__file__).parent / "receipts_e2e"
EXPECTED_SUFFIX = ".expected.json"


class ReceiptCase(NamedTuple):
    name: str
    expected: dict[str, Any]
    ocr_json: Path | None
    photo: Path | None


def _optional(path: Path) -> Path | None:
    return path if path.exists() else None


def discover_cases() -> list[ReceiptCase]:
    cases = []
    for expected_path in sorted(CASES_DIR.glob(f"*{EXPECTED_SUFFIX}")):
        name = expected_path.name[: -len(EXPECTED_SUFFIX)]
        cases.append(
            ReceiptCase(
                name=name,
                expected=json.loads(expected_path.read_text()),
                ocr_json=_optional(CASES_DIR / f"{name}.ocr.json"),
                photo=_optional(CASES_DIR / f"{name}.jpg"),
            )
        )
    return cases


def check_receipt(receipt: ReceiptRecord, expected: dict[str, Any]) -> None:
    if "store" in expected:
        assert receipt.store == (expected["store"] or UNKNOWN_STORE)

    if "date" in expected:
        if expected["date"] is None:
            assert receipt.date_is_placeholder, f"receipt has no printed date, parser read {receipt.date}"
        else:
            assert receipt.date == expected["date"]

    assert receipt.total == Decimal(expected["total"])
    if "total_is_computed" in expected:
        assert receipt.total_is_computed is expected["total_is_computed"]

    if "items" in expected:
        got = [(item.name, item.unit_price, item.quantity) for item in receipt.items]
        want = [(item["name"], Decimal(item["price"]), item.get("quantity", 1)) for item in expected["items"]]
        assert got == want, "\n".join(receipt.raw_lines)

    assert receipt.date in format_receipt_summary(receipt)
    assert json.loads(format_receipt_json(receipt))["total"] == float(receipt.total)


@pytest.fixture
def e2e_mode(request: pytest.FixtureRequest) -> str:
    return request.config.getoption("--smartration-e2e-mode")


@pytest.mark.parametrize("case", discover_cases(), ids=lambda case: case.name)
def test_cached_receipt(case: ReceiptCase, e2e_mode: str) -> None:
    if e2e_mode == "live":
        pytest.skip("cached replay disabled in live mode")
    if case.ocr_json is None:
        pytest.skip(f"no cached OCR for {case.name}")

    check_receipt(parse_receipt(load_ocr_json(case.ocr_json)), case.expected)


@pytest.mark.parametrize("case", discover_cases(), ids=lambda case: case.name)
def test_live_receipt(case: ReceiptCase, e2e_mode: str) -> None:
    if e2e_mode == "cached":
        pytest.skip("live OCR disabled in cached mode")
    if case.photo is None:
        pytest.skip(f"no photo for {case.name}")
    if not get_settings().vision_api_key:
        pytest.skip("GOOGLE_VISION_API_KEY not set")

    with create_ocr_client() as client:
        receipt = extract_receipt_data(case.photo.read_bytes(), client)
    check_receipt(receipt, case.expected)


def test_regression_cases_present() -> None:
    assert discover_cases(), f"add <name>.expected.json files to {CASES_DIR}"

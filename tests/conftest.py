"""Shared pytest fixtures/options for smartration tests."""

from __future__ import annotations

import pytest
from smartration.runtime.settings import reset_settings


def pytest_addoption(parser):
    """Custom pytest option for receipt e2e tests."""
    parser.addoption(
        "--smartration-e2e-mode",
        action="store",
        default="cached",
        choices=["cached", "live", "both"],
        help=(
            "Receipt E2E mode for tests/test_e2e_receipts.py: "
            "cached (.ocr.json), live (.jpg -> Vision OCR), or both."
        ),
    )


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Make every test read settings from its own (possibly patched) environment."""
    reset_settings()
    yield
    reset_settings()

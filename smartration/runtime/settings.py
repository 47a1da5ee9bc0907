"""Environment-driven runtime settings.

Every knob the OCR client, the upload server and the CLI need is read from
environment variables once and kept in a frozen `Settings` instance.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"
DEFAULT_OCR_TIMEOUT = 60.0
DEFAULT_LINE_TOLERANCE = 10.0
DEFAULT_MAX_IMAGE_DIMENSION = 3000

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for SmartRation."""

    vision_api_key: str | None = None
    vision_api_url: str = DEFAULT_VISION_API_URL
    ocr_timeout: float = DEFAULT_OCR_TIMEOUT
    line_tolerance: float = DEFAULT_LINE_TOLERANCE
    collapse_repeats: bool = True
    max_image_dimension: int = DEFAULT_MAX_IMAGE_DIMENSION


def _env_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Raises:
        ValueError: If a numeric variable cannot be parsed.
    """
    if environ is None:
        environ = os.environ

    api_key = environ.get("GOOGLE_VISION_API_KEY", "").strip() or None
    collapse_raw = environ.get("SMARTRATION_COLLAPSE_REPEATS", "1").strip().lower()

    return Settings(
        vision_api_key=api_key,
        vision_api_url=environ.get("SMARTRATION_VISION_URL", "").strip() or DEFAULT_VISION_API_URL,
        ocr_timeout=_env_float(environ, "SMARTRATION_OCR_TIMEOUT", DEFAULT_OCR_TIMEOUT),
        line_tolerance=_env_float(environ, "SMARTRATION_LINE_TOLERANCE", DEFAULT_LINE_TOLERANCE),
        collapse_repeats=collapse_raw not in _FALSE_VALUES,
        max_image_dimension=_env_int(environ, "SMARTRATION_MAX_IMAGE_DIMENSION", DEFAULT_MAX_IMAGE_DIMENSION),
    )


# Global singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or load the process-wide settings.

    The environment is read on first call; later calls return the same
    instance until `reset_settings()` is called.
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next `get_settings()` re-reads the environment."""
    global _settings
    _settings = None

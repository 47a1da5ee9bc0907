"""Runtime helpers for the receipt OCR pipeline (non-HTTP)."""

import base64
import binascii
import json
import re
from pathlib import Path
from typing import Any

from smartration.domain.receipt import ReceiptRecord
from smartration.receipt.ocr_helpers import resize_image_bytes
from smartration.receipt.ocr_result_parser import parse_receipt
from smartration.runtime.logging import get_logger
from smartration.runtime.ocr_client import TextAnnotationSource
from smartration.runtime.settings import Settings, get_settings

logger = get_logger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")


class InvalidReceiptImage(ValueError):
    """Raised when uploaded bytes are not a decodable image."""


def decode_image_data_url(data: str) -> bytes:
    """
    Decode a base64 image, with or without a ``data:image/...;base64,`` prefix.

    Raises:
        InvalidReceiptImage: If the payload is empty or not valid base64.
    """
    encoded = DATA_URL_PREFIX.sub("", data.strip())
    if not encoded:
        raise InvalidReceiptImage("Empty image payload")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidReceiptImage("Image payload is not valid base64") from e


def prepare_image_bytes(image_bytes: bytes, max_dimension: int) -> bytes:
    """Normalize orientation/size of an uploaded image before OCR.

    Raises:
        InvalidReceiptImage: If Pillow cannot read the bytes as an image.
    """
    from PIL import UnidentifiedImageError

    try:
        return resize_image_bytes(image_bytes, max_dimension=max_dimension)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidReceiptImage("Uploaded file is not a readable image") from e


def extract_receipt_data(
    image_bytes: bytes,
    ocr_client: TextAnnotationSource,
    settings: Settings | None = None,
    annotations_sink: list[dict[str, Any]] | None = None,
) -> ReceiptRecord:
    """
    Run the full pipeline for one image: prepare -> OCR -> parse.

    Args:
        image_bytes: Raw uploaded image
        ocr_client: Source of text annotations
        settings: Runtime settings (defaults to process settings)
        annotations_sink: Optional list that receives the raw annotations,
            e.g. for caching them as JSON

    Raises:
        InvalidReceiptImage: If the image cannot be read.
        OCRServiceUnavailable: If the OCR call fails.
        NoTextDetected: If OCR found no text.
    """
    settings = settings or get_settings()
    prepared = prepare_image_bytes(image_bytes, settings.max_image_dimension)
    annotations = ocr_client.annotate(prepared)
    if annotations_sink is not None:
        annotations_sink.extend(annotations)

    return parse_receipt(
        annotations,
        line_tolerance=settings.line_tolerance,
        collapse_repeats=settings.collapse_repeats,
    )


def save_ocr_json(annotations: list[dict[str, Any]], output_path: Path) -> Path:
    """Save OCR annotations as JSON for debugging and offline re-parsing."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps({"textAnnotations": annotations}, indent=2))
    logger.debug("OCR JSON saved to: %s", output_path)
    return output_path


def load_ocr_json(json_path: Path) -> list[dict[str, Any]]:
    """
    Load annotations saved by `save_ocr_json`.

    Also accepts a raw Vision response (``{"responses": [...]}``) or a bare
    annotation list.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not JSON or holds none of those shapes.
    """
    if not json_path.exists():
        raise FileNotFoundError(f"OCR JSON not found: {json_path}")

    data = json.loads(json_path.read_text())
    if isinstance(data, dict) and "responses" in data:
        responses = data.get("responses") or [{}]
        data = (responses[0] or {}) if isinstance(responses, list) else None
    if isinstance(data, dict):
        data = data.get("textAnnotations") or []
    if not isinstance(data, list):
        raise ValueError(f"Unrecognized OCR JSON in {json_path}: expected an annotation list")
    return data

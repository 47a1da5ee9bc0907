"""Google Cloud Vision text-detection client.

The client is constructed explicitly and passed to whatever needs OCR, so
tests can hand the pipeline any object with an ``annotate`` method instead.
"""

from __future__ import annotations

import base64
import time
from types import TracebackType
from typing import Any, Protocol

import httpx

from smartration.runtime.logging import get_logger
from smartration.runtime.settings import DEFAULT_OCR_TIMEOUT, DEFAULT_VISION_API_URL, Settings, get_settings

logger = get_logger(__name__)

MAX_TEXT_RESULTS = 50


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached or returns an error."""


class TextAnnotationSource(Protocol):
    """Anything that turns image bytes into Vision-style text annotations."""

    def annotate(self, image_bytes: bytes) -> list[dict[str, Any]]: ...


class VisionOCRClient:
    """Thin client for the Vision ``images:annotate`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_VISION_API_URL,
        timeout: float = DEFAULT_OCR_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            api_key: Vision API key sent as the ``key`` query parameter.
            api_url: Endpoint URL (overridable for proxies and tests).
            timeout: Request timeout in seconds for a client created here.
            http_client: Optional pre-built httpx client. Clients passed in
                are not closed by `close()`.
        """
        self.api_key = api_key
        self.api_url = api_url
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=timeout)

    def annotate(self, image_bytes: bytes) -> list[dict[str, Any]]:
        """
        Run text detection on an image.

        Returns:
            The ``textAnnotations`` list of the response; empty when Vision
            found no text.

        Raises:
            OCRServiceUnavailable: On transport errors, non-200 responses or a
                per-image error reported by Vision.
        """
        payload = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [{"type": "TEXT_DETECTION", "maxResults": MAX_TEXT_RESULTS}],
                }
            ]
        }
        logger.info("Sending receipt image (%d bytes) to Vision OCR...", len(image_bytes))

        start_time = time.time()
        try:
            response = self._http.post(self.api_url, params={"key": self.api_key}, json=payload)
        except httpx.RequestError as e:
            logger.error("Failed to connect to OCR service: %s", e)
            raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e
        logger.info("OCR service returned in %.2f seconds", time.time() - start_time)

        if response.status_code != 200:
            # Response bodies may echo receipt text; log status only.
            logger.error("OCR service error: %s", response.status_code)
            raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise OCRServiceUnavailable("OCR service returned invalid JSON") from e
        if not isinstance(data, dict):
            raise OCRServiceUnavailable("OCR service returned an unexpected payload")

        responses = data.get("responses") or [{}]
        first = responses[0] or {}
        error = first.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            logger.error("OCR service reported an error: %s", message)
            raise OCRServiceUnavailable(f"OCR service error: {message}")

        annotations = first.get("textAnnotations") or []
        logger.debug("OCR returned %d text annotations", len(annotations))
        return list(annotations)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> VisionOCRClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def create_ocr_client(settings: Settings | None = None) -> VisionOCRClient:
    """Create a Vision client from settings.

    Raises:
        OCRServiceUnavailable: If no API key is configured.
    """
    settings = settings or get_settings()
    if not settings.vision_api_key:
        raise OCRServiceUnavailable("GOOGLE_VISION_API_KEY is not configured")
    return VisionOCRClient(
        settings.vision_api_key,
        api_url=settings.vision_api_url,
        timeout=settings.ocr_timeout,
    )

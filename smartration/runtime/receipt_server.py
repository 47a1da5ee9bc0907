"""FastAPI service that turns uploaded receipt photos into meal-planning input."""

from collections.abc import Iterator
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from smartration.domain.receipt import ReceiptRecord
from smartration.receipt.ocr_result_parser import NoTextDetected
from smartration.runtime.logging import get_logger
from smartration.runtime.ocr_client import OCRServiceUnavailable, TextAnnotationSource, create_ocr_client
from smartration.runtime.receipt_pipeline import InvalidReceiptImage, decode_image_data_url, extract_receipt_data

logger = get_logger(__name__)

RETAKE_PHOTO_MESSAGE = "No text found in the image. Please retake the photo."


class ReceiptImagePayload(BaseModel):
    """JSON upload body: a base64 image, optionally as a data URL."""

    image: str


def get_ocr_client() -> Iterator[TextAnnotationSource]:
    """Provide a Vision client per request (overridden in tests)."""
    client = create_ocr_client()
    try:
        yield client
    finally:
        client.close()


app = FastAPI(title="SmartRation Receipt Scanner")


@app.exception_handler(InvalidReceiptImage)
async def invalid_image_handler(_request: Request, exc: InvalidReceiptImage) -> JSONResponse:
    return JSONResponse({"status": "error", "message": str(exc)}, status_code=400)


@app.exception_handler(NoTextDetected)
async def no_text_handler(_request: Request, _exc: NoTextDetected) -> JSONResponse:
    return JSONResponse({"status": "error", "message": RETAKE_PHOTO_MESSAGE}, status_code=422)


@app.exception_handler(OCRServiceUnavailable)
async def ocr_unavailable_handler(_request: Request, exc: OCRServiceUnavailable) -> JSONResponse:
    logger.error("Receipt OCR failed: %s", exc)
    return JSONResponse(
        {"status": "error", "message": "Receipt processing failed. Please try again later."},
        status_code=502,
    )


def _success_response(record: ReceiptRecord) -> dict[str, Any]:
    logger.info("Parsed receipt: %d items, total %.2f", len(record.items), record.total)
    return {
        "status": "success",
        "receipt": record.to_payload(),
        "store_is_placeholder": record.store_is_placeholder,
        "date_is_placeholder": record.date_is_placeholder,
        "total_is_computed": record.total_is_computed,
    }


@app.post("/api/receipts/scan")
async def scan_receipt(
    request: Request,
    ocr_client: TextAnnotationSource = Depends(get_ocr_client),
) -> JSONResponse:
    """Receive a receipt image as multipart form data and return the parsed record."""
    form = await request.form()

    # Accept the first uploaded file regardless of its field name.
    file = None
    for key, value in form.items():
        logger.debug("Form field: key=%r, type=%s", key, type(value))
        if hasattr(value, "read"):
            file = value
            break

    if file is None:
        return JSONResponse({"status": "error", "message": "No file found in request"}, status_code=400)

    contents = await file.read()
    if not contents:
        raise InvalidReceiptImage("Uploaded file is empty")

    record = await run_in_threadpool(extract_receipt_data, contents, ocr_client)
    return JSONResponse(_success_response(record))


@app.post("/api/receipts/scan-base64")
async def scan_receipt_base64(
    payload: ReceiptImagePayload,
    ocr_client: TextAnnotationSource = Depends(get_ocr_client),
) -> JSONResponse:
    """Receive a base64 (data URL) receipt image and return the parsed record."""
    contents = decode_image_data_url(payload.image)
    record = await run_in_threadpool(extract_receipt_data, contents, ocr_client)
    return JSONResponse(_success_response(record))


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

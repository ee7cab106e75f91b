"""Text-layer OCR for PDFs via the OCR.space parse API.

Backs the ``/api/v1/pdf-ocr`` endpoint, which the router can use as its
text-layer engine (``PDF_OCR_URL``).
"""

import logging

import httpx

from config import settings
from ocr_clients import build_http_client

logger = logging.getLogger(__name__)


class PdfOcrError(Exception):
    """PDF could not be fetched or OCR.space failed to process it."""


class PdfOcrService:
    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.OCR_SPACE_API_KEY
        self._endpoint = endpoint or settings.OCR_SPACE_URL
        self._client = build_http_client(timeout, connect_timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def close(self):
        self._client.close()

    def extract(self, pdf_url: str) -> tuple[str, int]:
        """Return (text, page_count). Raises PdfOcrError."""
        if not self._api_key:
            raise PdfOcrError("OCR_SPACE_API_KEY not configured")

        logger.info("Processing PDF with OCR.space: %s", pdf_url[:100])

        try:
            pdf_resp = self._client.get(pdf_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PdfOcrError(f"Failed to fetch PDF: {e}") from e
        if pdf_resp.status_code != 200:
            raise PdfOcrError(f"Failed to fetch PDF: HTTP {pdf_resp.status_code}")

        try:
            resp = self._client.post(
                self._endpoint,
                headers={"apikey": self._api_key},
                files={"file": ("document.pdf", pdf_resp.content, "application/pdf")},
            )
        except httpx.HTTPError as e:
            raise PdfOcrError(f"OCR API failed: {e}") from e
        if resp.status_code != 200:
            raise PdfOcrError(f"OCR API failed: HTTP {resp.status_code}")

        try:
            result = resp.json()
        except ValueError as e:
            raise PdfOcrError("OCR API returned invalid JSON") from e

        parsed = result.get("ParsedResults") or []
        if result.get("IsErroredOnProcessing") or not parsed:
            message = result.get("ErrorMessage") or "OCR processing failed"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise PdfOcrError(message)

        text = "\n\n".join(page.get("ParsedText") or "" for page in parsed)
        logger.info("OCR.space returned %d pages, %d characters", len(parsed), len(text))
        return text, len(parsed)

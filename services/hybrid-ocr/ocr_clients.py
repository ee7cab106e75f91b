"""HTTP clients for the OCR backends.

Three backends, tried in order by the router:
- the text-layer OCR service (PDFs),
- the cloud vision OCR service (images),
- the Google Vision API called directly as a last resort.

The service clients raise OcrServiceError; the direct client never raises
and returns an empty string instead.
"""

import base64
import logging

import httpx

from config import settings

logger = logging.getLogger(__name__)


class OcrServiceError(Exception):
    """OCR backend failed (transport error, non-OK status, or error payload)."""


def build_http_client(
    timeout: int | None = None,
    connect_timeout: int | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Client:
    read_timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
    conn_timeout = connect_timeout if connect_timeout is not None else settings.HTTP_CONNECT_TIMEOUT

    return httpx.Client(
        headers=headers or {},
        timeout=httpx.Timeout(
            connect=float(conn_timeout),
            read=float(read_timeout),
            write=30.0,
            pool=30.0,
        ),
        follow_redirects=True,
    )


def _service_headers(auth_token: str) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


class _ServiceClient:
    """Shared plumbing for the internal OCR services."""

    name = "ocr"

    def __init__(
        self,
        url: str,
        auth_token: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._url = url
        token = auth_token if auth_token is not None else settings.SERVICE_AUTH_TOKEN
        self._client = build_http_client(timeout, connect_timeout, _service_headers(token))

    @property
    def configured(self) -> bool:
        return bool(self._url)

    def close(self):
        self._client.close()

    def _post(self, payload: dict) -> dict:
        if not self._url:
            raise OcrServiceError(f"{self.name} service not configured")

        try:
            resp = self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            logger.error("%s service HTTP error: %s", self.name, e)
            raise OcrServiceError(f"{self.name} service HTTP error: {e}") from e

        if resp.status_code != 200:
            logger.error("%s service error %d: %s", self.name, resp.status_code, resp.text[:200])
            raise OcrServiceError(f"{self.name} service returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise OcrServiceError(f"{self.name} service returned invalid JSON") from e

        if not isinstance(data, dict):
            raise OcrServiceError(f"{self.name} service returned unexpected payload")
        return data


class TextLayerOcrClient(_ServiceClient):
    """Client for the PDF text-extraction service: POST {pdf_url} -> {text}."""

    name = "text-layer OCR"

    def extract_text(self, pdf_url: str) -> str:
        data = self._post({"pdf_url": pdf_url})
        text = data.get("text") or ""
        logger.info("Text-layer OCR returned %d characters", len(text))
        return text


class VisionOcrClient(_ServiceClient):
    """Client for the cloud vision OCR service.

    The locator is sent as both ``image_url`` and ``signedUrl``; the
    receiving service has accepted either name over time.
    """

    name = "vision OCR"

    def extract_text(self, image_url: str) -> str:
        data = self._post({"image_url": image_url, "signedUrl": image_url})
        text = data.get("text") or data.get("extracted_text") or ""
        if not text and data.get("error"):
            logger.error("Vision OCR returned error: %s", data["error"])
            raise OcrServiceError(f"vision OCR error: {data['error']}")

        logger.info("Vision OCR returned %d characters", len(text))
        return text


class DirectVisionClient:
    """Calls the Google Vision ``images:annotate`` endpoint with raw image bytes."""

    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.GOOGLE_VISION_API_KEY
        self._endpoint = endpoint or settings.GOOGLE_VISION_URL
        self._client = build_http_client(timeout, connect_timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def close(self):
        self._client.close()

    def extract_text(self, locator: str) -> str:
        """Return the detected document text, or "" on any failure."""
        if not self._api_key:
            logger.warning("Google Vision API key not configured, skipping direct OCR")
            return ""

        try:
            image_resp = self._client.get(locator)
            if image_resp.status_code != 200:
                logger.error("Failed to fetch document for direct OCR: HTTP %d", image_resp.status_code)
                return ""

            content = base64.b64encode(image_resp.content).decode()
            logger.info("Fetched document for direct OCR: %d bytes", len(image_resp.content))

            payload = {
                "requests": [
                    {
                        "image": {"content": content},
                        "features": [{"type": "DOCUMENT_TEXT_DETECTION", "maxResults": 1}],
                    }
                ]
            }
            resp = self._client.post(self._endpoint, params={"key": self._api_key}, json=payload)
            if resp.status_code != 200:
                logger.error("Google Vision API error %d: %s", resp.status_code, resp.text[:200])
                return ""

            responses = resp.json().get("responses") or [{}]
            text = (responses[0].get("fullTextAnnotation") or {}).get("text") or ""
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, AttributeError) as e:
            logger.error("Direct Google Vision error: %s", e)
            return ""

        logger.info("Google Vision direct extracted %d characters", len(text))
        return text

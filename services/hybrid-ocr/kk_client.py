"""HTTP client for the delegated KK (family register) extractor service."""

import logging

import httpx

from config import settings
from ocr_clients import build_http_client

logger = logging.getLogger(__name__)


class KKExtractorError(Exception):
    """KK extractor unavailable or returned no usable data."""


class KKClient:
    def __init__(
        self,
        url: str | None = None,
        auth_token: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._url = url if url is not None else settings.KK_EXTRACTOR_URL
        token = auth_token if auth_token is not None else settings.SERVICE_AUTH_TOKEN
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = build_http_client(timeout, connect_timeout, headers)

    @property
    def configured(self) -> bool:
        return bool(self._url)

    def close(self):
        self._client.close()

    def extract(self, ocr_text: str) -> dict:
        """Return the extractor's ``data`` object; raise KKExtractorError otherwise."""
        if not self._url:
            raise KKExtractorError("KK extractor service not configured")

        try:
            resp = self._client.post(self._url, json={"ocr_text": ocr_text})
        except httpx.HTTPError as e:
            logger.error("KK extractor HTTP error: %s", e)
            raise KKExtractorError(f"KK extractor HTTP error: {e}") from e

        if resp.status_code != 200:
            raise KKExtractorError(f"KK extractor returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise KKExtractorError("KK extractor returned invalid JSON") from e

        if not isinstance(body, dict):
            raise KKExtractorError("KK extractor returned unexpected payload")

        data = body.get("data")
        if not body.get("success") or not isinstance(data, dict) or not data:
            raise KKExtractorError(body.get("error") or "KK extractor returned no data")

        return data

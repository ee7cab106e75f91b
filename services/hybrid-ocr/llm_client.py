"""HTTP client for the OpenAI-compatible chat-completions API.

Uses httpx with configurable timeouts and tenacity for retry with
exponential backoff on 429/503 and connection errors. Callers receive the
parsed JSON object from the model's message content.
"""

import json
import logging
import re

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 502, 503, 504}


class LLMServiceUnavailable(Exception):
    """LLM provider is temporarily unavailable (retryable: 429, 503, connection error)."""


class LLMServiceError(Exception):
    """LLM provider returned a non-retryable error or no usable content."""


class LLMClient:
    """Chat-completions client that asks for strict JSON output."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self._model = model or settings.OPENAI_MODEL
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.OPENAI_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.OPENAI_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.OPENAI_RETRY_BACKOFF

        read_timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.HTTP_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> dict:
        """Run one completion and return the parsed JSON object.

        Raises LLMServiceUnavailable (after retries) or LLMServiceError.
        """
        if not self._api_key:
            raise LLMServiceError("OPENAI_API_KEY not configured")

        payload: dict = {
            "model": model or self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0,
            "response_format": {"type": "json_object"},
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens

        content = self._complete_with_retry(payload)
        parsed = try_parse_json(content)
        if parsed is None:
            raise LLMServiceError("LLM response was not a JSON object")
        return parsed

    def _complete_with_retry(self, payload: dict) -> str:
        """Retry wrapper, configured dynamically based on settings."""

        @retry(
            retry=retry_if_exception_type(LLMServiceUnavailable),
            stop=stop_after_attempt(max(self._retry_attempts, 1)),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=60,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "LLM provider unavailable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_complete() -> str:
            return self._send_completion(payload)

        return _do_complete()

    def _send_completion(self, payload: dict) -> str:
        """Send a single chat-completions request."""
        try:
            resp = self._client.post("/chat/completions", json=payload)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("LLM provider connection failed: %s", e)
            raise LLMServiceUnavailable(f"Cannot connect to LLM provider: {e}") from e
        except httpx.ReadTimeout as e:
            logger.warning("LLM provider read timeout: %s", e)
            raise LLMServiceUnavailable(f"LLM provider read timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("LLM provider HTTP error: %s", e)
            raise LLMServiceError(f"LLM provider HTTP error: {e}") from e

        if resp.status_code in RETRYABLE_STATUS:
            logger.warning("LLM provider returned %d", resp.status_code)
            raise LLMServiceUnavailable(f"LLM provider returned HTTP {resp.status_code}")

        if resp.status_code != 200:
            logger.error("LLM provider error %d: %s", resp.status_code, resp.text[:200])
            raise LLMServiceError(f"LLM provider returned HTTP {resp.status_code}")

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMServiceError(f"Unexpected LLM response shape: {e}") from e

        if not content:
            raise LLMServiceError("LLM returned empty content")

        logger.info("LLM response received (%d chars)", len(content))
        return content


def try_parse_json(raw: str) -> dict | None:
    """Try to extract a JSON object from the model output.

    Handles: direct JSON, markdown fences, preamble text, and
    <think>...</think> blocks.
    """
    if not raw:
        return None

    cleaned = re.sub(r"<think>.*?</think>", "", raw, flags=re.DOTALL).strip()

    # Try direct parse first
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    # Try to find JSON block in markdown code fences
    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", cleaned, re.DOTALL)
    if match:
        try:
            result = json.loads(match.group(1).strip())
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass

    # Try the outermost { ... } span (objects may nest, e.g. anggota_keluarga)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        try:
            result = json.loads(cleaned[start:end + 1])
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass

    logger.warning("Could not parse JSON from model response: %s", cleaned[:200])
    return None

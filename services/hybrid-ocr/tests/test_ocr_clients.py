"""Tests for the OCR backend HTTP clients."""

import base64
import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from ocr_clients import DirectVisionClient, OcrServiceError, TextLayerOcrClient, VisionOcrClient


@pytest.fixture
def text_layer():
    client = TextLayerOcrClient("http://fake-pdf-ocr/extract", auth_token="secret", timeout=5, connect_timeout=2)
    yield client
    client.close()


@pytest.fixture
def vision():
    client = VisionOcrClient("http://fake-vision/ocr", auth_token="", timeout=5, connect_timeout=2)
    yield client
    client.close()


@pytest.fixture
def direct():
    client = DirectVisionClient(
        api_key="gv-key", endpoint="http://fake-gv/v1/images:annotate", timeout=5, connect_timeout=2,
    )
    yield client
    client.close()


class TestTextLayerOcrClient:
    def test_returns_text(self, text_layer: TextLayerOcrClient):
        with patch.object(text_layer._client, "post", return_value=httpx.Response(200, json={"text": "HELLO"})) as post:
            assert text_layer.extract_text("https://x/doc.pdf") == "HELLO"
        assert post.call_args.kwargs["json"] == {"pdf_url": "https://x/doc.pdf"}

    def test_bearer_token_sent(self, text_layer: TextLayerOcrClient):
        assert text_layer._client.headers["Authorization"] == "Bearer secret"

    def test_non_200_raises(self, text_layer: TextLayerOcrClient):
        with patch.object(text_layer._client, "post", return_value=httpx.Response(500, text="boom")):
            with pytest.raises(OcrServiceError, match="500"):
                text_layer.extract_text("https://x/doc.pdf")

    def test_transport_error_raises(self, text_layer: TextLayerOcrClient):
        with patch.object(text_layer._client, "post", side_effect=httpx.ConnectError("refused")):
            with pytest.raises(OcrServiceError):
                text_layer.extract_text("https://x/doc.pdf")

    def test_unconfigured_raises(self):
        client = TextLayerOcrClient("")
        assert client.configured is False
        with pytest.raises(OcrServiceError, match="not configured"):
            client.extract_text("https://x/doc.pdf")
        client.close()


class TestVisionOcrClient:
    def test_sends_both_locator_names(self, vision: VisionOcrClient):
        with patch.object(vision._client, "post", return_value=httpx.Response(200, json={"text": "KTP"})) as post:
            assert vision.extract_text("https://x/a.jpg") == "KTP"
        assert post.call_args.kwargs["json"] == {"image_url": "https://x/a.jpg", "signedUrl": "https://x/a.jpg"}
        assert "Authorization" not in vision._client.headers

    def test_extracted_text_key(self, vision: VisionOcrClient):
        with patch.object(vision._client, "post", return_value=httpx.Response(200, json={"extracted_text": "X"})):
            assert vision.extract_text("https://x/a.jpg") == "X"

    def test_error_field_raises(self, vision: VisionOcrClient):
        resp = httpx.Response(200, json={"text": "", "error": "quota exceeded"})
        with patch.object(vision._client, "post", return_value=resp):
            with pytest.raises(OcrServiceError, match="quota exceeded"):
                vision.extract_text("https://x/a.jpg")

    def test_empty_text_without_error(self, vision: VisionOcrClient):
        with patch.object(vision._client, "post", return_value=httpx.Response(200, json={})):
            assert vision.extract_text("https://x/a.jpg") == ""

    def test_non_object_payload_raises(self, vision: VisionOcrClient):
        with patch.object(vision._client, "post", return_value=httpx.Response(200, json=["text"])):
            with pytest.raises(OcrServiceError):
                vision.extract_text("https://x/a.jpg")


class TestDirectVisionClient:
    def test_annotates_fetched_bytes(self, direct: DirectVisionClient):
        image = httpx.Response(200, content=b"jpeg-bytes")
        annotated = httpx.Response(200, json={"responses": [{"fullTextAnnotation": {"text": "NIK 123"}}]})

        with patch.object(direct._client, "get", return_value=image), \
                patch.object(direct._client, "post", return_value=annotated) as post:
            assert direct.extract_text("https://x/a.jpg") == "NIK 123"

        assert post.call_args.kwargs["params"] == {"key": "gv-key"}
        request = post.call_args.kwargs["json"]["requests"][0]
        assert request["image"]["content"] == base64.b64encode(b"jpeg-bytes").decode()
        assert request["features"] == [{"type": "DOCUMENT_TEXT_DETECTION", "maxResults": 1}]

    def test_missing_key_returns_empty(self):
        client = DirectVisionClient(api_key="", endpoint="http://fake-gv")
        with patch.object(client._client, "get") as get:
            assert client.extract_text("https://x/a.jpg") == ""
            get.assert_not_called()
        client.close()

    def test_fetch_failure_returns_empty(self, direct: DirectVisionClient):
        with patch.object(direct._client, "get", return_value=httpx.Response(403)):
            assert direct.extract_text("https://x/a.jpg") == ""

    def test_api_error_returns_empty(self, direct: DirectVisionClient):
        with patch.object(direct._client, "get", return_value=httpx.Response(200, content=b"x")), \
                patch.object(direct._client, "post", return_value=httpx.Response(400, text="bad image")):
            assert direct.extract_text("https://x/a.jpg") == ""

    def test_transport_error_returns_empty(self, direct: DirectVisionClient):
        with patch.object(direct._client, "get", side_effect=httpx.ReadTimeout("slow")):
            assert direct.extract_text("https://x/a.jpg") == ""

    def test_malformed_locator_returns_empty(self, direct: DirectVisionClient):
        assert direct.extract_text("http://exa mple.com/\x00a.jpg") == ""

    def test_no_annotation_returns_empty(self, direct: DirectVisionClient):
        with patch.object(direct._client, "get", return_value=httpx.Response(200, content=b"x")), \
                patch.object(direct._client, "post", return_value=httpx.Response(200, json={"responses": [{}]})):
            assert direct.extract_text("https://x/a.jpg") == ""

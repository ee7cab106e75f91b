"""Tests for the OCR.space PDF text extraction."""

import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pdf_ocr import PdfOcrError, PdfOcrService


@pytest.fixture
def pdf_ocr():
    service = PdfOcrService(api_key="ocr-key", endpoint="http://fake-ocrspace/parse/image", timeout=5)
    yield service
    service.close()


def _pdf() -> httpx.Response:
    return httpx.Response(200, content=b"%PDF-1.4 fake")


class TestPdfOcrService:
    def test_joins_pages(self, pdf_ocr: PdfOcrService):
        parsed = httpx.Response(200, json={
            "IsErroredOnProcessing": False,
            "ParsedResults": [{"ParsedText": "page one"}, {"ParsedText": "page two"}],
        })
        with patch.object(pdf_ocr._client, "get", return_value=_pdf()), \
                patch.object(pdf_ocr._client, "post", return_value=parsed) as post:
            text, pages = pdf_ocr.extract("https://x/doc.pdf")

        assert text == "page one\n\npage two"
        assert pages == 2
        assert post.call_args.kwargs["headers"] == {"apikey": "ocr-key"}
        name, content, media_type = post.call_args.kwargs["files"]["file"]
        assert (name, content, media_type) == ("document.pdf", b"%PDF-1.4 fake", "application/pdf")

    def test_processing_error(self, pdf_ocr: PdfOcrService):
        parsed = httpx.Response(200, json={"IsErroredOnProcessing": True, "ErrorMessage": ["File too large"]})
        with patch.object(pdf_ocr._client, "get", return_value=_pdf()), \
                patch.object(pdf_ocr._client, "post", return_value=parsed):
            with pytest.raises(PdfOcrError, match="File too large"):
                pdf_ocr.extract("https://x/doc.pdf")

    def test_no_parsed_results(self, pdf_ocr: PdfOcrService):
        parsed = httpx.Response(200, json={"ParsedResults": []})
        with patch.object(pdf_ocr._client, "get", return_value=_pdf()), \
                patch.object(pdf_ocr._client, "post", return_value=parsed):
            with pytest.raises(PdfOcrError, match="OCR processing failed"):
                pdf_ocr.extract("https://x/doc.pdf")

    def test_fetch_failure(self, pdf_ocr: PdfOcrService):
        with patch.object(pdf_ocr._client, "get", return_value=httpx.Response(404)):
            with pytest.raises(PdfOcrError, match="Failed to fetch PDF"):
                pdf_ocr.extract("https://x/doc.pdf")

    def test_malformed_url(self, pdf_ocr: PdfOcrService):
        with pytest.raises(PdfOcrError, match="Failed to fetch PDF"):
            pdf_ocr.extract("http://exa mple.com/\x00doc.pdf")

    def test_missing_key(self):
        service = PdfOcrService(api_key="", endpoint="http://fake-ocrspace")
        with pytest.raises(PdfOcrError, match="OCR_SPACE_API_KEY"):
            service.extract("https://x/doc.pdf")
        service.close()

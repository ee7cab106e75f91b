"""Tests for the per-document-type extraction strategies."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from extraction import (
    IJAZAH_ENGINE_SUFFIX,
    KK_ENGINE_SUFFIX,
    STRATEGIES,
    FieldExtractor,
)
from kk_client import KKExtractorError
from llm_client import LLMServiceError, LLMServiceUnavailable
from models import DocumentType


@pytest.fixture
def llm():
    client = MagicMock()
    client.configured = True
    return client


@pytest.fixture
def kk_client():
    client = MagicMock()
    client.extract.side_effect = KKExtractorError("not configured")
    return client


@pytest.fixture
def extractor(llm, kk_client):
    return FieldExtractor(llm, kk_client)


class TestStrategies:
    def test_every_type_has_a_strategy(self):
        assert set(STRATEGIES) == set(DocumentType)

    def test_dedicated_paths(self):
        assert STRATEGIES[DocumentType.IJAZAH].dedicated == "ijazah"
        assert STRATEGIES[DocumentType.KK].dedicated == "kk"
        assert STRATEGIES[DocumentType.KTP].dedicated is None
        assert STRATEGIES[DocumentType.KTP].regex_fallback is None


class TestGenericExtraction:
    def test_ktp_uses_generic_prompt(self, extractor: FieldExtractor, llm, ktp_text: str):
        llm.complete_json.return_value = {"nik": "3174012345678901"}

        result = extractor.extract(ktp_text, DocumentType.KTP)

        assert result.data == {"nik": "3174012345678901"}
        assert result.engine_suffix == ""
        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "KTP" in system_prompt
        assert user_prompt.startswith("Document Type: KTP")
        assert ktp_text in user_prompt

    def test_llm_failure_gives_empty_data(self, extractor: FieldExtractor, llm, ktp_text: str):
        llm.complete_json.side_effect = LLMServiceUnavailable("503")

        result = extractor.extract(ktp_text, DocumentType.KTP)

        assert result.data == {}
        assert result.engine_suffix == ""

    def test_unconfigured_llm_skips_call(self, extractor: FieldExtractor, llm):
        llm.configured = False

        result = extractor.extract("some text", DocumentType.INVOICE)

        assert result.data == {}
        llm.complete_json.assert_not_called()

    def test_unknown_document(self, extractor: FieldExtractor, llm):
        llm.complete_json.return_value = {"title": "memo"}
        assert extractor.extract("memo", DocumentType.UNKNOWN).data == {"title": "memo"}


class TestIjazahExtraction:
    def test_llm_path(self, extractor: FieldExtractor, llm, ijazah_text: str):
        llm.complete_json.return_value = {"nama": "SITI AMINAH", "jenjang": "SMA"}

        result = extractor.extract(ijazah_text, DocumentType.IJAZAH)

        assert result.data["nama"] == "SITI AMINAH"
        assert result.engine_suffix == IJAZAH_ENGINE_SUFFIX

    def test_regex_fallback_on_llm_error(self, extractor: FieldExtractor, llm, ijazah_text: str):
        llm.complete_json.side_effect = LLMServiceError("bad content")

        result = extractor.extract(ijazah_text, DocumentType.IJAZAH)

        assert result.data["tahun_lulus"] == "2020"
        assert result.data["jenjang"] == "SMA"
        assert result.engine_suffix == IJAZAH_ENGINE_SUFFIX

    def test_regex_fallback_on_empty_object(self, extractor: FieldExtractor, llm, ijazah_text: str):
        llm.complete_json.return_value = {}

        result = extractor.extract(ijazah_text, DocumentType.IJAZAH)

        assert result.data["nisn"] == "0023456789"


class TestKKExtraction:
    def test_delegated_service_short_circuits(self, extractor: FieldExtractor, llm, kk_client, kk_text: str):
        kk_client.extract.side_effect = None
        kk_client.extract.return_value = {"nomor_kk": "1234567890123456", "anggota_keluarga": []}

        result = extractor.extract(kk_text, DocumentType.KK)

        assert result.data["nomor_kk"] == "1234567890123456"
        assert result.engine_suffix == KK_ENGINE_SUFFIX
        llm.complete_json.assert_not_called()

    def test_falls_back_to_generic(self, extractor: FieldExtractor, llm, kk_text: str):
        llm.complete_json.return_value = {"nomor_kk": "999"}

        result = extractor.extract(kk_text, DocumentType.KK)

        assert result.data == {"nomor_kk": "999"}
        assert result.engine_suffix == ""
        assert llm.complete_json.call_args.args[1].startswith("Document Type: KK")

    def test_regex_after_generic_fails(self, extractor: FieldExtractor, llm, kk_text: str):
        llm.complete_json.side_effect = LLMServiceUnavailable("down")

        result = extractor.extract(kk_text, DocumentType.KK)

        assert result.data["nomor_kk"] == "1234567890123456"
        assert result.data["provinsi"] == "DKI JAKARTA"
        assert result.engine_suffix == ""

    def test_no_regex_fallback_for_other_types(self, extractor: FieldExtractor, llm, kk_text: str):
        llm.complete_json.return_value = {}
        assert extractor.extract(kk_text, DocumentType.NPWP).data == {}

"""Structured field extraction: per-document-type strategies over the LLM.

IJAZAH and KK have dedicated paths with regex fallbacks; every other type
goes through the generic (UDFM) prompt with no fallback.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from kk_client import KKClient, KKExtractorError
from llm_client import LLMClient, LLMServiceError, LLMServiceUnavailable
from models import DocumentType, Extraction, StructuredFields
from prompts import (
    IJAZAH_SYSTEM_PROMPT,
    ijazah_user_prompt,
    udfm_system_prompt,
    udfm_user_prompt,
)
from regex_extractors import extract_ijazah_with_regex, extract_kk_with_regex

logger = logging.getLogger(__name__)

IJAZAH_ENGINE_SUFFIX = "_ijazah_extractor"
KK_ENGINE_SUFFIX = "_kk_extractor"


@dataclass(frozen=True)
class ExtractionStrategy:
    """How one document type is extracted.

    ``dedicated`` names a special path ("ijazah" or "kk"); ``regex_fallback``
    runs when the LLM paths leave the data empty.
    """

    doc_type: DocumentType
    dedicated: str | None = None
    regex_fallback: Callable[[str], StructuredFields] | None = None


STRATEGIES: dict[DocumentType, ExtractionStrategy] = {
    doc_type: ExtractionStrategy(doc_type) for doc_type in DocumentType
}
STRATEGIES[DocumentType.IJAZAH] = ExtractionStrategy(
    DocumentType.IJAZAH, dedicated="ijazah", regex_fallback=extract_ijazah_with_regex,
)
STRATEGIES[DocumentType.KK] = ExtractionStrategy(
    DocumentType.KK, dedicated="kk", regex_fallback=extract_kk_with_regex,
)


class FieldExtractor:
    def __init__(self, llm: LLMClient, kk_client: KKClient):
        self._llm = llm
        self._kk_client = kk_client

    def extract(self, raw_text: str, doc_type: DocumentType) -> Extraction:
        strategy = STRATEGIES[doc_type]

        if strategy.dedicated == "ijazah":
            return self._extract_ijazah(raw_text, strategy)

        if strategy.dedicated == "kk":
            delegated = self._delegate_kk(raw_text)
            if delegated:
                return Extraction(data=delegated, engine_suffix=KK_ENGINE_SUFFIX)
            logger.info("KK extractor unavailable, falling back to generic extraction")

        data = self._complete(udfm_system_prompt(doc_type), udfm_user_prompt(doc_type, raw_text), doc_type)

        if not data and doc_type is DocumentType.KK and strategy.regex_fallback is not None:
            logger.info("Using regex fallback for KK extraction")
            data = strategy.regex_fallback(raw_text)

        return Extraction(data=data)

    def _extract_ijazah(self, raw_text: str, strategy: ExtractionStrategy) -> Extraction:
        data = self._complete(IJAZAH_SYSTEM_PROMPT, ijazah_user_prompt(raw_text), DocumentType.IJAZAH)
        if not data and strategy.regex_fallback is not None:
            logger.info("Using regex fallback for IJAZAH extraction")
            data = strategy.regex_fallback(raw_text)
        return Extraction(data=data, engine_suffix=IJAZAH_ENGINE_SUFFIX)

    def _delegate_kk(self, raw_text: str) -> StructuredFields:
        try:
            data = self._kk_client.extract(raw_text)
        except KKExtractorError as e:
            logger.warning("KK extractor failed: %s", e)
            return {}
        logger.info("KK extractor returned %d fields", len(data))
        return data

    def _complete(self, system_prompt: str, user_prompt: str, doc_type: DocumentType) -> StructuredFields:
        if not self._llm.configured:
            logger.warning("LLM not configured, skipping %s extraction", doc_type.value)
            return {}

        try:
            data = self._llm.complete_json(system_prompt, user_prompt)
        except (LLMServiceUnavailable, LLMServiceError) as e:
            logger.error("LLM extraction for %s failed: %s", doc_type.value, e)
            return {}

        logger.info("Extracted %d fields for %s", len(data), doc_type.value)
        return data

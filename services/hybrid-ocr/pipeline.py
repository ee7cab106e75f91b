"""Hybrid OCR pipeline: normalize -> OCR -> classify -> extract -> assemble.

``Pipeline.run`` never raises. It returns PipelineOk or PipelineErr, and
``assemble`` turns either into the wire response at the HTTP boundary.
"""

import logging
import re
from dataclasses import dataclass

from classifier import candidate_types, classify, resolve_hint
from config import Settings
from extraction import FieldExtractor
from input_normalizer import normalize_input
from kk_client import KKClient
from kk_extractor import KKFullExtractor
from llm_client import LLMClient
from models import DocumentType, ExtractionResponse, PipelineErr, PipelineOk
from ocr_clients import DirectVisionClient, TextLayerOcrClient, VisionOcrClient
from ocr_router import OcrRouter
from pdf_ocr import PdfOcrService

logger = logging.getLogger(__name__)

NO_TEXT_ERROR = (
    "OCR failed to extract any text from the document. "
    "Please ensure the image is clear and readable."
)


def clean_ocr_text(raw_text: str) -> str:
    """Squeeze whitespace runs and drop blank lines."""
    lines = (re.sub(r"[^\S\n]+", " ", line).strip() for line in raw_text.splitlines())
    return "\n".join(line for line in lines if line)


class Pipeline:
    def __init__(self, router: OcrRouter, extractor: FieldExtractor):
        self._router = router
        self._extractor = extractor

    def run(
        self,
        image_url: str,
        file_type: str | None = None,
        document_type_hint: str | None = None,
    ) -> PipelineOk | PipelineErr:
        try:
            return self._run(image_url, file_type, document_type_hint)
        except Exception as e:
            logger.exception("Hybrid OCR pipeline failed")
            return PipelineErr(reason=str(e) or "Unknown error occurred", ocr_engine="error")

    def _run(self, image_url: str, file_type: str | None, hint: str | None) -> PipelineOk | PipelineErr:
        logger.info("Processing file: type=%s hint=%s url=%s...", file_type, hint, image_url[:100])

        kind = normalize_input(image_url, file_type)
        ocr = self._router.run(image_url, kind)

        if not ocr.has_text:
            return PipelineErr(
                reason=NO_TEXT_ERROR,
                ocr_engine=ocr.engine_used.value,
                document_type=resolve_hint(hint) or DocumentType.UNKNOWN,
            )

        doc_type = classify(ocr.raw_text, hint)
        if resolve_hint(hint) is None:
            candidates = candidate_types(ocr.raw_text)
            if len(candidates) > 1:
                logger.warning(
                    "Ambiguous document: %s match, using %s",
                    ", ".join(c.value for c in candidates), doc_type.value,
                )
        logger.info("Detected document type = %s", doc_type.value)

        extraction = self._extractor.extract(ocr.raw_text, doc_type)
        logger.info("Extraction complete: %d fields", len(extraction.data))

        return PipelineOk(
            ocr_engine=ocr.engine_used.value + extraction.engine_suffix,
            document_type=doc_type,
            data=extraction.data,
            raw_text=ocr.raw_text,
            clean_text=clean_ocr_text(ocr.raw_text),
        )


def assemble(outcome: PipelineOk | PipelineErr) -> ExtractionResponse:
    if isinstance(outcome, PipelineOk):
        return ExtractionResponse(
            success=True,
            ocr_engine=outcome.ocr_engine,
            jenis_dokumen=outcome.document_type.value,
            data=outcome.data,
            raw_text=outcome.raw_text,
            clean_text=outcome.clean_text,
        )

    return ExtractionResponse(
        success=False,
        ocr_engine=outcome.ocr_engine,
        jenis_dokumen=outcome.document_type.value,
        data={},
        raw_text="",
        clean_text="",
        error=outcome.reason,
    )


@dataclass
class Services:
    """Everything the HTTP layer needs, built once from Settings."""

    pipeline: Pipeline
    kk_extractor: KKFullExtractor
    pdf_ocr: PdfOcrService
    text_layer: TextLayerOcrClient
    vision: VisionOcrClient
    direct: DirectVisionClient
    llm: LLMClient
    kk_client: KKClient

    def health(self) -> dict[str, bool]:
        return {
            "pdf_ocr": self.text_layer.configured,
            "vision_ocr": self.vision.configured,
            "kk_extractor": self.kk_client.configured,
            "google_vision_key": self.direct.configured,
            "openai_key": self.llm.configured,
        }

    def close(self):
        for client in (self.pdf_ocr, self.text_layer, self.vision, self.direct, self.llm, self.kk_client):
            client.close()


def build_services(cfg: Settings) -> Services:
    timeouts = {"timeout": cfg.HTTP_TIMEOUT_SECONDS, "connect_timeout": cfg.HTTP_CONNECT_TIMEOUT}

    text_layer = TextLayerOcrClient(cfg.PDF_OCR_URL, auth_token=cfg.SERVICE_AUTH_TOKEN, **timeouts)
    vision = VisionOcrClient(cfg.VISION_OCR_URL, auth_token=cfg.SERVICE_AUTH_TOKEN, **timeouts)
    direct = DirectVisionClient(api_key=cfg.GOOGLE_VISION_API_KEY, endpoint=cfg.GOOGLE_VISION_URL, **timeouts)
    llm = LLMClient(
        api_key=cfg.OPENAI_API_KEY,
        base_url=cfg.OPENAI_BASE_URL,
        model=cfg.OPENAI_MODEL,
        retry_attempts=cfg.OPENAI_RETRY_ATTEMPTS,
        retry_delay=cfg.OPENAI_RETRY_DELAY,
        retry_backoff=cfg.OPENAI_RETRY_BACKOFF,
        **timeouts,
    )
    kk_client = KKClient(cfg.KK_EXTRACTOR_URL, auth_token=cfg.SERVICE_AUTH_TOKEN, **timeouts)

    router = OcrRouter(text_layer, vision, direct)
    return Services(
        pipeline=Pipeline(router, FieldExtractor(llm, kk_client)),
        kk_extractor=KKFullExtractor(llm, router, model=cfg.KK_OPENAI_MODEL, max_tokens=cfg.KK_MAX_TOKENS),
        pdf_ocr=PdfOcrService(api_key=cfg.OCR_SPACE_API_KEY, endpoint=cfg.OCR_SPACE_URL, **timeouts),
        text_layer=text_layer,
        vision=vision,
        direct=direct,
        llm=llm,
        kk_client=kk_client,
    )

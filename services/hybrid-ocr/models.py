"""Request/response models and the transient values passed between pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel


class DocumentType(str, Enum):
    KTP = "KTP"
    KK = "KK"
    IJAZAH = "IJAZAH"
    NPWP = "NPWP"
    SIM = "SIM"
    STNK = "STNK"
    PAJAK_KENDARAAN = "PAJAK_KENDARAAN"
    AWB = "AWB"
    INVOICE = "INVOICE"
    CV = "CV"
    BPJS = "BPJS"
    AKTA_LAHIR = "AKTA_LAHIR"
    SURAT_KETERANGAN = "SURAT_KETERANGAN"
    UNKNOWN = "UNKNOWN"


class OcrEngine(str, Enum):
    TESSERACT = "tesseract"
    GOOGLE_VISION = "google_vision"
    GOOGLE_VISION_FALLBACK = "google_vision_fallback"
    GOOGLE_VISION_DIRECT = "google_vision_direct"
    NONE = "none"


StructuredFields = dict[str, Any]


class ExtractionRequest(BaseModel):
    image_url: str | None = None
    file_type: str | None = None
    document_type_hint: str | None = None


class ExtractionResponse(BaseModel):
    success: bool
    ocr_engine: str
    jenis_dokumen: str
    data: StructuredFields = {}
    raw_text: str = ""
    clean_text: str = ""
    error: str | None = None


class KKExtractRequest(BaseModel):
    ocr_text: str | None = None
    image_url: str | None = None
    file_type: str | None = None


class PdfOcrRequest(BaseModel):
    pdf_url: str | None = None


@dataclass(frozen=True)
class InputKind:
    mime_type: str
    is_pdf: bool
    is_image: bool


@dataclass(frozen=True)
class OcrResult:
    engine_used: OcrEngine
    raw_text: str
    attempts: tuple[str, ...] = ()

    @property
    def has_text(self) -> bool:
        return bool(self.raw_text.strip())


@dataclass
class Extraction:
    """Fields pulled out of the OCR text, plus the extractor that produced them."""

    data: StructuredFields = field(default_factory=dict)
    engine_suffix: str = ""


@dataclass(frozen=True)
class PipelineOk:
    ocr_engine: str
    document_type: DocumentType
    data: StructuredFields
    raw_text: str
    clean_text: str


@dataclass(frozen=True)
class PipelineErr:
    reason: str
    ocr_engine: str
    document_type: DocumentType = DocumentType.UNKNOWN

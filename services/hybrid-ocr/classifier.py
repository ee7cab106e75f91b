"""Keyword-based classifier for Indonesian documents.

Rules are checked in a fixed priority order against the uppercased OCR
text; the first match wins. There is no confidence score. A document that
legitimately mentions another type's keywords (a CV listing a NIK, say) can
match several rules; ``candidate_types`` reports all of them.
"""

import logging
from typing import Callable

from models import DocumentType

logger = logging.getLogger(__name__)

# Types a caller may force through document_type_hint.
ACCEPTED_HINTS = frozenset({
    DocumentType.KTP, DocumentType.KK, DocumentType.IJAZAH, DocumentType.NPWP,
    DocumentType.SIM, DocumentType.STNK, DocumentType.PAJAK_KENDARAAN,
    DocumentType.AWB, DocumentType.INVOICE, DocumentType.CV,
})


def _any(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(kw in text for kw in keywords)


def _all(*keywords: str) -> Callable[[str], bool]:
    return lambda text: all(kw in text for kw in keywords)


def _either(*checks: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: any(check(text) for check in checks)


def _both(*checks: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: all(check(text) for check in checks)


# Priority order matters: KK before KTP, since a family card lists NIKs and birthplaces.
RULES: list[tuple[DocumentType, Callable[[str], bool]]] = [
    (DocumentType.KK, _any("KARTU KELUARGA", "NOMOR KK")),
    (
        DocumentType.KTP,
        _both(
            _any("NIK", "NOMOR INDUK KEPENDUDUKAN"),
            _any("TEMPAT", "TGL LAHIR", "TANGGAL LAHIR"),
        ),
    ),
    (
        DocumentType.IJAZAH,
        _any(
            "IJAZAH", "SEKOLAH MENENGAH", "NISN", "DIPLOMA",
            "SARJANA", "KELULUSAN", "SERTIFIKAT KELULUSAN",
        ),
    ),
    (DocumentType.NPWP, _any("NPWP", "NOMOR POKOK WAJIB PAJAK")),
    (DocumentType.SIM, _either(_any("SURAT IZIN MENGEMUDI"), _all("SIM", "GOLONGAN"))),
    (DocumentType.STNK, _any("SURAT TANDA NOMOR KENDARAAN", "STNK")),
    (DocumentType.PAJAK_KENDARAAN, _any("PAJAK KENDARAAN BERMOTOR", "PKB", "SAMSAT")),
    (DocumentType.AWB, _either(_any("AIR WAYBILL", "AWB"), _all("CONSIGNEE", "SHIPPER"))),
    (DocumentType.INVOICE, _either(_any("INVOICE", "FAKTUR"), _all("BILL TO", "TOTAL"))),
    (
        DocumentType.CV,
        _either(_any("CURRICULUM VITAE", "RIWAYAT HIDUP"), _all("PENGALAMAN KERJA", "PENDIDIKAN")),
    ),
    (DocumentType.BPJS, _any("BPJS", "JAMINAN KESEHATAN")),
    (DocumentType.AKTA_LAHIR, _any("AKTA KELAHIRAN", "KUTIPAN AKTA KELAHIRAN")),
    (DocumentType.SURAT_KETERANGAN, _any("SURAT KETERANGAN", "SKCK")),
]


def resolve_hint(hint: str | None) -> DocumentType | None:
    """Return the hint as a DocumentType if it is one of the accepted hints."""
    if not hint:
        return None
    try:
        doc_type = DocumentType(hint.strip().upper())
    except ValueError:
        return None
    return doc_type if doc_type in ACCEPTED_HINTS else None


def candidate_types(raw_text: str) -> list[DocumentType]:
    """All document types whose keyword rule matches, in priority order."""
    upper = (raw_text or "").upper()
    return [doc_type for doc_type, matches in RULES if matches(upper)]


def classify(raw_text: str, hint: str | None = None) -> DocumentType:
    """Assign one document type; an accepted hint bypasses text inspection."""
    hinted = resolve_hint(hint)
    if hinted is not None:
        return hinted

    upper = (raw_text or "").upper()
    for doc_type, matches in RULES:
        if matches(upper):
            return doc_type
    return DocumentType.UNKNOWN

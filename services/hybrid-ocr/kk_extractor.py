"""KK (Kartu Keluarga) full-table extractor.

Runs one LLM call with the full-table prompt, then normalizes the result
so every header field and all fifteen member columns are present, dates
are yyyy-MM-dd, regions are uppercase and a missing province is inferred
from the regency/city.
"""

import logging
import re

from input_normalizer import normalize_input
from llm_client import LLMClient, LLMServiceError, LLMServiceUnavailable
from ocr_router import OcrRouter
from prompts import KK_SYSTEM_PROMPT, kk_user_prompt
from regex_extractors import INDONESIAN_MONTHS

logger = logging.getLogger(__name__)

MEMBER_FIELDS: tuple[str, ...] = (
    "nama", "nik", "jenis_kelamin", "tempat_lahir", "tanggal_lahir", "agama",
    "pendidikan", "jenis_pekerjaan", "status_perkawinan", "status_hubungan_keluarga",
    "kewarganegaraan", "no_paspor", "no_kitap", "nama_ayah", "nama_ibu",
)

KOTA_TO_PROVINSI: dict[str, str] = {
    # DKI Jakarta
    "JAKARTA PUSAT": "DKI JAKARTA", "JAKARTA UTARA": "DKI JAKARTA",
    "JAKARTA BARAT": "DKI JAKARTA", "JAKARTA SELATAN": "DKI JAKARTA",
    "JAKARTA TIMUR": "DKI JAKARTA", "KEPULAUAN SERIBU": "DKI JAKARTA",
    # Jawa Barat
    "BANDUNG": "JAWA BARAT", "BANDUNG BARAT": "JAWA BARAT", "BOGOR": "JAWA BARAT",
    "BEKASI": "JAWA BARAT", "DEPOK": "JAWA BARAT", "CIMAHI": "JAWA BARAT",
    "TASIKMALAYA": "JAWA BARAT", "SUKABUMI": "JAWA BARAT", "CIANJUR": "JAWA BARAT",
    "GARUT": "JAWA BARAT", "KARAWANG": "JAWA BARAT", "SUBANG": "JAWA BARAT",
    "PURWAKARTA": "JAWA BARAT", "CIREBON": "JAWA BARAT", "INDRAMAYU": "JAWA BARAT",
    "MAJALENGKA": "JAWA BARAT", "KUNINGAN": "JAWA BARAT", "SUMEDANG": "JAWA BARAT",
    "CIAMIS": "JAWA BARAT", "PANGANDARAN": "JAWA BARAT", "BANJAR": "JAWA BARAT",
    # Jawa Tengah
    "SEMARANG": "JAWA TENGAH", "SOLO": "JAWA TENGAH", "SURAKARTA": "JAWA TENGAH",
    "MAGELANG": "JAWA TENGAH", "SALATIGA": "JAWA TENGAH", "PEKALONGAN": "JAWA TENGAH",
    "TEGAL": "JAWA TENGAH", "BREBES": "JAWA TENGAH", "CILACAP": "JAWA TENGAH",
    "BANYUMAS": "JAWA TENGAH", "PURBALINGGA": "JAWA TENGAH", "BANJARNEGARA": "JAWA TENGAH",
    "KEBUMEN": "JAWA TENGAH", "PURWOREJO": "JAWA TENGAH", "WONOSOBO": "JAWA TENGAH",
    "TEMANGGUNG": "JAWA TENGAH", "KENDAL": "JAWA TENGAH", "BATANG": "JAWA TENGAH",
    "PEMALANG": "JAWA TENGAH", "DEMAK": "JAWA TENGAH", "KUDUS": "JAWA TENGAH",
    "JEPARA": "JAWA TENGAH", "PATI": "JAWA TENGAH", "REMBANG": "JAWA TENGAH",
    "BLORA": "JAWA TENGAH", "GROBOGAN": "JAWA TENGAH", "SRAGEN": "JAWA TENGAH",
    "KARANGANYAR": "JAWA TENGAH", "WONOGIRI": "JAWA TENGAH", "SUKOHARJO": "JAWA TENGAH",
    "KLATEN": "JAWA TENGAH", "BOYOLALI": "JAWA TENGAH",
    # Jawa Timur
    "SURABAYA": "JAWA TIMUR", "MALANG": "JAWA TIMUR", "SIDOARJO": "JAWA TIMUR",
    "GRESIK": "JAWA TIMUR", "MOJOKERTO": "JAWA TIMUR", "PASURUAN": "JAWA TIMUR",
    "PROBOLINGGO": "JAWA TIMUR", "LUMAJANG": "JAWA TIMUR", "JEMBER": "JAWA TIMUR",
    "BANYUWANGI": "JAWA TIMUR", "BONDOWOSO": "JAWA TIMUR", "SITUBONDO": "JAWA TIMUR",
    "KEDIRI": "JAWA TIMUR", "BLITAR": "JAWA TIMUR", "TULUNGAGUNG": "JAWA TIMUR",
    "TRENGGALEK": "JAWA TIMUR", "PONOROGO": "JAWA TIMUR", "PACITAN": "JAWA TIMUR",
    "MADIUN": "JAWA TIMUR", "MAGETAN": "JAWA TIMUR", "NGAWI": "JAWA TIMUR",
    "BOJONEGORO": "JAWA TIMUR", "TUBAN": "JAWA TIMUR", "LAMONGAN": "JAWA TIMUR",
    "BANGKALAN": "JAWA TIMUR", "SAMPANG": "JAWA TIMUR", "PAMEKASAN": "JAWA TIMUR",
    "SUMENEP": "JAWA TIMUR", "NGANJUK": "JAWA TIMUR", "JOMBANG": "JAWA TIMUR",
    "BATU": "JAWA TIMUR",
    # Banten
    "TANGERANG": "BANTEN", "TANGERANG SELATAN": "BANTEN", "SERANG": "BANTEN",
    "CILEGON": "BANTEN", "PANDEGLANG": "BANTEN", "LEBAK": "BANTEN",
    # DI Yogyakarta
    "YOGYAKARTA": "DI YOGYAKARTA", "SLEMAN": "DI YOGYAKARTA", "BANTUL": "DI YOGYAKARTA",
    "KULON PROGO": "DI YOGYAKARTA", "GUNUNGKIDUL": "DI YOGYAKARTA",
    # Bali
    "DENPASAR": "BALI", "BADUNG": "BALI", "GIANYAR": "BALI", "TABANAN": "BALI",
    "BULELENG": "BALI", "KARANGASEM": "BALI", "KLUNGKUNG": "BALI", "BANGLI": "BALI",
    "JEMBRANA": "BALI",
    # Sumatera
    "MEDAN": "SUMATERA UTARA", "DELI SERDANG": "SUMATERA UTARA", "BINJAI": "SUMATERA UTARA",
    "PEMATANGSIANTAR": "SUMATERA UTARA", "PADANG": "SUMATERA BARAT",
    "BUKITTINGGI": "SUMATERA BARAT", "PEKANBARU": "RIAU", "DUMAI": "RIAU",
    "PALEMBANG": "SUMATERA SELATAN", "BANDAR LAMPUNG": "LAMPUNG",
    # Kalimantan
    "BALIKPAPAN": "KALIMANTAN TIMUR", "SAMARINDA": "KALIMANTAN TIMUR",
    "PONTIANAK": "KALIMANTAN BARAT", "BANJARMASIN": "KALIMANTAN SELATAN",
    "PALANGKARAYA": "KALIMANTAN TENGAH",
    # Sulawesi
    "MAKASSAR": "SULAWESI SELATAN", "MANADO": "SULAWESI UTARA", "PALU": "SULAWESI TENGAH",
    "KENDARI": "SULAWESI TENGGARA",
    # Papua
    "JAYAPURA": "PAPUA",
}

AGAMA_MAP: dict[str, str] = {
    "KRISTEN PROTESTAN": "KRISTEN", "PROTESTAN": "KRISTEN",
    "KRISTEN KATOLIK": "KATOLIK",
    "BUDDHA": "BUDHA",
    "KHONGHUCU": "KONGHUCU",
}

PENDIDIKAN_MAP: dict[str, str] = {
    "TIDAK SEKOLAH": "TIDAK/BELUM SEKOLAH",
    "BELUM SEKOLAH": "TIDAK/BELUM SEKOLAH",
    "SD": "TAMAT SD/SEDERAJAT",
    "SMP": "SLTP/SEDERAJAT",
    "SMA": "SLTA/SEDERAJAT",
    "SMK": "SLTA/SEDERAJAT",
    "D1": "DIPLOMA I/II",
    "D2": "DIPLOMA I/II",
    "D3": "AKADEMI/DIPLOMA III/S.MUDA",
    "D4": "DIPLOMA IV/STRATA I",
    "S1": "DIPLOMA IV/STRATA I",
    "S2": "STRATA II",
    "S3": "STRATA III",
}

STATUS_PERKAWINAN_MAP: dict[str, str] = {
    "BELUM MENIKAH": "BELUM KAWIN", "SINGLE": "BELUM KAWIN",
    "MENIKAH": "KAWIN", "MARRIED": "KAWIN",
    "CERAI": "CERAI HIDUP",
    "JANDA": "CERAI MATI", "DUDA": "CERAI MATI",
}

STATUS_HUBUNGAN_MAP: dict[str, str] = {
    "KEPALA": "KEPALA KELUARGA", "KK": "KEPALA KELUARGA",
    "ISTERI": "ISTRI",
    "ANAK KANDUNG": "ANAK", "ANAK ANGKAT": "ANAK",
    "ORANGTUA": "ORANG TUA",
    "KELUARGA LAIN": "FAMILI LAIN",
}


def clean_ocr_artifacts(text: str) -> str:
    if not text:
        return ""
    cleaned = text.replace("|", "")
    cleaned = re.sub(r"\\+", "", cleaned)
    cleaned = re.sub(r"[`´‘’]", "'", cleaned)
    cleaned = re.sub(r"[“”]", '"', cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def normalize_date(value: str) -> str:
    """Best-effort conversion of Indonesian date notations to yyyy-MM-dd."""
    cleaned = clean_ocr_artifacts(value)
    if not cleaned:
        return ""

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", cleaned):
        return cleaned

    match = re.search(r"(\d{1,2})[-/](\d{1,2})[-/](\d{4})", cleaned)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    match = re.search(r"(\d{1,2})[-/](\d{1,2})[-/](\d{2})\b", cleaned)
    if match:
        day, month, yy = match.groups()
        year = f"19{yy}" if int(yy) > 30 else f"20{yy}"
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    months = "|".join(sorted(INDONESIAN_MONTHS, key=len, reverse=True))
    match = re.search(rf"(\d{{1,2}})[\s\-]*({months})[\s\-]*(\d{{4}})", cleaned, re.IGNORECASE)
    if match:
        day, month_name, year = match.groups()
        return f"{year}-{INDONESIAN_MONTHS[month_name.lower()]}-{day.zfill(2)}"

    return cleaned


def normalize_gender(value: str) -> str:
    g = value.strip().lower()
    if "laki" in g or g in ("l", "pria"):
        return "Laki-Laki"
    if "perempuan" in g or g in ("p", "wanita"):
        return "Perempuan"
    return value


def normalize_rt_rw(value: str) -> str:
    match = re.search(r"(\d{1,3})\s*[/\\]\s*(\d{1,3})", value or "")
    if match:
        return f"{match.group(1).zfill(3)}/{match.group(2).zfill(3)}"
    return value or ""


def _digits_if_length(value: str, length: int) -> str:
    digits = re.sub(r"\D", "", value or "")
    return digits if len(digits) == length else (value or "")


def clean_nik(value: str) -> str:
    digits = re.sub(r"\D", "", value or "")
    return digits if len(digits) == 16 else re.sub(r"\s+", "", value or "")


def _mapped(value: str, mapping: dict[str, str]) -> str:
    key = (value or "").strip().upper()
    return mapping.get(key, key)


def normalize_kewarganegaraan(value: str) -> str:
    k = (value or "").strip().upper()
    if not k or k == "WNI" or "INDONESIA" in k:
        return "WNI"
    if k == "WNA" or "ASING" in k:
        return "WNA"
    return k


def infer_provinsi(provinsi: str, kabupaten_kota: str) -> str:
    if provinsi and provinsi.strip():
        return provinsi.strip().upper()

    kota = re.sub(r"^(KOTA|KABUPATEN|KAB\.?)\s+", "", (kabupaten_kota or "").strip().upper())
    if not kota:
        return ""
    if kota in KOTA_TO_PROVINSI:
        return KOTA_TO_PROVINSI[kota]

    for name, prov in KOTA_TO_PROVINSI.items():
        if name in kota or kota in name:
            return prov
    return ""


def normalize_member(member: dict) -> dict[str, str]:
    def text(key: str) -> str:
        value = member.get(key)
        return clean_ocr_artifacts(value if isinstance(value, str) else "")

    return {
        "nama": text("nama").upper(),
        "nik": clean_nik(text("nik")),
        "jenis_kelamin": normalize_gender(text("jenis_kelamin")),
        "tempat_lahir": text("tempat_lahir").upper(),
        "tanggal_lahir": normalize_date(text("tanggal_lahir")),
        "agama": _mapped(text("agama"), AGAMA_MAP),
        "pendidikan": _mapped(text("pendidikan"), PENDIDIKAN_MAP),
        "jenis_pekerjaan": text("jenis_pekerjaan").upper(),
        "status_perkawinan": _mapped(text("status_perkawinan"), STATUS_PERKAWINAN_MAP),
        "status_hubungan_keluarga": _mapped(text("status_hubungan_keluarga"), STATUS_HUBUNGAN_MAP),
        "kewarganegaraan": normalize_kewarganegaraan(text("kewarganegaraan")),
        "no_paspor": text("no_paspor"),
        "no_kitap": text("no_kitap"),
        "nama_ayah": text("nama_ayah").upper(),
        "nama_ibu": text("nama_ibu").upper(),
    }


def normalize_kk_data(data: dict) -> dict:
    """Fill every KK field and normalize values to the civil-registry forms."""

    def header(key: str) -> str:
        value = data.get(key)
        return clean_ocr_artifacts(value if isinstance(value, str) else "")

    raw_members = data.get("anggota_keluarga")
    members = [normalize_member(m) for m in raw_members or [] if isinstance(m, dict)]

    nama_kepala = header("nama_kepala_keluarga").upper()
    if not nama_kepala and members:
        kepala = next((m for m in members if m["status_hubungan_keluarga"] == "KEPALA KELUARGA"), None)
        nama_kepala = (kepala or members[0])["nama"]

    kabupaten_kota = header("kabupaten_kota").upper()

    debug_notes = data.get("debug_notes")
    if not isinstance(debug_notes, dict):
        debug_notes = {"inferred_fields": [], "uncertain_values": [], "ocr_confidence": 0}

    return {
        "nomor_kk": _digits_if_length(header("nomor_kk"), 16),
        "nama_kepala_keluarga": nama_kepala,
        "alamat": header("alamat"),
        "rt_rw": normalize_rt_rw(header("rt_rw")),
        "kelurahan_desa": header("kelurahan_desa").upper(),
        "kecamatan": header("kecamatan").upper(),
        "kabupaten_kota": kabupaten_kota,
        "provinsi": infer_provinsi(header("provinsi"), kabupaten_kota),
        "kode_pos": _digits_if_length(header("kode_pos"), 5),
        "tanggal_dikeluarkan": normalize_date(header("tanggal_dikeluarkan")),
        "anggota_keluarga": members or [dict.fromkeys(MEMBER_FIELDS, "")],
        "debug_notes": debug_notes,
    }


class KKFullExtractor:
    """Serves the ``/api/v1/kk-extract`` endpoint."""

    def __init__(self, llm: LLMClient, router: OcrRouter, model: str, max_tokens: int):
        self._llm = llm
        self._router = router
        self._model = model
        self._max_tokens = max_tokens

    def run(self, ocr_text: str | None, image_url: str | None = None, file_type: str | None = None) -> dict:
        raw_text = ocr_text or ""

        if not raw_text.strip() and image_url:
            logger.info("No OCR text provided, running OCR on %s", image_url[:100])
            raw_text = self._router.run(image_url, normalize_input(image_url, file_type)).raw_text

        if not raw_text.strip():
            return _failure("No OCR text provided or OCR failed to extract text")

        if not self._llm.configured:
            logger.error("OpenAI API key not configured")
            return _failure("AI service not configured - OPENAI_API_KEY missing")

        logger.info("Processing KK document with %d characters", len(raw_text))

        try:
            extracted = self._llm.complete_json(
                KK_SYSTEM_PROMPT,
                kk_user_prompt(raw_text),
                model=self._model,
                max_tokens=self._max_tokens,
            )
        except (LLMServiceUnavailable, LLMServiceError) as e:
            logger.error("KK extraction failed: %s", e)
            return _failure(f"AI extraction failed: {e}")

        data = normalize_kk_data(extracted)
        logger.info("KK extraction successful: %d family members", len(data["anggota_keluarga"]))

        return {
            "success": True,
            "jenis_dokumen": "KK",
            "data": data,
            "raw_text": raw_text,
            "ocr_engine": "kk_full_extractor",
        }


def _failure(error: str) -> dict:
    return {"success": False, "error": error, "data": None}

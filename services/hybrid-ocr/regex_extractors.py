"""Regex fallbacks used when the LLM extraction yields nothing.

Only KK and IJAZAH have one. They are best-effort: every key of the
document's schema is present, unmatched keys stay None.
"""

import re

# Full Indonesian month names plus the abbreviations seen on printed documents.
INDONESIAN_MONTHS: dict[str, str] = {
    "januari": "01", "jan": "01",
    "februari": "02", "feb": "02", "pebruari": "02",
    "maret": "03", "mar": "03",
    "april": "04", "apr": "04",
    "mei": "05",
    "juni": "06", "jun": "06",
    "juli": "07", "jul": "07",
    "agustus": "08", "agu": "08", "ags": "08",
    "september": "09", "sep": "09", "sept": "09",
    "oktober": "10", "okt": "10",
    "november": "11", "nov": "11", "nop": "11",
    "desember": "12", "des": "12",
}

# Longest names first so "juni" is not read as "jun" + "i".
_MONTH_ALTERNATION = "|".join(sorted(INDONESIAN_MONTHS, key=len, reverse=True))

MONTH_DATE_RE = re.compile(
    rf"\b(\d{{1,2}})[\s\-]*({_MONTH_ALTERNATION})\b[\s\-]*(\d{{4}})\b",
    re.IGNORECASE,
)

_LINE = r"[^\S\n]*"  # horizontal whitespace only


def parse_month_name_date(text: str) -> str | None:
    """Find the first "dd <Month> yyyy" date and return it as yyyy-MM-dd."""
    match = MONTH_DATE_RE.search(text or "")
    if not match:
        return None
    day, month_name, year = match.groups()
    month = INDONESIAN_MONTHS.get(month_name.lower())
    if month is None:
        return None
    return f"{year}-{month}-{day.zfill(2)}"


def _first(pattern: str, text: str, flags: int = re.IGNORECASE) -> str | None:
    match = re.search(pattern, text, flags)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


# ---------------------------------------------------------------------------
# KK (Kartu Keluarga)
# ---------------------------------------------------------------------------

KK_FIELDS: tuple[str, ...] = (
    "nomor_kk", "nama_kepala_keluarga", "alamat", "rt_rw", "kelurahan_desa",
    "kecamatan", "kabupaten_kota", "provinsi", "kode_pos",
)

JAKARTA_AREAS: tuple[str, ...] = (
    "JAKARTA PUSAT", "JAKARTA SELATAN", "JAKARTA BARAT", "JAKARTA TIMUR", "JAKARTA UTARA",
)


def extract_kk_with_regex(text: str) -> dict[str, str | None]:
    data: dict[str, str | None] = dict.fromkeys(KK_FIELDS)
    text = text or ""
    upper = text.upper()

    data["nomor_kk"] = _first(r"(?<!\d)(\d{16})(?!\d)", text)

    rt_rw = re.search(r"(?<!\d)(\d{3})\s*/\s*(\d{3})(?!\d)", text)
    if rt_rw:
        data["rt_rw"] = f"{rt_rw.group(1)}/{rt_rw.group(2)}"

    data["kode_pos"] = _first(r"(?<!\d)(\d{5})(?!\d)", text)

    for area in JAKARTA_AREAS:
        if area in upper:
            data["kabupaten_kota"] = area
            data["provinsi"] = "DKI JAKARTA"
            break

    data["kelurahan_desa"] = _first(
        rf"\b(?:KELURAHAN|KEL|DESA)\b\.?{_LINE}(?:/{_LINE}DESA)?{_LINE}:?{_LINE}([A-Z][A-Z ]*)", text
    )
    data["kecamatan"] = _first(rf"\b(?:KECAMATAN|KEC)\b\.?{_LINE}:?{_LINE}([A-Z][A-Z ]*)", text)
    data["nama_kepala_keluarga"] = _first(
        rf"NAMA{_LINE}KEPALA{_LINE}KELUARGA{_LINE}:?{_LINE}([A-Z][A-Z .']*)", text
    )
    data["alamat"] = _first(rf"\bALAMAT{_LINE}:?{_LINE}([^\n]+)", text)

    return data


# ---------------------------------------------------------------------------
# IJAZAH (diploma / graduation certificate)
# ---------------------------------------------------------------------------

IJAZAH_FIELDS: tuple[str, ...] = (
    "nomor_ijazah", "nama", "tempat_lahir", "tanggal_lahir", "nama_sekolah",
    "jenjang", "jurusan", "program_studi", "fakultas", "tahun_lulus",
    "tanggal_lulus", "nomor_peserta_ujian", "nisn", "gelar", "ipk",
    "akreditasi", "nomor_seri_ijazah", "kepala_sekolah", "tanggal_terbit",
)

# (level, keywords) checked in order; short codes are matched as whole words.
JENJANG_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("SMA", ("SMA", "SEKOLAH MENENGAH ATAS")),
    ("SMK", ("SMK", "SEKOLAH MENENGAH KEJURUAN")),
    ("SMP", ("SMP", "SEKOLAH MENENGAH PERTAMA")),
    ("SD", ("SD", "SEKOLAH DASAR")),
    ("S1", ("SARJANA", "S1")),
    ("S2", ("MAGISTER", "S2")),
    ("S3", ("DOKTOR", "S3")),
    ("D3", ("DIPLOMA", "D3")),
    ("D4", ("D4",)),
)

_SCHOOL_PATTERNS = (
    rf"\b(?:SMA|SMK|SMP|SD|SEKOLAH)\b(?:{_LINE}(?:NEGERI|SWASTA))?(?:{_LINE}\d+)?{_LINE}[A-Z][A-Z ]*",
    rf"\b(?:UNIVERSITAS|INSTITUT|POLITEKNIK|AKADEMI)\b{_LINE}[A-Z][A-Z ]*",
)


def _detect_jenjang(upper: str) -> str | None:
    for level, keywords in JENJANG_RULES:
        for keyword in keywords:
            if re.search(rf"\b{re.escape(keyword)}\b", upper):
                return level
    return None


def extract_ijazah_with_regex(text: str) -> dict[str, str | None]:
    data: dict[str, str | None] = dict.fromkeys(IJAZAH_FIELDS)
    text = text or ""
    upper = text.upper()

    data["nomor_ijazah"] = _first(rf"\bNO(?:MOR)?\.?{_LINE}IJAZAH{_LINE}:?{_LINE}([A-Z0-9\-/.]+)", text)
    data["nama"] = _first(rf"\bNAMA\b(?!{_LINE}(?:SEKOLAH|KEPALA)){_LINE}:?{_LINE}([A-Z][A-Z .']*)", text)

    tempat = _first(
        rf"TEMPAT{_LINE}(?:DAN{_LINE})?(?:TANGGAL{_LINE})?LAHIR{_LINE}:?{_LINE}([A-Z][A-Z ]*)", text
    )
    if tempat:
        data["tempat_lahir"] = re.split(r"[,/]", tempat)[0].strip() or None

    data["tanggal_lahir"] = parse_month_name_date(text)

    for pattern in _SCHOOL_PATTERNS:
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            data["nama_sekolah"] = match.group(0).strip()
            break

    data["jenjang"] = _detect_jenjang(upper)

    jurusan = _first(rf"\b(?:JURUSAN|PROGRAM{_LINE}STUDI|PRODI)\b{_LINE}:?{_LINE}([A-Z][A-Z ]*)", text)
    data["jurusan"] = jurusan
    data["program_studi"] = jurusan

    data["fakultas"] = _first(rf"\bFAKULTAS\b{_LINE}:?{_LINE}([A-Z][A-Z ]*)", text)

    data["tahun_lulus"] = _first(
        rf"\bTAHUN{_LINE}(?:PELAJARAN|AJARAN|LULUS)?{_LINE}:?{_LINE}(\d{{4}})", text
    ) or _first(r"\b(20[0-3]\d)\b", text)

    data["nisn"] = _first(rf"\bNISN{_LINE}:?{_LINE}(\d{{10}})", text)
    data["nomor_peserta_ujian"] = _first(
        rf"\bNO(?:MOR)?\.?{_LINE}PESERTA{_LINE}(?:UJIAN)?{_LINE}:?{_LINE}([A-Z0-9\-]+)", text
    )
    data["gelar"] = _first(rf"\b(?:GELAR|DEGREE)\b{_LINE}:?{_LINE}([A-Z][A-Z. ]*)", text)
    data["ipk"] = _first(rf"\b(?:IPK|GPA|INDEKS{_LINE}PRESTASI)\b{_LINE}:?{_LINE}(\d[\d,.]*)", text)
    data["akreditasi"] = _first(rf"\bAKREDITASI\b{_LINE}:?{_LINE}([A-Z])\b", text)
    data["kepala_sekolah"] = _first(
        rf"\b(?:KEPALA{_LINE}SEKOLAH|REKTOR|DEKAN)\b{_LINE}:?{_LINE}([A-Z][A-Z .,']*)", text
    )
    data["nomor_seri_ijazah"] = _first(rf"\bNO(?:MOR)?\.?{_LINE}SERI{_LINE}:?{_LINE}([A-Z0-9\-/.]+)", text)

    return data

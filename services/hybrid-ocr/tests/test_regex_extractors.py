"""Tests for the KK and IJAZAH regex fallbacks."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from regex_extractors import (
    IJAZAH_FIELDS,
    KK_FIELDS,
    extract_ijazah_with_regex,
    extract_kk_with_regex,
    parse_month_name_date,
)


class TestMonthNameDate:
    def test_full_month_name(self):
        assert parse_month_name_date("Jakarta, 17 Agustus 1990") == "1990-08-17"

    def test_abbreviated_month(self):
        assert parse_month_name_date("lahir 3 Des 2001") == "2001-12-03"

    def test_juni_not_read_as_jun(self):
        assert parse_month_name_date("1 Juni 2010") == "2010-06-01"

    def test_no_date(self):
        assert parse_month_name_date("tanpa tanggal") is None
        assert parse_month_name_date("") is None


class TestKKRegex:
    def test_header_fields(self, kk_text: str):
        data = extract_kk_with_regex(kk_text)
        assert data["nomor_kk"] == "1234567890123456"
        assert data["rt_rw"] == "001/002"
        assert data["kode_pos"] == "10310"
        assert data["kabupaten_kota"] == "JAKARTA PUSAT"
        assert data["provinsi"] == "DKI JAKARTA"
        assert data["kelurahan_desa"] == "MENTENG"
        assert data["kecamatan"] == "MENTENG"
        assert data["nama_kepala_keluarga"] == "BUDI SANTOSO"
        assert data["alamat"] == "JL. MERDEKA NO. 10"

    def test_all_keys_present_when_nothing_matches(self):
        data = extract_kk_with_regex("tidak ada apa-apa")
        assert set(data) == set(KK_FIELDS)
        assert all(value is None for value in data.values())

    def test_keluarga_is_not_kelurahan(self):
        data = extract_kk_with_regex("KARTU KELUARGA\nNO 1234567890123456")
        assert data["kelurahan_desa"] is None

    def test_longer_digit_runs_not_truncated(self):
        data = extract_kk_with_regex("NIK 31740123456789012")
        assert data["nomor_kk"] is None

    def test_non_jakarta_region_left_empty(self):
        data = extract_kk_with_regex("KABUPATEN BOGOR")
        assert data["kabupaten_kota"] is None
        assert data["provinsi"] is None


class TestIjazahRegex:
    def test_fields(self, ijazah_text: str):
        data = extract_ijazah_with_regex(ijazah_text)
        assert data["nomor_ijazah"] == "DN-01/M-SMA/13/0012345"
        assert data["nama"] == "SITI AMINAH"
        assert data["tempat_lahir"] == "BANDUNG"
        assert data["tanggal_lahir"] == "2002-03-05"
        assert data["nama_sekolah"] == "SEKOLAH MENENGAH ATAS"
        assert data["jenjang"] == "SMA"
        assert data["tahun_lulus"] == "2020"
        assert data["nisn"] == "0023456789"
        assert data["kepala_sekolah"] == "DRS. AHMAD YANI"

    def test_all_keys_present(self, ijazah_text: str):
        assert set(extract_ijazah_with_regex(ijazah_text)) == set(IJAZAH_FIELDS)
        assert len(IJAZAH_FIELDS) == 19

    def test_year_without_label(self):
        data = extract_ijazah_with_regex("IJAZAH\nDiberikan pada 2019")
        assert data["tahun_lulus"] == "2019"

    def test_university_jenjang(self):
        data = extract_ijazah_with_regex("UNIVERSITAS INDONESIA\nGELAR SARJANA TEKNIK")
        assert data["jenjang"] == "S1"
        assert data["nama_sekolah"] == "UNIVERSITAS INDONESIA"

    def test_sd_not_matched_inside_words(self):
        data = extract_ijazah_with_regex("ISDN KOMUNIKASI")
        assert data["jenjang"] is None

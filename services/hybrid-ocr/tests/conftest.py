"""Shared test fixtures for hybrid OCR tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def ktp_text() -> str:
    """OCR text of a KTP (national ID card)."""
    return (
        "PROVINSI DKI JAKARTA\n"
        "JAKARTA SELATAN\n"
        "NIK : 3174012345678901\n"
        "Nama : BUDI SANTOSO\n"
        "Tempat/Tgl Lahir : JAKARTA, 17-08-1990\n"
        "Jenis Kelamin : LAKI-LAKI\n"
        "Alamat : JL. MERDEKA NO. 10\n"
    )


@pytest.fixture
def kk_text() -> str:
    """OCR text of a KK (family register) header."""
    return (
        "KARTU KELUARGA\n"
        "NOMOR KK: 1234567890123456\n"
        "Nama Kepala Keluarga : BUDI SANTOSO\n"
        "Alamat : JL. MERDEKA NO. 10\n"
        "RT/RW : 001/002\n"
        "Kelurahan : MENTENG\n"
        "Kecamatan : MENTENG\n"
        "Kabupaten/Kota : JAKARTA PUSAT\n"
        "Kode Pos : 10310\n"
        "NIK 3174012345678901 TEMPAT LAHIR JAKARTA\n"
    )


@pytest.fixture
def ijazah_text() -> str:
    """OCR text of a high-school IJAZAH."""
    return (
        "IJAZAH\n"
        "SEKOLAH MENENGAH ATAS\n"
        "No. Ijazah : DN-01/M-SMA/13/0012345\n"
        "Nama : SITI AMINAH\n"
        "Tempat dan Tanggal Lahir : BANDUNG, 5 Maret 2002\n"
        "NISN : 0023456789\n"
        "Tahun Lulus : 2020\n"
        "Kepala Sekolah : DRS. AHMAD YANI\n"
    )


@pytest.fixture
def mock_llm_content() -> str:
    """Mock chat-completions message content for a KTP extraction."""
    return json.dumps({
        "nik": "3174012345678901",
        "nama": "BUDI SANTOSO",
        "tempat_lahir": "JAKARTA",
        "tanggal_lahir": "1990-08-17",
        "jenis_kelamin": "LAKI-LAKI",
        "golongan_darah": None,
    })


@pytest.fixture
def mock_kk_llm_payload() -> dict:
    """Raw (unnormalized) KK extraction as a model might return it."""
    return {
        "nomor_kk": "3174 0123 4567 8901",
        "nama_kepala_keluarga": "",
        "alamat": "JL. MERDEKA NO. 10",
        "rt_rw": "1/2",
        "kelurahan_desa": "menteng",
        "kecamatan": "menteng",
        "kabupaten_kota": "Kota Bandung",
        "provinsi": "",
        "kode_pos": "40 111",
        "tanggal_dikeluarkan": "12 Januari 2015",
        "anggota_keluarga": [
            {
                "nama": "budi santoso",
                "nik": "3174 0123 4567 8901",
                "jenis_kelamin": "L",
                "tempat_lahir": "jakarta",
                "tanggal_lahir": "17-08-1990",
                "agama": "islam",
                "pendidikan": "S1",
                "jenis_pekerjaan": "karyawan swasta",
                "status_perkawinan": "menikah",
                "status_hubungan_keluarga": "kepala",
                "kewarganegaraan": "Indonesia",
            },
            {
                "nama": "siti | aminah",
                "nik": "3174012345678902",
                "jenis_kelamin": "P",
                "tanggal_lahir": "01/05/92",
                "status_hubungan_keluarga": "isteri",
            },
        ],
    }

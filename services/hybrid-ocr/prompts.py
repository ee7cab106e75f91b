"""Per-document-type prompts for Indonesian document field extraction.

The generic (UDFM) prompt is assembled from a shared header, a per-type
field list and a shared rule block. IJAZAH and the KK full-table extractor
have dedicated system prompts.
"""

from models import DocumentType

_UDFM_HEADER = (
    "You are UDFM ULTRA - Universal Document Field Mapper. "
    "Extract structured data from Indonesian documents."
)

_UDFM_RULES = """RULES:
1. Return valid JSON only
2. Use null for missing fields
3. Dates must be in yyyy-MM-dd format
4. Numbers should be strings to preserve formatting
5. Extract ALL available information
6. For arrays, include all items found"""

FIELD_PROMPTS: dict[DocumentType, str] = {
    DocumentType.KTP: """Extract from Indonesian KTP (ID Card):
- nik: 16-digit NIK number
- nama: Full name
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth (yyyy-MM-dd)
- jenis_kelamin: Gender (LAKI-LAKI/PEREMPUAN)
- alamat: Full address
- rt_rw: RT/RW
- kelurahan_desa: Village/Kelurahan
- kecamatan: District
- kabupaten_kota: City/Regency
- provinsi: Province
- agama: Religion
- status_perkawinan: Marital status
- pekerjaan: Occupation
- kewarganegaraan: Nationality
- berlaku_hingga: Valid until date
- golongan_darah: Blood type""",

    DocumentType.KK: """Extract from Indonesian KK (Family Card):
- nomor_kk: 16-digit KK number
- nama_kepala_keluarga: Head of family name
- alamat: Full address
- rt_rw: RT/RW
- kelurahan_desa: Village/Kelurahan
- kecamatan: District
- kabupaten_kota: City/Regency
- provinsi: Province
- kode_pos: Postal code
- tanggal_dikeluarkan: Issue date
- anggota_keluarga: Array of family members with {nama, nik, jenis_kelamin, tempat_lahir, tanggal_lahir, agama, pendidikan, pekerjaan, status_perkawinan, hubungan_keluarga}""",

    DocumentType.IJAZAH: """Extract from Indonesian IJAZAH (Diploma/Certificate):
- nomor_ijazah: Certificate number
- nama: Graduate's full name
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth (yyyy-MM-dd)
- nama_sekolah: School/institution name
- jenjang: Education level (SD/SMP/SMA/SMK/D3/S1/S2/S3)
- jurusan: Major/department
- program_studi: Study program
- fakultas: Faculty
- tahun_lulus: Graduation year
- tanggal_lulus: Graduation date (yyyy-MM-dd)
- nomor_peserta_ujian: Exam participant number
- nisn: National Student ID
- gelar: Academic degree
- ipk: GPA
- akreditasi: Accreditation
- nomor_seri_ijazah: Serial number
- kepala_sekolah: Principal/Rector name""",

    DocumentType.NPWP: """Extract from Indonesian NPWP (Tax ID):
- nomor_npwp: NPWP number (15 digits with dots)
- nama: Taxpayer name
- alamat: Address
- kelurahan: Village
- kecamatan: District
- kota: City
- provinsi: Province
- tanggal_terdaftar: Registration date
- kpp: Tax office name""",

    DocumentType.SIM: """Extract from Indonesian SIM (Driving License):
- nomor_sim: SIM number
- nama: Full name
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth (yyyy-MM-dd)
- alamat: Address
- golongan_sim: SIM class (A/B1/B2/C/D)
- berlaku_hingga: Valid until date
- tinggi_badan: Height
- golongan_darah: Blood type
- pekerjaan: Occupation""",

    DocumentType.STNK: """Extract from Indonesian STNK (Vehicle Registration):
- nomor_polisi: License plate number
- nama_pemilik: Owner name
- alamat: Address
- merk: Vehicle brand
- tipe: Vehicle type
- jenis: Vehicle category
- model: Vehicle model
- tahun_pembuatan: Year of manufacture
- warna: Color
- nomor_rangka: Chassis number
- nomor_mesin: Engine number
- bahan_bakar: Fuel type
- isi_silinder: Engine capacity
- masa_berlaku: Valid until""",

    DocumentType.PAJAK_KENDARAAN: """Extract from Indonesian PKB (Vehicle Tax):
- nomor_polisi: License plate
- nama_pemilik: Owner name
- alamat: Address
- merk: Vehicle brand
- tipe: Vehicle type
- tahun: Year
- warna: Color
- nomor_rangka: Chassis number
- nomor_mesin: Engine number
- pkb_pokok: Main tax amount
- swdkllj: Insurance fee
- total_bayar: Total payment
- tanggal_bayar: Payment date
- masa_berlaku: Valid until""",

    DocumentType.AWB: """Extract from Air Waybill:
- awb_number: AWB number
- shipper_name: Shipper name
- shipper_address: Shipper address
- consignee_name: Consignee name
- consignee_address: Consignee address
- origin: Origin airport/city
- destination: Destination airport/city
- pieces: Number of pieces
- weight: Weight
- description: Goods description
- declared_value: Declared value
- flight_number: Flight number
- flight_date: Flight date""",

    DocumentType.INVOICE: """Extract from Invoice/Faktur:
- nomor_invoice: Invoice number
- tanggal_invoice: Invoice date
- nama_penjual: Seller name
- alamat_penjual: Seller address
- npwp_penjual: Seller NPWP
- nama_pembeli: Buyer name
- alamat_pembeli: Buyer address
- npwp_pembeli: Buyer NPWP
- items: Array of {nama_barang, quantity, harga_satuan, jumlah}
- subtotal: Subtotal
- ppn: VAT amount
- total: Total amount
- tanggal_jatuh_tempo: Due date""",

    DocumentType.CV: """Extract from Curriculum Vitae:
- nama: Full name
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth
- alamat: Address
- email: Email
- telepon: Phone number
- pendidikan: Array of {institusi, jurusan, tahun_lulus, gelar}
- pengalaman_kerja: Array of {perusahaan, posisi, tahun_mulai, tahun_selesai, deskripsi}
- keahlian: Array of skills
- bahasa: Array of languages
- sertifikasi: Array of certifications""",

    DocumentType.BPJS: """Extract from BPJS Card:
- nomor_bpjs: BPJS number
- nama: Full name
- nik: NIK
- tanggal_lahir: Date of birth
- jenis_kelamin: Gender
- kelas: Class
- faskes_tingkat_1: Primary healthcare facility
- tanggal_berlaku: Valid from date""",

    DocumentType.AKTA_LAHIR: """Extract from Birth Certificate:
- nomor_akta: Certificate number
- nama: Full name
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth
- jenis_kelamin: Gender
- nama_ayah: Father's name
- nama_ibu: Mother's name
- tanggal_terbit: Issue date
- tempat_terbit: Place of issue""",

    DocumentType.UNKNOWN: """Extract all identifiable fields from this document. Common fields:
- nama: Name
- nomor: Any ID number
- tanggal: Any date
- alamat: Address
- Any other relevant fields found""",
}


def udfm_system_prompt(doc_type: DocumentType) -> str:
    """Generic extraction prompt; types without a field list get the UNKNOWN one."""
    fields = FIELD_PROMPTS.get(doc_type, FIELD_PROMPTS[DocumentType.UNKNOWN])
    return f"{_UDFM_HEADER}\n\n{fields}\n\n{_UDFM_RULES}"


def udfm_user_prompt(doc_type: DocumentType, raw_text: str) -> str:
    return f"Document Type: {doc_type.value}\n\nOCR Text:\n{raw_text}"


IJAZAH_SYSTEM_PROMPT = """Extract structured data from Indonesian IJAZAH (diploma/certificate) document. Return JSON with these fields:

- nomor_ijazah: Certificate/diploma number
- nama: Full name of the graduate
- tempat_lahir: Place of birth
- tanggal_lahir: Date of birth (yyyy-MM-dd format)
- nama_sekolah: School/institution name
- jenjang: Education level (SD/SMP/SMA/SMK/D3/S1/S2/S3)
- jurusan: Major/department/program
- program_studi: Study program (for university)
- fakultas: Faculty (for university)
- tahun_lulus: Graduation year
- tanggal_lulus: Graduation date (yyyy-MM-dd format)
- nomor_peserta_ujian: Exam participant number (if available)
- nisn: National Student ID Number (if available)
- gelar: Academic degree (if available)
- ipk: GPA (if available)
- akreditasi: Accreditation status (if available)
- nomor_seri_ijazah: Serial number of certificate (if available)
- kepala_sekolah: Principal/Rector name (if available)
- tanggal_terbit: Issue date (yyyy-MM-dd format)

Use null for missing fields. Extract all available information."""


def ijazah_user_prompt(raw_text: str) -> str:
    return f"OCR Text from IJAZAH document:\n{raw_text}"


KK_SYSTEM_PROMPT = """You are an expert AI specialized in extracting detailed structured data from Indonesian Kartu Keluarga (KK) documents. Output a JSON with all required fields, infer missing header values, reconstruct and normalize the anggota_keluarga table, and include debug notes.

HEADER INFERENCE:
1. nama_kepala_keluarga: take the member whose status_hubungan_keluarga is "KEPALA KELUARGA"; otherwise the first member; otherwise the name near the "Kepala Keluarga" label.
2. alamat: text after the "Alamat" label, or street fragments (Jl., Jalan, Gg., Komp., Perumahan) combined into one line.
3. rt_rw: format "NNN/NNN"; complete a partial value with "000".
4. kelurahan_desa: after "Kel.", "Kelurahan", "Desa" or "Ds.".
5. kecamatan: after "Kec." or "Kecamatan".
6. kabupaten_kota: after "Kab.", "Kabupaten" or "Kota".
7. provinsi: after "Prov." or "Provinsi"; infer from kabupaten_kota when missing (e.g. BANDUNG -> JAWA BARAT).
8. kode_pos: 5-digit number near the address.
9. tanggal_dikeluarkan: issue date near the bottom ("Dikeluarkan tanggal"), formatted yyyy-MM-dd.

TABLE RECONSTRUCTION (anggota_keluarga):
- NIK is always 16 digits and marks a new row; merge split NIKs ("3201 2345 6789 0001").
- Column order: nama, nik, jenis_kelamin, tempat_lahir, tanggal_lahir, agama, pendidikan, jenis_pekerjaan, status_perkawinan, status_hubungan_keluarga, kewarganegaraan, no_paspor, no_kitap, nama_ayah, nama_ibu.
- If columns are merged or rows split, use the data type patterns to separate and recombine them.
- A missing column is "" (empty string). All 15 columns must be present for each member.

NORMALIZATION:
- Dates as yyyy-MM-dd ("1 Mei 1990" -> "1990-05-01", "01-05-1990" -> "1990-05-01").
- jenis_kelamin: "Laki-Laki" or "Perempuan".
- kelurahan_desa, kecamatan, kabupaten_kota, provinsi in UPPERCASE.
- status_hubungan_keluarga: KEPALA KELUARGA, ISTRI, ANAK, MENANTU, CUCU, ORANG TUA, MERTUA, FAMILI LAIN, PEMBANTU, LAINNYA.
- status_perkawinan: BELUM KAWIN, KAWIN, CERAI HIDUP, CERAI MATI.
- Remove OCR artifacts such as "|" and stray backslashes.

OUTPUT FORMAT (valid JSON only, never null, "" for truly missing values):
{
  "nomor_kk": "", "nama_kepala_keluarga": "", "alamat": "", "rt_rw": "",
  "kelurahan_desa": "", "kecamatan": "", "kabupaten_kota": "", "provinsi": "",
  "kode_pos": "", "tanggal_dikeluarkan": "",
  "anggota_keluarga": [{"nama": "", "nik": "", "jenis_kelamin": "", "tempat_lahir": "", "tanggal_lahir": "", "agama": "", "pendidikan": "", "jenis_pekerjaan": "", "status_perkawinan": "", "status_hubungan_keluarga": "", "kewarganegaraan": "", "no_paspor": "", "no_kitap": "", "nama_ayah": "", "nama_ibu": ""}],
  "debug_notes": {"inferred_fields": [], "uncertain_values": [], "ocr_confidence": 0}
}"""


def kk_user_prompt(raw_text: str) -> str:
    return (
        "Here is the OCR text of the KK document. Extract the complete JSON structure, "
        "infer missing headers, reconstruct the member table, normalize the data and "
        "include debug notes as specified.\n\n"
        f"OCR TEXT:\n{raw_text}"
    )

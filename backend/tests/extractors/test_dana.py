from transfer_ocr.extractors.dana import extract_dana
from transfer_ocr.ocr.text_utils import split_lines


RECEIPT = """Kirim Uang Rp300.000 ke GANI MUHAMMAD -
RAMADLAN - SeaBank
21 Jul 2025 • 17:14
ID DANA 0857-4165
Total Bayar Rp301.000
Seabank Indonesia ••••0190
Detail Penerima
Nama SITI AMINAH
ID Transaksi 2025072110121410010
1234567890123456789
"""


def _run(text):
    return extract_dana(split_lines(text), text)


def test_dana_fields():
    f = _run(RECEIPT)
    assert f.date == "21 Jul 2025"
    assert f.time == "17:14"
    assert f.sender_name == "0857****4165"
    assert f.receiver_bank == "SEABANK"
    assert f.receiver_account == "***********0190"


def test_total_bayar_supersedes_transfer_amount():
    assert _run(RECEIPT).amount == 301000


def test_detail_name_preferred_over_amount_line():
    assert _run(RECEIPT).receiver_name == "SITI AMINAH"


def test_receiver_from_amount_line_with_continuation():
    text = RECEIPT.replace("Nama SITI AMINAH\n", "")
    assert _run(text).receiver_name == "GANI MUHAMMAD RAMADLAN"


def test_wrapped_transaction_id_is_joined():
    assert _run(RECEIPT).reference_number == "20250721101214100101234567890123456789"


def test_unlabelled_reference_fallback():
    text = "Kirim Uang Rp50.000 ke BUDI\n20250721101214\n10010123456\n"
    f = _run(text)
    assert f.reference_number == "2025072110121410010123456"
    assert f.amount == 50000
    assert f.receiver_name == "BUDI"


def test_sender_line_with_mangled_mask():
    f = _run("0857-:4165\n")
    assert f.sender_name == "0857****4165"


def test_defaults():
    f = _run("")
    assert f.receiver_bank == "SEABANK"
    assert f.reference_number.startswith("DNA")
    assert f.sender_name == "PENGIRIM DANA"

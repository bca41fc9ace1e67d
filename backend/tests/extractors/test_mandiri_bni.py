from transfer_ocr.extractors.bni import extract_bni
from transfer_ocr.extractors.mandiri import extract_mandiri
from transfer_ocr.ocr.text_utils import split_lines


MANDIRI = """Transfer Berhasil
04 Des 2025 • 16:15:52 WIB • No. Ref. 2512041122006741849
Total Transaksi
Rp 2.009.596
Penerima
Bpk. ANDI WIJAYA
Bank Mandiri - 1210006207728
Sumber Dana
BUDI SANTOSO
Bank Mandiri - .........9764
"""

BNI = """BNI Mobile Banking
Transfer Berhasil
06 Des 2025 • 04:41:51 WIB •
Rp1.000.755
Biaya Transfer Rp2.500
Cashback Rp6.500
Ref ID: 20251206044147000158
Sumber dana
BUDI SANTOSO
BNI • 1234567890
Penerima
Sdr WARSA DIANA
BNI • 0799641820
"""


def test_mandiri_fields():
    f = extract_mandiri(split_lines(MANDIRI), MANDIRI)
    assert f.date == "04 Des 2025"
    assert f.time == "16:15:52"
    assert f.reference_number == "2512041122006741849"
    assert f.amount == 2009596
    assert f.receiver_account == "1210006207728"
    assert f.receiver_name == "ANDI WIJAYA"
    assert f.sender_name == "BUDI SANTOSO"
    assert f.receiver_bank == "MANDIRI"


def test_mandiri_amount_on_same_line():
    text = "Total Transaksi Rp 75.000\n"
    assert extract_mandiri(split_lines(text), text).amount == 75000


def test_mandiri_defaults_use_mdr_prefix():
    f = extract_mandiri([], "")
    assert f.reference_number.startswith("MDR")
    assert f.sender_name == "PENGIRIM MANDIRI"


def test_bni_fields():
    f = extract_bni(split_lines(BNI), BNI)
    assert f.date == "06 Des 2025"
    assert f.time == "04:41:51"
    assert f.reference_number == "20251206044147000158"
    assert f.sender_name == "BUDI SANTOSO"
    assert f.receiver_name == "WARSA DIANA"
    assert f.receiver_account == "0799641820"


def test_bni_amount_is_largest_non_fee_value():
    f = extract_bni(split_lines(BNI), BNI)
    assert f.amount == 1000755


def test_bni_fee_line_never_wins():
    text = "Biaya Admin Rp9.000.000\nRp25.000\n"
    assert extract_bni(split_lines(text), text).amount == 25000


def test_bni_reference_on_next_line():
    text = "Ref No\n20251206044147000158\n"
    assert extract_bni(split_lines(text), text).reference_number == "20251206044147000158"

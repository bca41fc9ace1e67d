from datetime import date

from transfer_ocr.extractors.bca import extract_bca, is_new_layout
from transfer_ocr.ocr.text_utils import split_lines


LEGACY = """m-Transfer
BERHASIL
25/07 07:29:32
KE 1670903504
WARSA DIANA
Rp 130,000.00
REF 9503120250725072931956672CAE83FCB72B
"""

MYBCA = """Transfer Successful
09 Dec 2025 11:41:11
IDR 2,000,571.00
Beneficiary Name
WARSA DIANA
Beneficiary Account 777 - 309 - 8541
Reference No. 9527120925
ABCD1234
XY99
Currency IDR
"""


def test_layout_classification():
    assert is_new_layout(split_lines(MYBCA)) is True
    assert is_new_layout(split_lines(LEGACY)) is False


def test_legacy_layout_fields():
    f = extract_bca(split_lines(LEGACY), LEGACY)
    assert f.receiver_account == "1670903504"
    assert f.receiver_name == "WARSA DIANA"
    assert f.amount == 130000
    assert f.reference_number == "9503120250725072931956672CAE83FCB72B"
    assert f.date == f"25/07/{date.today().year}"
    assert f.time == "07:29:32"
    assert f.receiver_bank == "BCA"
    assert f.sender_name == "PENGIRIM BCA"


def test_new_layout_fields():
    f = extract_bca(split_lines(MYBCA), MYBCA)
    assert f.amount == 2000571
    assert f.receiver_name == "WARSA DIANA"
    assert f.receiver_account == "7773098541"
    assert f.date == "09 Dec 2025"
    assert f.time == "11:41:11"
    # wrapped reference joined, stops at the next labelled line
    assert f.reference_number == "9527120925ABCD1234XY99"


def test_new_layout_reference_continuation_is_bounded():
    text = "IDR 10,000.00\nReference No. 11\nAA\nBB\nCC\nDD\n"
    f = extract_bca(split_lines(text), text)
    assert f.reference_number == "11AABBCC"


def test_currency_line_is_not_an_amount():
    text = "Transfer Successful\nCurrency IDR 1\nIDR 50,000.00\n"
    f = extract_bca(split_lines(text), text)
    assert f.amount == 50000

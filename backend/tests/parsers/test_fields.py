import pytest

from transfer_ocr.parsers import amount_after_idr, amount_after_rp, parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("130,000.00", 130000),
        ("2.009.596", 2009596),
        ("300.000", 300000),
        ("1.000.755,00", 1000755),
        ("1O.OOO", 10000),
        ("50000", 50000),
    ],
)
def test_parse_amount(text, expected):
    r = parse_amount(text)
    assert r.ok
    assert r.value == expected


def test_parse_amount_errors():
    assert parse_amount("").error == "EMPTY"
    assert parse_amount("abc").ok is False
    assert parse_amount("...").ok is False


def test_amount_after_markers():
    assert amount_after_rp("Jumlah Transfer Rp 260.000") == 260000
    assert amount_after_rp("Kirim Uang Rp300.000 ke BUDI") == 300000
    assert amount_after_rp("RP. 15.000") == 15000
    assert amount_after_rp("Total Transaksi") is None
    assert amount_after_idr("IDR 2,000,571.00") == 2000571
    assert amount_after_idr("Currency") is None

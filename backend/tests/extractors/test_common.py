import json

import pytest

from transfer_ocr.extractors.base import finish, profile_for, synthesize_reference
from transfer_ocr.extractors.common import (
    clean_name,
    format_dana_account,
    mask_bank_account,
    parse_masked_bank_line,
    pick_reference,
)
from transfer_ocr.extractors.generic import extract_generic
from transfer_ocr.validations.patterns import SuffixCorrectionTable, load_suffix_corrections


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("0812****337", "0812****337"),
        ("0812*****337", "0812*****337"),
        ("0812337", "0812****337"),
        ("081234567890", "0812*****890"),
        ("0812xxxxxx337", "0812*****337"),
        ("0812 •••• 337", "0812****337"),
        ("081", None),
        ("", None),
    ],
)
def test_format_dana_account(raw, expected):
    assert format_dana_account(raw) == expected


def test_mask_bank_account():
    assert mask_bank_account("1234567890") == "***********7890"
    assert mask_bank_account("504") == "***********504"
    assert mask_bank_account("12") == ""


def test_parse_masked_bank_line_applies_corrections():
    assert parse_masked_bank_line("BANK BRI: xxxxxxxx 504") == ("BRI", "***********8504")
    assert parse_masked_bank_line("BANK BCA: ***********2531") == ("BCA", "***********2531")
    assert parse_masked_bank_line("Mandiri •••••••• 9764") == ("MANDIRI", "***********9764")


def test_marker_restricted_correction():
    assert parse_masked_bank_line("BANK BRI: kkk 531") == ("BRI", "***********2531")
    assert parse_masked_bank_line("BANK BRI: **** 531") == ("BRI", "***********531")


def test_parse_masked_bank_line_rejects_lines_without_suffix():
    assert parse_masked_bank_line("BANK BRI") is None
    assert parse_masked_bank_line("Jumlah Transfer Rp 10.000") is None


def test_custom_correction_table():
    table = SuffixCorrectionTable(version="t", table={"777": "1777"})
    assert parse_masked_bank_line("BRI: ***777", table) == ("BRI", "***********1777")
    assert parse_masked_bank_line("BRI: ***504", table) == ("BRI", "***********504")


def test_load_suffix_corrections(tmp_path):
    p = tmp_path / "suffix.json"
    p.write_text(json.dumps({"version": "2025-09", "table": {"601": "9601"}}), encoding="utf-8")
    table = load_suffix_corrections(str(p))
    assert table.version == "2025-09"
    assert table.apply("601") == "9601"
    assert table.apply("504") == "504"
    assert load_suffix_corrections(None).apply("504") == "8504"


def test_pick_reference_longest_then_first():
    assert pick_reference(["abc", "abcd", "wxyz"]) == "abcd"
    assert pick_reference([]) == ""


def test_clean_name_strips_ocr_prefix_noise():
    assert clean_name("J Gani Muhammad") == "GANI MUHAMMAD"
    assert clean_name("WN DNID Diah S.") == "DIAH S"
    assert clean_name("AB SITI") == "SITI"
    assert clean_name("") == ""


def test_finish_fills_bank_defaults():
    f = finish(profile_for("BRI"), amount=-10)
    assert f.sender_name == "PENGIRIM BRI"
    assert f.receiver_name == "NAMA PENERIMA"
    assert f.amount == 0
    assert f.receiver_bank == "BRI"
    assert f.reference_number.startswith("BRI")


def test_synthesized_reference_shape():
    ref = synthesize_reference("SEA")
    assert ref.startswith("SEA")
    assert ref[3:].isdigit() and len(ref) == 11


def test_generic_extractor_placeholders():
    f = extract_generic(["anything"], "anything", bank_type="FLIP")
    assert f.sender_name == "GENERIC SENDER"
    assert f.receiver_name == "GENERIC RECEIVER"
    assert f.amount == 100000
    assert f.receiver_bank == "FLIP"
    assert f.reference_number.startswith("FLIP")

import pytest

from transfer_ocr.extractors.base import finish, profile_for
from transfer_ocr.pipeline.postprocess import FieldKind, correct, correct_fields


SAMPLES = {
    FieldKind.AMOUNT: ["Rp 1O.OOO", "2.0S0,00", "B00", ""],
    FieldKind.ACCOUNT: ["xxxxxxxx 2531", "66O3 O1O3 S831", "•••• 0190", "0812****337"],
    FieldKind.REFERENCE: ["BR1234S67O", "2025O724 SSPII", "REF --", "SEA12345678"],
    FieldKind.BANK: ["B C A", "mand1ri", "SEA BANK", "B R I"],
    FieldKind.NAME: ["SITI  AMINAH.", "0857****4165", "Bpk. ANDI"],
}


@pytest.mark.parametrize("kind", list(FieldKind))
def test_correct_is_idempotent(kind):
    for raw in SAMPLES[kind]:
        once = correct(raw, kind)
        assert correct(once, kind) == once


def test_amount_letters_become_digits():
    assert correct("Rp 1O.OOO", FieldKind.AMOUNT) == "10.000"
    assert correct("B00", FieldKind.AMOUNT) == "800"


def test_account_masks_and_digit_fixes():
    assert correct("xxxxxxxx 2531", FieldKind.ACCOUNT) == "********2531"
    assert correct("66O3 O1O3 S831", FieldKind.ACCOUNT) == "660301035831"


def test_reference_keeps_alphabetic_prefix():
    assert correct("BR1234S67O", FieldKind.REFERENCE) == "BR1234567" + "0"
    assert correct("2025O724SSPII", FieldKind.REFERENCE) == "2025072455P11"
    assert correct("REF --", FieldKind.REFERENCE) == "REF"


def test_bank_misreads():
    assert correct("B C A", FieldKind.BANK) == "BCA"
    assert correct("mand1ri", FieldKind.BANK) == "MANDIRI"
    assert correct("SEA BANK", FieldKind.BANK) == "SEABANK"


def test_name_keeps_mask_and_strips_punctuation():
    assert correct("SITI  AMINAH.", FieldKind.NAME) == "SITI AMINAH"
    assert correct("0857****4165", FieldKind.NAME) == "0857****4165"


def test_empty_input():
    assert correct("", FieldKind.NAME) == ""


def test_correct_fields_leaves_amount_alone():
    fields = finish(
        profile_for("BRI"),
        receiver_name="SITI. AMINAH",
        amount=150000,
        receiver_account="66O3 O1O3",
        reference_number="BR12O",
    )
    out = correct_fields(fields)
    assert out.amount == 150000
    assert out.receiver_name == "SITI AMINAH"
    assert out.receiver_account == "66030103"
    assert out.reference_number == "BR120"

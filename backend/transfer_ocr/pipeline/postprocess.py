from __future__ import annotations

import re
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from transfer_ocr.extractors.base import ExtractedFields


class FieldKind(str, Enum):
    NAME = "name"
    BANK = "bank"
    ACCOUNT = "account"
    REFERENCE = "reference"
    AMOUNT = "amount"


# Letters the recognizer returns where a digit was printed
_DIGIT_FIXES: Dict[str, str] = {"O": "0", "o": "0", "I": "1", "l": "1", "S": "5", "G": "6"}
_AMOUNT_FIXES: Dict[str, str] = {**_DIGIT_FIXES, "B": "8"}
_MASK_CHARS = "xX•"

# Known token splits/misreads of bank names
BANK_FIXES: Dict[str, str] = {
    "B C A": "BCA",
    "B CA": "BCA",
    "BC A": "BCA",
    "B R I": "BRI",
    "B RI": "BRI",
    "BR I": "BRI",
    "MAND1RI": "MANDIRI",
    "MANDIR1": "MANDIRI",
    "MAND IRI": "MANDIRI",
    "BN1": "BNI",
    "BN I": "BNI",
    "B NI": "BNI",
    "SEAB ANK": "SEABANK",
    "SEA BANK": "SEABANK",
    "DAN A": "DANA",
    "D ANA": "DANA",
}


def _translate(text: str, table: Dict[str, str]) -> str:
    return "".join(table.get(ch, ch) for ch in text)


def _correct_amount(s: str) -> str:
    s = _translate(s, _AMOUNT_FIXES)
    return re.sub(r"[^\d\.,]", "", s)


def _correct_account(s: str) -> str:
    s = _translate(s, _DIGIT_FIXES)
    s = "".join("*" if ch in _MASK_CHARS else ch for ch in s)
    return re.sub(r"[^\d*]", "", s)


def _correct_reference(s: str) -> str:
    s = re.sub(r"[^\w]", "", s)
    # A leading alphabetic prefix (BR..., SEA..., BNI...) is part of the
    # reference format and is left alone.
    m = re.match(r"[A-Za-z]*", s)
    prefix = m.group(0) if m else ""
    return prefix + _translate(s[len(prefix):], _DIGIT_FIXES)


def _correct_bank(s: str) -> str:
    s = re.sub(r"\s+", " ", s).strip().upper()
    changed = True
    while changed:
        changed = False
        for wrong, right in BANK_FIXES.items():
            if wrong in s:
                s = s.replace(wrong, right)
                changed = True
    return s


def _correct_name(s: str) -> str:
    # Masked wallet ids (0857****4165) appear as sender names, keep the mask
    s = re.sub(r"[^\w\s*]", "", s)
    return re.sub(r"\s+", " ", s).strip()


_CORRECTORS = {
    FieldKind.AMOUNT: _correct_amount,
    FieldKind.ACCOUNT: _correct_account,
    FieldKind.REFERENCE: _correct_reference,
    FieldKind.BANK: _correct_bank,
    FieldKind.NAME: _correct_name,
}


def correct(raw_value: str, kind: FieldKind) -> str:
    """Normalize one OCR field value.

    Pure and idempotent: correct(correct(x, k), k) == correct(x, k).
    - amount/account/reference: letters confused with digits are fixed
    - bank: known misreads collapse to the canonical bank code
    - name: punctuation stripped, letters kept as read
    """
    if not raw_value:
        return ""
    return _CORRECTORS[FieldKind(kind)](str(raw_value).strip())


def correct_fields(fields: "ExtractedFields") -> "ExtractedFields":
    """Apply ``correct`` to every text field except the (already numeric) amount."""
    return replace(
        fields,
        sender_name=correct(fields.sender_name, FieldKind.NAME),
        receiver_name=correct(fields.receiver_name, FieldKind.NAME),
        receiver_bank=correct(fields.receiver_bank, FieldKind.BANK),
        receiver_account=correct(fields.receiver_account, FieldKind.ACCOUNT),
        reference_number=correct(fields.reference_number, FieldKind.REFERENCE),
    )


__all__ = ["FieldKind", "BANK_FIXES", "correct", "correct_fields"]

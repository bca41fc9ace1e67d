from __future__ import annotations

from enum import Enum
from typing import Dict, List


class BankType(str, Enum):
    BCA = "BCA"
    BRI = "BRI"
    MANDIRI = "MANDIRI"
    BNI = "BNI"
    SEABANK = "SEABANK"
    DANA = "DANA"
    BSI = "BSI"
    FLIP = "FLIP"


class PaperSize(str, Enum):
    MM58 = "58mm"
    MM80 = "80mm"


ALL_BANKS: List[str] = [e.value for e in BankType]

# Prefix used when a reference number has to be synthesized.
REFERENCE_PREFIXES: Dict[str, str] = {
    BankType.BCA.value: "BCA",
    BankType.BRI.value: "BRI",
    BankType.MANDIRI.value: "MDR",
    BankType.BNI.value: "BNI",
    BankType.SEABANK.value: "SEA",
    BankType.DANA.value: "DNA",
}


def is_valid_bank(label: str) -> bool:
    return label in ALL_BANKS


def normalize_bank_type(label: object) -> str:
    if isinstance(label, Enum):
        label = label.value
    return str(label or "").strip().upper()


def normalize_paper_size(value: object) -> str:
    if isinstance(value, Enum):
        value = value.value
    s = str(value or "").strip().lower()
    if s in (PaperSize.MM58.value, PaperSize.MM80.value):
        return s
    return PaperSize.MM80.value


def reference_prefix(bank_type: str) -> str:
    return REFERENCE_PREFIXES.get(bank_type, bank_type)

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

# Canonical masked-account shapes per destination kind.
MASKED_BANK_ACCOUNT_RX = re.compile(r"^\*{8,11}\d{3,4}$")
MASKED_DANA_ACCOUNT_RX = re.compile(r"^\d{4}\*{4,5}\d{3}$")
# Accepted by the name->account auto-save rule
MAPPING_ACCOUNT_RX = re.compile(r"^\*{8,}\d{3,4}$")

MASK_LENGTH = 11
BANK_ACCOUNT_PLACEHOLDER = "*" * MASK_LENGTH
DANA_ACCOUNT_PLACEHOLDER = "0000*****000"


@dataclass(frozen=True)
class SuffixCorrectionTable:
    """Observed digit-loss fixes for masked account suffixes.

    The recognizer drops the leading digit of some 4-digit suffixes after a
    mask run ("504" for "8504"). Entries come from receipts seen in the field;
    do not extend them by inference. ``markers`` restricts an entry to raw text
    that carries the given token.
    """

    version: str
    table: Mapping[str, str]
    markers: Mapping[str, str] = field(default_factory=dict)

    def apply(self, digits: str, raw: str = "") -> str:
        fixed = self.table.get(digits)
        if fixed is None:
            return digits
        marker = self.markers.get(digits)
        if marker and marker not in (raw or ""):
            return digits
        return fixed


SUFFIX_CORRECTIONS = SuffixCorrectionTable(
    version="2025-07",
    table={
        "531": "2531",
        "504": "8504",
        "532": "8532",
        "503": "8503",
        "501": "8501",
        "502": "8502",
    },
    markers={"531": "kkk"},
)


def load_suffix_corrections(path: Optional[str]) -> SuffixCorrectionTable:
    """Load a replacement table from JSON: {"version", "table", "markers"?}."""
    if not path:
        return SUFFIX_CORRECTIONS
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    table: Dict[str, str] = {str(k): str(v) for k, v in (data.get("table") or {}).items()}
    markers: Dict[str, str] = {str(k): str(v) for k, v in (data.get("markers") or {}).items()}
    return SuffixCorrectionTable(version=str(data.get("version", "custom")), table=table, markers=markers)

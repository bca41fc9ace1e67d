from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Any, Dict

from transfer_ocr.pipeline.postprocess import FieldKind, correct


@dataclass
class ParseResult:
    value: Any
    ok: bool
    error: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None


# Amount tokens start with a digit; letters commonly confused with digits are
# tolerated inside the token and fixed before conversion.
_AMOUNT_TOKEN = r"\d[\dOoIlSGB.,]*"
RP_AMOUNT_RX = re.compile(r"[Rr][Pp]\.?\s*(" + _AMOUNT_TOKEN + ")")
IDR_AMOUNT_RX = re.compile(r"IDR\s*(" + _AMOUNT_TOKEN + ")", re.IGNORECASE)
_DECIMAL_TAIL_RX = re.compile(r"^(.*\d)[\.,](\d{2})$")


def parse_amount(text: str) -> ParseResult:
    """Parse a rupiah amount into an integer.

    Thousands separators may be dots or commas; a two-digit decimal tail
    (``.00`` / ``,00``) is dropped. ``130,000.00`` -> 130000,
    ``2.009.596`` -> 2009596.
    """
    if not text:
        return ParseResult(value=None, ok=False, error="EMPTY")
    token = correct(text, FieldKind.AMOUNT).strip(".,")
    if not token or not re.search(r"\d", token):
        return ParseResult(value=None, ok=False, error="NO_MATCH", meta={"text": text})
    m = _DECIMAL_TAIL_RX.match(token)
    int_part = m.group(1) if m else token
    digits = re.sub(r"\D", "", int_part)
    if not digits:
        return ParseResult(value=None, ok=False, error="BAD_NUMBER", meta={"text": text})
    return ParseResult(value=int(digits), ok=True, meta={"token": token})


def amount_after_rp(line: str) -> Optional[int]:
    """Amount following an ``Rp`` marker on ``line``, if any."""
    m = RP_AMOUNT_RX.search(line or "")
    if not m:
        return None
    r = parse_amount(m.group(1))
    return r.value if r.ok else None


def amount_after_idr(line: str) -> Optional[int]:
    m = IDR_AMOUNT_RX.search(line or "")
    if not m:
        return None
    r = parse_amount(m.group(1))
    return r.value if r.ok else None

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Optional, Tuple

from transfer_ocr.config import DEFAULT_MAPPINGS
from transfer_ocr.validations.patterns import (
    MASK_LENGTH,
    MASKED_DANA_ACCOUNT_RX,
    SuffixCorrectionTable,
    load_suffix_corrections,
)

# Any glyph the recognizer uses for a mask position
MASK_GLYPHS = "*xX•"
_MASK_RUN_RX = re.compile(r"[*xX•]+")

BANK_KEYWORDS = ("BRI", "BCA", "BNI", "MANDIRI", "BSI")
MASKED_BANK_LINE_RX = re.compile(
    r"(?:BANK\s+)?\b(BRI|BCA|BNI|MANDIRI|BSI)\b\s*[:.]?\s*(.+)", re.IGNORECASE
)

# Person-like line shapes used by name fallbacks
NAME_LINE_PATTERNS = (
    re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+)+$"),
    re.compile(r"^[A-Z]{2,}(\s+[A-Z]{2,})+$"),
    re.compile(r"^[A-Z][a-z]+(\s+[A-Z]+)+$"),
)
CAPS_LINE_RX = re.compile(r"^[A-Z\s]+$")
HONORIFIC_RX = re.compile(r"^(Bpk|Ibu|Sdr)\.?\s+", re.IGNORECASE)

_NAME_PREFIX_NOISE = ("WN DNID ", "JM ", "J ", "EO ")
_SHORT_PREFIX_RX = re.compile(r"^[A-Z0-9]{1,2}\s+")


@lru_cache(maxsize=1)
def suffix_corrections() -> SuffixCorrectionTable:
    """The active suffix correction table (``SUFFIX_CORRECTIONS_PATH`` overrides the built-in one)."""
    return load_suffix_corrections(DEFAULT_MAPPINGS.suffix_corrections_path)


def pick_reference(candidates: Iterable[str]) -> str:
    """Longest candidate wins; the earliest one on ties."""
    best = ""
    for c in candidates:
        c = (c or "").strip()
        if len(c) > len(best):
            best = c
    return best


def mask_bank_account(digits: str) -> str:
    """Re-mask a bank account to 11 mask characters + its trailing 3-4 digits."""
    d = re.sub(r"\D", "", digits or "")
    if len(d) < 3:
        return ""
    return "*" * MASK_LENGTH + d[-4:]


def normalize_masks(text: str) -> str:
    return "".join("*" if ch in MASK_GLYPHS else ch for ch in (text or ""))


def parse_masked_bank_line(
    line: str, corrections: Optional[SuffixCorrectionTable] = None
) -> Optional[Tuple[str, str]]:
    """Parse ``BANK BRI: xxxxxxxx 504`` style lines.

    Returns ``(bank, account)`` or None. Whatever the recognizer made of the
    mask run, the trailing 3-4 digits are passed through the suffix correction
    table and re-masked to 11.
    """
    m = MASKED_BANK_LINE_RX.search(line or "")
    if not m:
        return None
    bank = m.group(1).upper()
    rest = m.group(2).strip()
    tail = re.search(r"(\d{3,4})\s*$", rest)
    if not tail:
        return None
    table = corrections or suffix_corrections()
    return bank, "*" * MASK_LENGTH + table.apply(tail.group(1), rest)


def format_dana_account(raw: str) -> Optional[str]:
    """Reformat a recognized DANA phone into ``dddd****ddd`` / ``dddd*****ddd``.

    OCR often loses the mask run entirely (``0812337``); the first four and
    last three digits are kept and the gap re-masked.
    """
    s = normalize_masks(raw).replace(" ", "")
    if not s:
        return None
    m = MASKED_DANA_ACCOUNT_RX.search(s)
    if m:
        return m.group(0)
    m = re.search(r"(\d{4})\*+(\d{3,})", s)
    if m:
        masks = min(max(len(s[m.start(0) + 4 : m.start(2)]), 4), 5)
        return m.group(1) + "*" * masks + m.group(2)[-3:]
    digits = re.sub(r"\D", "", s)
    if len(digits) == 7:
        return digits[:4] + "****" + digits[4:]
    if len(digits) >= 8:
        return digits[:4] + "*****" + digits[-3:]
    return None


def clean_name(raw: str) -> str:
    """Letters-only, upper-cased name with common OCR prefix noise removed."""
    s = re.sub(r"[^a-zA-Z\s]", "", raw or "")
    s = re.sub(r"\s+", " ", s).strip().upper()
    for noise in _NAME_PREFIX_NOISE:
        if s.startswith(noise):
            s = s[len(noise):]
    m = _SHORT_PREFIX_RX.match(s)
    if m:
        stripped = s[m.end():]
        if len(stripped) >= 3 and re.search(r"[A-Z]", stripped):
            s = stripped
    return s


def strip_honorific(name: str) -> str:
    return HONORIFIC_RX.sub("", (name or "").strip())


def looks_like_name(line: str) -> bool:
    return any(p.match(line) for p in NAME_LINE_PATTERNS)

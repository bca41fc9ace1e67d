from __future__ import annotations

import unicodedata
import re
from typing import List

# Lightweight normalization helpers shared by the engines and the extractors.

_ZERO_WIDTH = {
    "\u200B",  # ZERO WIDTH SPACE
    "\u200C",  # ZERO WIDTH NON-JOINER
    "\u200D",  # ZERO WIDTH JOINER
    "\u200E",  # LEFT-TO-RIGHT MARK
    "\u200F",  # RIGHT-TO-LEFT MARK
    "\uFEFF",  # BYTE ORDER MARK
}

# Bullets and dots printed between fields or used as mask glyphs
_BULLETS = {
    "\u00B7": "\u2022",  # MIDDLE DOT
    "\u2219": "\u2022",  # BULLET OPERATOR
    "\u25CF": "\u2022",  # BLACK CIRCLE
}


def normalize_ocr_text(text: str) -> str:
    """Unicode-normalize one line of OCR output and collapse its whitespace."""
    if not text:
        return ""
    s = unicodedata.normalize("NFKC", text)
    for ch in _ZERO_WIDTH:
        s = s.replace(ch, "")
    for ch, repl in _BULLETS.items():
        s = s.replace(ch, repl)
    return re.sub(r"\s+", " ", s).strip()


def split_lines(text: str) -> List[str]:
    """Split OCR text into trimmed, non-empty lines."""
    if not text:
        return []
    out: List[str] = []
    for raw in text.splitlines():
        line = normalize_ocr_text(raw)
        if line:
            out.append(line)
    return out


from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional


@dataclass
class PreflightSettings:
    padding: int = int(os.getenv("PREFLIGHT_PADDING", 50))
    contrast_factor: float = float(os.getenv("PREFLIGHT_CONTRAST_FACTOR", 2.5))
    contrast_midpoint: float = float(os.getenv("PREFLIGHT_CONTRAST_MIDPOINT", 210.0))


DEFAULT_PREFLIGHT = PreflightSettings()


# Characters a transfer receipt can legitimately contain. Space is implied by
# word segmentation and cannot be passed through a tesseract -c flag.
RECEIPT_CHAR_WHITELIST = (
    "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz.,:/()-*"
)
MASKED_DIGITS_WHITELIST = "0123456789*"


@dataclass
class RecognizerSettings:
    engine: str = os.getenv("RECOGNIZER_ENGINE", "tesseract")  # tesseract | paddle
    tesseract_cmd: Optional[str] = os.getenv("TESSERACT_CMD") or None
    lang: str = os.getenv("TESSERACT_LANG", "ind+eng")
    psm: int = int(os.getenv("TESSERACT_PSM", 6))
    oem: int = int(os.getenv("TESSERACT_OEM", 1))
    char_whitelist: str = os.getenv("OCR_CHAR_WHITELIST", RECEIPT_CHAR_WHITELIST)
    min_confidence: float = float(os.getenv("OCR_MIN_CONFIDENCE", 0.0))
    threads: int = int(os.getenv("OCR_THREADS", 4))


DEFAULT_RECOGNIZER = RecognizerSettings()


@dataclass
class DanaCropSettings:
    scale: float = float(os.getenv("DANA_CROP_SCALE", 2.0))
    workers: int = int(os.getenv("DANA_CROP_WORKERS", 3))
    adaptive_threshold: bool = os.getenv("DANA_CROP_ADAPTIVE", "1") == "1"


DEFAULT_DANA_CROP = DanaCropSettings()


@dataclass
class MappingSettings:
    path: Optional[str] = os.getenv("ACCOUNT_MAPPINGS_PATH") or None
    suffix_corrections_path: Optional[str] = os.getenv("SUFFIX_CORRECTIONS_PATH") or None


DEFAULT_MAPPINGS = MappingSettings()

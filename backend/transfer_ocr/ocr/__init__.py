"""OCR package.

Exports the recognizer facade, the image normalizer and related classes for
external use.
"""

from .crop import CropRegion, crop_region
from .ocr_engine import OCRLine, PaddleOCREngine, Recognition, Recognizer, RecognizerError, TesseractEngine
from .preflight import PreflightConfig, PreflightError, load_image, preflight_process

__all__ = [
    "CropRegion",
    "crop_region",
    "OCRLine",
    "PaddleOCREngine",
    "Recognition",
    "Recognizer",
    "RecognizerError",
    "TesseractEngine",
    "PreflightConfig",
    "PreflightError",
    "load_image",
    "preflight_process",
]

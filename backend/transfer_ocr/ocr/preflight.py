from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import cv2
import numpy as np
import logging
from transfer_ocr.config import DEFAULT_PREFLIGHT


ImageSource = Union[bytes, bytearray, str, Path]


@dataclass
class PreflightConfig:
    """Configuration for receipt normalization.

    - padding: white border (px) added on every side so edge glyphs survive recognition
    - contrast_factor: slope of the contrast stretch
    - contrast_midpoint: luma value left unchanged by the stretch; placed high so
      light-gray anti-aliased text is pushed towards black while paper stays white
    """

    padding: int = 50
    contrast_factor: float = 2.5
    contrast_midpoint: float = 210.0


class PreflightError(Exception):
    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "meta": self.meta}


def _decode_bytes(data: bytes) -> np.ndarray:
    if not data:
        raise PreflightError(code="IMAGE_DECODE_FAILED", message="Empty image payload")
    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise PreflightError(
            code="IMAGE_DECODE_FAILED",
            message="Image payload could not be decoded",
            meta={"size": len(data)},
        )
    return img


def load_image(source: ImageSource) -> np.ndarray:
    """Decode an image given as raw bytes, a ``data:`` URI or a file path.

    Raises PreflightError with code 'IMAGE_DECODE_FAILED' when nothing usable
    can be decoded.
    """
    if isinstance(source, (bytes, bytearray)):
        return _decode_bytes(bytes(source))
    s = str(source)
    if s.startswith("data:"):
        _, _, payload = s.partition(",")
        try:
            return _decode_bytes(base64.b64decode(payload, validate=False))
        except (binascii.Error, ValueError) as e:
            raise PreflightError(code="IMAGE_DECODE_FAILED", message=f"Bad data URI: {e}")
    path = Path(s)
    if not path.is_file():
        raise PreflightError(code="IMAGE_DECODE_FAILED", message=f"Image not found: {s}", meta={"path": s})
    return _decode_bytes(path.read_bytes())


def _to_gray(image: np.ndarray) -> np.ndarray:
    if len(image.shape) == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if len(image.shape) == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return image


def _pad(image: np.ndarray, padding: int) -> np.ndarray:
    if padding <= 0:
        return image.copy()
    fill = (255, 255, 255) if image.ndim == 3 else 255
    return cv2.copyMakeBorder(image, padding, padding, padding, padding, cv2.BORDER_CONSTANT, value=fill)


def _stretch_contrast(gray: np.ndarray, factor: float, midpoint: float) -> np.ndarray:
    stretched = (gray.astype(np.float32) - midpoint) * factor + midpoint
    return np.clip(stretched, 0, 255).astype(np.uint8)


def preflight_process(
    image: np.ndarray,
    cfg: Optional[PreflightConfig] = None,
    correlation_id: Optional[str] = None,
) -> Tuple[np.ndarray, Dict[str, Any]]:
    """Normalize a receipt photo for recognition.

    Returns a tuple of (processed_image, meta). The processed image is a new
    single-channel array; the input is never modified.
    """
    if cfg is None:
        cfg = PreflightConfig(
            padding=DEFAULT_PREFLIGHT.padding,
            contrast_factor=DEFAULT_PREFLIGHT.contrast_factor,
            contrast_midpoint=DEFAULT_PREFLIGHT.contrast_midpoint,
        )
    logger = logging.getLogger("transfer_ocr.ocr.preflight")
    logger.info("preflight_start", extra={"correlation_id": correlation_id})

    if image is None or image.size == 0:
        raise PreflightError(code="IMAGE_DECODE_FAILED", message="Empty image", meta={"correlation_id": correlation_id})

    padded = _pad(image, cfg.padding)
    gray = _to_gray(padded)
    normalized = _stretch_contrast(gray, cfg.contrast_factor, cfg.contrast_midpoint)

    meta: Dict[str, Any] = {
        "correlation_id": correlation_id,
        "source_shape": list(image.shape[:2]),
        "normalized_shape": list(normalized.shape[:2]),
        "padding": cfg.padding,
        "contrast_factor": cfg.contrast_factor,
        "contrast_midpoint": cfg.contrast_midpoint,
    }

    logger.info("preflight_complete", extra=meta)
    return normalized, meta


__all__ = [
    "PreflightConfig",
    "PreflightError",
    "load_image",
    "preflight_process",
]

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from transfer_ocr.ocr.preflight import PreflightError


@dataclass(frozen=True)
class CropRegion:
    """Region expressed as ratios (0..1) of the image width/height."""

    x: float
    y: float
    width: float
    height: float


def crop_region(
    image: np.ndarray,
    region: CropRegion,
    *,
    scale: float = 1.0,
    adaptive_threshold: bool = False,
) -> np.ndarray:
    """Cut a ratio-based region out of ``image`` and binarize it.

    The crop is optionally upscaled, converted to gray and thresholded either
    at the crop's mean brightness (``adaptive_threshold``) or at 128.
    Returns a new uint8 array; raises PreflightError when the region is empty.
    """
    h, w = image.shape[:2]
    x1 = max(0, int(round(w * region.x)))
    y1 = max(0, int(round(h * region.y)))
    x2 = min(w, x1 + int(round(w * region.width)))
    y2 = min(h, y1 + int(round(h * region.height)))
    if x2 <= x1 or y2 <= y1:
        raise PreflightError(
            code="EMPTY_CROP",
            message="Crop region does not overlap the image",
            meta={"region": [region.x, region.y, region.width, region.height], "shape": [h, w]},
        )
    crop = image[y1:y2, x1:x2]
    if scale and scale != 1.0:
        new_w = max(1, int(round(crop.shape[1] * scale)))
        new_h = max(1, int(round(crop.shape[0] * scale)))
        crop = cv2.resize(crop, (new_w, new_h), interpolation=cv2.INTER_CUBIC)
    if crop.ndim == 3:
        crop = cv2.cvtColor(crop, cv2.COLOR_BGR2GRAY)
    threshold = float(crop.mean()) if adaptive_threshold else 128.0
    return np.where(crop > threshold, 255, 0).astype(np.uint8)


__all__ = ["CropRegion", "crop_region"]

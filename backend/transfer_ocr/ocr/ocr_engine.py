from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import logging
import threading

import cv2
import numpy as np
import pytesseract
from PIL import Image

try:
    # PaddleOCR is an optional dependency; import lazily to avoid
    # import errors when only the tesseract engine is used.
    from paddleocr import PaddleOCR  # type: ignore
except ImportError:
    PaddleOCR = None  # type: ignore

from transfer_ocr.config import DEFAULT_RECOGNIZER, MASKED_DIGITS_WHITELIST, RecognizerSettings
from transfer_ocr.ocr.text_utils import normalize_ocr_text


logger = logging.getLogger("transfer_ocr.ocr.engine")


@dataclass
class OCRLine:
    """Structured representation of a single recognized line.

    Attributes
    ----------
    text : str
        Normalized text of the line (whitelist applied).
    raw_text : str
        Text as returned by the engine.
    confidence : float
        Mean word confidence reported by the engine (0–1).
    bbox : List[Tuple[float, float]]
        Quadrilateral [(x1, y1), (x2, y1), (x2, y2), (x1, y2)].
    center : Tuple[float, float]
        Centroid of the bounding box; used to restore top-down reading order.
    engine : str
        Identifier of the engine (``"tesseract"`` or ``"paddle"``).
    """

    text: str
    raw_text: str
    confidence: float
    bbox: List[Tuple[float, float]]
    center: Tuple[float, float]
    engine: str


@dataclass
class Recognition:
    text: str
    lines: List[OCRLine] = field(default_factory=list)
    confidence: float = 0.0

    @classmethod
    def from_lines(cls, lines: Sequence[OCRLine]) -> "Recognition":
        kept = [l for l in lines if l.text]
        conf = float(sum(l.confidence for l in kept)) / len(kept) if kept else 0.0
        return cls(text="\n".join(l.text for l in kept), lines=list(kept), confidence=conf)


class RecognizerError(Exception):
    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "meta": self.meta}


def _apply_whitelist(text: str, whitelist: Optional[str]) -> str:
    if not whitelist:
        return text
    allowed = set(whitelist) | {" "}
    return "".join(ch for ch in text if ch in allowed)


def _rect_poly(x: float, y: float, w: float, h: float) -> List[Tuple[float, float]]:
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]


def _compute_center(poly: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    xs = [p[0] for p in poly]
    ys = [p[1] for p in poly]
    return (sum(xs) / len(xs), sum(ys) / len(ys))


class TesseractEngine:
    """Tesseract (via pytesseract) configured for transfer receipts.

    Whitelisting, page segmentation and engine mode are passed as command-line
    flags, so every call is an independent subprocess and the engine may be
    shared between threads.
    """

    thread_safe = True
    name = "tesseract"

    def __init__(self, settings: Optional[RecognizerSettings] = None) -> None:
        self.settings = settings or DEFAULT_RECOGNIZER
        if self.settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.settings.tesseract_cmd

    def _config(self, whitelist: Optional[str], single_line: bool) -> str:
        psm = 7 if single_line else self.settings.psm
        parts = [f"--oem {self.settings.oem}", f"--psm {psm}", "-c preserve_interword_spaces=1"]
        if whitelist:
            parts.append(f"-c tessedit_char_whitelist={whitelist}")
        return " ".join(parts)

    def _parse_data(self, data: Dict[str, List[Any]], whitelist: Optional[str]) -> List[OCRLine]:
        """Group word-level ``image_to_data`` output into lines.

        Words with negative confidence are layout rows, not text, and are
        skipped. Words below ``min_confidence`` are dropped.
        """
        groups: Dict[Tuple[int, int, int], List[int]] = {}
        order: List[Tuple[int, int, int]] = []
        texts = data.get("text") or []
        for i, word in enumerate(texts):
            if not str(word).strip():
                continue
            try:
                conf = float(data["conf"][i])
            except (KeyError, TypeError, ValueError):
                conf = -1.0
            if conf < 0 or conf / 100.0 < self.settings.min_confidence:
                continue
            key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
            if key not in groups:
                groups[key] = []
                order.append(key)
            groups[key].append(i)

        lines: List[OCRLine] = []
        for key in order:
            idx = groups[key]
            raw = " ".join(str(texts[i]).strip() for i in idx)
            proc = normalize_ocr_text(_apply_whitelist(raw, whitelist))
            confs = [float(data["conf"][i]) / 100.0 for i in idx]
            x1 = min(float(data["left"][i]) for i in idx)
            y1 = min(float(data["top"][i]) for i in idx)
            x2 = max(float(data["left"][i]) + float(data["width"][i]) for i in idx)
            y2 = max(float(data["top"][i]) + float(data["height"][i]) for i in idx)
            poly = _rect_poly(x1, y1, x2 - x1, y2 - y1)
            lines.append(
                OCRLine(
                    text=proc,
                    raw_text=raw,
                    confidence=sum(confs) / len(confs),
                    bbox=poly,
                    center=_compute_center(poly),
                    engine=self.name,
                )
            )
        return lines

    def recognize(
        self,
        image: np.ndarray,
        *,
        whitelist: Optional[str] = None,
        single_line: bool = False,
    ) -> Recognition:
        if image is None or image.size == 0:
            return Recognition(text="")
        try:
            data = pytesseract.image_to_data(
                Image.fromarray(image),
                lang=self.settings.lang,
                config=self._config(whitelist, single_line),
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognizerError(code="RECOGNIZER_UNAVAILABLE", message=str(e)) from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise RecognizerError(code="RECOGNITION_FAILED", message=str(e)) from e
        return Recognition.from_lines(self._parse_data(data, whitelist))


class PaddleOCREngine:
    """Wrapper around PaddleOCR for receipt text.

    The underlying model is created lazily on first use and cached, because
    initialisation dominates per-call cost. PaddleOCR has no character
    whitelist, so the whitelist is applied to the recognized text afterwards.
    """

    thread_safe = False
    name = "paddle"

    def __init__(self, settings: Optional[RecognizerSettings] = None) -> None:
        if PaddleOCR is None:
            raise ImportError(
                "PaddleOCR library is not installed. Please install paddleocr to use this engine."
            )
        self.settings = settings or DEFAULT_RECOGNIZER
        self._ocr = None  # type: Optional[Any]

    def _get_engine(self) -> Any:
        if self._ocr is None:
            try:
                self._ocr = PaddleOCR(
                    lang="en",
                    use_angle_cls=False,
                    cpu_threads=self.settings.threads,
                    show_log=False,
                )
            except (TypeError, ValueError):
                # Newer releases dropped some keyword arguments
                self._ocr = PaddleOCR(lang="en")
        return self._ocr

    def _parse_results(self, results: Any, whitelist: Optional[str]) -> List[OCRLine]:
        """Convert raw PaddleOCR output to a list of ``OCRLine``.

        Handles both the dict-per-page format of newer releases and the
        ``[[(bbox, (text, conf))]]`` format of older ones.
        """
        triples: List[Tuple[Any, str, float]] = []
        if not results:
            return []
        first = results[0]
        if isinstance(first, dict):
            rec_texts = first.get("rec_texts") or []
            rec_scores = first.get("rec_scores") or []
            rec_polys = first.get("rec_polys") or []
            triples = [(p, str(t), float(s)) for t, s, p in zip(rec_texts, rec_scores, rec_polys)]
        elif isinstance(first, list):
            triples = [(bbox, str(text), float(conf)) for bbox, (text, conf) in first]

        lines: List[OCRLine] = []
        for poly, raw, conf in triples:
            if conf < self.settings.min_confidence:
                continue
            poly_f = [(float(p[0]), float(p[1])) for p in poly]
            lines.append(
                OCRLine(
                    text=normalize_ocr_text(_apply_whitelist(raw, whitelist)),
                    raw_text=raw,
                    confidence=conf,
                    bbox=poly_f,
                    center=_compute_center(poly_f),
                    engine=self.name,
                )
            )
        # Reading order: top-down, then left-right
        lines.sort(key=lambda l: (round(l.center[1] / 10.0), l.center[0]))
        return lines

    def recognize(
        self,
        image: np.ndarray,
        *,
        whitelist: Optional[str] = None,
        single_line: bool = False,
    ) -> Recognition:
        if image is None or image.size == 0:
            return Recognition(text="")
        img = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image
        engine = self._get_engine()
        try:
            try:
                raw_results = engine.ocr(img)
            except AttributeError:
                raw_results = engine.predict(img)
        except Exception as e:
            raise RecognizerError(code="RECOGNITION_FAILED", message=str(e)) from e
        lines = self._parse_results(raw_results, whitelist)
        if single_line and lines:
            merged = " ".join(l.text for l in lines)
            return Recognition(text=merged, lines=lines, confidence=min(l.confidence for l in lines))
        return Recognition.from_lines(lines)


class Recognizer:
    """Recognizer facade that selects an engine based on settings.

    Engines supported: tesseract | paddle

    Build one instance per process/session and pass it into the pipeline.
    Full-page calls are serialized; single-line calls run concurrently when
    the engine allows it.
    """

    def __init__(self, settings: Optional[RecognizerSettings] = None, engine: Any = None) -> None:
        self.settings = settings or DEFAULT_RECOGNIZER
        if engine is not None:
            self._engine = engine
        else:
            engine_name = (self.settings.engine or "tesseract").lower()
            if engine_name == "paddle":
                self._engine = PaddleOCREngine(self.settings)
            else:
                if engine_name != "tesseract":
                    logger.warning("unknown_recognizer_engine", extra={"engine_name": engine_name})
                self._engine = TesseractEngine(self.settings)
        self._lock = threading.Lock()

    @property
    def engine_name(self) -> str:
        return str(getattr(self._engine, "name", type(self._engine).__name__))

    def recognize(self, image: np.ndarray) -> Recognition:
        with self._lock:
            return self._engine.recognize(image, whitelist=self.settings.char_whitelist, single_line=False)

    def recognize_line(self, image: np.ndarray, whitelist: str = MASKED_DIGITS_WHITELIST) -> Recognition:
        guard = nullcontext() if getattr(self._engine, "thread_safe", False) else self._lock
        with guard:
            return self._engine.recognize(image, whitelist=whitelist, single_line=True)


__all__ = [
    "OCRLine",
    "Recognition",
    "RecognizerError",
    "TesseractEngine",
    "PaddleOCREngine",
    "Recognizer",
]

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from transfer_ocr.config import DEFAULT_DANA_CROP, DanaCropSettings
from transfer_ocr.extractors.base import synthesize_reference, today_id
from transfer_ocr.ocr.crop import CropRegion, crop_region
from transfer_ocr.ocr.labels import normalize_bank_type, normalize_paper_size, reference_prefix
from transfer_ocr.ocr.ocr_engine import Recognizer, RecognizerError
from transfer_ocr.ocr.preflight import ImageSource, PreflightConfig, PreflightError, load_image, preflight_process
from transfer_ocr.persistence.mappings import AccountMappingStore
from transfer_ocr.schemas.receipt import ReceiptRecord
from transfer_ocr.services.routing import extract

logger = logging.getLogger("transfer_ocr.services.pipeline")

# Vertical bands of the normalized receipt where the "Dana: 0812****337"
# line is printed on SeaBank receipts.
DANA_CROP_VARIANTS: List[CropRegion] = [
    CropRegion(x=0.0, y=0.32, width=1.0, height=0.25),
    CropRegion(x=0.0, y=0.28, width=1.0, height=0.30),
    CropRegion(x=0.0, y=0.36, width=1.0, height=0.28),
]

DEFAULT_SENDER = "DEFAULT SENDER"
DEFAULT_RECEIVER = "DEFAULT RECEIVER"


@dataclass
class ExtractionResult:
    record: ReceiptRecord
    ok: bool
    reason: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)


def default_record(bank_type: str, paper_size: str = "80mm") -> ReceiptRecord:
    """Placeholder record returned when the image never reached the extractors."""
    key = normalize_bank_type(bank_type)
    return ReceiptRecord(
        date=today_id(),
        sender_name=DEFAULT_SENDER,
        receiver_name=DEFAULT_RECEIVER,
        amount=0,
        receiver_bank=key or "GENERIC",
        receiver_account="",
        reference_number=synthesize_reference(reference_prefix(key) or "GENERIC"),
        paper_size=normalize_paper_size(paper_size),
        bank_type=key,
    )


def read_dana_band(
    normalized: np.ndarray,
    recognizer: Recognizer,
    settings: Optional[DanaCropSettings] = None,
    *,
    correlation_id: Optional[str] = None,
) -> str:
    """Re-read the DANA phone band with a digits-and-mask whitelist.

    The crop variants are recognized concurrently; failing variants are
    skipped and the longest non-empty text wins.
    """
    settings = settings or DEFAULT_DANA_CROP

    def _read(region: CropRegion) -> str:
        crop = crop_region(normalized, region, scale=settings.scale, adaptive_threshold=settings.adaptive_threshold)
        return recognizer.recognize_line(crop).text.strip()

    texts: List[str] = []
    with ThreadPoolExecutor(max_workers=max(1, settings.workers)) as pool:
        futures = [(region, pool.submit(_read, region)) for region in DANA_CROP_VARIANTS]
        for region, fut in futures:
            try:
                text = fut.result()
            except (PreflightError, RecognizerError) as e:
                logger.warning(
                    "dana_crop_failed",
                    extra={"correlation_id": correlation_id, "region": [region.y, region.height], "code": e.code},
                )
                continue
            if text:
                texts.append(text)
    best = max(texts, key=len) if texts else ""
    logger.info("dana_crop_read", extra={"correlation_id": correlation_id, "variants": len(texts), "text": best})
    return best


def extract_receipt(
    source: ImageSource,
    bank_type: str,
    paper_size: str = "80mm",
    *,
    recognizer: Recognizer,
    mappings: Optional[AccountMappingStore] = None,
    correlation_id: Optional[str] = None,
    preflight_cfg: Optional[PreflightConfig] = None,
    crop_settings: Optional[DanaCropSettings] = None,
) -> ExtractionResult:
    """Run one receipt image through normalization, recognition and extraction.

    Never raises: decode and recognizer failures, and anything unexpected,
    come back as a default record with ``ok=False`` and the error code in
    ``reason``.
    """
    cid = correlation_id or str(uuid.uuid4())
    try:
        image = load_image(source)
        normalized, pre_meta = preflight_process(image, preflight_cfg, correlation_id=cid)
        recognition = recognizer.recognize(normalized)
        logger.info(
            "recognition_complete",
            extra={"correlation_id": cid, "lines": len(recognition.lines), "confidence": recognition.confidence},
        )

        def _dana_reader() -> str:
            return read_dana_band(normalized, recognizer, crop_settings, correlation_id=cid)

        record = extract(
            recognition.text,
            bank_type,
            paper_size,
            mappings=mappings,
            dana_reader=_dana_reader,
            correlation_id=cid,
        )
        meta = {
            "correlation_id": cid,
            "preflight": pre_meta,
            "engine": recognizer.engine_name,
            "ocr_confidence": recognition.confidence,
            "raw_text": recognition.text,
        }
        return ExtractionResult(record=record, ok=True, meta=meta)
    except (PreflightError, RecognizerError) as e:
        logger.warning("extraction_degraded", extra={"correlation_id": cid, "code": e.code, "error": e.message})
        return ExtractionResult(
            record=default_record(bank_type, paper_size),
            ok=False,
            reason=e.code,
            meta={"correlation_id": cid, "error": e.to_dict()},
        )
    except Exception as e:
        logger.exception("extraction_failed", extra={"correlation_id": cid})
        return ExtractionResult(
            record=default_record(bank_type, paper_size),
            ok=False,
            reason="INTERNAL_ERROR",
            meta={"correlation_id": cid, "error": {"code": "INTERNAL_ERROR", "message": str(e)}},
        )

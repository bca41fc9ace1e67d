from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from typing import Dict, Optional

from transfer_ocr.extractors import (
    ExtractedFields,
    Extractor,
    extract_bca,
    extract_bni,
    extract_bri,
    extract_dana,
    extract_generic,
    extract_mandiri,
    extract_seabank,
    profile_for,
    refill_defaults,
)
from transfer_ocr.ocr.labels import BankType, normalize_bank_type, normalize_paper_size
from transfer_ocr.ocr.text_utils import split_lines
from transfer_ocr.persistence.mappings import AccountMappingStore
from transfer_ocr.pipeline.postprocess import correct_fields
from transfer_ocr.pipeline.reconstruct import (
    DanaReader,
    ReconstructionContext,
    reconstruct_bank_account,
    reconstruct_dana_account,
)
from transfer_ocr.schemas.receipt import ReceiptRecord
from transfer_ocr.validations.patterns import MASKED_DANA_ACCOUNT_RX

logger = logging.getLogger("transfer_ocr.services.routing")


EXTRACTORS: Dict[str, Extractor] = {
    BankType.BCA.value: extract_bca,
    BankType.BRI.value: extract_bri,
    BankType.MANDIRI.value: extract_mandiri,
    BankType.BNI.value: extract_bni,
    BankType.SEABANK.value: extract_seabank,
    BankType.DANA.value: extract_dana,
}


def select_extractor(bank_type: str) -> Extractor:
    """Extractor for ``bank_type``; unknown ids get the generic placeholder extractor."""
    key = normalize_bank_type(bank_type)
    fn = EXTRACTORS.get(key)
    if fn is None:
        logger.info("route_generic", extra={"bank_type": key})
        return partial(extract_generic, bank_type=key)
    return fn


def _reconstruct_seabank(
    fields: ExtractedFields,
    text: str,
    lines,
    *,
    mappings: Optional[AccountMappingStore],
    dana_reader: Optional[DanaReader],
    correlation_id: Optional[str],
) -> ExtractedFields:
    ctx = ReconstructionContext(
        text=text,
        lines=lines,
        receiver_name=fields.receiver_name,
        mappings=mappings,
        dana_reader=dana_reader,
        correlation_id=correlation_id,
    )
    if fields.dana_destination:
        if MASKED_DANA_ACCOUNT_RX.match(fields.receiver_account):
            return fields
        result = reconstruct_dana_account(ctx)
        return replace(fields, receiver_account=result.account, receiver_bank="DANA")
    if fields.receiver_account:
        return fields
    result = reconstruct_bank_account(ctx)
    return replace(fields, receiver_account=result.account, receiver_bank=result.bank or fields.receiver_bank)


def extract(
    text: str,
    bank_type: str,
    paper_size: str = "80mm",
    *,
    mappings: Optional[AccountMappingStore] = None,
    dana_reader: Optional[DanaReader] = None,
    correlation_id: Optional[str] = None,
) -> ReceiptRecord:
    """Turn recognized receipt text into a ReceiptRecord.

    Never raises for unknown bank ids or empty text: every field falls back
    to the bank's defaults. ``mappings`` and ``dana_reader`` feed the SEABANK
    account reconstruction chains.
    """
    key = normalize_bank_type(bank_type)
    text = text or ""
    lines = split_lines(text)
    fields = select_extractor(key)(lines, text)

    if key == BankType.SEABANK.value:
        fields = _reconstruct_seabank(
            fields,
            text,
            lines,
            mappings=mappings,
            dana_reader=dana_reader,
            correlation_id=correlation_id,
        )

    fields = refill_defaults(correct_fields(fields), profile_for(key or "GENERIC"))
    logger.info(
        "extract_complete",
        extra={
            "correlation_id": correlation_id,
            "bank_type": key,
            "lines": len(lines),
            "amount": fields.amount,
            "receiver_bank": fields.receiver_bank,
        },
    )
    return ReceiptRecord(
        date=fields.date,
        time=fields.time,
        sender_name=fields.sender_name,
        receiver_name=fields.receiver_name,
        amount=fields.amount,
        receiver_bank=fields.receiver_bank,
        receiver_account=fields.receiver_account,
        reference_number=fields.reference_number,
        admin_fee=fields.admin_fee,
        paper_size=normalize_paper_size(paper_size),
        bank_type=key,
    )

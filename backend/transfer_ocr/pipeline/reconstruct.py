from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from transfer_ocr.extractors.common import format_dana_account, suffix_corrections
from transfer_ocr.persistence.mappings import AccountMappingStore
from transfer_ocr.validations.patterns import (
    BANK_ACCOUNT_PLACEHOLDER,
    DANA_ACCOUNT_PLACEHOLDER,
    MAPPING_ACCOUNT_RX,
    MASK_LENGTH,
    SuffixCorrectionTable,
)

logger = logging.getLogger("transfer_ocr.pipeline.reconstruct")

_MASKED_SHAPE_RX = re.compile(r"[*xX•]{8,}\s*(\d{3,4})")
_BANK_LINE_KEYWORDS = ("BRI", "BANK", "MANDIRI", "BCA", "BNI")
_TRAILING_DIGITS_RX = re.compile(r"(\d{3,4})\s*$")
_PHONE_RX = re.compile(r"(?<!\d)08\d{2}[*xX•]*\d{3,9}(?!\d)")

DanaReader = Callable[[], str]


@dataclass(frozen=True)
class ReconstructionContext:
    text: str
    lines: Sequence[str]
    receiver_name: str = ""
    mappings: Optional[AccountMappingStore] = None
    dana_reader: Optional[DanaReader] = None
    corrections: Optional[SuffixCorrectionTable] = None
    correlation_id: Optional[str] = None


@dataclass(frozen=True)
class Reconstruction:
    account: str
    step: str
    bank: Optional[str] = None
    meta: dict = field(default_factory=dict)


Step = Callable[[ReconstructionContext], Optional[Reconstruction]]


def _bank_from_line(line: str) -> Optional[str]:
    upper = line.upper()
    for bank in ("BCA", "MANDIRI", "BNI", "BRI"):
        if bank in upper:
            return bank
    return None


def full_text_masked_shape(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    m = _MASKED_SHAPE_RX.search(ctx.text)
    if not m:
        return None
    return Reconstruction(account="*" * MASK_LENGTH + m.group(1), step="full_text_masked_shape")


def bank_line_suffix(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    table = ctx.corrections or suffix_corrections()
    for line in ctx.lines:
        upper = line.upper()
        # The sender side of a SeaBank receipt carries its own account
        if "SEABANK" in upper or not any(k in upper for k in _BANK_LINE_KEYWORDS):
            continue
        m = _TRAILING_DIGITS_RX.search(line)
        if not m:
            continue
        digits = table.apply(m.group(1), line)
        return Reconstruction(
            account="*" * MASK_LENGTH + digits,
            step="bank_line_suffix",
            bank=_bank_from_line(line),
            meta={"read": m.group(1), "corrections_version": table.version},
        )
    return None


def mapping_lookup(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    if ctx.mappings is None:
        return None
    name = (ctx.receiver_name or "").strip().upper()
    if not name:
        return None
    account = ctx.mappings.lookup(name)
    # Only masked shapes are accepted from the store
    if not account or not MAPPING_ACCOUNT_RX.match(account):
        return None
    return Reconstruction(account=account, step="mapping_lookup")


def bank_placeholder(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    return Reconstruction(account=BANK_ACCOUNT_PLACEHOLDER, step="placeholder")


def dana_crop_rescan(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    if ctx.dana_reader is None:
        return None
    raw = ctx.dana_reader()
    account = format_dana_account(raw) if raw else None
    if not account:
        return None
    return Reconstruction(account=account, step="dana_crop_rescan", meta={"read": raw})


def dana_text_search(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    for m in _PHONE_RX.finditer(ctx.text):
        account = format_dana_account(m.group(0))
        if account:
            return Reconstruction(account=account, step="dana_text_search")
    return None


def dana_placeholder(ctx: ReconstructionContext) -> Optional[Reconstruction]:
    return Reconstruction(account=DANA_ACCOUNT_PLACEHOLDER, step="placeholder")


BANK_CHAIN: List[Tuple[str, Step]] = [
    ("full_text_masked_shape", full_text_masked_shape),
    ("bank_line_suffix", bank_line_suffix),
    ("mapping_lookup", mapping_lookup),
    ("placeholder", bank_placeholder),
]

DANA_CHAIN: List[Tuple[str, Step]] = [
    ("dana_crop_rescan", dana_crop_rescan),
    ("dana_text_search", dana_text_search),
    ("placeholder", dana_placeholder),
]


def run_chain(chain: Sequence[Tuple[str, Step]], ctx: ReconstructionContext) -> Reconstruction:
    """Evaluate ``chain`` in order; the first step returning a result wins.

    Chains end with a placeholder step, so a result is always produced.
    """
    for name, step in chain:
        result = step(ctx)
        if result is not None:
            logger.info(
                "reconstruct_step_hit",
                extra={"step": name, "correlation_id": ctx.correlation_id, "account": result.account},
            )
            return result
        logger.debug("reconstruct_step_miss", extra={"step": name, "correlation_id": ctx.correlation_id})
    raise ValueError("reconstruction chain produced no result")


def reconstruct_bank_account(ctx: ReconstructionContext) -> Reconstruction:
    return run_chain(BANK_CHAIN, ctx)


def reconstruct_dana_account(ctx: ReconstructionContext) -> Reconstruction:
    return run_chain(DANA_CHAIN, ctx)


__all__ = [
    "ReconstructionContext",
    "Reconstruction",
    "BANK_CHAIN",
    "DANA_CHAIN",
    "run_chain",
    "reconstruct_bank_account",
    "reconstruct_dana_account",
]

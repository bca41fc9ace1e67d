from __future__ import annotations

import logging
import re
from typing import List, Optional

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import (
    BANK_KEYWORDS,
    MASK_GLYPHS,
    clean_name,
    format_dana_account,
    looks_like_name,
    parse_masked_bank_line,
    pick_reference,
)
from transfer_ocr.parsers.fields import amount_after_rp

logger = logging.getLogger("transfer_ocr.extractors.seabank")

PROFILE = profile_for("SEABANK")
DEFAULT_DESTINATION_BANK = "BRI"

_DANA_MARKERS = (
    re.compile(r"\bDANA\s*:", re.IGNORECASE),
    re.compile(r"\bDNID\b", re.IGNORECASE),
    # a bare DANA word, but not the "Sumber Dana" (source of funds) label
    re.compile(r"(?<!SUMBER )\bDANA\b", re.IGNORECASE),
)

_DATETIME_RX = re.compile(r"(\d{1,2}\s+\w+\s+\d{4}),\s+(\d{2}:\d{2})")
_FROM_RX = re.compile(r"^Dari\s+(.+)")
_TO_RX = re.compile(r"^Ke\s+(.+)")
_BARE_RP_RX = re.compile(r"^Rp\s+[\d.,]+$")
_TRX_NO_RX = re.compile(r"No\.\s*Transaksi\s*(\d+)", re.IGNORECASE)
_REF_NO_RX = re.compile(r"No\.\s*Referensi\s*(.+)", re.IGNORECASE)
_DANA_ACCOUNT_RX = re.compile(r"Dana\s*:\s*(.+)", re.IGNORECASE)

_NON_NAME_TOKENS = ("SEABANK", "TRANSAKSI", "JUMLAH", "WAKTU", "METODE", "BANK")
_SYSTEM_WORDS = ("TRANSFER", "TRANSAKSI", "JUMLAH", "WAKTU", "METODE", "DETAIL", "BUKTI")


def is_dana_destination(text: str) -> bool:
    return any(rx.search(text or "") for rx in _DANA_MARKERS)


def _is_bank_line(line: str) -> bool:
    upper = line.upper()
    if not any(re.search(rf"\b{kw}\b", upper) for kw in BANK_KEYWORDS):
        return False
    return "BANK " in upper or ":" in line or any(g in line for g in MASK_GLYPHS)


def _fallback_receiver(lines: List[str]) -> Optional[str]:
    for line in lines:
        upper = line.upper()
        if (
            any(tok in upper for tok in _NON_NAME_TOKENS)
            or "Rp" in line
            or ":" in line
            or "*" in line
            or line.isdigit()
        ):
            continue
        if not (6 <= len(line) <= 50 and looks_like_name(line)):
            continue
        candidate = clean_name(line)
        if len(candidate) >= 6 and not any(w in candidate for w in _SYSTEM_WORDS):
            return candidate
    return None


def extract_seabank(lines: List[str], text: str = "") -> ExtractedFields:
    """SeaBank transfer receipt.

    The destination is either a DANA wallet (``Dana: 0812****337``) or another
    bank (``BANK BRI: ***********2531``); the destination type is decided from
    the whole text before the line scan. Accounts the scan cannot read are left
    empty for the reconstruction chain.
    """
    text = text or "\n".join(lines)
    dana = is_dana_destination(text)
    date = time = sender_name = receiver_name = receiver_account = ""
    receiver_bank = "DANA" if dana else DEFAULT_DESTINATION_BANK
    amount = None
    references: List[str] = []

    for i, line in enumerate(lines):
        upper = line.upper()

        if "WAKTU TRANSAKSI" in upper:
            m = _DATETIME_RX.search(line)
            if m:
                date, time = m.group(1), m.group(2)

        m = _FROM_RX.match(line)
        if m:
            sender_name = clean_name(m.group(1))

        m = _TO_RX.match(line)
        if m:
            raw = m.group(1).strip()
            receiver_name = clean_name(raw)
            nxt = lines[i + 1] if i + 1 < len(lines) else ""
            # Long names wrap onto the next line
            if (len(receiver_name) < 4 or re.fullmatch(r"[A-Z]{1,3}", receiver_name)) and nxt:
                if "BANK" not in nxt.upper() and ":" not in nxt and "Rp" not in nxt:
                    combined = clean_name(raw + " " + nxt)
                    if len(combined) > len(receiver_name):
                        receiver_name = combined

        if ("JUMLAH TRANSFER" in upper and "Rp" in line) or _BARE_RP_RX.match(line):
            value = amount_after_rp(line)
            if value is not None:
                amount = value

        if dana:
            m = _DANA_ACCOUNT_RX.search(line)
            if m and not receiver_account:
                receiver_account = format_dana_account(m.group(1)) or ""
        elif not receiver_account and _is_bank_line(line):
            parsed = parse_masked_bank_line(line)
            if parsed:
                receiver_bank, receiver_account = parsed

        m = _TRX_NO_RX.search(line)
        if m:
            references.append(m.group(1))
        m = _REF_NO_RX.search(line)
        if m:
            references.append(m.group(1).strip())

    if not receiver_name:
        receiver_name = _fallback_receiver(lines) or ""

    logger.debug(
        "seabank_fields",
        extra={"dana_destination": dana, "receiver_bank": receiver_bank, "has_account": bool(receiver_account)},
    )
    return finish(
        PROFILE,
        date=date,
        time=time,
        sender_name=sender_name,
        receiver_name=receiver_name,
        amount=amount,
        receiver_bank=receiver_bank,
        receiver_account=receiver_account,
        reference_number=pick_reference(references),
        dana_destination=dana,
    )

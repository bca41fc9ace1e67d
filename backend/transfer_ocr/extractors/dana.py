from __future__ import annotations

import logging
import re
from typing import List, Optional

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import mask_bank_account, pick_reference
from transfer_ocr.parsers.fields import amount_after_rp

logger = logging.getLogger("transfer_ocr.extractors.dana")

PROFILE = profile_for("DANA")
DEFAULT_DESTINATION_BANK = "SEABANK"

_DATE_RX = re.compile(r"(\d{1,2}\s+\w{3}\s+\d{4})")
_TIME_RX = re.compile(r"\d{2}:\d{2}")
_SENDER_ID_RX = re.compile(r"ID DANA\s+(.+)", re.IGNORECASE)
_SENDER_LINE_RX = re.compile(r"^0\d{3}[-*:]{1,4}\d{4}$")
_RECEIVER_IN_AMOUNT_RX = re.compile(r"\bke\s+(.+?)(?:\s*-|$)", re.IGNORECASE)
_NAME_CONTINUATION_RX = re.compile(r"^([A-Z]+(?:\s+[A-Z]+)*).*-")
_DETAIL_NAME_RX = re.compile(r"^Nama\s+(.+)", re.IGNORECASE)
_CAPS_WORDS_RX = re.compile(r"^[A-Z]{3,}(\s+[A-Z]{3,})*$")
_CAPS_PREFIX_RX = re.compile(r"^[A-Z]{3,}(\s+[A-Z]{3,})*")
_DESTINATION_ACCOUNT_RX = re.compile(r"[•*]{4,}\s*(\d{3,4})")
_TRX_ID_RX = re.compile(r"ID TRANSAKSI\s+(\d+)", re.IGNORECASE)
_ID_PIECE_RX = re.compile(r"^\d{8,25}$")

_DESTINATION_BANKS = ("SEABANK", "BCA", "BRI", "MANDIRI", "BNI")
_NOT_A_NAME = ("DANA", "SEABANK", "TOTAL", "KIRIM", "BAYAR", "INDONESIA", "TRANSFER", "DETAIL")


def _masked_wallet_id(raw: str) -> str:
    """``0857-4165`` / ``0857-:4165`` -> ``0857****4165``."""
    raw = raw.strip()
    if "-" in raw:
        return re.sub(r"-:?", "****", raw, count=1)
    return raw


def _digit_run(lines: List[str], start: int) -> List[str]:
    run = []
    for line in lines[start:]:
        if not _ID_PIECE_RX.match(line):
            break
        run.append(line)
    return run


def _unlabelled_reference(lines: List[str]) -> Optional[str]:
    """Transaction ids printed without a label, possibly wrapped over lines (80mm)."""
    candidates = []
    i = 0
    while i < len(lines):
        run = _digit_run(lines, i)
        if not run:
            i += 1
            continue
        joined = "".join(run)
        if len(joined) >= 25 or (len(run) == 1 and len(joined) >= 15):
            candidates.append(joined)
        i += len(run)
    return pick_reference(candidates) or None


def extract_dana(lines: List[str], text: str = "") -> ExtractedFields:
    date = time = sender_name = receiver_name = receiver_account = reference = ""
    receiver_bank = ""
    detail_name = ""
    amount = None
    caps_lines: List[str] = []

    for i, line in enumerate(lines):
        upper = line.upper()
        nxt = lines[i + 1] if i + 1 < len(lines) else ""

        m = _DATE_RX.search(line)
        if m:
            date = m.group(1)
            tm = _TIME_RX.search(line)
            if tm:
                time = tm.group(0)

        m = _SENDER_ID_RX.search(line)
        if m:
            sender_name = _masked_wallet_id(m.group(1))
        elif _SENDER_LINE_RX.match(line):
            sender_name = _masked_wallet_id(line)

        if "KIRIM UANG" in upper and "Rp" in line:
            value = amount_after_rp(line)
            if value is not None:
                amount = value
            m = _RECEIVER_IN_AMOUNT_RX.search(line)
            if m:
                name = m.group(1).strip()
                cont = _NAME_CONTINUATION_RX.match(nxt)
                if cont:
                    name += " " + cont.group(1).strip()
                receiver_name = name

        # Total Bayar includes fees and supersedes the transfer amount
        if "TOTAL BAYAR" in upper and "Rp" in line:
            value = amount_after_rp(line)
            if value is not None:
                amount = value

        for bank in _DESTINATION_BANKS:
            if bank in upper:
                receiver_bank = bank
                m = _DESTINATION_ACCOUNT_RX.search(line)
                if m:
                    receiver_account = mask_bank_account(m.group(1))
                break

        m = _DETAIL_NAME_RX.match(line)
        if m:
            name = m.group(1).strip()
            if _CAPS_WORDS_RX.match(nxt) and not any(w in nxt for w in ("SEABANK", "DANA", "AKUN")):
                name += " " + nxt.strip()
            detail_name = name

        if _CAPS_PREFIX_RX.match(line) and not any(w in upper for w in _NOT_A_NAME):
            caps_lines.append(line.strip())

        m = _TRX_ID_RX.search(line)
        if m and not reference:
            reference = m.group(1) + "".join(_digit_run(lines, i + 1))

    # The recipient detail block is the most reliable source for the name
    receiver_name = detail_name or receiver_name
    if not receiver_name and caps_lines:
        receiver_name = max(caps_lines, key=len)

    if not reference:
        reference = _unlabelled_reference(lines) or ""

    logger.debug("dana_fields", extra={"receiver_bank": receiver_bank, "has_reference": bool(reference)})
    return finish(
        PROFILE,
        date=date,
        time=time,
        sender_name=sender_name,
        receiver_name=receiver_name,
        amount=amount,
        receiver_bank=receiver_bank or DEFAULT_DESTINATION_BANK,
        receiver_account=receiver_account,
        reference_number=reference,
    )

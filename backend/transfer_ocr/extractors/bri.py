from __future__ import annotations

import logging
import re
from typing import List, Optional

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import CAPS_LINE_RX, parse_masked_bank_line
from transfer_ocr.parsers.fields import amount_after_rp

logger = logging.getLogger("transfer_ocr.extractors.bri")

PROFILE = profile_for("BRI")

_DATETIME_RX = re.compile(r"(\d{1,2}\s+\w+\s+\d{4}),\s+(\d{2}:\d{2}:\d{2})")
# "No. Ref" is often read as "No. Re"
_REF_LABEL_RX = re.compile(r"\bNO\.?\s*REF?\b", re.IGNORECASE)
_REF_VALUE_RX = re.compile(r"(\d{9,})|(BR\d{7,})")
_STANDALONE_RP_RX = re.compile(r"^Rp\s*[\d.,]+$")

# Account layouts printed on BRI receipts, most specific first
_ACCOUNT_RXS = (
    re.compile(r"\d{4}\s+\d{4}\s+\d{4}\s+\d{2,4}"),
    re.compile(r"\b\d{14,16}\b"),
    re.compile(r"\d{4}\s+\d{4}\s+\d{6,8}"),
)

# Amount candidates ranked by label specificity (lower wins)
_RANK_TOTAL, _RANK_NOMINAL, _RANK_STANDALONE = 0, 1, 2


def _name_after(lines: List[str], i: int, *, reject_masked: bool) -> Optional[str]:
    for cand in lines[i + 1 : i + 4]:
        if (
            CAPS_LINE_RX.match(cand)
            and len(cand) > 3
            and "BANK" not in cand
            and not (reject_masked and "****" in cand)
        ):
            return cand.strip()
    return None


def _in_sender_section(lines: List[str], i: int) -> bool:
    return any("SUMBER DANA" in l.upper() for l in lines[max(0, i - 3) : i + 1])


def _account_candidate(line: str) -> Optional[str]:
    cleaned = re.sub(r"[Il]", "1", re.sub(r"[OocC]", "0", line))
    for rx in _ACCOUNT_RXS:
        m = rx.search(cleaned)
        if m:
            return m.group(0)
    return None


def extract_bri(lines: List[str], text: str = "") -> ExtractedFields:
    date = time = sender_name = receiver_name = reference = ""
    best_amount: Optional[int] = None
    best_rank = _RANK_STANDALONE + 1
    accounts: List[str] = []

    for i, line in enumerate(lines):
        upper = line.upper()
        nxt = lines[i + 1] if i + 1 < len(lines) else ""

        m = _DATETIME_RX.search(line)
        if m:
            date, time = m.group(1), m.group(2)

        candidates = []
        if "TOTAL TRANSAKSI" in upper and nxt.startswith("Rp"):
            candidates.append((_RANK_TOTAL, amount_after_rp(nxt)))
        if "NOMINAL" in upper:
            candidates.append((_RANK_NOMINAL, amount_after_rp(line)))
        if _STANDALONE_RP_RX.match(line):
            candidates.append((_RANK_STANDALONE, amount_after_rp(line)))
        for rank, value in candidates:
            if value is not None and rank < best_rank:
                best_amount, best_rank = value, rank

        if not reference and _REF_LABEL_RX.search(line):
            m = _REF_VALUE_RX.search(_REF_LABEL_RX.split(line, maxsplit=1)[-1]) or _REF_VALUE_RX.search(nxt)
            if m:
                reference = m.group(0)

        if "SUMBER DANA" in upper and not sender_name:
            sender_name = _name_after(lines, i, reject_masked=True) or ""

        if "TUJUAN" in upper and not receiver_name:
            receiver_name = _name_after(lines, i, reject_masked=False) or ""

        if not _in_sender_section(lines, i):
            acc = _account_candidate(line)
            if acc:
                accounts.append(acc)

    ref_digits = re.sub(r"\D", "", reference)
    receiver_account = ""
    for acc in reversed(accounts):
        if re.sub(r"\D", "", acc) != ref_digits:
            receiver_account = acc
            break

    if not receiver_account:
        for line in lines:
            parsed = parse_masked_bank_line(line)
            if parsed:
                receiver_account = parsed[1]
                logger.debug("bri_masked_account", extra={"account": receiver_account})
                break

    logger.debug(
        "bri_fields",
        extra={"amount_rank": best_rank, "has_reference": bool(reference), "has_account": bool(receiver_account)},
    )
    return finish(
        PROFILE,
        date=date,
        time=time,
        sender_name=sender_name,
        receiver_name=receiver_name,
        amount=best_amount,
        receiver_account=receiver_account,
        reference_number=reference,
    )

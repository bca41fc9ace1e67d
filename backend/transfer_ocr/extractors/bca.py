from __future__ import annotations

import logging
import re
from datetime import date as _date
from typing import List

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import CAPS_LINE_RX
from transfer_ocr.parsers.fields import amount_after_idr, parse_amount

logger = logging.getLogger("transfer_ocr.extractors.bca")

PROFILE = profile_for("BCA")

_NEW_FORMAT_MARKERS = ("BENEFICIARY", "IDR", "TRANSFER SUCCESSFUL")

_NEW_DATETIME_RX = re.compile(r"(\d{2}\s+\w+\s+\d{4})\s+(\d{2}:\d{2}:\d{2})")
_LEGACY_DATETIME_RX = re.compile(r"(\d{2}/\d{2})\s+(\d{2}:\d{2}:\d{2})")
_LEGACY_AMOUNT_RX = re.compile(r"^Rp\.?\s*([\d.,]+)")
_REF_CONTINUATION_RX = re.compile(r"^[A-Z0-9]+$")


def is_new_layout(lines: List[str]) -> bool:
    """myBCA (English) receipts vs m-Transfer; decided once for the whole receipt."""
    return any(marker in line.upper() for line in lines for marker in _NEW_FORMAT_MARKERS)


def _extract_new(lines: List[str]) -> ExtractedFields:
    date = time = receiver_name = receiver_account = reference = ""
    amount = 0
    for i, line in enumerate(lines):
        upper = line.upper()
        nxt = lines[i + 1] if i + 1 < len(lines) else ""

        m = _NEW_DATETIME_RX.search(line)
        if m:
            date, time = m.group(1), m.group(2)

        if "IDR" in upper and "CURRENCY" not in upper:
            value = amount_after_idr(line)
            if value is not None:
                amount = value

        if "BENEFICIARY NAME" in upper:
            name = re.sub(r"BENEFICIARY NAME", "", line, flags=re.IGNORECASE).strip(" :")
            receiver_name = name or nxt.strip()

        if "BENEFICIARY ACCOUNT" in upper:
            acc = re.sub(r"BENEFICIARY ACCOUNT", "", line, flags=re.IGNORECASE).strip(" :")
            if not re.search(r"\d", acc):
                acc = nxt
            receiver_account = re.sub(r"[\s-]", "", acc)

        if "REFERENCE NO" in upper:
            ref = re.sub(r"REFERENCE NO\.?", "", line, flags=re.IGNORECASE).strip(" :")
            # The reference wraps over at most three continuation lines
            for cont in lines[i + 1 : i + 4]:
                if ":" in cont or not _REF_CONTINUATION_RX.match(cont):
                    break
                ref += cont
            if ref:
                reference = ref

    return finish(
        PROFILE,
        date=date,
        time=time,
        receiver_name=receiver_name,
        amount=amount,
        receiver_account=receiver_account,
        reference_number=reference,
    )


def _extract_legacy(lines: List[str]) -> ExtractedFields:
    date = time = receiver_name = receiver_account = reference = ""
    amount = 0
    for line in lines:
        upper = line.upper()

        m = _LEGACY_DATETIME_RX.search(line)
        if m:
            date = f"{m.group(1)}/{_date.today().year}"
            time = m.group(2)

        if upper.startswith("KE "):
            receiver_account = line[3:].strip()
            continue

        # First all-caps line after the account holds the receiver
        if (
            receiver_account
            and not receiver_name
            and len(line) > 2
            and "Rp" not in line
            and "REF" not in upper
            and "TRANSFER" not in upper
            and not _LEGACY_DATETIME_RX.search(line)
            and CAPS_LINE_RX.match(line)
        ):
            receiver_name = line

        m = _LEGACY_AMOUNT_RX.match(line)
        if m:
            r = parse_amount(m.group(1))
            if r.ok:
                amount = r.value

        if upper.startswith("REF "):
            reference = line[4:].strip()

    return finish(
        PROFILE,
        date=date,
        time=time,
        receiver_name=receiver_name,
        amount=amount,
        receiver_account=receiver_account,
        reference_number=reference,
    )


def extract_bca(lines: List[str], text: str = "") -> ExtractedFields:
    new_layout = is_new_layout(lines)
    logger.debug("bca_layout", extra={"layout": "new" if new_layout else "legacy"})
    return _extract_new(lines) if new_layout else _extract_legacy(lines)

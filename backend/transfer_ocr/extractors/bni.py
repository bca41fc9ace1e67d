from __future__ import annotations

import logging
import re
from typing import List

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import strip_honorific
from transfer_ocr.parsers.fields import amount_after_rp

logger = logging.getLogger("transfer_ocr.extractors.bni")

PROFILE = profile_for("BNI")

_DATE_RX = re.compile(r"(\d{2}\s+\w+\s+\d{4})")
_TIME_RX = re.compile(r"\d{2}:\d{2}:\d{2}")
_REF_SAME_LINE_RX = re.compile(r":\s*(\d+)")


def extract_bni(lines: List[str], text: str = "") -> ExtractedFields:
    date = time = sender_name = receiver_name = receiver_account = reference = ""
    amount = 0

    for i, line in enumerate(lines):
        upper = line.upper()
        nxt = lines[i + 1] if i + 1 < len(lines) else ""

        if ":" in line:
            dm = _DATE_RX.search(line)
            if dm:
                date = dm.group(1)
                tm = _TIME_RX.search(line)
                if tm:
                    time = tm.group(0)

        # Largest value wins; fee lines would otherwise compete with the total
        if "Rp" in line and "Biaya" not in line:
            value = amount_after_rp(line)
            if value is not None and value > amount:
                amount = value

        if "REF ID" in upper or "REF NO" in upper:
            m = _REF_SAME_LINE_RX.search(line)
            if m:
                reference = m.group(1)
            elif re.fullmatch(r"\d+", nxt):
                reference = nxt

        if "SUMBER DANA" in upper:
            if nxt and "BNI" not in nxt and not re.search(r"\d", nxt):
                sender_name = nxt

        if "PENERIMA" in upper:
            if nxt:
                receiver_name = strip_honorific(nxt)
            # "BNI • 0799641820" sits two lines below the label
            acc_line = lines[i + 2] if i + 2 < len(lines) else ""
            m = re.search(r"\d{8,}", acc_line)
            if m:
                receiver_account = m.group(0)

    logger.debug("bni_fields", extra={"amount": amount, "has_reference": bool(reference)})
    return finish(
        PROFILE,
        date=date,
        time=time,
        sender_name=sender_name,
        receiver_name=receiver_name,
        amount=amount,
        receiver_account=receiver_account,
        reference_number=reference,
    )

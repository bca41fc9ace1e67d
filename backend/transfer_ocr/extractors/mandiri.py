from __future__ import annotations

import logging
import re
from typing import List

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for
from transfer_ocr.extractors.common import strip_honorific
from transfer_ocr.parsers.fields import amount_after_rp

logger = logging.getLogger("transfer_ocr.extractors.mandiri")

PROFILE = profile_for("MANDIRI")

_DATE_RX = re.compile(r"(\d{2}\s+\w+\s+\d{4})")
_TIME_RX = re.compile(r"\d{2}:\d{2}:\d{2}")
_REF_RX = re.compile(r"NO\.?\s*REF\.?\s*(\d+)", re.IGNORECASE)
_ACCOUNT_LINE_RX = re.compile(r"Bank Mandiri\s*-\s*.*?(\d{10,})", re.IGNORECASE)
_MASKED_ACCOUNT_LINE_RX = re.compile(r"Bank Mandiri\s*-\s*[.*•]{3,}", re.IGNORECASE)


def extract_mandiri(lines: List[str], text: str = "") -> ExtractedFields:
    """Livin' by Mandiri receipt.

    Date, time and reference often share one line
    (``04 Des 2025 • 16:15:52 WIB • No. Ref. 2512041122006741849``). Both
    parties are printed as a name line followed by ``Bank Mandiri - <account>``;
    the sender's account is masked, the receiver's is not.
    """
    date = time = sender_name = receiver_name = receiver_account = reference = ""
    amount = None

    for i, line in enumerate(lines):
        upper = line.upper()
        prev = lines[i - 1] if i > 0 else ""
        nxt = lines[i + 1] if i + 1 < len(lines) else ""

        if ":" in line:
            dm = _DATE_RX.search(line)
            if dm:
                date = dm.group(1)
                tm = _TIME_RX.search(line)
                if tm:
                    time = tm.group(0)

        m = _REF_RX.search(line)
        if m:
            reference = m.group(1)

        if "TOTAL TRANSAKSI" in upper:
            value = amount_after_rp(line) if "Rp" in line else amount_after_rp(nxt)
            if value is not None:
                amount = value

        m = _ACCOUNT_LINE_RX.search(line)
        if m:
            receiver_account = m.group(1)
            if prev and "Transfer" not in prev and "Penerima" not in prev:
                receiver_name = strip_honorific(prev)
        elif _MASKED_ACCOUNT_LINE_RX.search(line):
            if prev and "Total" not in prev and "Sumber" not in prev:
                sender_name = prev.strip()

    logger.debug("mandiri_fields", extra={"has_account": bool(receiver_account), "has_reference": bool(reference)})
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

from __future__ import annotations

from typing import List

from transfer_ocr.extractors.base import ExtractedFields, finish, profile_for

GENERIC_SENDER = "GENERIC SENDER"
GENERIC_RECEIVER = "GENERIC RECEIVER"
GENERIC_AMOUNT = 100000


def extract_generic(lines: List[str], text: str = "", bank_type: str = "") -> ExtractedFields:
    """Labelled placeholder for formats without a ruleset; the text is not read."""
    profile = profile_for(bank_type or "GENERIC")
    return finish(
        profile,
        sender_name=GENERIC_SENDER,
        receiver_name=GENERIC_RECEIVER,
        amount=GENERIC_AMOUNT,
    )

from __future__ import annotations

import time as _time
from dataclasses import dataclass, replace
from datetime import date as _date
from typing import Callable, List, Optional

from transfer_ocr.ocr.labels import reference_prefix

DEFAULT_RECEIVER_NAME = "NAMA PENERIMA"


@dataclass(frozen=True)
class ExtractedFields:
    """Raw field set produced by one bank extractor.

    Every field is populated; extractors fill what they could not read with
    the bank's defaults through ``finish``.
    """

    date: str
    sender_name: str
    receiver_name: str
    amount: int
    receiver_bank: str
    receiver_account: str
    reference_number: str
    time: Optional[str] = None
    admin_fee: int = 0
    # True when the receipt sends to a DANA wallet (SEABANK only)
    dana_destination: bool = False


# (lines, text) -> ExtractedFields
Extractor = Callable[[List[str], str], ExtractedFields]


@dataclass(frozen=True)
class BankProfile:
    bank: str
    reference_prefix: str
    sender_placeholder: str


def profile_for(bank: str) -> BankProfile:
    bank = (bank or "").strip().upper()
    return BankProfile(
        bank=bank,
        reference_prefix=reference_prefix(bank),
        sender_placeholder=f"PENGIRIM {bank}".strip(),
    )


def today_id() -> str:
    """Today's date the way Indonesian receipts print it (d/m/yyyy)."""
    d = _date.today()
    return f"{d.day}/{d.month}/{d.year}"


def synthesize_reference(prefix: str) -> str:
    return prefix + str(int(_time.time() * 1000))[-8:]


def finish(
    profile: BankProfile,
    *,
    date: str = "",
    time: Optional[str] = None,
    sender_name: str = "",
    receiver_name: str = "",
    amount: Optional[int] = None,
    receiver_bank: str = "",
    receiver_account: str = "",
    reference_number: str = "",
    admin_fee: int = 0,
    dana_destination: bool = False,
) -> ExtractedFields:
    """Fill unrecovered fields with the bank's defaults."""
    return ExtractedFields(
        date=date or today_id(),
        time=time or None,
        sender_name=sender_name or profile.sender_placeholder,
        receiver_name=receiver_name or DEFAULT_RECEIVER_NAME,
        amount=max(0, int(amount or 0)),
        receiver_bank=receiver_bank or profile.bank,
        receiver_account=receiver_account or "",
        reference_number=reference_number or synthesize_reference(profile.reference_prefix),
        admin_fee=max(0, int(admin_fee or 0)),
        dana_destination=dana_destination,
    )


def refill_defaults(fields: ExtractedFields, profile: BankProfile) -> ExtractedFields:
    """Restore defaults for text fields that correction emptied (``REF --``)."""
    return replace(
        fields,
        sender_name=fields.sender_name or profile.sender_placeholder,
        receiver_name=fields.receiver_name or DEFAULT_RECEIVER_NAME,
        receiver_bank=fields.receiver_bank or profile.bank,
        reference_number=fields.reference_number or synthesize_reference(profile.reference_prefix),
    )

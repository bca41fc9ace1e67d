from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .error_codes import ErrorCode
from .patterns import (
    BANK_ACCOUNT_PLACEHOLDER,
    DANA_ACCOUNT_PLACEHOLDER,
    MASKED_BANK_ACCOUNT_RX,
    MASKED_DANA_ACCOUNT_RX,
)


@dataclass
class ValidationResult:
    ok: bool
    code: ErrorCode
    meta: Dict[str, Any]


class ReceiptValidationError(ValueError):
    """Raised by callers that refuse to hand an unusable record onwards."""

    def __init__(self, detail: str, results: Optional[List[ValidationResult]] = None):
        super().__init__(f"VALIDATION_ERROR: {detail}")
        self.detail = detail
        self.results = results or []


def validate_amount(value: Optional[Union[str, int]], *, min_amount: int = 1, max_amount: int = 10_000_000_000) -> ValidationResult:
    if value in (None, ""):
        return ValidationResult(False, ErrorCode.AMOUNT_EMPTY, {"value": value})
    try:
        amt = int(value)
    except (TypeError, ValueError):
        return ValidationResult(False, ErrorCode.AMOUNT_RANGE, {"value": value})
    if amt <= 0:
        return ValidationResult(False, ErrorCode.AMOUNT_NONPOS, {"amount": amt})
    if not (min_amount <= amt <= max_amount):
        return ValidationResult(False, ErrorCode.AMOUNT_RANGE, {"amount": amt, "min": min_amount, "max": max_amount})
    return ValidationResult(True, ErrorCode.OK, {"amount": amt})


def validate_account(value: Optional[str], *, bank: Optional[str] = None) -> ValidationResult:
    """Check a receiver account against the shape expected for ``bank``.

    Masked values must be canonical (``*{8,11}`` + 3-4 digits for banks,
    ``dddd*{4,5}ddd`` for DANA). Plain digit accounts are accepted for banks.
    Placeholders fail with their own code so callers can prompt for input.
    """
    s = (value or "").strip()
    if not s:
        return ValidationResult(False, ErrorCode.ACCOUNT_EMPTY, {"bank": bank})
    if s in (BANK_ACCOUNT_PLACEHOLDER, DANA_ACCOUNT_PLACEHOLDER):
        return ValidationResult(False, ErrorCode.ACCOUNT_PLACEHOLDER, {"account": s, "bank": bank})
    if str(bank or "").upper() == "DANA":
        if MASKED_DANA_ACCOUNT_RX.match(s):
            return ValidationResult(True, ErrorCode.OK, {"account": s, "bank": bank})
        return ValidationResult(False, ErrorCode.ACCOUNT_PATTERN, {"account": s, "bank": bank, "regex": MASKED_DANA_ACCOUNT_RX.pattern})
    if "*" in s:
        if MASKED_BANK_ACCOUNT_RX.match(s):
            return ValidationResult(True, ErrorCode.OK, {"account": s, "bank": bank})
        return ValidationResult(False, ErrorCode.ACCOUNT_PATTERN, {"account": s, "bank": bank, "regex": MASKED_BANK_ACCOUNT_RX.pattern})
    if re.fullmatch(r"\d{8,16}", s):
        return ValidationResult(True, ErrorCode.OK, {"account": s, "bank": bank})
    return ValidationResult(False, ErrorCode.ACCOUNT_PATTERN, {"account": s, "bank": bank})


def validate_reference(value: Optional[str]) -> ValidationResult:
    if not (value or "").strip():
        return ValidationResult(False, ErrorCode.REFERENCE_EMPTY, {})
    return ValidationResult(True, ErrorCode.OK, {"reference": value})


def validate_receiver(name: Optional[str]) -> ValidationResult:
    s = re.sub(r"\s+", " ", str(name or "")).strip()
    if not s:
        return ValidationResult(False, ErrorCode.RECEIVER_EMPTY, {})
    return ValidationResult(True, ErrorCode.OK, {"name": s})


def validate_record(record: Any, *, require_account: bool = False) -> Dict[str, ValidationResult]:
    """Run the gates over a ReceiptRecord-like object; keyed by field name."""
    results = {
        "amount": validate_amount(getattr(record, "amount", None)),
        "reference_number": validate_reference(getattr(record, "reference_number", None)),
        "receiver_name": validate_receiver(getattr(record, "receiver_name", None)),
    }
    account = getattr(record, "receiver_account", "")
    if account or require_account:
        results["receiver_account"] = validate_account(account, bank=getattr(record, "receiver_bank", None))
    return results


def ensure_valid(record: Any, *, require_account: bool = False) -> Any:
    """Return ``record`` unchanged or raise ``ReceiptValidationError``.

    The message lists the failing fields: ``VALIDATION_ERROR: amount=AMOUNT_NONPOS``.
    """
    results = validate_record(record, require_account=require_account)
    failed = {k: v for k, v in results.items() if not v.ok}
    if failed:
        detail = ", ".join(f"{k}={v.code.value}" for k, v in failed.items())
        raise ReceiptValidationError(detail, list(failed.values()))
    return record

from .error_codes import ErrorCode
from .gates import (
    ReceiptValidationError,
    ValidationResult,
    ensure_valid,
    validate_account,
    validate_amount,
    validate_receiver,
    validate_record,
    validate_reference,
)

__all__ = [
    "ErrorCode",
    "ReceiptValidationError",
    "ValidationResult",
    "ensure_valid",
    "validate_account",
    "validate_amount",
    "validate_receiver",
    "validate_record",
    "validate_reference",
]

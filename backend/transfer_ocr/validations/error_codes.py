from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    OK = "OK"

    # Amount
    AMOUNT_EMPTY = "AMOUNT_EMPTY"
    AMOUNT_NONPOS = "AMOUNT_NONPOS"
    AMOUNT_RANGE = "AMOUNT_RANGE"

    # Receiver account
    ACCOUNT_EMPTY = "ACCOUNT_EMPTY"
    ACCOUNT_PLACEHOLDER = "ACCOUNT_PLACEHOLDER"
    ACCOUNT_PATTERN = "ACCOUNT_PATTERN"

    # Reference number
    REFERENCE_EMPTY = "REFERENCE_EMPTY"

    # Receiver name
    RECEIVER_EMPTY = "RECEIVER_EMPTY"

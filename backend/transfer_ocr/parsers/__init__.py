from .fields import (
    ParseResult,
    parse_amount,
    amount_after_rp,
    amount_after_idr,
)

__all__ = [
    "ParseResult",
    "parse_amount",
    "amount_after_rp",
    "amount_after_idr",
]

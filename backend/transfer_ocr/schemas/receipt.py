from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from transfer_ocr.ocr.labels import normalize_bank_type, normalize_paper_size


class ReceiptRecord(BaseModel):
    """Structured receipt handed to the caller.

    Serialized with camelCase keys (``senderName``, ``receiverAccount``);
    snake_case names are accepted on input.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: str
    time: Optional[str] = None
    sender_name: str
    receiver_name: str
    amount: int = Field(0, ge=0)
    receiver_bank: str
    receiver_account: str = ""
    reference_number: str = Field(..., min_length=1)
    admin_fee: int = Field(0, ge=0)
    paper_size: str = "80mm"
    bank_type: str

    @field_validator("paper_size", mode="before")
    @classmethod
    def _paper_size(cls, v: Any) -> str:
        return normalize_paper_size(v)

    @field_validator("bank_type", mode="before")
    @classmethod
    def _bank_type(cls, v: Any) -> str:
        return normalize_bank_type(v)


class ExtractResponse(BaseModel):
    ok: bool
    reason: Optional[str] = None
    record: ReceiptRecord
    meta: Dict[str, Any] = Field(default_factory=dict)


class MappingEntry(BaseModel):
    name: str = Field(..., min_length=1, description="Receiver name as printed on receipts")
    account: str = Field(..., description="Masked account, e.g. ***********2531")


class MappingSaveResult(BaseModel):
    saved: bool
    name: str
    account: str

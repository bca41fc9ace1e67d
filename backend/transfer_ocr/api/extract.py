from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from transfer_ocr.config import DEFAULT_MAPPINGS
from transfer_ocr.ocr.ocr_engine import Recognizer
from transfer_ocr.persistence.mappings import InMemoryAccountMappings, JsonAccountMappings
from transfer_ocr.schemas.receipt import ExtractResponse, MappingEntry, MappingSaveResult
from transfer_ocr.services.pipeline import extract_receipt
from transfer_ocr.validations import ReceiptValidationError, ensure_valid

logger = logging.getLogger("transfer_ocr.api.extract")

router = APIRouter(tags=["extract"])
mappings_router = APIRouter(prefix="/mappings", tags=["mappings"])


def get_recognizer(request: Request) -> Recognizer:
    """One recognizer per app; created on first use and kept on ``app.state``."""
    rec = getattr(request.app.state, "recognizer", None)
    if rec is None:
        rec = Recognizer()
        request.app.state.recognizer = rec
        logger.info("recognizer_ready", extra={"engine": rec.engine_name})
    return rec


def get_mappings(request: Request) -> InMemoryAccountMappings:
    store = getattr(request.app.state, "mappings", None)
    if store is None:
        path = DEFAULT_MAPPINGS.path
        store = JsonAccountMappings(path) if path else InMemoryAccountMappings()
        request.app.state.mappings = store
    return store


@router.post("/extract", response_model=ExtractResponse, response_model_by_alias=True)
async def extract_endpoint(
    request: Request,
    file: UploadFile = File(...),
    bank_type: str = Form(...),
    paper_size: str = Form("80mm"),
    strict: bool = Form(False),
    recognizer: Recognizer = Depends(get_recognizer),
    mappings: InMemoryAccountMappings = Depends(get_mappings),
) -> ExtractResponse:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload")
    corr: Optional[str] = getattr(request.state, "correlation_id", None)
    result = await run_in_threadpool(
        extract_receipt,
        data,
        bank_type,
        paper_size,
        recognizer=recognizer,
        mappings=mappings,
        correlation_id=corr,
    )
    if strict:
        try:
            ensure_valid(result.record)
        except ReceiptValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
    meta = {k: v for k, v in result.meta.items() if k in ("correlation_id", "engine", "ocr_confidence", "error")}
    return ExtractResponse(ok=result.ok, reason=result.reason, record=result.record, meta=meta)


@mappings_router.get("/{name}", response_model=MappingEntry)
def get_mapping(name: str, mappings: InMemoryAccountMappings = Depends(get_mappings)) -> MappingEntry:
    account = mappings.lookup(name)
    if not account:
        raise HTTPException(status_code=404, detail="Mapping not found")
    return MappingEntry(name=name.strip().upper(), account=account)


@mappings_router.put("", response_model=MappingSaveResult)
def put_mapping(entry: MappingEntry, mappings: InMemoryAccountMappings = Depends(get_mappings)) -> MappingSaveResult:
    saved = mappings.save(entry.name, entry.account)
    return MappingSaveResult(saved=saved, name=entry.name.strip().upper(), account=entry.account)

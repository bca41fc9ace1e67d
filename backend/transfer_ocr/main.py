from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import os
from dotenv import load_dotenv
import time
import json
import logging

# Load environment variables from .env (project or backend directory) BEFORE importing routers,
# settings dataclasses read the environment at import time
load_dotenv()
here = os.path.dirname(os.path.abspath(__file__))
env_path = os.path.join(os.path.dirname(here), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from transfer_ocr.api.extract import router as extract_router
from transfer_ocr.api.extract import mappings_router

logger = logging.getLogger("transfer_ocr.http")

app = FastAPI(title="Transfer Receipt OCR", version="0.1.0")

# CORS from env ALLOWED_ORIGINS (comma-separated). Defaults to dev permissive if not set
allowed = os.getenv("ALLOWED_ORIGINS")
allow_origins = [o.strip() for o in allowed.split(",") if o.strip()] if allowed else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Structured logging with request_id and correlation_id
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()
    req_id = request.headers.get("X-Request-ID") or hex(int(start * 1e9))[-12:]
    corr = request.headers.get("X-Correlation-ID") or request.query_params.get("correlation_id")
    request.state.request_id = req_id
    request.state.correlation_id = corr
    try:
        response = await call_next(request)
    except Exception as e:
        log = {
            "level": "error",
            "msg": "request_error",
            "method": request.method,
            "path": request.url.path,
            "duration_ms": int((time.time() - start) * 1000),
            "request_id": req_id,
            "correlation_id": corr,
            "error": str(e),
        }
        logger.error(json.dumps(log, ensure_ascii=False))
        raise
    log = {
        "level": "info",
        "msg": "request",
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": int((time.time() - start) * 1000),
        "request_id": req_id,
        "correlation_id": corr,
        "client": request.client.host if request.client else None,
        "ua": request.headers.get("user-agent"),
    }
    logger.info(json.dumps(log, ensure_ascii=False))
    response.headers["X-Request-ID"] = req_id
    if corr:
        response.headers["X-Correlation-ID"] = corr
    return response


app.include_router(extract_router)
app.include_router(mappings_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "version": app.version}

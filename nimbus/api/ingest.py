from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Dict, Optional
import logging
import time

from ..auth import require_ingest_token
from ..config import INGEST_CHUNK_SIZE, MAX_BODY_BYTES, get_cloudflare_account_id
from ..datasets import ALL_DATASETS, parse_dataset
from ..ingest.errors import IngestError, PayloadError, PersistenceError
from ..ingest.pipeline import ingest_payload
from ..logging_config import get_trace_id
from ..services.prometheus_metrics import prometheus_metrics
from ..services.record_store import record_store

router = APIRouter(tags=["Ingest"])
logger = logging.getLogger("nimbus.ingest")


class IngestResponse(BaseModel):
    success: bool
    message: str
    count: int = 0
    dataset: Optional[str] = None
    skipped: Dict[str, int] = Field(default_factory=dict)


class ValidateResponse(BaseModel):
    success: bool = True
    message: str


def get_record_store():
    return record_store


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"success": False, "message": message, "count": 0}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _reject(reason: str, exc: IngestError, **extra) -> JSONResponse:
    logger.warning("Ingest request rejected", extra={
        "trace_id": get_trace_id(),
        "component": "ingest",
        "event": "reject",
        "reason": reason,
        "status": exc.status_code,
        "error": exc.message,
    })
    prometheus_metrics.increment_ingest_reject(reason, 1)
    prometheus_metrics.increment_ingest_request("rejected")
    return _error_response(exc.status_code, exc.message, **extra)


@router.post("/ingest", response_model=IngestResponse)
async def ingest(
    request: Request,
    dataset: Optional[str] = None,
    content_encoding: Optional[str] = Header(None),
    store=Depends(get_record_store),
):
    """
    Receive a Logpush delivery: NDJSON, optionally gzipped.

    Each line is classified (unless ``dataset`` is given), normalized and
    stored. Lines that are not JSON objects or match no dataset are skipped
    and reported in ``skipped``.
    """
    start_time = time.time()

    # Step 1: shared-secret authentication
    try:
        require_ingest_token(request)
    except IngestError as e:
        return _reject("auth" if e.status_code == 401 else "config", e)

    # Step 2: optional explicit dataset
    declared = None
    if dataset:
        declared = parse_dataset(dataset)
        if declared is None:
            return _reject(
                "unknown_dataset",
                PayloadError(f"Unknown dataset: {dataset}"),
                validDatasets=[d.value for d in ALL_DATASETS],
            )

    # Step 3: body size guard
    raw = await request.body()
    if len(raw) > MAX_BODY_BYTES:
        return _reject(
            "size",
            PayloadError(f"Payload too large: {len(raw)} bytes (max {MAX_BODY_BYTES})", status_code=413),
        )

    # Steps 4-8: decode, probe, split, normalize, persist
    try:
        result = await ingest_payload(
            raw,
            store,
            content_encoding=content_encoding,
            dataset=declared,
            account_id=get_cloudflare_account_id(),
            chunk_size=INGEST_CHUNK_SIZE,
        )
    except PersistenceError as e:
        prometheus_metrics.increment_chunk_failures(1)
        prometheus_metrics.increment_ingest_request("failed")
        return _error_response(
            e.status_code,
            e.message,
            committed=e.committed,
            uncommitted=e.uncommitted,
        )
    except PayloadError as e:
        return _reject("payload", e)

    prometheus_metrics.increment_ingest_request("probe" if result.probe else "accepted")
    for ds, count in result.by_dataset.items():
        prometheus_metrics.record_accepted(ds, count)
    prometheus_metrics.record_skipped(result.skipped)
    prometheus_metrics.observe_records_per_batch(result.count)

    logger.info("Ingest batch processed", extra={
        "trace_id": get_trace_id(),
        "component": "ingest",
        "count": result.count,
        "dataset": result.dataset.value if result.dataset else None,
        "skipped": result.skipped,
        "probe": result.probe,
        "bytes": len(raw),
        "latency_ms": round((time.time() - start_time) * 1000, 2),
    })

    return result.to_dict()


@router.post("/ingest/validate", response_model=ValidateResponse)
async def validate_destination():
    """Destination ownership check: no auth, no side effects"""
    return {"success": True, "message": "Validation successful"}

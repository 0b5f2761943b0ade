from fastapi import APIRouter, HTTPException, Query
from typing import Optional

from ..datasets import SCOPES, parse_dataset
from ..ingest.timestamps import parse_iso_datetime
from ..services.record_store import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT, parse_filters, record_store

router = APIRouter(tags=["Logs"])


def _parse_time(name: str, value: Optional[str]):
    if not value:
        return None
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: expected ISO8601 timestamp")
    return parsed


@router.get("/logs")
def list_logs(
    dataset: Optional[str] = None,
    scope: Optional[str] = None,
    zoneId: Optional[str] = None,
    accountId: Optional[str] = None,
    search: Optional[str] = None,
    searchField: Optional[str] = None,
    filters: Optional[str] = Query(None, description='JSON list of {"field", "value"} pairs'),
    startTime: Optional[str] = None,
    endTime: Optional[str] = None,
    limit: int = Query(DEFAULT_QUERY_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
):
    """Stored logs, newest first. ``limit`` is capped at 1000."""
    if dataset and parse_dataset(dataset) is None:
        raise HTTPException(status_code=400, detail=f"Unknown dataset: {dataset}")
    if scope and scope not in SCOPES:
        raise HTTPException(status_code=400, detail=f"Unknown scope: {scope}")
    try:
        filter_list = parse_filters(filters)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid filters: {e}")

    return record_store.query_logs(
        dataset=dataset,
        scope=scope,
        zone_id=zoneId,
        account_id=accountId,
        search=search,
        search_field=searchField,
        filters=filter_list,
        start_time=_parse_time("startTime", startTime),
        end_time=_parse_time("endTime", endTime),
        limit=min(limit, MAX_QUERY_LIMIT),
        offset=offset,
    )

"""
SQLAlchemy-backed record store for normalized logs and the zone directory
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import String, cast, func, or_, select

from ..db import session_scope
from ..models.log import LogRecord
from ..models.zone import Zone
from ..ingest.zones import load_zone_map

logger = logging.getLogger("nimbus.store")

MAX_QUERY_LIMIT = 1000
DEFAULT_QUERY_LIMIT = 100

# searchField values that map onto indexed columns
_SEARCH_COLUMNS = {
    "clientIp": LogRecord.client_ip,
    "rayId": LogRecord.ray_id,
}


def _json_text(field: str):
    """Text value of a top-level key inside the JSON payload"""
    return LogRecord.data[field].as_string()


class SqlRecordStore:
    """Persistence for the ingest pipeline and the read endpoints"""

    def __init__(self, session_factory=session_scope):
        self._session_scope = session_factory

    # -- write side ---------------------------------------------------------

    def insert_batch(self, records: Sequence[Any]) -> int:
        """Insert normalized records in a single transaction"""
        rows = [
            LogRecord(
                dataset=r.dataset.value,
                scope=r.scope,
                zone_id=r.zone_id,
                account_id=r.account_id,
                timestamp=r.timestamp,
                ray_id=r.ray_id,
                client_ip=r.client_ip,
                data=r.data,
            )
            for r in records
        ]
        with self._session_scope() as s:
            s.add_all(rows)
        logger.debug("Inserted %d log records", len(rows))
        return len(rows)

    def zone_snapshot(self) -> Dict[str, str]:
        with self._session_scope() as s:
            rows = s.execute(select(Zone.id, Zone.name)).all()
        return load_zone_map(rows)

    # -- read side ----------------------------------------------------------

    def query_logs(self, *, dataset: Optional[str] = None, scope: Optional[str] = None,
                   zone_id: Optional[str] = None, account_id: Optional[str] = None,
                   search: Optional[str] = None, search_field: Optional[str] = None,
                   filters: Optional[List[Dict[str, Any]]] = None,
                   start_time: Optional[datetime] = None, end_time: Optional[datetime] = None,
                   limit: int = DEFAULT_QUERY_LIMIT, offset: int = 0) -> Dict[str, Any]:
        """Filtered page of logs, newest first, with zone names joined in"""
        limit = max(1, min(limit, MAX_QUERY_LIMIT))
        offset = max(0, offset)

        conditions = []
        if dataset:
            conditions.append(LogRecord.dataset == dataset)
        if scope:
            conditions.append(LogRecord.scope == scope)
        if zone_id:
            conditions.append(LogRecord.zone_id == zone_id)
        if account_id:
            conditions.append(LogRecord.account_id == account_id)
        if start_time:
            conditions.append(LogRecord.timestamp >= start_time)
        if end_time:
            conditions.append(LogRecord.timestamp <= end_time)
        if search:
            conditions.append(self._search_condition(search, search_field))
        for f in filters or []:
            field, value = f.get("field"), f.get("value")
            if not field or value is None:
                continue
            conditions.append(_json_text(field) == str(value))

        with self._session_scope() as s:
            total = s.execute(
                select(func.count()).select_from(LogRecord).where(*conditions)
            ).scalar_one()
            rows = s.execute(
                select(LogRecord, Zone.name)
                .outerjoin(Zone, Zone.id == LogRecord.zone_id)
                .where(*conditions)
                .order_by(LogRecord.timestamp.desc(), LogRecord.id.desc())
                .limit(limit)
                .offset(offset)
            ).all()
            logs = [log.to_dict(zone_name=name) for log, name in rows]

        return {
            "logs": logs,
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": offset + len(logs) < total,
            },
        }

    @staticmethod
    def _search_condition(search: str, search_field: Optional[str]):
        pattern = f"%{search}%"
        if search_field in _SEARCH_COLUMNS:
            return _SEARCH_COLUMNS[search_field].ilike(pattern)
        if search_field and search_field.startswith("data."):
            return _json_text(search_field[len("data."):]).ilike(pattern)
        # No field: match correlation columns or anywhere in the payload
        return or_(
            LogRecord.ray_id.ilike(pattern),
            LogRecord.client_ip.ilike(pattern),
            cast(LogRecord.data, String).ilike(pattern),
        )

    def dataset_stats(self) -> Dict[str, Any]:
        with self._session_scope() as s:
            total_logs = s.execute(select(func.count()).select_from(LogRecord)).scalar_one()
            total_zones = s.execute(select(func.count()).select_from(Zone)).scalar_one()
            rows = s.execute(
                select(LogRecord.dataset, func.count(), func.max(LogRecord.timestamp))
                .group_by(LogRecord.dataset)
                .order_by(func.count().desc())
            ).all()

        return {
            "totalLogs": total_logs,
            "totalZones": total_zones,
            "datasetCounts": {ds: count for ds, count, _ in rows},
            "latestByDataset": {ds: latest.isoformat() if latest else None for ds, _, latest in rows},
        }

    def list_zones(self) -> List[Dict[str, Any]]:
        with self._session_scope() as s:
            zones = s.execute(select(Zone).order_by(Zone.name)).scalars().all()
            return [z.to_dict() for z in zones]

    # -- zone directory -----------------------------------------------------

    def upsert_zones(self, zones: Sequence[Dict[str, Any]], synced_at: datetime) -> int:
        """Insert or update provider zones by id, stamping ``synced_at``"""
        with self._session_scope() as s:
            for z in zones:
                row = s.get(Zone, z["id"]) or Zone(id=z["id"])
                row.name = z["name"]
                row.status = z.get("status") or "unknown"
                row.account_id = z.get("account_id") or ""
                row.synced_at = synced_at
                s.add(row)
        return len(zones)

    def find_unzoned_logs(self, datasets: Sequence[str], limit: int, after_id: int = 0) -> List[Dict[str, Any]]:
        """Logs of ``datasets`` still missing a zone id with ``id > after_id``, in id order"""
        with self._session_scope() as s:
            rows = s.execute(
                select(LogRecord.id, LogRecord.dataset, LogRecord.data)
                .where(
                    LogRecord.zone_id.is_(None),
                    LogRecord.dataset.in_(list(datasets)),
                    LogRecord.id > after_id,
                )
                .order_by(LogRecord.id)
                .limit(limit)
            ).all()
        return [{"id": r.id, "dataset": r.dataset, "data": r.data} for r in rows]

    def set_zone_ids(self, assignments: Dict[int, str]) -> int:
        """Patch rows whose zone id is still null; returns the number patched"""
        if not assignments:
            return 0
        patched = 0
        with self._session_scope() as s:
            for log_id, zone_id in assignments.items():
                row = s.get(LogRecord, log_id)
                if row is not None and row.zone_id is None:
                    row.zone_id = zone_id
                    patched += 1
        return patched


def parse_filters(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Decode the ``filters`` query parameter: a JSON list of {field, value}"""
    if not raw:
        return []
    parsed = json.loads(raw)
    if not isinstance(parsed, list):
        raise ValueError("filters must be a JSON list")
    return [f for f in parsed if isinstance(f, dict)]


record_store = SqlRecordStore()

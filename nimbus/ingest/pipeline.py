"""
Logpush ingestion pipeline

decode -> probe check -> split -> per-line normalize -> chunked persist

Authentication happens in the HTTP router before any of this runs. Errors
raised before persistence leave no side effects; a failing chunk stops the
batch but chunks that already committed stay committed.
"""

import gzip
import json
import logging
import zlib
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from starlette.concurrency import run_in_threadpool

from ..datasets import SCOPE_ZONE, Dataset, dataset_scope
from .classifier import classify
from .errors import PayloadError, PersistenceError
from .fields import (
    CLIENT_IP_FIELDS,
    HOST_FIELDS,
    RAY_ID_FIELDS,
    ZONE_ID_FIELDS,
    extract_field,
    extract_text,
    timestamp_field,
)
from .timestamps import parse_timestamp
from .zones import resolve_zone_id

logger = logging.getLogger("nimbus.ingest")

GZIP_MAGIC = 0x1F
PROBE_BODY = {"content": "tests"}
DEFAULT_CHUNK_SIZE = 1000

SKIP_INVALID_JSON = "invalid_json"
SKIP_UNCLASSIFIED = "unclassified"


@dataclass
class NormalizedRecord:
    dataset: Dataset
    scope: str
    zone_id: Optional[str]
    account_id: Optional[str]
    timestamp: datetime
    ray_id: Optional[str]
    client_ip: Optional[str]
    data: Dict[str, Any]


@dataclass
class IngestResult:
    count: int = 0
    dataset: Optional[Dataset] = None
    skipped: Dict[str, int] = field(default_factory=dict)
    probe: bool = False
    by_dataset: Dict[str, int] = field(default_factory=dict)

    @property
    def message(self) -> str:
        if self.probe:
            return "Validation request accepted"
        if self.count == 0:
            return "No records ingested"
        return f"Ingested {self.count} records"

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "count": self.count,
            "dataset": self.dataset.value if self.dataset else None,
            "skipped": dict(self.skipped),
        }


class RecordSink(Protocol):
    """What the pipeline needs from the record store"""

    def insert_batch(self, records: Sequence[NormalizedRecord]) -> int: ...

    def zone_snapshot(self) -> Dict[str, str]: ...


def decode_body(raw: bytes, content_encoding: Optional[str] = None) -> str:
    """
    Gunzip when declared or when the gzip magic byte leads, then decode UTF-8.

    Invalid UTF-8 becomes U+FFFD so only the affected lines can fail to parse.
    """
    if (content_encoding or "").lower() == "gzip" or (raw and raw[0] == GZIP_MAGIC):
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as e:
            raise PayloadError(f"Failed to decompress gzip payload: {e}")
    return raw.decode("utf-8", errors="replace")


def is_validation_probe(text: str) -> bool:
    """Logpush sends {"content":"tests"} when a destination is created"""
    stripped = text.strip()
    if not stripped.startswith("{") or len(stripped) > 256:
        return False
    try:
        return json.loads(stripped) == PROBE_BODY
    except ValueError:
        return False


def _reject_constant(token: str):
    raise ValueError(f"{token} is not valid JSON")


def parse_line(line: str) -> Any:
    """Strict JSON decode of one NDJSON line; raises ValueError on any failure"""
    try:
        return json.loads(line, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON nested too deeply")


def split_lines(text: str) -> List[str]:
    return [line for line in (raw.strip() for raw in text.split("\n")) if line]


class LineNormalizer:
    """
    Turns NDJSON lines into NormalizedRecords.

    The zone snapshot is fetched through ``load_zones`` at most once, and only
    when a zone-scoped record without a declared zone id shows up.
    """

    def __init__(self, account_id: Optional[str], load_zones: Callable[[], Dict[str, str]],
                 dataset: Optional[Dataset] = None):
        self.account_id = account_id or None
        self.dataset = dataset
        self._load_zones = load_zones
        self._zone_map: Optional[Dict[str, str]] = None

    def zone_map(self) -> Dict[str, str]:
        if self._zone_map is None:
            self._zone_map = self._load_zones() or {}
        return self._zone_map

    def normalize(self, record: Dict[str, Any], dataset: Dataset) -> NormalizedRecord:
        scope = dataset_scope(dataset)
        zone_id = extract_text(record, ZONE_ID_FIELDS, dataset)
        if zone_id is None and scope == SCOPE_ZONE:
            host = extract_field(record, HOST_FIELDS, dataset)
            if host:
                zone_id = resolve_zone_id(str(host), self.zone_map())

        return NormalizedRecord(
            dataset=dataset,
            scope=scope,
            zone_id=zone_id,
            account_id=self.account_id,
            timestamp=parse_timestamp(record.get(timestamp_field(dataset))),
            ray_id=extract_text(record, RAY_ID_FIELDS, dataset),
            client_ip=extract_text(record, CLIENT_IP_FIELDS, dataset),
            data=record,
        )

    def process_lines(self, lines: Sequence[str]) -> Tuple[List[NormalizedRecord], Dict[str, int], Optional[Dataset]]:
        """Normalize every line; returns (records, skipped counts by reason, first dataset)"""
        records: List[NormalizedRecord] = []
        skipped: Counter = Counter()
        first: Optional[Dataset] = self.dataset

        for lineno, line in enumerate(lines, 1):
            try:
                record = parse_line(line)
            except ValueError:
                record = None
            if not isinstance(record, dict):
                skipped[SKIP_INVALID_JSON] += 1
                logger.debug("Skipping line %d: not a JSON object", lineno)
                continue

            dataset = self.dataset or classify(record)
            if dataset is None:
                skipped[SKIP_UNCLASSIFIED] += 1
                logger.debug("Skipping line %d: unknown dataset", lineno,
                             extra={"fields": sorted(record.keys())[:20]})
                continue

            if first is None:
                first = dataset
            records.append(self.normalize(record, dataset))

        return records, dict(skipped), first


async def persist_chunks(store: RecordSink, records: Sequence[NormalizedRecord],
                         chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Insert ``records`` in sequential chunks, one transaction each"""
    committed = 0
    for start in range(0, len(records), chunk_size):
        chunk = records[start:start + chunk_size]
        try:
            await run_in_threadpool(store.insert_batch, chunk)
        except Exception as e:
            uncommitted = len(records) - committed
            logger.error("Chunk insert failed", extra={
                "component": "ingest",
                "event": "chunk_failed",
                "chunk_start": start,
                "committed": committed,
                "uncommitted": uncommitted,
                "error": str(e),
            })
            raise PersistenceError(
                f"Failed to store records after {committed} committed; {uncommitted} not stored",
                committed=committed,
                uncommitted=uncommitted,
            ) from e
        committed += len(chunk)
    return committed


async def ingest_payload(raw: bytes, store: RecordSink, *, content_encoding: Optional[str] = None,
                         dataset: Optional[Dataset] = None, account_id: Optional[str] = None,
                         chunk_size: int = DEFAULT_CHUNK_SIZE) -> IngestResult:
    """Run one authenticated request body through the pipeline"""
    if not raw:
        raise PayloadError("Empty request body")

    text = decode_body(raw, content_encoding)
    if is_validation_probe(text):
        return IngestResult(probe=True)

    lines = split_lines(text)
    if not lines:
        return IngestResult(dataset=dataset)

    normalizer = LineNormalizer(account_id, store.zone_snapshot, dataset)
    # CPU-bound parsing and the lazy zone query both stay off the event loop
    records, skipped, first = await run_in_threadpool(normalizer.process_lines, lines)

    if records:
        await persist_chunks(store, records, chunk_size)

    by_dataset = Counter(r.dataset.value for r in records)
    return IngestResult(count=len(records), dataset=first, skipped=skipped, by_dataset=dict(by_dataset))

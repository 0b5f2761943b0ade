"""
Prometheus metrics for the NIMBUS ingestion service
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
import os

from ..config import API_VERSION

# Build info
BUILD_INFO = Gauge(
    'nimbus_build_info',
    'Build information',
    ['version', 'image_tag']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'nimbus_requests_total',
    'Total number of HTTP requests',
    ['status_class', 'path_group']
)

# Ingest outcomes
INGEST_REQUESTS_TOTAL = Counter(
    'nimbus_ingest_requests_total',
    'Ingest requests by outcome',
    ['outcome']
)

INGEST_REJECTS_TOTAL = Counter(
    'nimbus_ingest_rejects_total',
    'Ingest requests rejected before persistence',
    ['reason']
)

RECORDS_ACCEPTED_TOTAL = Counter(
    'nimbus_records_accepted_total',
    'Records persisted, by dataset',
    ['dataset']
)

LINES_SKIPPED_TOTAL = Counter(
    'nimbus_lines_skipped_total',
    'NDJSON lines dropped during normalization',
    ['reason']
)

CHUNK_FAILURES_TOTAL = Counter(
    'nimbus_chunk_failures_total',
    'Chunk inserts that failed'
)

RECORDS_PER_BATCH = Histogram(
    'nimbus_records_per_batch',
    'Accepted records per ingest request',
    buckets=[0, 1, 10, 100, 500, 1000, 5000, 10000, 50000]
)

# Zone directory
ZONE_SYNCS_TOTAL = Counter(
    'nimbus_zone_syncs_total',
    'Zone directory refreshes by outcome',
    ['outcome']
)

ZONES_KNOWN = Gauge(
    'nimbus_zones_known',
    'Zones returned by the last successful sync'
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        self._setup_build_info()

    def _setup_build_info(self):
        BUILD_INFO.labels(
            version=API_VERSION,
            image_tag=os.getenv("IMAGE_TAG", "latest")
        ).set(1)

    def increment_requests(self, status_code: int, path: str = "/unknown"):
        """Increment request counter."""
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        if "/ingest" in path:
            path_group = "ingest"
        elif "/logs" in path:
            path_group = "logs"
        elif "/zones" in path:
            path_group = "zones"
        else:
            path_group = "other"

        REQUESTS_TOTAL.labels(status_class=status_class, path_group=path_group).inc()

    def increment_ingest_request(self, outcome: str):
        INGEST_REQUESTS_TOTAL.labels(outcome=outcome).inc()

    def increment_ingest_reject(self, reason: str, count: int = 1):
        """Increment ingest reject counter."""
        INGEST_REJECTS_TOTAL.labels(reason=reason).inc(count)

    def record_accepted(self, dataset: str, count: int):
        if count > 0:
            RECORDS_ACCEPTED_TOTAL.labels(dataset=dataset).inc(count)

    def record_skipped(self, skipped: dict):
        for reason, count in skipped.items():
            LINES_SKIPPED_TOTAL.labels(reason=reason).inc(count)

    def increment_chunk_failures(self, count: int = 1):
        CHUNK_FAILURES_TOTAL.inc(count)

    def observe_records_per_batch(self, count: int):
        RECORDS_PER_BATCH.observe(count)

    def record_zone_sync(self, outcome: str, zones: int = None):
        ZONE_SYNCS_TOTAL.labels(outcome=outcome).inc()
        if zones is not None:
            ZONES_KNOWN.set(zones)

    def get_metrics(self) -> bytes:
        """Get Prometheus metrics in text format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST


# Global metrics instance
prometheus_metrics = PrometheusMetrics()

"""
Tests for Prometheus metrics functionality
"""

from prometheus_client import REGISTRY

from nimbus.services.prometheus_metrics import PrometheusMetrics, prometheus_metrics


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestPrometheusMetrics:
    """Test the PrometheusMetrics class."""

    def test_prometheus_metrics_initialization(self):
        """Test Prometheus metrics initializes correctly."""
        metrics = PrometheusMetrics()
        assert metrics is not None

    def test_increment_requests_groups_paths(self):
        """Test request counter status classes and path groups."""
        before = _sample("nimbus_requests_total", {"status_class": "4xx", "path_group": "ingest"})
        prometheus_metrics.increment_requests(401, "/v1/ingest")
        prometheus_metrics.increment_requests(100, "/v1/health")
        assert _sample("nimbus_requests_total", {"status_class": "4xx", "path_group": "ingest"}) == before + 1

    def test_record_accepted_by_dataset(self):
        """Test accepted records are counted per dataset."""
        before = _sample("nimbus_records_accepted_total", {"dataset": "dns_logs"})
        prometheus_metrics.record_accepted("dns_logs", 3)
        prometheus_metrics.record_accepted("dns_logs", 0)
        assert _sample("nimbus_records_accepted_total", {"dataset": "dns_logs"}) == before + 3

    def test_record_skipped(self):
        """Test skipped lines are counted per reason."""
        before = _sample("nimbus_lines_skipped_total", {"reason": "unclassified"})
        prometheus_metrics.record_skipped({"unclassified": 2, "invalid_json": 1})
        assert _sample("nimbus_lines_skipped_total", {"reason": "unclassified"}) == before + 2

    def test_zone_sync_sets_gauge(self):
        """Test a successful sync records the zone count."""
        prometheus_metrics.record_zone_sync("success", 7)
        assert _sample("nimbus_zones_known") == 7

    def test_get_metrics(self):
        """Test exposition output."""
        prometheus_metrics.increment_ingest_reject("auth", 1)
        assert b"nimbus_ingest_rejects_total" in prometheus_metrics.get_metrics()
        assert prometheus_metrics.get_content_type().startswith("text/plain")

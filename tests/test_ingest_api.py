"""
Tests for the ingest HTTP endpoints
"""

import gzip
import json

import pytest

from conftest import INGEST_TOKEN, FakeStore
from nimbus.api.ingest import get_record_store
from nimbus.models.zone import Zone

HTTP_RECORD = {
    "EdgeStartTimestamp": "2024-01-01T00:00:00Z",
    "ClientRequestHost": "www.example.com",
    "EdgeResponseStatus": 200,
    "RayID": "abc",
    "EdgeColoCode": "SJC",
}


def _body(*records) -> bytes:
    return "\n".join(json.dumps(r) for r in records).encode("utf-8")


class TestIngestAuth:
    """Test ingest authentication."""

    def test_missing_token(self, client):
        """Test a request without a token is rejected."""
        r = client.post("/v1/ingest", content=_body(HTTP_RECORD))
        assert r.status_code == 401
        assert r.json()["success"] is False

    def test_wrong_token(self, client):
        """Test a mismatched token is rejected."""
        r = client.post("/v1/ingest", params={"token": "nope"}, content=_body(HTTP_RECORD))
        assert r.status_code == 401

    def test_unconfigured_secret(self, client, monkeypatch):
        """Test a missing server secret is a server error."""
        monkeypatch.delenv("INGEST_AUTH_TOKEN")
        r = client.post("/v1/ingest", params={"token": INGEST_TOKEN}, content=_body(HTTP_RECORD))
        assert r.status_code == 500

    def test_header_authorization_query_param(self, client, db):
        """Test Logpush's header passthrough parameter."""
        r = client.post("/v1/ingest", params={"header_Authorization": f"Bearer {INGEST_TOKEN}"},
                        content=_body(HTTP_RECORD))
        assert r.status_code == 200

    def test_authorization_header(self, client, db):
        """Test a regular bearer header."""
        r = client.post("/v1/ingest", headers={"Authorization": f"Bearer {INGEST_TOKEN}"},
                        content=_body(HTTP_RECORD))
        assert r.status_code == 200

    def test_query_token_preferred(self, client, db):
        """Test ?token wins over a bad Authorization header."""
        r = client.post("/v1/ingest", params={"token": INGEST_TOKEN},
                        headers={"Authorization": "Bearer wrong"}, content=_body(HTTP_RECORD))
        assert r.status_code == 200

    def test_auth_checked_before_dataset(self, client):
        """Test an unauthenticated request with a bad dataset is still a 401."""
        r = client.post("/v1/ingest", params={"dataset": "bogus"}, content=_body(HTTP_RECORD))
        assert r.status_code == 401


class TestIngestRequests:
    """Test ingest request handling."""

    def test_end_to_end(self, client, db, auth_params):
        """Test one HTTP record is classified, stored and listed."""
        r = client.post("/v1/ingest", params={"header_Authorization": f"Bearer {INGEST_TOKEN}"},
                        content=_body(HTTP_RECORD))
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["dataset"] == "http_requests"

        logs = client.get("/v1/logs", params={"dataset": "http_requests"}).json()["logs"]
        assert len(logs) == 1
        assert logs[0]["rayId"] == "abc"
        assert logs[0]["scope"] == "zone"
        assert logs[0]["accountId"] == "acct-test"
        assert logs[0]["timestamp"].startswith("2024-01-01T00:00:00")
        assert logs[0]["data"] == HTTP_RECORD

    def test_zone_fallback(self, client, db, auth_params):
        """Test the zone is resolved from the request host."""
        with db() as s:
            s.add(Zone(id="Z1", name="example.com", status="active", account_id="acct-test"))

        r = client.post("/v1/ingest", params=auth_params, content=_body(HTTP_RECORD))
        assert r.status_code == 200

        logs = client.get("/v1/logs").json()["logs"]
        assert logs[0]["zoneId"] == "Z1"
        assert logs[0]["zoneName"] == "example.com"

    def test_malformed_line(self, client, db, auth_params):
        """Test a malformed middle line is skipped."""
        body = _body(HTTP_RECORD) + b"\n{broken\n" + _body(HTTP_RECORD)
        r = client.post("/v1/ingest", params=auth_params, content=body)
        assert r.status_code == 200
        assert r.json()["count"] == 2
        assert r.json()["skipped"] == {"invalid_json": 1}

    def test_gzip_body(self, client, db, auth_params):
        """Test gzipped deliveries."""
        r = client.post("/v1/ingest", params=auth_params, content=gzip.compress(_body(HTTP_RECORD)),
                        headers={"Content-Encoding": "gzip"})
        assert r.status_code == 200
        assert r.json()["count"] == 1

    def test_corrupt_gzip(self, client, auth_params):
        """Test a broken gzip body is a 400."""
        r = client.post("/v1/ingest", params=auth_params, content=b"\x1f\x8bgarbage",
                        headers={"Content-Encoding": "gzip"})
        assert r.status_code == 400
        assert "decompress" in r.json()["message"]

    def test_empty_body(self, client, auth_params):
        """Test an empty body is a 400."""
        r = client.post("/v1/ingest", params=auth_params, content=b"")
        assert r.status_code == 400

    def test_unknown_dataset(self, client, auth_params):
        """Test an unknown dataset lists the valid ones."""
        r = client.post("/v1/ingest", params=dict(auth_params, dataset="bogus"), content=_body(HTTP_RECORD))
        assert r.status_code == 400
        assert "http_requests" in r.json()["validDatasets"]

    def test_declared_dataset(self, client, db, auth_params):
        """Test an explicit dataset overrides detection."""
        r = client.post("/v1/ingest", params=dict(auth_params, dataset="audit_logs"),
                        content=_body({"anything": "goes"}))
        assert r.status_code == 200
        assert r.json()["dataset"] == "audit_logs"

    def test_probe(self, client, auth_params):
        """Test the Logpush validation probe."""
        r = client.post("/v1/ingest", params=auth_params, content=b'{"content":"tests"}')
        assert r.status_code == 200
        assert r.json()["count"] == 0
        assert r.json()["success"] is True

    def test_payload_too_large(self, client, auth_params, monkeypatch):
        """Test the body size guard."""
        monkeypatch.setattr("nimbus.api.ingest.MAX_BODY_BYTES", 10)
        r = client.post("/v1/ingest", params=auth_params, content=_body(HTTP_RECORD))
        assert r.status_code == 413

    def test_persistence_failure(self, client, auth_params):
        """Test a failing store surfaces as a 500 with uncommitted counts."""
        store = FakeStore(fail_on_chunk=0)
        client.app.dependency_overrides[get_record_store] = lambda: store
        try:
            r = client.post("/v1/ingest", params=auth_params, content=_body(HTTP_RECORD, HTTP_RECORD))
        finally:
            client.app.dependency_overrides.pop(get_record_store, None)
        assert r.status_code == 500
        assert r.json()["success"] is False
        assert r.json()["uncommitted"] == 2

    def test_legacy_alias(self, client, db, auth_params):
        """Test /api/ingest routes to the same handler."""
        r = client.post("/api/ingest", params=auth_params, content=_body(HTTP_RECORD))
        assert r.status_code == 200
        assert r.json()["count"] == 1

    def test_request_id_echoed(self, client, auth_params):
        """Test X-Request-ID is propagated."""
        r = client.post("/v1/ingest", params=auth_params, content=b'{"content":"tests"}',
                        headers={"X-Request-ID": "trace-123"})
        assert r.headers["X-Request-ID"] == "trace-123"


@pytest.mark.parametrize("path", ["/v1/ingest/validate", "/api/ingest/validate"])
def test_validate_endpoint(client, path):
    """Test the destination validation endpoint needs no auth."""
    r = client.post(path)
    assert r.status_code == 200
    assert r.json()["success"] is True

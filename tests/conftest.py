# tests/conftest.py
import os
import tempfile

# Settings are read at import time, so they must be in place before nimbus loads
_DB_DIR = tempfile.mkdtemp(prefix="nimbus-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'nimbus-test.db')}"
os.environ["INGEST_AUTH_TOKEN"] = "test-ingest-token"
os.environ["CLOUDFLARE_ACCOUNT_ID"] = "acct-test"
os.environ["ENVIRONMENT"] = "test"
os.environ["ZONE_SYNC_INTERVAL_SEC"] = "0"
os.environ["LOG_FORMAT"] = "text"
os.environ.pop("CLOUDFLARE_API_TOKEN", None)

import pytest
from sqlalchemy import delete

INGEST_TOKEN = "test-ingest-token"


class FakeStore:
    """In-memory stand-in for the record store used by the pipeline"""

    def __init__(self, zones=None, fail_on_chunk=None):
        self.zones = dict(zones or {})
        self.fail_on_chunk = fail_on_chunk
        self.batches = []
        self.snapshot_calls = 0

    def insert_batch(self, records):
        if self.fail_on_chunk is not None and len(self.batches) == self.fail_on_chunk:
            raise RuntimeError("database unavailable")
        self.batches.append(list(records))
        return len(records)

    def zone_snapshot(self):
        self.snapshot_calls += 1
        return dict(self.zones)

    @property
    def records(self):
        return [r for batch in self.batches for r in batch]


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient
    from nimbus.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    """Empty logs and zones tables around each test that touches the database"""
    from nimbus.db import session_scope
    from nimbus.models.log import LogRecord
    from nimbus.models.zone import Zone

    def _clear():
        with session_scope() as s:
            s.execute(delete(LogRecord))
            s.execute(delete(Zone))

    _clear()
    yield session_scope
    _clear()


@pytest.fixture
def auth_params():
    return {"token": INGEST_TOKEN}

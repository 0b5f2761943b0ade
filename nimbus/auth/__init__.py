# nimbus/auth/__init__.py
from .ingest_token import extract_ingest_token, verify_ingest_token, require_ingest_token

__all__ = ["extract_ingest_token", "verify_ingest_token", "require_ingest_token"]

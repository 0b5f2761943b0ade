"""
Shared-secret authentication for Logpush deliveries

Logpush destinations cannot always set headers, so the token may arrive as a
query parameter. Lookup order:

1) ?token=<token>
2) ?header_Authorization=Bearer <token>   (Logpush's header passthrough)
3) Authorization: Bearer <token>
"""

import hmac
import logging
from typing import Optional

from fastapi import Request

from ..config import get_ingest_auth_token
from ..ingest.errors import AuthenticationError, ConfigurationError

log = logging.getLogger("nimbus.auth")


def _bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    parts = value.split(None, 1)  # ["Bearer", "<token>"]
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


def extract_ingest_token(request: Request) -> Optional[str]:
    """Pull the ingest token from the request, None when absent"""
    token = request.query_params.get("token")
    if token:
        return token
    token = _bearer(request.query_params.get("header_Authorization"))
    if token:
        return token
    return _bearer(request.headers.get("Authorization"))


def verify_ingest_token(token: Optional[str]) -> None:
    """Raise unless ``token`` equals the configured secret"""
    expected = get_ingest_auth_token()
    if not expected:
        log.error("INGEST_AUTH_TOKEN is not configured", extra={"component": "auth"})
        raise ConfigurationError("Server misconfigured: ingest token not set")
    if not token:
        raise AuthenticationError("Missing authentication token")
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise AuthenticationError("Invalid authentication token")


def require_ingest_token(request: Request) -> None:
    verify_ingest_token(extract_ingest_token(request))

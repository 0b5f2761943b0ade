"""
Configuration module for the NIMBUS ingestion service
"""

import os
from pathlib import Path


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _read_version_from_repo(default: str = "dev") -> str:
    try:
        # repo root: nimbus/.. (two parents up)
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except Exception:
        pass
    return os.getenv("APP_VERSION", default)


API_VERSION = _read_version_from_repo()
APP_NAME = os.getenv("APP_NAME", "nimbus")

# API configuration
API_PREFIX = "/v1"
# Logpush destinations created against the original deployment post to /api/ingest
LEGACY_API_PREFIX = "/api"
APP_PORT = int(os.getenv("APP_PORT", "3000"))

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./nimbus.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))

# Ingest limits
INGEST_CHUNK_SIZE = int(os.getenv("INGEST_CHUNK_SIZE", "1000"))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(50 * 1024 * 1024)))

# Cloudflare API
CLOUDFLARE_API_BASE = os.getenv("CLOUDFLARE_API_BASE", "https://api.cloudflare.com/client/v4")
CLOUDFLARE_TIMEOUT_SEC = float(os.getenv("CLOUDFLARE_TIMEOUT_SEC", "10"))
ZONES_PER_PAGE = 50

# Zone directory refresh
ZONE_SYNC_ON_STARTUP: bool = env_bool("ZONE_SYNC_ON_STARTUP", True)
ZONE_SYNC_INTERVAL_SEC = int(os.getenv("ZONE_SYNC_INTERVAL_SEC", "3600"))  # 0 = disabled

# Logging configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_EXCLUDE_PATHS = set(os.getenv("LOG_EXCLUDE_PATHS", "/v1/health,/v1/metrics/prometheus").split(","))

# Settings that must be present for a production deployment: (env var, purpose)
REQUIRED_SETTINGS = [
    ("CLOUDFLARE_API_TOKEN", "zone sync"),
    ("CLOUDFLARE_ACCOUNT_ID", "record attribution and zone sync"),
    ("DATABASE_URL", "record store"),
    ("INGEST_AUTH_TOKEN", "ingest authentication"),
]


# Secrets are read on every call so a rotated value applies without a restart
def get_ingest_auth_token() -> str:
    return os.getenv("INGEST_AUTH_TOKEN", "")


def get_cloudflare_api_token() -> str:
    return os.getenv("CLOUDFLARE_API_TOKEN", "")


def get_cloudflare_account_id() -> str:
    return os.getenv("CLOUDFLARE_ACCOUNT_ID", "")


def is_production() -> bool:
    return os.getenv("ENVIRONMENT", ENVIRONMENT).lower() == "production"


def missing_required_settings() -> list:
    """Names of required settings that are unset or empty"""
    return [name for name, _ in REQUIRED_SETTINGS if not os.getenv(name)]

"""
Startup checks and the zone directory refresh loop
"""

import asyncio
import logging

from .config import (
    REQUIRED_SETTINGS,
    ZONE_SYNC_INTERVAL_SEC,
    ZONE_SYNC_ON_STARTUP,
    get_cloudflare_api_token,
    is_production,
    missing_required_settings,
)
from .services.cloudflare import sync_zones_to_database, verify_token

logger = logging.getLogger("nimbus.startup")


class StartupError(RuntimeError):
    pass


async def run_startup_checks(transport=None) -> bool:
    """
    Validate configuration and verify the Cloudflare token, then run the
    initial zone sync when enabled.

    In production every failure raises StartupError; elsewhere it is logged
    and startup continues. Returns True when zone sync can run.
    """
    missing = missing_required_settings()
    if missing:
        purposes = dict(REQUIRED_SETTINGS)
        detail = ", ".join(f"{name} ({purposes[name]})" for name in missing)
        if is_production():
            raise StartupError(f"Missing required environment variables: {detail}")
        logger.warning("Missing required environment variables: %s", detail, extra={"component": "startup"})
        return False

    valid, error = await verify_token(get_cloudflare_api_token(), transport=transport)
    if not valid:
        if is_production():
            raise StartupError(f"Cloudflare API token invalid: {error}")
        logger.warning("Cloudflare API token verification failed: %s", error, extra={"component": "startup"})
        return False
    logger.info("Cloudflare API token verified", extra={"component": "startup"})

    if ZONE_SYNC_ON_STARTUP:
        try:
            result = await sync_zones_to_database(transport=transport)
            logger.info("Initial zone sync complete: %d zones", result["synced"], extra={"component": "startup"})
        except Exception as e:
            if is_production():
                raise StartupError(f"Initial zone sync failed: {e}") from e
            logger.error("Failed to sync zones on startup: %s", e, extra={"component": "startup"})
    return True


async def zone_sync_loop(interval_sec: int = ZONE_SYNC_INTERVAL_SEC):
    """Refresh the zone directory every ``interval_sec`` seconds until cancelled"""
    while True:
        await asyncio.sleep(interval_sec)
        try:
            result = await sync_zones_to_database()
            logger.info("Periodic zone sync: %d zones", result["synced"], extra={"component": "zones"})
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Periodic zone sync failed: %s", e, extra={"component": "zones"})

"""
Cloudflare API client: token verification and zone directory sync
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
from starlette.concurrency import run_in_threadpool

from ..config import (
    CLOUDFLARE_API_BASE,
    CLOUDFLARE_TIMEOUT_SEC,
    ZONES_PER_PAGE,
    get_cloudflare_account_id,
    get_cloudflare_api_token,
)
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("nimbus.cloudflare")


class CloudflareError(Exception):
    """Cloudflare API call failed or returned success=false"""


def _first_error(payload: Dict[str, Any], default: str) -> str:
    errors = payload.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return errors[0]["message"]
    return default


def _client(token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=CLOUDFLARE_API_BASE,
        timeout=CLOUDFLARE_TIMEOUT_SEC,
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        transport=transport,
    )


async def verify_token(token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Tuple[bool, Optional[str]]:
    """Check an API token against /user/tokens/verify; returns (valid, error)"""
    try:
        async with _client(token, transport) as client:
            r = await client.get("/user/tokens/verify")
            data = r.json()
    except httpx.TimeoutException:
        return False, "timeout"
    except (httpx.HTTPError, ValueError) as e:
        return False, f"Failed to verify token: {e}"

    if r.status_code >= 400 or not data.get("success"):
        return False, _first_error(data, "Token verification failed")
    return True, None


async def fetch_all_zones(token: str, account_id: str,
                          transport: Optional[httpx.AsyncBaseTransport] = None) -> List[Dict[str, Any]]:
    """All zones of an account, ordered by name, following pagination"""
    zones: List[Dict[str, Any]] = []
    page = 1
    async with _client(token, transport) as client:
        while True:
            try:
                r = await client.get("/zones", params={
                    "account.id": account_id,
                    "page": page,
                    "per_page": ZONES_PER_PAGE,
                    "order": "name",
                    "direction": "asc",
                })
                r.raise_for_status()
                data = r.json()
            except httpx.HTTPStatusError as e:
                raise CloudflareError(f"Failed to fetch zones: HTTP {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise CloudflareError(f"Failed to fetch zones: {e}") from e
            except ValueError as e:
                raise CloudflareError("Failed to fetch zones: invalid JSON response") from e

            if not data.get("success"):
                raise CloudflareError(f"Cloudflare API error: {_first_error(data, 'Unknown error')}")

            zones.extend(data.get("result") or [])

            result_info = data.get("result_info")
            if not result_info or page >= result_info.get("total_pages", 0):
                break
            page += 1

    logger.info("Fetched %d zones for account %s", len(zones), account_id,
                extra={"component": "zones", "pages": page})
    return zones


def _zone_row(zone: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": zone["id"],
        "name": zone["name"],
        "status": zone.get("status"),
        "account_id": (zone.get("account") or {}).get("id"),
    }


async def sync_zones_to_database(store=None,
                                 transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    """Refresh the zone directory from Cloudflare; returns {synced, zones}"""
    if store is None:
        from .record_store import record_store as store

    token = get_cloudflare_api_token()
    account_id = get_cloudflare_account_id()
    if not token or not account_id:
        prometheus_metrics.record_zone_sync("not_configured")
        raise CloudflareError("CLOUDFLARE_API_TOKEN and CLOUDFLARE_ACCOUNT_ID must be set")

    try:
        zones = [_zone_row(z) for z in await fetch_all_zones(token, account_id, transport)]
        await run_in_threadpool(store.upsert_zones, zones, datetime.now(timezone.utc))
    except Exception:
        prometheus_metrics.record_zone_sync("failed")
        raise

    prometheus_metrics.record_zone_sync("success", len(zones))
    logger.info("Synced %d zones to database", len(zones), extra={"component": "zones"})
    return {"synced": len(zones), "zones": [z["name"] for z in zones]}

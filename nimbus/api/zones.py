from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from ..services.cloudflare import sync_zones_to_database
from ..services.record_store import record_store

router = APIRouter(tags=["Zones"])
logger = logging.getLogger("nimbus.zones")


@router.get("/zones")
def list_zones():
    zones = record_store.list_zones()
    return {"zones": zones, "count": len(zones)}


@router.post("/zones/sync")
async def sync_zones():
    """Refresh the zone directory from the Cloudflare API"""
    try:
        result = await sync_zones_to_database()
    except Exception as e:
        logger.error("Zone sync failed", extra={"component": "zones", "error": str(e)})
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": f"Failed to sync zones: {e}"},
        )
    return {
        "success": True,
        "message": f"Synced {result['synced']} zones",
        "zones": result["zones"],
    }

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress
import asyncio
import logging

from .middleware import TracingMiddleware
from .logging_config import setup_logging
from .config import API_PREFIX, API_VERSION, LEGACY_API_PREFIX, ZONE_SYNC_INTERVAL_SEC
from .db import init_db
from .startup import run_startup_checks, zone_sync_loop
from .api.ingest import router as ingest_router
from .api.logs import router as logs_router
from .api.stats import router as stats_router
from .api.zones import router as zones_router
from .api.datasets import router as datasets_router
from .api.health import router as health_router
from .api.prometheus import router as prometheus_router

# Configure logging at import time
setup_logging()

logger = logging.getLogger("nimbus")


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("NIMBUS starting up", extra={"component": "api", "version": API_VERSION})

    # Ensure DB schema (idempotent)
    init_db()

    zone_sync_ready = await run_startup_checks()

    application.state.background_tasks = []
    if zone_sync_ready and ZONE_SYNC_INTERVAL_SEC > 0:
        application.state.background_tasks.append(asyncio.create_task(zone_sync_loop()))

    logger.info("NIMBUS ready", extra={
        "component": "api",
        "zone_sync_loop": bool(application.state.background_tasks),
    })

    try:
        yield
    finally:
        for t in application.state.background_tasks:
            t.cancel()
        for t in application.state.background_tasks:
            with suppress(asyncio.CancelledError):
                await t
        logger.info("NIMBUS shutting down", extra={"component": "api"})


app = FastAPI(title="NIMBUS Logpush ingestion", version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(TracingMiddleware)

# Include API routers
app.include_router(health_router, prefix=API_PREFIX)
app.include_router(ingest_router, prefix=API_PREFIX)
app.include_router(logs_router, prefix=API_PREFIX)
app.include_router(stats_router, prefix=API_PREFIX)
app.include_router(zones_router, prefix=API_PREFIX)
app.include_router(datasets_router, prefix=API_PREFIX)
app.include_router(prometheus_router, prefix=API_PREFIX)

# Logpush destinations configured against /api/ingest keep working
app.include_router(ingest_router, prefix=LEGACY_API_PREFIX, include_in_schema=False)

# Server startup configuration
if __name__ == "__main__":
    import uvicorn
    from .config import APP_PORT

    logger.info(f"Starting NIMBUS on port {APP_PORT}")
    uvicorn.run(
        "nimbus.main:app",
        host="0.0.0.0",
        port=APP_PORT,
        reload=False,
        access_log=True
    )

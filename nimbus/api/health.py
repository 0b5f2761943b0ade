"""
Health and version endpoints - no authentication required
"""

import os

from fastapi import APIRouter

from ..config import API_VERSION, APP_NAME

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/version")
def get_version():
    return {
        "status": "ok",
        "service": APP_NAME,
        "version": API_VERSION,
        "git_sha": os.getenv("GIT_SHA", "unknown"),
    }

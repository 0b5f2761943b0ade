from fastapi import APIRouter

from ..services.record_store import record_store

router = APIRouter(tags=["Stats"])


@router.get("/stats")
def get_stats():
    """Totals per dataset and the newest event time of each"""
    return record_store.dataset_stats()

from fastapi import APIRouter, HTTPException

from ..datasets import DATASET_CONFIGS, get_dataset_config, parse_dataset

router = APIRouter(tags=["Datasets"])


@router.get("/datasets")
def list_datasets():
    """Catalog of recognised Logpush datasets"""
    return {
        "datasets": [c.to_dict() for c in DATASET_CONFIGS],
        "count": len(DATASET_CONFIGS),
    }


@router.get("/datasets/{dataset_id}")
def get_dataset(dataset_id: str):
    dataset = parse_dataset(dataset_id)
    config = get_dataset_config(dataset) if dataset else None
    if config is None:
        raise HTTPException(status_code=404, detail=f"Unknown dataset: {dataset_id}")
    return config.to_dict()

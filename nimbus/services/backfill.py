"""
Zone id backfill for records stored before their zone was known
"""

import logging
from typing import Dict

from ..datasets import ZONE_DATASETS, Dataset
from ..ingest.fields import HOST_FIELDS, extract_field
from ..ingest.zones import resolve_zone_id

logger = logging.getLogger("nimbus.backfill")

DEFAULT_BACKFILL_LIMIT = 10000


def backfill_zone_ids(store=None, limit: int = DEFAULT_BACKFILL_LIMIT, after_id: int = 0) -> Dict[str, int]:
    """
    Resolve and patch ``zone_id`` on zone-scoped logs where it is null.

    Examines at most ``limit`` candidates with ``id > after_id``. Rows whose
    host cannot be resolved stay null and are counted as skipped; pass the
    returned ``lastId`` as ``after_id`` to continue past them. Returns
    ``{"updated": n, "skipped": m, "lastId": k}``.
    """
    if store is None:
        from .record_store import record_store as store

    zone_map = store.zone_snapshot()
    candidates = store.find_unzoned_logs([d.value for d in ZONE_DATASETS], limit, after_id)
    logger.info("Backfill: %d zones loaded, %d logs without zone id after id %d",
                len(zone_map), len(candidates), after_id, extra={"component": "backfill"})

    assignments = {}
    skipped = 0
    for row in candidates:
        dataset = Dataset(row["dataset"])
        host = extract_field(row["data"] or {}, HOST_FIELDS, dataset)
        zone_id = resolve_zone_id(str(host), zone_map) if host else None
        if zone_id:
            assignments[row["id"]] = zone_id
        else:
            skipped += 1

    updated = store.set_zone_ids(assignments)
    last_id = candidates[-1]["id"] if candidates else after_id
    logger.info("Backfill: updated %d logs, skipped %d", updated, skipped,
                extra={"component": "backfill", "last_id": last_id})
    return {"updated": updated, "skipped": skipped, "lastId": last_id}

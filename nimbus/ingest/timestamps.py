"""
Timestamp normalization for Logpush records

Logpush jobs emit timestamps as RFC3339 strings or as Unix epochs in
seconds, milliseconds or nanoseconds depending on the job's
``timestamp_format``. Numbers carry no unit, so the unit is inferred from
magnitude:

    value >  1e15            nanoseconds
    1e12 < value <= 1e15     milliseconds
    value <= 1e12            seconds

Anything that cannot be turned into a representable UTC datetime resolves to
the ingestion time instead of failing the record.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("nimbus.ingest")

NANOSECONDS_THRESHOLD = 1e15
MILLISECONDS_THRESHOLD = 1e12

# fromisoformat keeps at most microseconds
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis(value: float) -> float:
    """Convert a unit-less epoch number to milliseconds using its magnitude"""
    if value > NANOSECONDS_THRESHOLD:
        return value / 1e6
    if value > MILLISECONDS_THRESHOLD:
        return float(value)
    return value * 1000


def _from_epoch(value: float) -> Optional[datetime]:
    try:
        millis = epoch_millis(value)
        if math.isnan(millis) or math.isinf(millis):
            return None
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """RFC3339 / ISO8601 string to aware UTC datetime, None when unparseable"""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _EXTRA_FRACTION.sub(r"\1", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def parse_timestamp(value: Any) -> datetime:
    """Normalize a timestamp field value to an aware UTC datetime. Never raises."""
    if not value:
        return _now()

    parsed = None
    if isinstance(value, str):
        parsed = parse_iso_datetime(value)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = _from_epoch(value)
    else:
        return _now()

    if parsed is None:
        logger.debug("Unparseable timestamp %r, using ingestion time", value)
        return _now()
    return parsed

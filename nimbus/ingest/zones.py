"""
Zone (tenant) resolution from hostnames
"""

from typing import Dict, Iterable, Mapping, Optional, Tuple
from urllib.parse import urlsplit


def load_zone_map(rows: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Build the lowercased ``{zone name: zone id}`` lookup from ``(id, name)`` rows"""
    return {name.lower(): zone_id for zone_id, name in rows if name}


def _hostname(value: str) -> str:
    if not value.lower().startswith(("http://", "https://")):
        return value
    try:
        host = urlsplit(value).hostname
    except ValueError:
        return value
    return host or value


def resolve_zone_id(host_or_url: Optional[str], zone_map: Mapping[str, str]) -> Optional[str]:
    """
    Resolve a hostname or URL to a zone id.

    Exact match first, then parent domains from the longest down:
    ``a.b.example.com`` tries ``b.example.com`` then ``example.com`` then ``com``.
    """
    if not host_or_url or not zone_map:
        return None
    host = _hostname(str(host_or_url)).lower().rstrip(".")
    if host in zone_map:
        return zone_map[host]

    labels = host.split(".")
    for i in range(1, len(labels)):
        zone_id = zone_map.get(".".join(labels[i:]))
        if zone_id:
            return zone_id
    return None

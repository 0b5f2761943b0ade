"""
Per-dataset field tables used to pull index columns out of raw records
"""

from typing import Any, Dict, Mapping, Optional

from ..datasets import Dataset

DEFAULT_TIMESTAMP_FIELD = "Timestamp"

TIMESTAMP_FIELDS: Dict[Dataset, str] = {
    Dataset.HTTP_REQUESTS: "EdgeStartTimestamp",
    Dataset.FIREWALL_EVENTS: "Datetime",
    Dataset.DNS_LOGS: "Timestamp",
    Dataset.AUDIT_LOGS: "When",
    Dataset.AUDIT_LOGS_V2: "When",
    Dataset.GATEWAY_DNS: "Datetime",
    Dataset.GATEWAY_HTTP: "Datetime",
    Dataset.GATEWAY_NETWORK: "Datetime",
    Dataset.ACCESS_REQUESTS: "CreatedAt",
    Dataset.WORKERS_TRACE_EVENTS: "EventTimestampMs",
    Dataset.SPECTRUM_EVENTS: "Timestamp",
    Dataset.NEL_REPORTS: "Timestamp",
    Dataset.PAGE_SHIELD_EVENTS: "Timestamp",
    Dataset.ZARAZ_EVENTS: "Timestamp",
    Dataset.ZERO_TRUST_NETWORK_SESSIONS: "SessionStartTime",
    Dataset.BISO_USER_ACTIONS: "Timestamp",
    Dataset.CASB_FINDINGS: "DetectedTimestamp",
    Dataset.DEVICE_POSTURE_RESULTS: "Timestamp",
    Dataset.DEX_APPLICATION_TESTS: "Timestamp",
    Dataset.DEX_DEVICE_STATE_EVENTS: "Timestamp",
    Dataset.DLP_FORENSIC_COPIES: "Datetime",
    Dataset.DNS_FIREWALL_LOGS: "Timestamp",
    Dataset.EMAIL_SECURITY_ALERTS: "Timestamp",
    Dataset.IPSEC_LOGS: "Timestamp",
    Dataset.MAGIC_IDS_DETECTIONS: "Timestamp",
    Dataset.NETWORK_ANALYTICS_LOGS: "Datetime",
    Dataset.SINKHOLE_HTTP_LOGS: "Timestamp",
    Dataset.SSH_LOGS: "Timestamp",
    Dataset.WARP_CONFIG_CHANGES: "Timestamp",
    Dataset.WARP_TOGGLE_CHANGES: "Timestamp",
}

# Cloudflare Ray ID, the cross-product correlation id
RAY_ID_FIELDS: Dict[Dataset, str] = {
    Dataset.HTTP_REQUESTS: "RayID",
    Dataset.FIREWALL_EVENTS: "RayID",
    Dataset.DNS_LOGS: "RayID",
    Dataset.ACCESS_REQUESTS: "RayID",
}

CLIENT_IP_FIELDS: Dict[Dataset, str] = {
    Dataset.HTTP_REQUESTS: "ClientIP",
    Dataset.FIREWALL_EVENTS: "ClientIP",
    Dataset.DNS_LOGS: "SourceIP",
    Dataset.SPECTRUM_EVENTS: "ClientIP",
    Dataset.GATEWAY_DNS: "SrcIP",
    Dataset.GATEWAY_HTTP: "SourceIP",
    Dataset.GATEWAY_NETWORK: "SourceIP",
    Dataset.ACCESS_REQUESTS: "IPAddress",
}

# Datasets whose records name their zone directly
ZONE_ID_FIELDS: Dict[Dataset, str] = {
    Dataset.HTTP_REQUESTS: "ZoneID",
    Dataset.FIREWALL_EVENTS: "ZoneID",
    Dataset.DNS_LOGS: "ZoneID",
}

# Hostname-bearing field used to resolve the zone when ZoneID is absent
HOST_FIELDS: Dict[Dataset, str] = {
    Dataset.HTTP_REQUESTS: "ClientRequestHost",
    Dataset.FIREWALL_EVENTS: "ClientRequestHost",
    Dataset.DNS_LOGS: "QueryName",
    Dataset.NEL_REPORTS: "URL",
    Dataset.PAGE_SHIELD_EVENTS: "Host",
}


def timestamp_field(dataset: Dataset) -> str:
    return TIMESTAMP_FIELDS.get(dataset, DEFAULT_TIMESTAMP_FIELD)


def extract_field(record: Mapping[str, Any], field_table: Mapping[Dataset, str], dataset: Dataset) -> Optional[Any]:
    """
    Look up ``dataset`` in ``field_table`` and return that field of ``record``.

    Returns None when the dataset has no entry, the record lacks the field,
    or the value is falsy.
    """
    field = field_table.get(dataset)
    if not field:
        return None
    return record.get(field) or None


def extract_text(record: Mapping[str, Any], field_table: Mapping[Dataset, str], dataset: Dataset) -> Optional[str]:
    """Same as extract_field, coerced to str for text index columns"""
    value = extract_field(record, field_table, dataset)
    return None if value is None else str(value)

"""
Tests for per-dataset field extraction
"""

from nimbus.datasets import ALL_DATASETS, Dataset
from nimbus.ingest.fields import (
    CLIENT_IP_FIELDS,
    HOST_FIELDS,
    RAY_ID_FIELDS,
    TIMESTAMP_FIELDS,
    ZONE_ID_FIELDS,
    extract_field,
    extract_text,
    timestamp_field,
)


def test_every_dataset_has_a_timestamp_field():
    """Test the timestamp table covers all datasets."""
    assert set(TIMESTAMP_FIELDS) == set(ALL_DATASETS)


def test_timestamp_field_lookup():
    """Test known timestamp fields."""
    assert timestamp_field(Dataset.HTTP_REQUESTS) == "EdgeStartTimestamp"
    assert timestamp_field(Dataset.FIREWALL_EVENTS) == "Datetime"
    assert timestamp_field(Dataset.AUDIT_LOGS) == "When"


def test_extract_present_field():
    """Test a declared field is returned as-is."""
    record = {"RayID": "7d1f", "ClientIP": "192.0.2.1"}
    assert extract_field(record, RAY_ID_FIELDS, Dataset.HTTP_REQUESTS) == "7d1f"
    assert extract_field(record, CLIENT_IP_FIELDS, Dataset.HTTP_REQUESTS) == "192.0.2.1"


def test_extract_missing_entry_or_field():
    """Test None when the dataset has no entry or the record lacks the field."""
    record = {"RayID": "7d1f"}
    assert extract_field(record, RAY_ID_FIELDS, Dataset.AUDIT_LOGS) is None
    assert extract_field(record, CLIENT_IP_FIELDS, Dataset.HTTP_REQUESTS) is None


def test_extract_falsy_value_is_none():
    """Test empty values count as absent."""
    assert extract_field({"ZoneID": ""}, ZONE_ID_FIELDS, Dataset.HTTP_REQUESTS) is None
    assert extract_field({"ZoneID": 0}, ZONE_ID_FIELDS, Dataset.HTTP_REQUESTS) is None


def test_extract_text_coerces_to_str():
    """Test numeric zone ids are stored as strings."""
    assert extract_text({"ZoneID": 12345}, ZONE_ID_FIELDS, Dataset.DNS_LOGS) == "12345"
    assert extract_text({}, ZONE_ID_FIELDS, Dataset.DNS_LOGS) is None


def test_host_fields_are_zone_scoped():
    """Test hostname fallback is only configured for zone datasets."""
    for dataset in HOST_FIELDS:
        assert dataset in (Dataset.HTTP_REQUESTS, Dataset.FIREWALL_EVENTS, Dataset.DNS_LOGS,
                           Dataset.NEL_REPORTS, Dataset.PAGE_SHIELD_EVENTS)

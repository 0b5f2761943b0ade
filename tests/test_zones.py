"""
Tests for hostname to zone resolution
"""

import pytest

from nimbus.ingest.zones import load_zone_map, resolve_zone_id

ZONES = {"example.com": "Z1", "other.com": "Z2"}


@pytest.mark.parametrize("host,expected", [
    ("example.com", "Z1"),
    ("www.example.com", "Z1"),
    ("a.b.example.com", "Z1"),
    ("WWW.Example.COM", "Z1"),
    ("example.com.", "Z1"),
    ("https://shop.example.com/cart?id=1", "Z1"),
    ("http://other.com:8080/", "Z2"),
    ("other.com", "Z2"),
    ("example.org", None),
    ("notexample.com", None),
])
def test_resolve_zone_id(host, expected):
    """Test exact and parent-domain matches."""
    assert resolve_zone_id(host, ZONES) == expected


def test_most_specific_zone_wins():
    """Test a delegated subdomain zone beats its parent."""
    zones = {"example.com": "Z1", "shop.example.com": "Z3"}
    assert resolve_zone_id("a.shop.example.com", zones) == "Z3"
    assert resolve_zone_id("blog.example.com", zones) == "Z1"


@pytest.mark.parametrize("host", [None, ""])
def test_empty_host(host):
    """Test empty input resolves to nothing."""
    assert resolve_zone_id(host, ZONES) is None


def test_empty_zone_map():
    """Test no zones means no match."""
    assert resolve_zone_id("www.example.com", {}) is None


def test_load_zone_map_lowercases():
    """Test snapshot keys are lowercased names."""
    assert load_zone_map([("Z1", "Example.COM"), ("Z2", "other.com")]) == {"example.com": "Z1", "other.com": "Z2"}

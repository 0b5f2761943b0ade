"""
Cloudflare Logpush datasets known to NIMBUS and their scope partition
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Dataset(str, Enum):
    # Zone-scoped datasets (per domain/zone)
    DNS_LOGS = "dns_logs"
    FIREWALL_EVENTS = "firewall_events"
    HTTP_REQUESTS = "http_requests"
    NEL_REPORTS = "nel_reports"
    PAGE_SHIELD_EVENTS = "page_shield_events"
    SPECTRUM_EVENTS = "spectrum_events"
    ZARAZ_EVENTS = "zaraz_events"
    # Account-scoped datasets (account-wide)
    ACCESS_REQUESTS = "access_requests"
    AUDIT_LOGS = "audit_logs"
    AUDIT_LOGS_V2 = "audit_logs_v2"
    BISO_USER_ACTIONS = "biso_user_actions"
    CASB_FINDINGS = "casb_findings"
    DEVICE_POSTURE_RESULTS = "device_posture_results"
    DEX_APPLICATION_TESTS = "dex_application_tests"
    DEX_DEVICE_STATE_EVENTS = "dex_device_state_events"
    DLP_FORENSIC_COPIES = "dlp_forensic_copies"
    DNS_FIREWALL_LOGS = "dns_firewall_logs"
    EMAIL_SECURITY_ALERTS = "email_security_alerts"
    GATEWAY_DNS = "gateway_dns"
    GATEWAY_HTTP = "gateway_http"
    GATEWAY_NETWORK = "gateway_network"
    IPSEC_LOGS = "ipsec_logs"
    MAGIC_IDS_DETECTIONS = "magic_ids_detections"
    NETWORK_ANALYTICS_LOGS = "network_analytics_logs"
    SINKHOLE_HTTP_LOGS = "sinkhole_http_logs"
    SSH_LOGS = "ssh_logs"
    WARP_CONFIG_CHANGES = "warp_config_changes"
    WARP_TOGGLE_CHANGES = "warp_toggle_changes"
    WORKERS_TRACE_EVENTS = "workers_trace_events"
    ZERO_TRUST_NETWORK_SESSIONS = "zero_trust_network_sessions"


SCOPE_ZONE = "zone"
SCOPE_ACCOUNT = "account"
SCOPES = (SCOPE_ZONE, SCOPE_ACCOUNT)

ZONE_DATASETS: List[Dataset] = [
    Dataset.DNS_LOGS,
    Dataset.FIREWALL_EVENTS,
    Dataset.HTTP_REQUESTS,
    Dataset.NEL_REPORTS,
    Dataset.PAGE_SHIELD_EVENTS,
    Dataset.SPECTRUM_EVENTS,
    Dataset.ZARAZ_EVENTS,
]

ACCOUNT_DATASETS: List[Dataset] = [d for d in Dataset if d not in ZONE_DATASETS]

# Declaration order matters: classification ties resolve to the earlier entry
ALL_DATASETS: List[Dataset] = ZONE_DATASETS + ACCOUNT_DATASETS

_ZONE_SET = frozenset(ZONE_DATASETS)


def dataset_scope(dataset: Dataset) -> str:
    return SCOPE_ZONE if Dataset(dataset) in _ZONE_SET else SCOPE_ACCOUNT


def parse_dataset(value: Optional[str]) -> Optional[Dataset]:
    """Map a dataset name to its enum member, None when unknown"""
    if not value:
        return None
    try:
        return Dataset(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class DatasetConfig:
    id: Dataset
    label: str
    description: str

    @property
    def scope(self) -> str:
        return dataset_scope(self.id)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id.value,
            "label": self.label,
            "scope": self.scope,
            "description": self.description,
        }


DATASET_CONFIGS: List[DatasetConfig] = [
    DatasetConfig(Dataset.HTTP_REQUESTS, "HTTP Requests", "HTTP request logs with client, edge, and origin details"),
    DatasetConfig(Dataset.FIREWALL_EVENTS, "Firewall Events", "WAF, rate limiting, and security events"),
    DatasetConfig(Dataset.DNS_LOGS, "DNS Logs", "DNS query and response logs"),
    DatasetConfig(Dataset.SPECTRUM_EVENTS, "Spectrum Events", "Spectrum TCP/UDP proxy events"),
    DatasetConfig(Dataset.NEL_REPORTS, "NEL Reports", "Network Error Logging reports"),
    DatasetConfig(Dataset.PAGE_SHIELD_EVENTS, "Page Shield", "Page Shield script detection events"),
    DatasetConfig(Dataset.ZARAZ_EVENTS, "Zaraz Events", "Zaraz third-party tool events"),
    DatasetConfig(Dataset.AUDIT_LOGS, "Audit Logs", "Account audit trail"),
    DatasetConfig(Dataset.AUDIT_LOGS_V2, "Audit Logs V2", "Enhanced audit logs with more detail"),
    DatasetConfig(Dataset.ACCESS_REQUESTS, "Access Requests", "Cloudflare Access authentication logs"),
    DatasetConfig(Dataset.GATEWAY_DNS, "Gateway DNS", "Zero Trust Gateway DNS logs"),
    DatasetConfig(Dataset.GATEWAY_HTTP, "Gateway HTTP", "Zero Trust Gateway HTTP logs"),
    DatasetConfig(Dataset.GATEWAY_NETWORK, "Gateway Network", "Zero Trust Gateway network logs"),
    DatasetConfig(Dataset.WORKERS_TRACE_EVENTS, "Workers Traces", "Cloudflare Workers execution traces"),
    DatasetConfig(Dataset.ZERO_TRUST_NETWORK_SESSIONS, "ZT Sessions", "Zero Trust network session logs"),
    DatasetConfig(Dataset.BISO_USER_ACTIONS, "Browser Isolation", "Browser Isolation user actions"),
    DatasetConfig(Dataset.CASB_FINDINGS, "CASB Findings", "CASB security findings"),
    DatasetConfig(Dataset.DEVICE_POSTURE_RESULTS, "Device Posture", "Device posture check results"),
    DatasetConfig(Dataset.DEX_APPLICATION_TESTS, "DEX App Tests", "DEX application test results"),
    DatasetConfig(Dataset.DEX_DEVICE_STATE_EVENTS, "DEX Device State", "DEX device state events"),
    DatasetConfig(Dataset.DLP_FORENSIC_COPIES, "DLP Forensics", "DLP forensic copies"),
    DatasetConfig(Dataset.DNS_FIREWALL_LOGS, "DNS Firewall", "DNS Firewall logs"),
    DatasetConfig(Dataset.EMAIL_SECURITY_ALERTS, "Email Security", "Email security alerts"),
    DatasetConfig(Dataset.IPSEC_LOGS, "IPSec Logs", "IPSec tunnel logs"),
    DatasetConfig(Dataset.MAGIC_IDS_DETECTIONS, "Magic IDS", "Magic IDS detections"),
    DatasetConfig(Dataset.NETWORK_ANALYTICS_LOGS, "Network Analytics", "Network analytics logs"),
    DatasetConfig(Dataset.SINKHOLE_HTTP_LOGS, "Sinkhole HTTP", "Sinkhole HTTP logs"),
    DatasetConfig(Dataset.SSH_LOGS, "SSH Logs", "SSH session logs"),
    DatasetConfig(Dataset.WARP_CONFIG_CHANGES, "WARP Config", "WARP configuration changes"),
    DatasetConfig(Dataset.WARP_TOGGLE_CHANGES, "WARP Toggle", "WARP toggle state changes"),
]


def get_dataset_config(dataset: Dataset) -> Optional[DatasetConfig]:
    for config in DATASET_CONFIGS:
        if config.id == dataset:
            return config
    return None

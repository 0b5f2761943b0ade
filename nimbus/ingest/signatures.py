"""
Field-name signatures used to recognise Logpush datasets

Each dataset shares generic fields (client IP, timestamps, device ids) with
several others but has a handful of field names nobody else emits. Unique
fields weigh 2, common fields weigh 1, and a record must reach ``min_score``
to be a candidate. ``min_score`` is always above the total weight of the
common fields, so a record needs at least one unique hit to match.
"""

from dataclasses import dataclass
from typing import FrozenSet, List

from ..datasets import ALL_DATASETS, Dataset

UNIQUE_WEIGHT = 2
COMMON_WEIGHT = 1


@dataclass(frozen=True)
class DatasetSignature:
    dataset: Dataset
    unique_fields: FrozenSet[str]
    common_fields: FrozenSet[str]
    min_score: int

    def score(self, field_names: FrozenSet[str]) -> int:
        return (UNIQUE_WEIGHT * len(field_names & self.unique_fields)
                + COMMON_WEIGHT * len(field_names & self.common_fields))


def _sig(dataset: Dataset, unique: List[str], common: List[str], min_score: int) -> DatasetSignature:
    return DatasetSignature(dataset, frozenset(unique), frozenset(common), min_score)


# Declared in ALL_DATASETS order; on equal scores the earlier signature wins
SIGNATURES: List[DatasetSignature] = [
    # Zone-scoped
    _sig(Dataset.DNS_LOGS,
         ["ResponseCode", "ResponseCached", "EDNSSubnetLength"],
         ["QueryName", "QueryType", "ColoCode", "SourceIP"], 5),
    _sig(Dataset.FIREWALL_EVENTS,
         ["Action", "Source", "RuleID", "MatchIndex", "OriginatorRayID", "Kind", "Ref"],
         ["Datetime", "RayID", "ClientIP", "ClientRequestPath"], 5),
    _sig(Dataset.HTTP_REQUESTS,
         ["EdgeStartTimestamp", "EdgeEndTimestamp", "EdgeResponseStatus", "EdgeColoCode",
          "CacheCacheStatus", "OriginResponseStatus", "EdgeResponseBytes"],
         ["RayID", "ClientIP", "ClientRequestHost", "ClientRequestURI"], 5),
    _sig(Dataset.NEL_REPORTS,
         ["LastKnownGoodColoCode", "ClientIPASNDescription"],
         ["Phase", "ClientIPASN", "ClientIPCountry", "Type"], 5),
    _sig(Dataset.PAGE_SHIELD_EVENTS,
         ["CSPDirective", "PageURL", "URLHost", "ResourceType"],
         ["Host", "URL", "PolicyID", "Action"], 5),
    _sig(Dataset.SPECTRUM_EVENTS,
         ["Application", "ClientMatchedIpFirewall", "ConnectTimestamp", "DisconnectTimestamp", "OriginTcpRtt"],
         ["ClientIP", "OriginIP", "Event", "Status"], 5),
    _sig(Dataset.ZARAZ_EVENTS,
         ["TrackingID", "EventDetails"],
         ["Body", "EventType", "IPAddress"], 4),
    # Account-scoped
    _sig(Dataset.ACCESS_REQUESTS,
         ["AppDomain", "AppUUID", "Allowed", "PurposeJustificationPrompt", "TemporaryAccessDuration"],
         ["Action", "Email", "IPAddress", "CreatedAt"], 5),
    _sig(Dataset.AUDIT_LOGS,
         ["ActorIP", "OldValue", "NewValue", "OwnerID", "Interface"],
         ["ActionResult", "ActionType", "ActorEmail", "When"], 5),
    _sig(Dataset.AUDIT_LOGS_V2,
         ["ActionDescription", "ActorContext", "ActorTokenID", "ActorIPAddress", "ResourceProduct", "ResourceScope"],
         ["ActionResult", "ActionType", "ActorEmail", "ActionTime"], 5),
    _sig(Dataset.BISO_USER_ACTIONS,
         ["Decision", "DomainName"],
         ["UserEmail", "UserID", "URL", "Type"], 5),
    _sig(Dataset.CASB_FINDINGS,
         ["FindingTypeID", "FindingTypeSeverity", "AssetExternalID", "IntegrationID", "DetectedTimestamp"],
         ["AssetDisplayName", "AssetLink", "InstanceID"], 4),
    _sig(Dataset.DEVICE_POSTURE_RESULTS,
         ["PostureCheckName", "PostureCheckType", "PostureEvaluatedResult", "PostureExpectedJSON",
          "PostureReceivedJSON"],
         ["DeviceID", "DeviceName", "Email", "UserUID"], 5),
    _sig(Dataset.DEX_APPLICATION_TESTS,
         ["TestID", "TestName", "HTTPResponseStatusCode", "ResourceFetchTimeMs", "ServerResponseTimeMs"],
         ["DeviceID", "ColoCode", "ClientPlatform"], 4),
    _sig(Dataset.DEX_DEVICE_STATE_EVENTS,
         ["BatteryPct", "CPUPct", "MemoryUsagePct", "DiskUsagePct", "WiFiStrengthDbm", "NetworkType"],
         ["DeviceID", "DeviceName", "Platform", "Status"], 5),
    _sig(Dataset.DLP_FORENSIC_COPIES,
         ["ForensicCopyID", "TriggeredDLPProfileID", "GatewayRequestID"],
         ["Headers", "Payload", "Phase", "Datetime"], 5),
    _sig(Dataset.DNS_FIREWALL_LOGS,
         ["ClientResponseCode", "ClusterID", "UpstreamIP", "UpstreamResponseCode", "UpstreamResponseTimeMs",
          "ResponseCachedStale", "QueryDO"],
         ["QueryName", "QueryType", "SourceIP", "EDNSSubnet"], 5),
    _sig(Dataset.EMAIL_SECURITY_ALERTS,
         ["AlertID", "FinalDisposition", "DetectionReasons", "ThreatCategories", "XOriginatingIP"],
         ["From", "To", "Subject", "MessageID"], 5),
    _sig(Dataset.GATEWAY_DNS,
         ["QueryNameReversed", "ResolverDecision", "MatchedCategoryIDs", "QueryCategoryIDs", "RData"],
         ["QueryName", "QueryType", "SrcIP", "DstIP"], 5),
    _sig(Dataset.GATEWAY_HTTP,
         ["HTTPHost", "HTTPMethod", "HTTPStatusCode", "UntrustedCertificateAction", "IsIsolated",
          "BlockedFileHash"],
         ["Action", "SourceIP", "DestinationIP", "URL"], 5),
    _sig(Dataset.GATEWAY_NETWORK,
         ["DetectedProtocol", "OverrideIP", "OverridePort", "SNI", "Transport"],
         ["Action", "SourceIP", "DestinationIP", "DestinationPort"], 5),
    _sig(Dataset.IPSEC_LOGS,
         ["TunnelID", "TunnelName", "SPI", "DiffieHellmanGroup"],
         ["ColoCode", "RemoteIP", "Status"], 4),
    _sig(Dataset.MAGIC_IDS_DETECTIONS,
         ["SignatureID", "SignatureMessage", "SignatureRevision", "ColoCity"],
         ["DestinationIP", "SourceIP", "Protocol", "Action"], 5),
    _sig(Dataset.NETWORK_ANALYTICS_LOGS,
         ["AttackCampaignID", "AttackID", "MitigationReason", "MitigationSystem", "Outcome", "Verdict",
          "ColoGeoHash"],
         ["ProtocolName", "RuleID", "SourceASN", "DestinationASN"], 5),
    _sig(Dataset.SINKHOLE_HTTP_LOGS,
         ["SinkholeID", "R2Path", "DestAddr", "SrcAddr", "BodyLength"],
         ["Host", "Method", "URI", "UserAgent"], 5),
    _sig(Dataset.SSH_LOGS,
         ["SSHSessionID", "TargetAddress", "ClientAddress", "ServerCommand"],
         ["Username", "UserID"], 3),
    _sig(Dataset.WARP_CONFIG_CHANGES,
         ["FromConfigName", "ToConfigName"],
         ["DeviceID", "UserEmail", "UserUID"], 4),
    _sig(Dataset.WARP_TOGGLE_CHANGES,
         ["Toggle", "ToggleReason"],
         ["DeviceID", "UserEmail", "UserUID"], 4),
    _sig(Dataset.WORKERS_TRACE_EVENTS,
         ["CPUTimeMs", "EventTimestampMs", "ScriptName", "ScriptTags", "WallTimeMs", "DispatchNamespace"],
         ["Event", "EventType", "Exceptions", "Logs"], 5),
    _sig(Dataset.ZERO_TRUST_NETWORK_SESSIONS,
         ["SessionStartTime", "SessionEndTime", "BytesReceived", "BytesSent", "EgressColoName",
          "VirtualNetworkID"],
         ["SessionID", "SourceIP", "DestinationIP", "DeviceID"], 5),
]


def validate_signatures(signatures: List[DatasetSignature]) -> None:
    """Raise ValueError if the table breaks an invariant the classifier relies on."""
    datasets = [s.dataset for s in signatures]
    if datasets != ALL_DATASETS:
        raise ValueError("signatures must cover every dataset exactly once, in ALL_DATASETS order")

    seen = {}
    for sig in signatures:
        if not sig.unique_fields:
            raise ValueError(f"{sig.dataset.value}: unique_fields is empty")
        if sig.min_score <= COMMON_WEIGHT * len(sig.common_fields):
            raise ValueError(f"{sig.dataset.value}: min_score {sig.min_score} reachable with common fields only")
        if sig.unique_fields in seen:
            raise ValueError(f"{sig.dataset.value}: unique_fields identical to {seen[sig.unique_fields].value}")
        seen[sig.unique_fields] = sig.dataset


validate_signatures(SIGNATURES)

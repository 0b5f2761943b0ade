from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from nimbus.db import Base


class LogRecord(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dataset = Column(String(50), nullable=False)  # http_requests, dns_logs, ...
    scope = Column(String(10), nullable=False)  # "zone" | "account"
    zone_id = Column(Text)  # zone-scoped datasets only
    account_id = Column(Text)
    timestamp = Column(DateTime(timezone=True), nullable=False)  # event time
    ray_id = Column(Text)  # Cloudflare Ray ID for correlation
    client_ip = Column(Text)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)  # original record
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("logs_dataset_idx", "dataset"),
        Index("logs_zone_id_idx", "zone_id"),
        Index("logs_account_id_idx", "account_id"),
        Index("logs_timestamp_idx", "timestamp"),
        Index("logs_ray_id_idx", "ray_id"),
        Index("logs_client_ip_idx", "client_ip"),
        Index("logs_dataset_timestamp_idx", "dataset", "timestamp"),
        Index("logs_dataset_zone_timestamp_idx", "dataset", "zone_id", "timestamp"),
    )

    def to_dict(self, zone_name: str = None):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "dataset": self.dataset,
            "scope": self.scope,
            "zoneId": self.zone_id,
            "zoneName": zone_name,
            "accountId": self.account_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "rayId": self.ray_id,
            "clientIp": self.client_ip,
            "data": self.data,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

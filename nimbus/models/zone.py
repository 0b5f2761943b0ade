from sqlalchemy import Column, DateTime, Index, Text, func

from nimbus.db import Base


class Zone(Base):
    """Zone cached from the Cloudflare API"""
    __tablename__ = "zones"

    id = Column(Text, primary_key=True)  # Cloudflare zone ID
    name = Column(Text, nullable=False)  # zone domain name
    status = Column(Text, nullable=False)  # active, pending, ...
    account_id = Column(Text, nullable=False)
    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("zones_account_id_idx", "account_id"),
        Index("zones_name_idx", "name"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "accountId": self.account_id,
            "syncedAt": self.synced_at.isoformat() if self.synced_at else None,
        }

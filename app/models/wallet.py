from sqlalchemy import Column, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime, timezone
from app.db.database import Base
from app.core.database_types import UUIDType


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (
        # One registration per (address, network); the same EVM address may
        # appear once under ERC-20 and once under BEP-20.
        UniqueConstraint("address", "network", name="uq_wallets_address_network"),
    )

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)

    # Wallet Details
    address = Column(String(128), nullable=False, index=True)
    network = Column(String(10), nullable=False)  # ERC-20, BEP-20, TRC-20
    wallet_client = Column(String(100), nullable=False, default="unknown")

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    # Relationships
    payouts = relationship("PayoutRecord", back_populates="wallet", lazy="noload")

    def __repr__(self):
        return f"<Wallet(address='{self.address}', network='{self.network}')>"

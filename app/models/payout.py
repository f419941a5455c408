from sqlalchemy import Column, String, DateTime, Numeric, Integer, Text, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime, timezone
from app.db.database import Base
from app.core.database_types import UUIDType


class PayoutStatus:
    PENDING = "pending"        # recorded, transaction not yet handed to the chain
    SUBMITTED = "submitted"    # broadcast, tx hash known
    CONFIRMED = "confirmed"
    FAILED = "failed"
    UNKNOWN = "unknown"        # broadcast outcome unknown, needs operator review


class PayoutRecord(Base):
    __tablename__ = "payout_records"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    wallet_id = Column(UUIDType, ForeignKey("wallets.id"), nullable=False, index=True)

    # What was moved and where to
    network = Column(String(10), nullable=False)
    owner_address = Column(String(128), nullable=False)
    recipient = Column(String(128), nullable=False)
    spender = Column(String(128), nullable=False)
    amount = Column(Numeric(38, 18), nullable=False)
    raw_amount = Column(String(80), nullable=False)  # uint256 does not fit BIGINT
    decimals = Column(Integer, nullable=False)

    # Outcome
    status = Column(String(20), nullable=False, default=PayoutStatus.PENDING, index=True)
    tx_hash = Column(String(100), nullable=True, index=True)
    error = Column(Text, nullable=True)

    # Replay protection and audit
    idempotency_key = Column(String(100), nullable=True, unique=True)
    requested_by = Column(UUIDType, nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    wallet = relationship("Wallet", back_populates="payouts")

    def __repr__(self):
        return f"<PayoutRecord(wallet_id='{self.wallet_id}', amount='{self.amount}', status='{self.status}')>"

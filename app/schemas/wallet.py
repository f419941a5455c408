from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.core.networks import Network


class WalletConnect(BaseModel):
    address: str = Field(..., min_length=1, max_length=128)
    network: Network
    wallet_client: Optional[str] = Field(None, max_length=100, alias="walletClient")

    @validator('address')
    def strip_address(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('address required')
        return v

    class Config:
        populate_by_name = True


class WalletResponse(BaseModel):
    id: UUID
    address: str
    network: str
    wallet_client: str
    created_at: datetime

    class Config:
        from_attributes = True


class WalletStatusResponse(WalletResponse):
    """Wallet enriched with a live allowance snapshot"""
    decimals: int
    raw_allowance: str
    approved_amount: Decimal
    approved: bool
    status: str  # connected, approved, error
    error: Optional[str] = None
    last_updated: datetime


class WalletSendRequest(BaseModel):
    """Only the amount is taken from the client; any recipient field is dropped"""
    amount: Decimal = Field(..., gt=0)
    idempotency_key: Optional[str] = Field(None, min_length=8, max_length=100)

    class Config:
        extra = "ignore"


class PayoutResponse(BaseModel):
    payout_id: UUID
    wallet_id: UUID
    tx_hash: str
    network: str
    amount: Decimal
    recipient: str
    status: str
    replayed: bool = False

    class Config:
        from_attributes = True


class PayoutRecordResponse(BaseModel):
    id: UUID
    wallet_id: UUID
    network: str
    owner_address: str
    recipient: str
    spender: str
    amount: Decimal
    raw_amount: str
    decimals: int
    status: str
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    idempotency_key: Optional[str] = None
    requested_by: Optional[UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PayoutResolve(BaseModel):
    status: str = Field(..., pattern="^(confirmed|failed)$")
    tx_hash: Optional[str] = Field(None, max_length=100)
    note: Optional[str] = None

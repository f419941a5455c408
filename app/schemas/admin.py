from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class DashboardStats(BaseModel):
    total_trades: int
    active_users: int
    connected_wallets: int
    approved_wallets: int  # wallets with a live allowance, i.e. pending payouts
    unverified_wallets: int
    open_tickets: int
    total_volume: Decimal


class PlatformSettingsUpdate(BaseModel):
    platform_fee: Optional[Decimal] = Field(None, ge=0, le=100)
    min_trade_amount: Optional[Decimal] = Field(None, ge=0)
    support_email: Optional[str] = Field(None, max_length=255)
    maintenance_mode: Optional[bool] = None

    class Config:
        extra = "ignore"


class PlatformSettingsResponse(BaseModel):
    platform_fee: Decimal
    min_trade_amount: Decimal
    support_email: str
    maintenance_mode: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

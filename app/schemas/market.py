from pydantic import BaseModel, EmailStr, Field
from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from app.core.networks import Network


class PaymentOption(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    fields: List[str] = []


class TraderBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    avatar: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = Field(None, max_length=10)
    currency_symbol: Optional[str] = Field(None, max_length=10)
    price_per_usdt: Decimal = Field(..., ge=0)
    total_trades: int = 0
    success_rate: float = 0
    response_rate: Optional[str] = None
    network: Network = Network.TRC20
    payment_options: List[PaymentOption] = []
    limit: Optional[str] = None
    online: bool = False
    rating: float = 0
    reviews: int = 0


class TraderCreate(TraderBase):
    pass


class TraderResponse(TraderBase):
    id: int
    network: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TraderStatusUpdate(BaseModel):
    online: bool


class AdBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image: Optional[str] = None
    bg_color: Optional[str] = None
    link: Optional[str] = None
    active: bool = True


class AdCreate(AdBase):
    pass


class AdResponse(AdBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdStatusUpdate(BaseModel):
    active: bool


class TicketCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    wallet_address: Optional[str] = Field(None, max_length=128)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)


class TicketResponse(BaseModel):
    id: int
    name: str
    email: str
    wallet_address: Optional[str] = None
    subject: str
    message: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(open|closed)$")


class TradePlanRequest(BaseModel):
    trader_id: int
    amount_usdt: Decimal = Field(..., gt=0)
    owner_address: str = Field(..., min_length=1, max_length=128)
    wallet_client: Optional[str] = None
    payment_method: str = Field(..., min_length=1)
    payment_details: Dict[str, str] = {}


class TradePlanResponse(BaseModel):
    trader_id: int
    network: str
    owner_address: str
    token: str
    spender: str
    decimals: int
    amount_usdt: Decimal
    approve_amount: Decimal
    approve_raw_amount: str
    current_allowance_raw: str
    needs_approval: bool
    receive_amount: Decimal
    currency: Optional[str] = None
    payment_method: str
    escrow_expires_at: datetime
    room_name: str

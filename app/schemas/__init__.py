from .base import BaseResponse, MessageResponse, ErrorBody
from .wallet import (
    WalletConnect, WalletResponse, WalletStatusResponse, WalletSendRequest,
    PayoutResponse, PayoutRecordResponse, PayoutResolve
)
from .admin import (
    AdminLogin, Token, DashboardStats, PlatformSettingsUpdate, PlatformSettingsResponse
)
from .market import (
    TraderCreate, TraderResponse, TraderStatusUpdate,
    AdCreate, AdResponse, AdStatusUpdate,
    TicketCreate, TicketResponse, TicketStatusUpdate,
    TradePlanRequest, TradePlanResponse
)

__all__ = [
    "BaseResponse", "MessageResponse", "ErrorBody",
    "WalletConnect", "WalletResponse", "WalletStatusResponse", "WalletSendRequest",
    "PayoutResponse", "PayoutRecordResponse", "PayoutResolve",
    "AdminLogin", "Token", "DashboardStats", "PlatformSettingsUpdate", "PlatformSettingsResponse",
    "TraderCreate", "TraderResponse", "TraderStatusUpdate",
    "AdCreate", "AdResponse", "AdStatusUpdate",
    "TicketCreate", "TicketResponse", "TicketStatusUpdate",
    "TradePlanRequest", "TradePlanResponse",
]

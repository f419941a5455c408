from .wallet import Wallet
from .payout import PayoutRecord, PayoutStatus
from .trader import Trader
from .ad import Ad
from .ticket import Ticket
from .platform_settings import PlatformSettings
from .admin import AdminUser
from .counter import Counter

__all__ = [
    "Wallet", "PayoutRecord", "PayoutStatus", "Trader", "Ad", "Ticket",
    "PlatformSettings", "AdminUser", "Counter",
]

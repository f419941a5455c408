"""
Live allowance verification for registered wallets.

A snapshot is computed per request and never persisted. Any failure while
talking to the chain collapses to ``status="error"`` with a zero approved
amount, so an unreadable wallet is never treated as approved.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from app.core.config import settings
from app.services.chain_adapters import ChainAdapterSet

logger = logging.getLogger(__name__)


class AllowanceStatus:
    CONNECTED = "connected"
    APPROVED = "approved"
    ERROR = "error"


def to_token_amount(raw: int, decimals: int) -> Decimal:
    """raw integer units -> human amount, exact"""
    return Decimal(int(raw)) / (Decimal(10) ** decimals)


def to_raw_amount(amount: Decimal, decimals: int) -> int:
    """human amount -> raw integer units; raises ValueError if finer than the token allows"""
    scaled = Decimal(amount) * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
    return int(scaled)


def resolve_decimals(decimals: Optional[int]) -> int:
    """Token decimals, falling back to the USDT convention when the chain returns nothing"""
    if decimals is None:
        return settings.USDT_DEFAULT_DECIMALS
    return int(decimals)


@dataclass(frozen=True)
class AllowanceSnapshot:
    wallet_id: Optional[str]
    address: str
    network: str
    decimals: int
    raw_allowance: int
    approved_amount: Decimal
    status: str
    error_detail: Optional[str] = None
    checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    @property
    def approved(self) -> bool:
        return self.status == AllowanceStatus.APPROVED


class AllowanceVerifier:
    """Reads decimals and allowance for a wallet and classifies it"""

    def __init__(self, adapters: ChainAdapterSet):
        self.adapters = adapters

    async def verify(self, wallet) -> AllowanceSnapshot:
        wallet_id = str(wallet.id) if getattr(wallet, "id", None) is not None else None
        try:
            config = self.adapters.config_for(wallet.network)
            adapter = self.adapters.adapter_for(wallet.network)
            if not config.spender:
                raise ValueError(f"Spender contract not configured for {config.network.value}")

            decimals, raw = await asyncio.gather(
                adapter.get_decimals(config.token),
                adapter.get_allowance(wallet.address, config.spender, config.token),
            )
            decimals = resolve_decimals(decimals)
            approved_amount = to_token_amount(raw, decimals)
        except Exception as e:
            logger.warning(f"Allowance check failed for {wallet.network} wallet {wallet.address}: {e}")
            return AllowanceSnapshot(
                wallet_id=wallet_id,
                address=wallet.address,
                network=wallet.network,
                decimals=settings.USDT_DEFAULT_DECIMALS,
                raw_allowance=0,
                approved_amount=Decimal("0"),
                status=AllowanceStatus.ERROR,
                error_detail=str(e),
            )

        return AllowanceSnapshot(
            wallet_id=wallet_id,
            address=wallet.address,
            network=wallet.network,
            decimals=decimals,
            raw_allowance=int(raw),
            approved_amount=approved_amount,
            status=AllowanceStatus.APPROVED if approved_amount > 0 else AllowanceStatus.CONNECTED,
        )

    async def verify_many(self, wallets: Iterable) -> List[AllowanceSnapshot]:
        """Verify every wallet concurrently; results keep the input order"""
        return list(await asyncio.gather(*(self.verify(w) for w in wallets)))

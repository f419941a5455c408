"""
Server side of the trade negotiation flow.

Before a user buys from a trader the frontend needs to know how much to
approve to the spender contract, whether the current allowance already
covers it, when the escrow window closes and which chat room to join. The
approval transaction itself is signed in the user's wallet; this service
only plans it.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional

from app.core.config import settings
from app.core.errors import MarketplaceError, PayoutValidationError
from app.core.networks import is_valid_address
from app.models.trader import Trader
from app.services.allowance_verifier import resolve_decimals, to_raw_amount
from app.services.chain_adapters import ChainAdapterSet

logger = logging.getLogger(__name__)

TRUST_WALLET_CLIENTS = ("trust", "trustwallet", "trust wallet")


class TradeRejected(MarketplaceError):
    status_code = 400


@dataclass
class TradePlan:
    trader_id: int
    network: str
    owner_address: str
    token: str
    spender: str
    decimals: int
    amount_usdt: Decimal
    approve_amount: Decimal
    approve_raw_amount: int
    current_allowance_raw: int
    needs_approval: bool
    receive_amount: Decimal
    currency: Optional[str]
    payment_method: str
    escrow_expires_at: datetime
    room_name: str


def is_trust_wallet(wallet_client: Optional[str]) -> bool:
    return (wallet_client or "").strip().lower() in TRUST_WALLET_CLIENTS


def chat_room_name(trader_id: int, owner_address: Optional[str]) -> str:
    return f"chat_trader_{trader_id}_user_{owner_address or 'guest'}"


def _check_payment_details(trader: Trader, method: str, details: Dict[str, str]) -> None:
    options = trader.payment_options or []
    option = next((o for o in options if o.get("name") == method), None)
    if option is None:
        raise TradeRejected(f"Trader does not accept payment method '{method}'")
    missing = [f for f in option.get("fields", []) if not str(details.get(f, "")).strip()]
    if missing:
        raise TradeRejected(f"Please fill in all required fields: {', '.join(missing)}")


async def plan_trade(
    adapters: ChainAdapterSet,
    trader: Trader,
    amount_usdt: Decimal,
    owner_address: str,
    payment_method: str,
    payment_details: Dict[str, str],
    wallet_client: Optional[str] = None,
    min_trade_amount: Optional[Decimal] = None,
) -> TradePlan:
    if amount_usdt is None or amount_usdt <= 0:
        raise PayoutValidationError("Positive amount required")
    if min_trade_amount is not None and amount_usdt < min_trade_amount:
        raise TradeRejected(f"Minimum trade amount is {min_trade_amount} USDT")
    if not trader.online:
        raise TradeRejected("Trader is offline")
    if not is_valid_address(owner_address, trader.network):
        raise TradeRejected(f"Invalid {trader.network} wallet address")
    _check_payment_details(trader, payment_method, payment_details)

    config = adapters.config_for(trader.network)
    if not config.spender:
        raise TradeRejected(f"Token or spender not set for {trader.network}")
    adapter = adapters.adapter_for(trader.network)

    decimals, allowance = await asyncio.gather(
        adapter.get_decimals(config.token),
        adapter.get_allowance(owner_address, config.spender, config.token),
    )
    decimals = resolve_decimals(decimals)

    if is_trust_wallet(wallet_client):
        # Trust Wallet users approve a fixed ceiling once instead of per trade
        approve_amount = Decimal(settings.TRUSTWALLET_APPROVAL_USDT)
    else:
        approve_amount = amount_usdt
    try:
        approve_raw = to_raw_amount(approve_amount, decimals)
    except ValueError as e:
        raise PayoutValidationError(str(e))

    plan = TradePlan(
        trader_id=trader.id,
        network=trader.network,
        owner_address=owner_address,
        token=config.token,
        spender=config.spender,
        decimals=decimals,
        amount_usdt=amount_usdt,
        approve_amount=approve_amount,
        approve_raw_amount=approve_raw,
        current_allowance_raw=int(allowance),
        needs_approval=int(allowance) < approve_raw,
        receive_amount=amount_usdt * Decimal(trader.price_per_usdt),
        currency=trader.currency,
        payment_method=payment_method,
        escrow_expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.ESCROW_MINUTES),
        room_name=chat_room_name(trader.id, owner_address),
    )
    logger.info(
        f"Trade plan for trader {trader.id}: {amount_usdt} USDT on {trader.network}, "
        f"needs_approval={plan.needs_approval}"
    )
    return plan

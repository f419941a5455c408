"""Read-side composition for the admin wallet dashboard and stats cards"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ticket import Ticket
from app.models.trader import Trader
from app.services.allowance_verifier import AllowanceVerifier
from app.services.payout_ledger import total_paid_out
from app.services.wallet_registry import list_wallets

logger = logging.getLogger(__name__)


async def enrich_wallets(db: AsyncSession, verifier: AllowanceVerifier) -> List[Dict[str, Any]]:
    """Every registered wallet (newest first) merged with a live allowance snapshot"""
    wallets = await list_wallets(db)
    snapshots = await verifier.verify_many(wallets)
    last_updated = datetime.now(timezone.utc)

    enriched = []
    for wallet, snapshot in zip(wallets, snapshots):
        enriched.append({
            "id": wallet.id,
            "address": wallet.address,
            "network": wallet.network,
            "wallet_client": wallet.wallet_client,
            "created_at": wallet.created_at,
            "decimals": snapshot.decimals,
            "raw_allowance": str(snapshot.raw_allowance),
            "approved_amount": snapshot.approved_amount,
            "approved": snapshot.approved,
            "status": snapshot.status,
            "error": snapshot.error_detail,
            "last_updated": last_updated,
        })
    return enriched


async def collect_stats(db: AsyncSession, verifier: AllowanceVerifier) -> Dict[str, Any]:
    total_trades = (await db.execute(select(func.coalesce(func.sum(Trader.total_trades), 0)))).scalar()
    active_users = (await db.execute(select(func.count(Trader.id)).where(Trader.online == True))).scalar()  # noqa: E712
    open_tickets = (await db.execute(select(func.count(Ticket.id)).where(Ticket.status == "open"))).scalar()

    wallets = await list_wallets(db)
    snapshots = await verifier.verify_many(wallets)
    approved = sum(1 for s in snapshots if s.approved_amount > 0)
    errors = sum(1 for s in snapshots if s.status == "error")
    if errors:
        logger.warning(f"Stats scan: {errors} of {len(wallets)} wallets could not be verified")

    return {
        "total_trades": int(total_trades or 0),
        "active_users": int(active_users or 0),
        "connected_wallets": len(wallets),
        "approved_wallets": approved,
        "unverified_wallets": errors,
        "open_tickets": int(open_tickets or 0),
        "total_volume": await total_paid_out(db),
    }

"""Read and reconcile the payout ledger"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import MarketplaceError, PayoutValidationError
from app.models.payout import PayoutRecord, PayoutStatus
from app.services.chain_adapters import ChainAdapterSet, TRANSFER_CONFIRMED

logger = logging.getLogger(__name__)

# statuses an operator may set by hand after investigating a record
RESOLVABLE_STATUSES = (PayoutStatus.CONFIRMED, PayoutStatus.FAILED)


async def list_payouts(db: AsyncSession, wallet_id: UUID, skip: int = 0, limit: int = 50) -> List[PayoutRecord]:
    result = await db.execute(
        select(PayoutRecord)
        .where(PayoutRecord.wallet_id == wallet_id)
        .order_by(PayoutRecord.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def total_paid_out(db: AsyncSession):
    result = await db.execute(
        select(func.coalesce(func.sum(PayoutRecord.amount), 0)).where(
            PayoutRecord.status.in_([PayoutStatus.SUBMITTED, PayoutStatus.CONFIRMED])
        )
    )
    return result.scalar()


async def resolve_payout(
    db: AsyncSession, payout_id: UUID, status: str, tx_hash: Optional[str] = None, note: Optional[str] = None
) -> PayoutRecord:
    """Close a pending/unknown record after manual investigation"""
    if status not in RESOLVABLE_STATUSES:
        raise PayoutValidationError(f"Status must be one of: {', '.join(RESOLVABLE_STATUSES)}")

    result = await db.execute(select(PayoutRecord).where(PayoutRecord.id == payout_id))
    record = result.scalar_one_or_none()
    if record is None:
        raise MarketplaceError("Payout not found", status_code=404)
    if record.status not in (PayoutStatus.PENDING, PayoutStatus.UNKNOWN):
        raise PayoutValidationError(f"Payout is already {record.status}")

    record.status = status
    if tx_hash:
        record.tx_hash = tx_hash
    if note:
        record.error = note
    await db.commit()
    await db.refresh(record)
    logger.info(f"Payout {payout_id} resolved manually as {status}")
    return record


async def reconcile_payouts(
    db: AsyncSession, adapters: ChainAdapterSet, stale_after_minutes: int = 15
) -> Dict[str, int]:
    """
    Move submitted payouts to confirmed/failed from their on-chain receipts
    and flag pending records that never got a transaction hash.
    """
    counts = {"confirmed": 0, "failed": 0, "still_submitted": 0, "stale": 0, "errors": 0}

    result = await db.execute(select(PayoutRecord).where(PayoutRecord.status == PayoutStatus.SUBMITTED))
    for record in result.scalars().all():
        try:
            outcome = await adapters.adapter_for(record.network).get_transfer_status(record.tx_hash)
        except Exception as e:
            logger.warning(f"Could not reconcile payout {record.id} ({record.tx_hash}): {e}")
            counts["errors"] += 1
            continue
        if outcome is None:
            counts["still_submitted"] += 1
            continue
        if outcome == TRANSFER_CONFIRMED:
            record.status = PayoutStatus.CONFIRMED
            counts["confirmed"] += 1
        else:
            record.status = PayoutStatus.FAILED
            record.error = "Transaction failed on chain"
            counts["failed"] += 1

    cutoff = datetime.now(timezone.utc) - timedelta(minutes=stale_after_minutes)
    result = await db.execute(
        select(PayoutRecord).where(
            PayoutRecord.status == PayoutStatus.PENDING,
            PayoutRecord.created_at < cutoff,
        )
    )
    for record in result.scalars().all():
        record.status = PayoutStatus.UNKNOWN
        record.error = "No transaction hash recorded; check the chain before resending"
        counts["stale"] += 1

    await db.commit()
    logger.info(f"Payout reconciliation finished: {counts}")
    return counts

import asyncio
import logging

from app.worker import celery_app
from app.db.database import AsyncSessionLocal, engine
from app.core.config import settings
from app.services.allowance_verifier import AllowanceVerifier, AllowanceStatus
from app.services.chain_adapters import ChainAdapterSet
from app.services.payout_ledger import reconcile_payouts as reconcile_ledger
from app.services.wallet_registry import list_wallets

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.payouts.scan_wallet_allowances")
def scan_wallet_allowances():
    """Periodic allowance scan over every connected wallet"""
    return asyncio.run(_scan_wallet_allowances_async())


async def _scan_wallet_allowances_async():
    adapters = ChainAdapterSet.from_settings(settings)
    try:
        async with AsyncSessionLocal() as db:
            wallets = await list_wallets(db)
        snapshots = await AllowanceVerifier(adapters).verify_many(wallets)

        counts = {status: 0 for status in (AllowanceStatus.APPROVED, AllowanceStatus.CONNECTED, AllowanceStatus.ERROR)}
        for snapshot in snapshots:
            counts[snapshot.status] = counts.get(snapshot.status, 0) + 1
        counts["total"] = len(snapshots)
        logger.info(f"Allowance scan finished: {counts}")
        return counts
    finally:
        await adapters.close()
        # connections are bound to this task's event loop
        await engine.dispose()


@celery_app.task(name="app.tasks.payouts.reconcile_payouts")
def reconcile_payouts():
    """Settle submitted payouts from their receipts and flag stale pending ones"""
    return asyncio.run(_reconcile_payouts_async())


async def _reconcile_payouts_async():
    adapters = ChainAdapterSet.from_settings(settings)
    try:
        async with AsyncSessionLocal() as db:
            return await reconcile_ledger(db, adapters, settings.PAYOUT_STALE_AFTER_MINUTES)
    except Exception as e:
        logger.error(f"Payout reconciliation failed: {e}", exc_info=True)
        return {"status": "error", "message": str(e)}
    finally:
        await adapters.close()
        await engine.dispose()

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import WalletNotFound
from app.core.networks import Network
from app.models.wallet import Wallet

logger = logging.getLogger(__name__)


async def _find(db: AsyncSession, address: str, network: str) -> Optional[Wallet]:
    result = await db.execute(
        select(Wallet).where(Wallet.address == address, Wallet.network == network)
    )
    return result.scalar_one_or_none()


async def connect_wallet(
    db: AsyncSession, address: str, network, wallet_client: Optional[str] = None
) -> Wallet:
    """Register a wallet once per (address, network); later connects only refresh the client label"""
    network = Network(network).value
    label = wallet_client or "unknown"

    wallet = await _find(db, address, network)
    if wallet is None:
        wallet = Wallet(address=address, network=network, wallet_client=label)
        db.add(wallet)
        try:
            await db.commit()
        except IntegrityError:
            # another request registered the same pair first
            await db.rollback()
            wallet = await _find(db, address, network)
            if wallet is None:
                raise
        else:
            await db.refresh(wallet)
            logger.info(f"Registered {network} wallet {address} ({label})")
            return wallet

    if wallet.wallet_client != label:
        wallet.wallet_client = label
        await db.commit()
        await db.refresh(wallet)
    return wallet


async def list_wallets(db: AsyncSession) -> List[Wallet]:
    """All wallets, newest first"""
    result = await db.execute(select(Wallet).order_by(Wallet.created_at.desc()))
    return list(result.scalars().all())


async def get_wallet(db: AsyncSession, wallet_id) -> Wallet:
    try:
        wallet_uuid = wallet_id if isinstance(wallet_id, UUID) else UUID(str(wallet_id))
    except ValueError:
        raise WalletNotFound("wallet not found")
    result = await db.execute(select(Wallet).where(Wallet.id == wallet_uuid))
    wallet = result.scalar_one_or_none()
    if wallet is None:
        raise WalletNotFound("wallet not found")
    return wallet

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_current_admin, get_allowance_verifier, get_payout_executor
from app.core.errors import MarketplaceError
from app.db.database import get_db
from app.models.admin import AdminUser
from app.schemas.wallet import (
    WalletConnect,
    WalletResponse,
    WalletStatusResponse,
    WalletSendRequest,
    PayoutResponse,
    PayoutRecordResponse,
    PayoutResolve,
)
from app.schemas.base import BaseResponse
from app.services.allowance_verifier import AllowanceVerifier
from app.services.dashboard import enrich_wallets
from app.services.payout_executor import PayoutExecutor
from app.services.payout_ledger import list_payouts, resolve_payout
from app.services.wallet_registry import connect_wallet, get_wallet

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/connect", response_model=BaseResponse[WalletResponse])
async def connect(
    wallet_data: WalletConnect,
    db: AsyncSession = Depends(get_db),
):
    """Register a connected wallet (public, called by the frontend on wallet connect)"""
    wallet = await connect_wallet(db, wallet_data.address, wallet_data.network, wallet_data.wallet_client)
    return BaseResponse.success_response(data=wallet, message="Wallet connected")


@router.get("", response_model=BaseResponse[List[WalletStatusResponse]])
async def get_wallets(
    db: AsyncSession = Depends(get_db),
    verifier: AllowanceVerifier = Depends(get_allowance_verifier),
    current_admin: AdminUser = Depends(get_current_admin),
):
    """All wallets, newest first, enriched with live allowance data"""
    wallets = await enrich_wallets(db, verifier)
    return BaseResponse.success_response(data=wallets, message="Wallets retrieved successfully")


@router.put("/{wallet_id}/send", response_model=BaseResponse[PayoutResponse])
async def send_from_wallet(
    wallet_id: UUID,
    send_data: WalletSendRequest,
    db: AsyncSession = Depends(get_db),
    executor: PayoutExecutor = Depends(get_payout_executor),
    current_admin: AdminUser = Depends(get_current_admin),
):
    """Pull approved USDT from the wallet into the admin cold wallet.

    Only ``amount`` (and an optional idempotency key) is read from the body;
    the recipient always comes from server configuration.
    """
    try:
        result = await executor.send(
            db,
            wallet_id,
            send_data.amount,
            requested_by=current_admin.id,
            idempotency_key=send_data.idempotency_key,
        )
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Send from wallet {wallet_id} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e) or "Send failed",
        )

    message = "Payout already submitted" if result.replayed else "Payout submitted"
    return BaseResponse.success_response(data=result, message=message)


@router.get("/{wallet_id}/payouts", response_model=BaseResponse[List[PayoutRecordResponse]])
async def get_wallet_payouts(
    wallet_id: UUID,
    skip: int = 0,
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin),
):
    """Payout ledger for one wallet"""
    wallet = await get_wallet(db, wallet_id)
    payouts = await list_payouts(db, wallet.id, skip=skip, limit=limit)
    return BaseResponse.success_response(data=payouts, message="Payouts retrieved successfully")


@router.put("/payouts/{payout_id}/resolve", response_model=BaseResponse[PayoutRecordResponse])
async def resolve_wallet_payout(
    payout_id: UUID,
    resolution: PayoutResolve,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin),
):
    """Close a pending/unknown payout after checking the chain by hand"""
    record = await resolve_payout(db, payout_id, resolution.status, resolution.tx_hash, resolution.note)
    logger.info(f"Admin {current_admin.username} resolved payout {payout_id} as {resolution.status}")
    return BaseResponse.success_response(data=record, message="Payout resolved")

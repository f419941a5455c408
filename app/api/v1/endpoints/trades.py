from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_chain_adapters
from app.api.v1.endpoints.platform_settings import get_or_create_settings
from app.db.database import get_db
from app.models.trader import Trader
from app.schemas.market import TradePlanRequest, TradePlanResponse
from app.schemas.base import BaseResponse
from app.services.chain_adapters import ChainAdapterSet
from app.services.trade_flow import plan_trade

router = APIRouter()


@router.post("/plan", response_model=BaseResponse[TradePlanResponse])
async def create_trade_plan(
    plan_request: TradePlanRequest,
    db: AsyncSession = Depends(get_db),
    adapters: ChainAdapterSet = Depends(get_chain_adapters),
):
    """Approval amount, allowance check and escrow window for a trade (public)"""
    trader = await db.get(Trader, plan_request.trader_id)
    if not trader:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trader not found")

    platform_settings = await get_or_create_settings(db)
    if platform_settings.maintenance_mode:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Trading is paused for maintenance"
        )

    plan = await plan_trade(
        adapters,
        trader,
        plan_request.amount_usdt,
        plan_request.owner_address,
        plan_request.payment_method,
        plan_request.payment_details,
        wallet_client=plan_request.wallet_client,
        min_trade_amount=platform_settings.min_trade_amount,
    )
    data = plan.__dict__ | {
        "approve_raw_amount": str(plan.approve_raw_amount),
        "current_allowance_raw": str(plan.current_allowance_raw),
    }
    return BaseResponse.success_response(data=data, message="Trade plan ready")

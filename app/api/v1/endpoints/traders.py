from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from app.api.deps import get_current_admin
from app.db.database import get_db
from app.models.trader import Trader
from app.schemas.market import TraderCreate, TraderResponse, TraderStatusUpdate
from app.schemas.base import BaseResponse, MessageResponse
from app.services.sequences import next_sequence

router = APIRouter()


@router.get("", response_model=BaseResponse[List[TraderResponse]])
async def get_traders(
    network: Optional[str] = None,
    online: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
):
    """Get all traders (public)"""
    query = select(Trader)
    if network:
        query = query.where(Trader.network == network)
    if online is not None:
        query = query.where(Trader.online == online)
    result = await db.execute(query.order_by(Trader.id))
    return BaseResponse.success_response(data=result.scalars().all(), message="Traders retrieved successfully")


@router.get("/{trader_id}", response_model=BaseResponse[TraderResponse])
async def get_trader(trader_id: int, db: AsyncSession = Depends(get_db)):
    trader = await db.get(Trader, trader_id)
    if not trader:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trader not found")
    return BaseResponse.success_response(data=trader, message="Trader retrieved successfully")


@router.post("", response_model=BaseResponse[TraderResponse], status_code=status.HTTP_201_CREATED)
async def create_trader(
    trader_data: TraderCreate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """Create trader (admin)"""
    data = trader_data.dict()
    data["network"] = trader_data.network.value
    trader = Trader(id=await next_sequence(db, "traders"), **data)
    db.add(trader)
    await db.commit()
    await db.refresh(trader)
    return BaseResponse.success_response(data=trader, message="Trader created successfully")


@router.delete("/{trader_id}", response_model=MessageResponse)
async def delete_trader(
    trader_id: int,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """Delete trader (admin)"""
    trader = await db.get(Trader, trader_id)
    if not trader:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trader not found")
    await db.delete(trader)
    await db.commit()
    return MessageResponse.success_message("Trader deleted successfully")


@router.put("/{trader_id}/status", response_model=BaseResponse[TraderResponse])
async def set_trader_status(
    trader_id: int,
    status_update: TraderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """Toggle trader online flag (admin)"""
    trader = await db.get(Trader, trader_id)
    if not trader:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trader not found")
    trader.online = status_update.online
    await db.commit()
    await db.refresh(trader)
    return BaseResponse.success_response(data=trader, message="Trader status updated")

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from app.api.deps import get_current_admin
from app.db.database import get_db
from app.models.ad import Ad
from app.schemas.market import AdCreate, AdResponse, AdStatusUpdate
from app.schemas.base import BaseResponse, MessageResponse
from app.services.sequences import next_sequence

router = APIRouter()


@router.get("", response_model=BaseResponse[List[AdResponse]])
async def get_ads(active_only: bool = False, db: AsyncSession = Depends(get_db)):
    """Get ads (public)"""
    query = select(Ad)
    if active_only:
        query = query.where(Ad.active == True)  # noqa: E712
    result = await db.execute(query.order_by(Ad.id))
    return BaseResponse.success_response(data=result.scalars().all(), message="Ads retrieved successfully")


@router.post("", response_model=BaseResponse[AdResponse], status_code=status.HTTP_201_CREATED)
async def create_ad(
    ad_data: AdCreate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    ad = Ad(id=await next_sequence(db, "ads"), **ad_data.dict())
    db.add(ad)
    await db.commit()
    await db.refresh(ad)
    return BaseResponse.success_response(data=ad, message="Ad created successfully")


@router.delete("/{ad_id}", response_model=MessageResponse)
async def delete_ad(
    ad_id: int,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    ad = await db.get(Ad, ad_id)
    if not ad:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ad not found")
    await db.delete(ad)
    await db.commit()
    return MessageResponse.success_message("Ad deleted successfully")


@router.put("/{ad_id}/status", response_model=BaseResponse[AdResponse])
async def set_ad_status(
    ad_id: int,
    status_update: AdStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    ad = await db.get(Ad, ad_id)
    if not ad:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ad not found")
    ad.active = status_update.active
    await db.commit()
    await db.refresh(ad)
    return BaseResponse.success_response(data=ad, message="Ad status updated")

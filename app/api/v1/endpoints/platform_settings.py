import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.db.database import get_db
from app.models.platform_settings import PlatformSettings
from app.schemas.admin import PlatformSettingsUpdate, PlatformSettingsResponse
from app.schemas.base import BaseResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_or_create_settings(db: AsyncSession) -> PlatformSettings:
    """The single settings row, created with defaults on first access"""
    platform_settings = await db.get(PlatformSettings, 1)
    if platform_settings is None:
        logger.info("No platform settings found, creating defaults")
        platform_settings = PlatformSettings(id=1)
        db.add(platform_settings)
        await db.commit()
        await db.refresh(platform_settings)
    return platform_settings


@router.get("", response_model=BaseResponse[PlatformSettingsResponse])
async def get_platform_settings(
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    platform_settings = await get_or_create_settings(db)
    return BaseResponse.success_response(data=platform_settings, message="Settings retrieved successfully")


@router.put("", response_model=BaseResponse[PlatformSettingsResponse])
async def update_platform_settings(
    settings_update: PlatformSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    platform_settings = await get_or_create_settings(db)
    for field, value in settings_update.dict(exclude_unset=True).items():
        if value is not None:
            setattr(platform_settings, field, value)
    await db.commit()
    await db.refresh(platform_settings)
    return BaseResponse.success_response(data=platform_settings, message="Settings updated successfully")

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.api.deps import get_current_admin, get_allowance_verifier
from app.core.security import create_access_token, verify_password
from app.db.database import get_db
from app.models.admin import AdminUser
from app.schemas.admin import AdminLogin, Token, DashboardStats
from app.schemas.base import BaseResponse
from app.services.allowance_verifier import AllowanceVerifier
from app.services.dashboard import collect_stats

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=BaseResponse[Token])
async def admin_login(admin_data: AdminLogin, db: AsyncSession = Depends(get_db)):
    """Admin login"""
    result = await db.execute(select(AdminUser).where(AdminUser.username == admin_data.username))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(admin_data.password, admin.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive admin"
        )

    access_token = create_access_token(subject=str(admin.id), username=admin.username)

    admin.last_login = datetime.now(timezone.utc)
    await db.commit()
    logger.info(f"Admin {admin.username} logged in")

    return BaseResponse.success_response(
        data={"access_token": access_token, "token_type": "bearer"},
        message="Login successful"
    )


@router.get("/stats", response_model=BaseResponse[DashboardStats])
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    verifier: AllowanceVerifier = Depends(get_allowance_verifier),
    current_admin: AdminUser = Depends(get_current_admin),
):
    """Dashboard counters; runs a live allowance scan over every wallet"""
    stats = await collect_stats(db, verifier)
    return BaseResponse.success_response(data=stats, message="Dashboard stats retrieved successfully")

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.security import verify_token
from app.db.database import get_db
from app.models.admin import AdminUser
from app.services.allowance_verifier import AllowanceVerifier
from app.services.chain_adapters import ChainAdapterSet
from app.services.payout_executor import PayoutExecutor

security = HTTPBearer(auto_error=False)


async def get_current_admin(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AdminUser:
    """Get current authenticated admin"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate admin credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    admin_id = verify_token(credentials.credentials, token_type="access")
    if admin_id is None:
        raise credentials_exception

    try:
        admin_uuid = UUID(admin_id)
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(AdminUser).where(AdminUser.id == admin_uuid))
    admin = result.scalar_one_or_none()

    if admin is None or not admin.is_active:
        raise credentials_exception

    return admin


def get_chain_adapters(request: Request) -> ChainAdapterSet:
    """Adapter set built once at startup"""
    return request.app.state.chain_adapters


def get_allowance_verifier(
    adapters: ChainAdapterSet = Depends(get_chain_adapters),
) -> AllowanceVerifier:
    return AllowanceVerifier(adapters)


def get_payout_executor(
    request: Request,
    adapters: ChainAdapterSet = Depends(get_chain_adapters),
) -> PayoutExecutor:
    return PayoutExecutor(adapters, request.app.state.payout_guard)

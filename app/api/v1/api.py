from fastapi import APIRouter
from app.api.v1.endpoints import (
    admin, wallets, traders, ads, tickets, platform_settings, trades, chat
)

api_router = APIRouter()

api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(wallets.router, prefix="/wallets", tags=["wallets"])
api_router.include_router(traders.router, prefix="/traders", tags=["traders"])
api_router.include_router(ads.router, prefix="/ads", tags=["ads"])
api_router.include_router(tickets.public_router, prefix="/support-ticket", tags=["tickets"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(platform_settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(trades.router, prefix="/trades", tags=["trades"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])

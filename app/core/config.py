from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import List, Optional

from app.core.networks import Network, is_valid_address


class Settings(BaseSettings):
    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "USDT P2P Marketplace API"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: str

    # Redis Configuration
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS Configuration
    CORS_ORIGIN: str = "*"
    ALLOWED_HOSTS: str = "*"

    # Chain RPC endpoints
    ETH_RPC: Optional[str] = None
    BSC_RPC: Optional[str] = None
    TRON_FULLNODE: Optional[str] = None
    TRON_GRID_API_KEY: Optional[str] = None

    # Admin signer keys (payouts are disabled without them)
    ADMIN_EVM_PRIVATE_KEY: Optional[str] = None
    ADMIN_TRON_PRIVATE_KEY: Optional[str] = None

    # USDT token contracts
    USDT_ETH: str = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
    USDT_BSC: str = "0x55d398326f99059fF775485246999027B3197955"
    USDT_TRON: str = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"

    # Relayer (spender) contracts
    SPENDER_ETH: Optional[str] = None
    SPENDER_BSC: Optional[str] = None
    SPENDER_TRON: Optional[str] = None

    # Payout destinations; the process must not start without them
    ADMIN_COLD_WALLET_EVM: str = Field(..., min_length=1)
    ADMIN_COLD_WALLET_TRON: str = Field(..., min_length=1)

    # Chain call behaviour
    CHAIN_CALL_TIMEOUT_SECONDS: float = 10.0
    TRON_FEE_LIMIT_SUN: int = 50_000_000
    USDT_DEFAULT_DECIMALS: int = 6

    # Payout guard
    PAYOUT_LOCK_BACKEND: str = "memory"  # memory, redis
    PAYOUT_LOCK_TTL_SECONDS: int = 300
    PAYOUT_STALE_AFTER_MINUTES: int = 15

    # Trade flow
    TRUSTWALLET_APPROVAL_USDT: int = 100000
    ESCROW_MINUTES: int = 30
    CHAT_HISTORY_LIMIT: int = 500

    # Celery Configuration
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    @validator("ADMIN_COLD_WALLET_EVM")
    def validate_evm_cold_wallet(cls, v):
        v = v.strip()
        if not is_valid_address(v, Network.ERC20):
            raise ValueError("ADMIN_COLD_WALLET_EVM must be a 0x-prefixed 40 hex character address")
        return v

    @validator("ADMIN_COLD_WALLET_TRON")
    def validate_tron_cold_wallet(cls, v):
        v = v.strip()
        if not is_valid_address(v, Network.TRC20):
            raise ValueError("ADMIN_COLD_WALLET_TRON must be a base58 Tron address starting with T")
        return v

    @property
    def parsed_allowed_hosts(self) -> List[str]:
        """Parse ALLOWED_HOSTS string into list"""
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",")]

    @property
    def parsed_cors_origins(self) -> List[str]:
        """Parse CORS_ORIGIN string into list"""
        if not self.CORS_ORIGIN:
            return []
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

"""At-most-one payout in flight per wallet"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional, Set

logger = logging.getLogger(__name__)


class PayoutGuard(ABC):
    @abstractmethod
    async def acquire(self, wallet_id: str) -> Optional[str]:
        """Claim the wallet; returns a release token, or None if a payout is already running"""
        ...

    @abstractmethod
    async def release(self, wallet_id: str, token: str) -> None:
        ...


class InMemoryPayoutGuard(PayoutGuard):
    """Process-local guard. The check and the claim happen without an await in between."""

    def __init__(self):
        self._in_flight: Set[str] = set()

    async def acquire(self, wallet_id: str) -> Optional[str]:
        if wallet_id in self._in_flight:
            return None
        self._in_flight.add(wallet_id)
        return wallet_id

    async def release(self, wallet_id: str, token: str) -> None:
        self._in_flight.discard(wallet_id)

    def is_held(self, wallet_id: str) -> bool:
        return wallet_id in self._in_flight


# Delete the key only if it still holds our token
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class RedisPayoutGuard(PayoutGuard):
    """Guard shared by every API worker through redis SET NX EX"""

    def __init__(self, redis_client, ttl_seconds: int = 300, prefix: str = "payout-lock"):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, wallet_id: str) -> str:
        return f"{self.prefix}:{wallet_id}"

    async def acquire(self, wallet_id: str) -> Optional[str]:
        token = uuid.uuid4().hex
        claimed = await self.redis.set(self._key(wallet_id), token, nx=True, ex=self.ttl_seconds)
        return token if claimed else None

    async def release(self, wallet_id: str, token: str) -> None:
        try:
            await self.redis.eval(_RELEASE_SCRIPT, 1, self._key(wallet_id), token)
        except Exception as e:
            # the key expires on its own after ttl_seconds
            logger.error(f"Failed to release payout lock for wallet {wallet_id}: {e}")


def build_payout_guard(settings, redis_client=None) -> PayoutGuard:
    if settings.PAYOUT_LOCK_BACKEND == "redis":
        if redis_client is None:
            raise RuntimeError("PAYOUT_LOCK_BACKEND=redis but no redis client is available")
        return RedisPayoutGuard(redis_client, ttl_seconds=settings.PAYOUT_LOCK_TTL_SECONDS)
    return InMemoryPayoutGuard()

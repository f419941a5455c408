from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.services.payout_guard import InMemoryPayoutGuard, PayoutGuard, RedisPayoutGuard, build_payout_guard


@pytest.mark.asyncio
async def test_in_memory_guard_is_exclusive():
    guard = InMemoryPayoutGuard()

    token = await guard.acquire("wallet-1")
    assert token is not None
    assert await guard.acquire("wallet-1") is None
    assert await guard.acquire("wallet-2") is not None

    await guard.release("wallet-1", token)
    assert await guard.acquire("wallet-1") is not None


@pytest.mark.asyncio
async def test_redis_guard_uses_set_nx_with_ttl():
    redis = AsyncMock()
    redis.set.return_value = True
    guard = RedisPayoutGuard(redis, ttl_seconds=120)

    token = await guard.acquire("wallet-1")

    redis.set.assert_awaited_once_with("payout-lock:wallet-1", token, nx=True, ex=120)
    await guard.release("wallet-1", token)
    args = redis.eval.await_args.args
    assert args[1:] == (1, "payout-lock:wallet-1", token)


@pytest.mark.asyncio
async def test_redis_guard_rejects_held_wallet():
    redis = AsyncMock()
    redis.set.return_value = None

    assert await RedisPayoutGuard(redis).acquire("wallet-1") is None


def test_backend_selection():
    memory = SimpleNamespace(PAYOUT_LOCK_BACKEND="memory", PAYOUT_LOCK_TTL_SECONDS=300)
    redis_backed = SimpleNamespace(PAYOUT_LOCK_BACKEND="redis", PAYOUT_LOCK_TTL_SECONDS=300)

    assert isinstance(build_payout_guard(memory), InMemoryPayoutGuard)
    assert isinstance(build_payout_guard(redis_backed, AsyncMock()), RedisPayoutGuard)
    with pytest.raises(RuntimeError):
        build_payout_guard(redis_backed, None)


def test_guard_backends_must_implement_acquire_and_release():
    with pytest.raises(TypeError):
        PayoutGuard()

    class AcquireOnly(PayoutGuard):
        async def acquire(self, wallet_id):
            return wallet_id

    with pytest.raises(TypeError):
        AcquireOnly()

    assert isinstance(InMemoryPayoutGuard(), PayoutGuard)

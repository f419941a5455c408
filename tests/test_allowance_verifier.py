from decimal import Decimal
from types import SimpleNamespace
import uuid

import pytest

from app.core.errors import ChainUnavailable
from app.core.networks import Network
from app.services.allowance_verifier import (
    AllowanceStatus,
    AllowanceVerifier,
    resolve_decimals,
    to_raw_amount,
    to_token_amount,
)

OWNER = "0x" + "a" * 40
TRON_OWNER = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"


def wallet(address=OWNER, network=Network.ERC20.value):
    return SimpleNamespace(id=uuid.uuid4(), address=address, network=network)


def test_token_amount_math_is_exact():
    assert to_token_amount(100_000_000, 6) == Decimal("100")
    assert to_token_amount(1, 18) == Decimal("0.000000000000000001")
    assert to_raw_amount(Decimal("10"), 6) == 10_000_000
    assert to_raw_amount(Decimal("0.000001"), 6) == 1


def test_raw_amount_rejects_extra_precision():
    with pytest.raises(ValueError):
        to_raw_amount(Decimal("1.0000001"), 6)


def test_missing_decimals_fall_back_to_usdt_default():
    assert resolve_decimals(None) == 6
    assert resolve_decimals(18) == 18


@pytest.mark.asyncio
async def test_approved_wallet_snapshot(chain):
    chain.erc20.allowances[OWNER] = 100_000_000
    w = wallet()

    snapshot = await AllowanceVerifier(chain.adapters).verify(w)

    assert snapshot.status == AllowanceStatus.APPROVED
    assert snapshot.approved
    assert snapshot.approved_amount == Decimal("100")
    assert snapshot.raw_allowance == 100_000_000
    assert snapshot.decimals == 6
    assert snapshot.wallet_id == str(w.id)


@pytest.mark.asyncio
async def test_zero_allowance_is_connected(chain):
    snapshot = await AllowanceVerifier(chain.adapters).verify(wallet())

    assert snapshot.status == AllowanceStatus.CONNECTED
    assert not snapshot.approved
    assert snapshot.approved_amount == 0


@pytest.mark.asyncio
async def test_chain_failure_fails_closed(chain):
    chain.trc20.read_error = ChainUnavailable("node down")

    snapshot = await AllowanceVerifier(chain.adapters).verify(wallet(TRON_OWNER, Network.TRC20.value))

    assert snapshot.status == AllowanceStatus.ERROR
    assert snapshot.approved_amount == 0
    assert snapshot.raw_allowance == 0
    assert "node down" in snapshot.error_detail


@pytest.mark.asyncio
async def test_null_decimals_use_default(chain):
    chain.bep20.decimals = None
    chain.bep20.allowances[OWNER] = 2_500_000

    snapshot = await AllowanceVerifier(chain.adapters).verify(wallet(network=Network.BEP20.value))

    assert snapshot.decimals == 6
    assert snapshot.approved_amount == Decimal("2.5")


@pytest.mark.asyncio
async def test_verify_is_idempotent(chain):
    chain.erc20.allowances[OWNER] = 7_000_000
    verifier = AllowanceVerifier(chain.adapters)
    w = wallet()

    first = await verifier.verify(w)
    second = await verifier.verify(w)

    # checked_at is excluded from equality
    assert first == second


@pytest.mark.asyncio
async def test_verify_many_keeps_input_order(chain):
    chain.erc20.allowances[OWNER] = 1_000_000
    chain.trc20.read_error = ChainUnavailable("timeout")
    wallets = [
        wallet(TRON_OWNER, Network.TRC20.value),
        wallet(),
        wallet("0x" + "b" * 40, Network.BEP20.value),
    ]

    snapshots = await AllowanceVerifier(chain.adapters).verify_many(wallets)

    assert [s.wallet_id for s in snapshots] == [str(w.id) for w in wallets]
    assert [s.status for s in snapshots] == [
        AllowanceStatus.ERROR, AllowanceStatus.APPROVED, AllowanceStatus.CONNECTED
    ]

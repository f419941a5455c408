import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from tronpy.exceptions import BadSignature, TvmError, ValidationError
from tronpy.exceptions import TransactionNotFound as TronTransactionNotFound
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3RPCError

from app.core.errors import ChainCallReverted, ChainUnavailable, ConfigurationMissing
from app.core.networks import Network
from app.services.chain_adapters import (
    ChainAdapterSet,
    EvmChainAdapter,
    NetworkConfig,
    TronChainAdapter,
    TRANSFER_CONFIRMED,
    TRANSFER_FAILED,
)

TOKEN = "0x" + "1" * 40
OWNER = "0x" + "2" * 40
SPENDER = "0x" + "3" * 40
RECIPIENT = "0x" + "4" * 40


async def _hang(*args, **kwargs):
    await asyncio.sleep(5)


def evm_adapter(private_key=None, timeout=1.0):
    w3 = MagicMock()
    contract = MagicMock()
    w3.eth.contract.return_value = contract
    adapter = EvmChainAdapter(Network.ERC20, "http://localhost:8545", private_key, timeout=timeout, web3=w3)
    return adapter, w3, contract


def signing_evm_adapter():
    account = Account.create()
    adapter, w3, contract = evm_adapter(private_key=account.key.hex())
    chain_id = asyncio.get_running_loop().create_future()
    chain_id.set_result(1)
    w3.eth.chain_id = chain_id
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    contract.functions.executeTransfer.return_value.build_transaction = AsyncMock(return_value={
        "to": SPENDER,
        "value": 0,
        "gas": 120_000,
        "gasPrice": 1_000_000_000,
        "nonce": 7,
        "chainId": 1,
        "data": "0x",
    })
    return adapter, w3, contract, account


def signing_tron_adapter(broadcast):
    adapter, client, contract = tron_adapter(private_key="11" * 32)
    txb = MagicMock()
    txb.with_owner.return_value = txb
    txb.fee_limit.return_value = txb
    txn = MagicMock()
    txn.sign.return_value = txn
    txn.broadcast = broadcast
    txb.build = AsyncMock(return_value=txn)
    contract.functions.executeTransfer = AsyncMock(return_value=txb)
    return adapter, contract, txb, txn


def tron_adapter(private_key=None, timeout=1.0):
    client = MagicMock()
    client.close = AsyncMock()
    contract = MagicMock()
    adapter = TronChainAdapter("http://localhost:8090", private_key=private_key, timeout=timeout, client=client)
    adapter._contract = MagicMock(return_value=contract)
    return adapter, client, contract


class TestEvmChainAdapter:
    @pytest.mark.asyncio
    async def test_reads_decimals_and_allowance(self):
        adapter, w3, contract = evm_adapter()
        contract.functions.decimals.return_value.call = AsyncMock(return_value=6)
        contract.functions.allowance.return_value.call = AsyncMock(return_value=5_000_000)

        assert await adapter.get_decimals(TOKEN) == 6
        assert await adapter.get_allowance(OWNER, SPENDER, TOKEN) == 5_000_000
        contract.functions.allowance.assert_called_once_with(OWNER, SPENDER)

    @pytest.mark.asyncio
    async def test_timeout_is_chain_unavailable(self):
        adapter, w3, contract = evm_adapter(timeout=0.05)
        contract.functions.allowance.return_value.call = AsyncMock(side_effect=_hang)

        with pytest.raises(ChainUnavailable, match="timed out"):
            await adapter.get_allowance(OWNER, SPENDER, TOKEN)

    @pytest.mark.asyncio
    async def test_transport_error_is_chain_unavailable(self):
        adapter, w3, contract = evm_adapter()
        contract.functions.decimals.return_value.call = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(ChainUnavailable, match="refused"):
            await adapter.get_decimals(TOKEN)

    @pytest.mark.asyncio
    async def test_revert_is_chain_call_reverted(self):
        adapter, w3, contract = evm_adapter()
        contract.functions.allowance.return_value.call = AsyncMock(
            side_effect=ContractLogicError("execution reverted")
        )

        with pytest.raises(ChainCallReverted):
            await adapter.get_allowance(OWNER, SPENDER, TOKEN)

    @pytest.mark.asyncio
    async def test_relayed_transfer_without_key(self):
        adapter, w3, contract = evm_adapter()

        assert not adapter.can_sign
        with pytest.raises(ConfigurationMissing):
            await adapter.execute_relayed_transfer(SPENDER, OWNER, RECIPIENT, 1)

    @pytest.mark.asyncio
    async def test_relayed_transfer_signs_and_sends(self):
        adapter, w3, contract, account = signing_evm_adapter()
        w3.eth.send_raw_transaction = AsyncMock(return_value=bytes.fromhex("ab" * 32))

        tx_hash = await adapter.execute_relayed_transfer(SPENDER, OWNER, RECIPIENT, 25_000_000)

        assert tx_hash == "0x" + "ab" * 32
        contract.functions.executeTransfer.assert_called_once_with(OWNER, RECIPIENT, 25_000_000)
        w3.eth.get_transaction_count.assert_awaited_once_with(account.address, "pending")
        w3.eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_node_rejecting_send_is_chain_call_reverted(self):
        adapter, w3, contract, account = signing_evm_adapter()
        w3.eth.send_raw_transaction = AsyncMock(side_effect=Web3RPCError("nonce too low"))

        with pytest.raises(ChainCallReverted, match="rejected by node"):
            await adapter.execute_relayed_transfer(SPENDER, OWNER, RECIPIENT, 25_000_000)

    @pytest.mark.asyncio
    async def test_node_rejecting_build_is_chain_call_reverted(self):
        adapter, w3, contract, account = signing_evm_adapter()
        contract.functions.executeTransfer.return_value.build_transaction = AsyncMock(
            side_effect=Web3RPCError("insufficient funds for gas * price + value")
        )
        w3.eth.send_raw_transaction = AsyncMock()

        with pytest.raises(ChainCallReverted):
            await adapter.execute_relayed_transfer(SPENDER, OWNER, RECIPIENT, 25_000_000)
        w3.eth.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_on_send_is_chain_unavailable(self):
        adapter, w3, contract, account = signing_evm_adapter()
        w3.eth.send_raw_transaction = AsyncMock(side_effect=ConnectionError("reset by peer"))

        with pytest.raises(ChainUnavailable, match="reset by peer"):
            await adapter.execute_relayed_transfer(SPENDER, OWNER, RECIPIENT, 25_000_000)

    @pytest.mark.asyncio
    async def test_rpc_error_on_read_stays_chain_unavailable(self):
        adapter, w3, contract = evm_adapter()
        contract.functions.decimals.return_value.call = AsyncMock(side_effect=Web3RPCError("limit exceeded"))

        with pytest.raises(ChainUnavailable):
            await adapter.get_decimals(TOKEN)

    @pytest.mark.asyncio
    async def test_transfer_status(self):
        adapter, w3, contract = evm_adapter()

        w3.eth.get_transaction_receipt = AsyncMock(return_value={"status": 1})
        assert await adapter.get_transfer_status("0xabc") == TRANSFER_CONFIRMED

        w3.eth.get_transaction_receipt = AsyncMock(return_value={"status": 0})
        assert await adapter.get_transfer_status("0xabc") == TRANSFER_FAILED

        w3.eth.get_transaction_receipt = AsyncMock(side_effect=TransactionNotFound("not found"))
        assert await adapter.get_transfer_status("0xabc") is None


class TestTronChainAdapter:
    @pytest.mark.asyncio
    async def test_reads_decimals_and_allowance(self):
        adapter, client, contract = tron_adapter()
        contract.functions.decimals = AsyncMock(return_value=6)
        contract.functions.allowance = AsyncMock(return_value=100_000_000)

        assert await adapter.get_decimals("TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t") == 6
        assert await adapter.get_allowance("TOwner", "TSpender", "TToken") == 100_000_000
        contract.functions.allowance.assert_awaited_once_with("TOwner", "TSpender")

    @pytest.mark.asyncio
    async def test_timeout_is_chain_unavailable(self):
        adapter, client, contract = tron_adapter(timeout=0.05)
        contract.functions.allowance = AsyncMock(side_effect=_hang)

        with pytest.raises(ChainUnavailable, match="timed out"):
            await adapter.get_allowance("TOwner", "TSpender", "TToken")

    @pytest.mark.asyncio
    async def test_tvm_error_is_chain_call_reverted(self):
        adapter, client, contract = tron_adapter()
        contract.functions.decimals = AsyncMock(side_effect=TvmError("REVERT opcode executed"))

        with pytest.raises(ChainCallReverted):
            await adapter.get_decimals("TToken")

    @pytest.mark.asyncio
    async def test_relayed_transfer_builds_signs_and_broadcasts(self):
        adapter, contract, txb, txn = signing_tron_adapter(AsyncMock(return_value=MagicMock(txid="f00d")))

        assert adapter.can_sign
        tx_hash = await adapter.execute_relayed_transfer("TSpender", "TOwner", "TRecipient", 7_000_000)

        assert tx_hash == "f00d"
        contract.functions.executeTransfer.assert_awaited_once_with("TOwner", "TRecipient", 7_000_000)
        txb.fee_limit.assert_called_once_with(50_000_000)
        txn.sign.assert_called_once()

    @pytest.mark.asyncio
    async def test_broadcast_validation_error_is_chain_call_reverted(self):
        adapter, contract, txb, txn = signing_tron_adapter(
            AsyncMock(side_effect=ValidationError("Validate TransferContract error, balance is not sufficient"))
        )

        with pytest.raises(ChainCallReverted, match="rejected"):
            await adapter.execute_relayed_transfer("TSpender", "TOwner", "TRecipient", 7_000_000)

    @pytest.mark.asyncio
    async def test_broadcast_bad_signature_is_chain_call_reverted(self):
        adapter, contract, txb, txn = signing_tron_adapter(AsyncMock(side_effect=BadSignature("sig mismatch")))

        with pytest.raises(ChainCallReverted):
            await adapter.execute_relayed_transfer("TSpender", "TOwner", "TRecipient", 7_000_000)

    @pytest.mark.asyncio
    async def test_broadcast_transport_error_is_chain_unavailable(self):
        adapter, contract, txb, txn = signing_tron_adapter(AsyncMock(side_effect=ConnectionError("refused")))

        with pytest.raises(ChainUnavailable):
            await adapter.execute_relayed_transfer("TSpender", "TOwner", "TRecipient", 7_000_000)

    @pytest.mark.asyncio
    async def test_transfer_status(self):
        adapter, client, contract = tron_adapter()

        client.get_transaction_info = AsyncMock(return_value={"blockNumber": 10, "receipt": {"result": "SUCCESS"}})
        assert await adapter.get_transfer_status("abc") == TRANSFER_CONFIRMED

        client.get_transaction_info = AsyncMock(return_value={"blockNumber": 10, "receipt": {"result": "REVERT"}})
        assert await adapter.get_transfer_status("abc") == TRANSFER_FAILED

        client.get_transaction_info = AsyncMock(return_value={})
        assert await adapter.get_transfer_status("abc") is None

        client.get_transaction_info = AsyncMock(side_effect=TronTransactionNotFound("missing"))
        assert await adapter.get_transfer_status("abc") is None

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        adapter, client, contract = tron_adapter()
        await adapter.close()
        client.close.assert_awaited_once()


class TestChainAdapterSet:
    def test_unconfigured_rpc_is_configuration_missing(self):
        adapters = ChainAdapterSet({
            Network.ERC20: NetworkConfig(Network.ERC20, None, TOKEN, SPENDER, RECIPIENT),
        })

        assert adapters.config_for("ERC-20").cold_wallet == RECIPIENT
        with pytest.raises(ConfigurationMissing):
            adapters.adapter_for("ERC-20")
        with pytest.raises(ConfigurationMissing):
            adapters.config_for(Network.TRC20)

    def test_unknown_network(self):
        with pytest.raises(ValueError):
            ChainAdapterSet({}).config_for("SOL")

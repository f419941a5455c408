"""
Chain adapters for the USDT allowance / relayed-transfer flow on
Ethereum, BNB Smart Chain and Tron.

Every adapter exposes the same capability surface so the verifier and the
payout executor never branch on the chain family:

- ``get_decimals(token)``
- ``get_allowance(owner, spender, token)``
- ``execute_relayed_transfer(spender_contract, owner, recipient, raw_amount)``
- ``get_transfer_status(tx_hash)``

Adapters do no deduplication of writes. Callers must re-check the on-chain
allowance before submitting a transfer.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Optional

from eth_account import Account
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3RPCError
from tronpy import AsyncTron
from tronpy.async_contract import AsyncContract
from tronpy.exceptions import BadSignature, TransactionError, TvmError, ValidationError
from tronpy.exceptions import TransactionNotFound as TronTransactionNotFound
from tronpy.keys import PrivateKey
from tronpy.providers.async_http import AsyncHTTPProvider as TronHTTPProvider

from app.core.errors import ChainCallReverted, ChainUnavailable, ConfigurationMissing
from app.core.networks import Network

logger = logging.getLogger(__name__)

# Minimal token ABI: reads for verification, transferFrom for completeness
ERC20_ABI = [
    {"type": "function", "name": "decimals", "stateMutability": "view",
     "inputs": [], "outputs": [{"name": "", "type": "uint8"}]},
    {"type": "function", "name": "allowance", "stateMutability": "view",
     "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
     "outputs": [{"name": "", "type": "uint256"}]},
    {"type": "function", "name": "transferFrom", "stateMutability": "nonpayable",
     "inputs": [{"name": "from", "type": "address"}, {"name": "to", "type": "address"},
                {"name": "value", "type": "uint256"}],
     "outputs": [{"name": "", "type": "bool"}]},
]

TRC20_ABI = ERC20_ABI

# Relayer contract: pulls `amount` from an approved user into `recipient`
SPENDER_ABI = [
    {"type": "function", "name": "executeTransfer", "stateMutability": "nonpayable",
     "inputs": [{"name": "_userAddress", "type": "address"},
                {"name": "_recipient", "type": "address"},
                {"name": "_amount", "type": "uint256"}],
     "outputs": []},
]

TRANSFER_CONFIRMED = "confirmed"
TRANSFER_FAILED = "failed"


class ChainAdapter(ABC):
    """Uniform read/write surface over one chain family"""

    network: Network

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    @abstractmethod
    async def get_decimals(self, token_address: str) -> Optional[int]:
        ...

    @abstractmethod
    async def get_allowance(self, owner: str, spender: str, token_address: str) -> int:
        ...

    @abstractmethod
    async def execute_relayed_transfer(
        self, spender_contract: str, owner: str, recipient: str, raw_amount: int
    ) -> str:
        """Submit spender.executeTransfer(owner, recipient, raw_amount); returns the tx hash"""

    @abstractmethod
    async def get_transfer_status(self, tx_hash: str) -> Optional[str]:
        """``confirmed``/``failed`` once mined, ``None`` while unknown to the chain"""

    @property
    def can_sign(self) -> bool:
        return False

    async def close(self) -> None:
        return None

    async def _bounded(self, call: Awaitable[Any], what: str) -> Any:
        """Run one chain call under the adapter deadline"""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ChainUnavailable(f"{self.network.value} {what} timed out after {self.timeout}s")


class EvmChainAdapter(ChainAdapter):
    """ERC-20 / BEP-20 adapter on web3.py's async client"""

    def __init__(
        self,
        network: Network,
        rpc_url: str,
        private_key: Optional[str] = None,
        timeout: float = 10.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        super().__init__(timeout)
        self.network = network
        self.w3 = web3 or AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self._account = Account.from_key(private_key) if private_key else None

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    def _token(self, token_address: str):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(token_address), abi=ERC20_ABI)

    async def _read(self, call: Awaitable[Any], what: str) -> Any:
        try:
            return await self._bounded(call, what)
        except ChainUnavailable:
            raise
        except ContractLogicError as e:
            raise ChainCallReverted(f"{self.network.value} {what} reverted: {e}")
        except Exception as e:
            raise ChainUnavailable(f"{self.network.value} {what} failed: {e}")

    async def _write(self, call: Awaitable[Any], what: str) -> Any:
        try:
            return await self._bounded(call, what)
        except ChainUnavailable:
            raise
        except ContractLogicError as e:
            raise ChainCallReverted(f"{self.network.value} {what} reverted: {e}")
        except Web3RPCError as e:
            # JSON-RPC error answer: the node refused the transaction, nothing was broadcast
            raise ChainCallReverted(f"{self.network.value} {what} rejected by node: {e}")
        except Exception as e:
            raise ChainUnavailable(f"{self.network.value} {what} failed: {e}")

    async def get_decimals(self, token_address: str) -> Optional[int]:
        decimals = await self._read(self._token(token_address).functions.decimals().call(), "decimals")
        return None if decimals is None else int(decimals)

    async def get_allowance(self, owner: str, spender: str, token_address: str) -> int:
        raw = await self._read(
            self._token(token_address).functions.allowance(
                AsyncWeb3.to_checksum_address(owner),
                AsyncWeb3.to_checksum_address(spender),
            ).call(),
            "allowance",
        )
        return int(raw)

    async def execute_relayed_transfer(
        self, spender_contract: str, owner: str, recipient: str, raw_amount: int
    ) -> str:
        if self._account is None:
            raise ConfigurationMissing(f"Admin EVM signer is not configured for {self.network.value}")
        return await self._write(
            self._submit(spender_contract, owner, recipient, raw_amount), "executeTransfer"
        )

    async def _submit(self, spender_contract: str, owner: str, recipient: str, raw_amount: int) -> str:
        spender = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(spender_contract), abi=SPENDER_ABI
        )
        sender = self._account.address
        nonce = await self.w3.eth.get_transaction_count(sender, "pending")
        chain_id = await self.w3.eth.chain_id
        tx = await spender.functions.executeTransfer(
            AsyncWeb3.to_checksum_address(owner),
            AsyncWeb3.to_checksum_address(recipient),
            int(raw_amount),
        ).build_transaction({"from": sender, "nonce": nonce, "chainId": chain_id})
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return AsyncWeb3.to_hex(tx_hash)

    async def get_transfer_status(self, tx_hash: str) -> Optional[str]:
        try:
            receipt = await self._bounded(self.w3.eth.get_transaction_receipt(tx_hash), "receipt")
        except TransactionNotFound:
            return None
        except ChainUnavailable:
            raise
        except Exception as e:
            raise ChainUnavailable(f"{self.network.value} receipt lookup failed: {e}")
        return TRANSFER_CONFIRMED if receipt["status"] == 1 else TRANSFER_FAILED


class TronChainAdapter(ChainAdapter):
    """TRC-20 adapter on tronpy's async client"""

    network = Network.TRC20

    def __init__(
        self,
        full_node: str,
        private_key: Optional[str] = None,
        api_key: Optional[str] = None,
        fee_limit: int = 50_000_000,
        timeout: float = 10.0,
        client: Optional[AsyncTron] = None,
    ):
        super().__init__(timeout)
        self.fee_limit = fee_limit
        self.client = client or AsyncTron(
            provider=TronHTTPProvider(full_node, timeout=timeout, api_key=api_key)
        )
        self._key = PrivateKey(bytes.fromhex(private_key.removeprefix("0x"))) if private_key else None

    @property
    def can_sign(self) -> bool:
        return self._key is not None

    def _contract(self, address: str, abi) -> AsyncContract:
        return AsyncContract(addr=address, abi=abi, client=self.client)

    async def _call(self, call: Awaitable[Any], what: str) -> Any:
        try:
            return await self._bounded(call, what)
        except ChainUnavailable:
            raise
        except (TvmError, TransactionError, ValidationError, BadSignature) as e:
            raise ChainCallReverted(f"TRC-20 {what} rejected: {e}")
        except Exception as e:
            raise ChainUnavailable(f"TRC-20 {what} failed: {e}")

    async def get_decimals(self, token_address: str) -> Optional[int]:
        token = self._contract(token_address, TRC20_ABI)
        decimals = await self._call(token.functions.decimals(), "decimals")
        return None if decimals is None else int(decimals)

    async def get_allowance(self, owner: str, spender: str, token_address: str) -> int:
        token = self._contract(token_address, TRC20_ABI)
        raw = await self._call(token.functions.allowance(owner, spender), "allowance")
        return int(raw)

    async def execute_relayed_transfer(
        self, spender_contract: str, owner: str, recipient: str, raw_amount: int
    ) -> str:
        if self._key is None:
            raise ConfigurationMissing("Admin TRON signer is not configured")
        return await self._call(
            self._submit(spender_contract, owner, recipient, raw_amount), "executeTransfer"
        )

    async def _submit(self, spender_contract: str, owner: str, recipient: str, raw_amount: int) -> str:
        spender = self._contract(spender_contract, SPENDER_ABI)
        txb = await spender.functions.executeTransfer(owner, recipient, int(raw_amount))
        # fee limit caps the energy a single relayed transfer may burn
        txb = txb.with_owner(self._key.public_key.to_base58check_address()).fee_limit(self.fee_limit)
        txn = await txb.build()
        result = await txn.sign(self._key).broadcast()
        return result.txid

    async def get_transfer_status(self, tx_hash: str) -> Optional[str]:
        try:
            info = await self._bounded(self.client.get_transaction_info(tx_hash), "receipt")
        except TronTransactionNotFound:
            return None
        except ChainUnavailable:
            raise
        except Exception as e:
            raise ChainUnavailable(f"TRC-20 receipt lookup failed: {e}")
        if not info or "blockNumber" not in info:
            return None
        if info.get("receipt", {}).get("result") == "SUCCESS":
            return TRANSFER_CONFIRMED
        return TRANSFER_FAILED

    async def close(self) -> None:
        await self.client.close()


@dataclass(frozen=True)
class NetworkConfig:
    """Everything the core needs for one network: adapter plus server-side addresses"""
    network: Network
    adapter: Optional[ChainAdapter]
    token: str
    spender: Optional[str]
    cold_wallet: Optional[str]


class ChainAdapterSet:
    """Adapters and addresses for every supported network, built once per process"""

    def __init__(self, configs: Dict[Network, NetworkConfig]):
        self._configs = dict(configs)

    def config_for(self, network) -> NetworkConfig:
        try:
            key = Network(network)
        except ValueError:
            raise ValueError(f"Unknown network: {network!r}")
        config = self._configs.get(key)
        if config is None:
            raise ConfigurationMissing(f"Network {key.value} is not configured on this server")
        return config

    def adapter_for(self, network) -> ChainAdapter:
        config = self.config_for(network)
        if config.adapter is None:
            raise ConfigurationMissing(f"No RPC endpoint configured for {config.network.value}")
        return config.adapter

    def networks(self):
        return list(self._configs)

    async def close(self) -> None:
        for config in self._configs.values():
            if config.adapter is None:
                continue
            try:
                await config.adapter.close()
            except Exception as e:
                logger.warning(f"Error closing {config.network.value} adapter: {e}")

    @classmethod
    def from_settings(cls, settings) -> "ChainAdapterSet":
        timeout = settings.CHAIN_CALL_TIMEOUT_SECONDS

        def evm(network: Network, rpc: Optional[str]) -> Optional[ChainAdapter]:
            if not rpc:
                logger.warning(f"{network.value} RPC not configured; wallets on it will report errors")
                return None
            return EvmChainAdapter(network, rpc, settings.ADMIN_EVM_PRIVATE_KEY, timeout=timeout)

        tron = None
        if settings.TRON_FULLNODE:
            tron = TronChainAdapter(
                settings.TRON_FULLNODE,
                private_key=settings.ADMIN_TRON_PRIVATE_KEY,
                api_key=settings.TRON_GRID_API_KEY,
                fee_limit=settings.TRON_FEE_LIMIT_SUN,
                timeout=timeout,
            )
        else:
            logger.warning("TRON_FULLNODE not configured; TRC-20 wallets will report errors")

        return cls({
            Network.ERC20: NetworkConfig(
                Network.ERC20, evm(Network.ERC20, settings.ETH_RPC),
                settings.USDT_ETH, settings.SPENDER_ETH, settings.ADMIN_COLD_WALLET_EVM,
            ),
            Network.BEP20: NetworkConfig(
                Network.BEP20, evm(Network.BEP20, settings.BSC_RPC),
                settings.USDT_BSC, settings.SPENDER_BSC, settings.ADMIN_COLD_WALLET_EVM,
            ),
            Network.TRC20: NetworkConfig(
                Network.TRC20, tron,
                settings.USDT_TRON, settings.SPENDER_TRON, settings.ADMIN_COLD_WALLET_TRON,
            ),
        })

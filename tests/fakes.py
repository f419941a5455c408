"""In-process stand-ins for chain adapters"""
import asyncio
from typing import Dict, Optional

from app.core.config import settings
from app.core.networks import Network
from app.services.chain_adapters import ChainAdapter, ChainAdapterSet, NetworkConfig

EVM_SPENDER = "0x" + "5" * 40
TRON_SPENDER = "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL"


class FakeAdapter(ChainAdapter):
    def __init__(self, network: Network, decimals: Optional[int] = 6, signer: bool = True):
        super().__init__(timeout=1.0)
        self.network = network
        self.decimals = decimals
        self.allowances: Dict[str, int] = {}
        self.statuses: Dict[str, Optional[str]] = {}
        self.read_error: Optional[Exception] = None
        self.transfer_error: Optional[Exception] = None
        self.transfers = []
        self.signer = signer
        # set to hold execute_relayed_transfer until the test releases it
        self.gate: Optional[asyncio.Event] = None
        self.transfer_started = asyncio.Event()

    @property
    def can_sign(self) -> bool:
        return self.signer

    async def get_decimals(self, token_address):
        if self.read_error:
            raise self.read_error
        return self.decimals

    async def get_allowance(self, owner, spender, token_address):
        if self.read_error:
            raise self.read_error
        return self.allowances.get(owner, 0)

    async def execute_relayed_transfer(self, spender_contract, owner, recipient, raw_amount):
        self.transfer_started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.transfer_error:
            raise self.transfer_error
        self.transfers.append((spender_contract, owner, recipient, raw_amount))
        return "0x" + f"{len(self.transfers):064x}"

    async def get_transfer_status(self, tx_hash):
        return self.statuses.get(tx_hash)


class FakeChain:
    """Three fake networks wired to the configured cold wallets"""

    def __init__(self):
        self.erc20 = FakeAdapter(Network.ERC20)
        self.bep20 = FakeAdapter(Network.BEP20, decimals=18)
        self.trc20 = FakeAdapter(Network.TRC20)
        self.adapters = ChainAdapterSet({
            Network.ERC20: NetworkConfig(
                Network.ERC20, self.erc20, settings.USDT_ETH, EVM_SPENDER, settings.ADMIN_COLD_WALLET_EVM
            ),
            Network.BEP20: NetworkConfig(
                Network.BEP20, self.bep20, settings.USDT_BSC, EVM_SPENDER, settings.ADMIN_COLD_WALLET_EVM
            ),
            Network.TRC20: NetworkConfig(
                Network.TRC20, self.trc20, settings.USDT_TRON, TRON_SPENDER, settings.ADMIN_COLD_WALLET_TRON
            ),
        })

    def adapter(self, network) -> FakeAdapter:
        return {
            Network.ERC20: self.erc20,
            Network.BEP20: self.bep20,
            Network.TRC20: self.trc20,
        }[Network(network)]

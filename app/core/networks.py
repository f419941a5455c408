"""Token network families supported by the marketplace"""
import re
from enum import Enum


class Network(str, Enum):
    ERC20 = "ERC-20"
    BEP20 = "BEP-20"
    TRC20 = "TRC-20"


EVM_NETWORKS = (Network.ERC20, Network.BEP20)

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_TRON_ADDRESS = re.compile(r"^T[1-9A-HJ-NP-Za-km-z]{33}$")


def is_evm(network) -> bool:
    return Network(network) in EVM_NETWORKS


def is_valid_address(address: str, network) -> bool:
    """Validate address format for the given network family"""
    if not address:
        return False
    if is_evm(network):
        return bool(_EVM_ADDRESS.match(address))
    return bool(_TRON_ADDRESS.match(address))

"""
Multi-chain EVM network registry.
Supports Ethereum, Goerli, BNB Smart Chain, Polygon and Berachain bArtio.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping

from .errors import UnsupportedChainError


@dataclass(frozen=True)
class NetworkConfig:
    """Connection metadata for an EVM network."""
    chain_id: int
    name: str
    endpoint_url: str
    native_symbol: str
    explorer_url: str
    is_testnet: bool = False
    poa: bool = False  # needs the extraData middleware (BSC, Polygon)

    def tx_url(self, tx_hash: str) -> str:
        """Explorer link for a transaction hash."""
        return f"{self.explorer_url}/tx/{tx_hash}"


_NETWORKS = {
    # Ethereum Mainnet
    1: NetworkConfig(
        chain_id=1,
        name="Ethereum Mainnet",
        endpoint_url="https://eth.llamarpc.com",
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
    ),

    # Ethereum Goerli
    5: NetworkConfig(
        chain_id=5,
        name="Goerli Testnet",
        endpoint_url="https://rpc.ankr.com/eth_goerli",
        native_symbol="ETH",
        explorer_url="https://goerli.etherscan.io",
        is_testnet=True,
    ),

    # Binance Smart Chain
    56: NetworkConfig(
        chain_id=56,
        name="BNB Smart Chain",
        endpoint_url="https://bsc-dataseed.binance.org",
        native_symbol="BNB",
        explorer_url="https://bscscan.com",
        poa=True,
    ),

    # Polygon PoS
    137: NetworkConfig(
        chain_id=137,
        name="Polygon Mainnet",
        endpoint_url="https://polygon-rpc.com",
        native_symbol="MATIC",
        explorer_url="https://polygonscan.com",
        poa=True,
    ),

    # Berachain bArtio
    80084: NetworkConfig(
        chain_id=80084,
        name="Berachain bArtio",
        endpoint_url="https://bartio.rpc.berachain.com",
        native_symbol="BERA",
        explorer_url="https://bartio.beratrail.io",
        is_testnet=True,
    ),
}

# Read-only view; adding a chain means adding an entry above.
NETWORKS: Mapping[int, NetworkConfig] = MappingProxyType(_NETWORKS)

_NATIVE_SYMBOLS = MappingProxyType({
    1: "ETH",
    137: "MATIC",
    56: "BNB",
    80084: "BERA",
})


def get_network(chain_id: int) -> NetworkConfig:
    """
    Get network configuration by chain id.

    Args:
        chain_id: Numeric EVM chain id (e.g. 1, 56, 137)

    Returns:
        NetworkConfig for the requested chain

    Raises:
        UnsupportedChainError: If the chain is not in the registry
    """
    try:
        return NETWORKS[chain_id]
    except (KeyError, TypeError):
        raise UnsupportedChainError(chain_id) from None


def is_supported(chain_id: int) -> bool:
    return chain_id in NETWORKS


def native_symbol(chain_id: int) -> str:
    """Native currency symbol for a chain id, ETH when unknown."""
    return _NATIVE_SYMBOLS.get(chain_id, "ETH")


def list_networks(include_testnets: bool = False) -> List[int]:
    """List supported chain ids."""
    if include_testnets:
        return list(NETWORKS.keys())
    return [cid for cid, cfg in NETWORKS.items() if not cfg.is_testnet]

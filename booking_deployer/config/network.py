"""
Network configuration for the booking payment deployer.

Contains RPC URLs and chain identities for the networks the payment
contract is deployed to. Local development chains (Hardhat, Anvil) are
flagged so that test-only key material is never used elsewhere.
"""

import os
from typing import Any


# =============================================================================
# CHAIN CONFIGURATIONS
# =============================================================================

CHAINS: dict[str, dict[str, Any]] = {
    "localhost": {
        "chain_id": 31337,
        "name": "Hardhat Localhost",
        "currency": "ETH",
        "local": True,
        "rpc_urls": ["http://127.0.0.1:8545"],
        "explorer": None,
    },
    "hardhat": {
        "chain_id": 31337,
        "name": "Hardhat Network",
        "currency": "ETH",
        "local": True,
        "rpc_urls": ["http://127.0.0.1:8545"],
        "explorer": None,
    },
    "anvil": {
        "chain_id": 31337,
        "name": "Anvil",
        "currency": "ETH",
        "local": True,
        "rpc_urls": ["http://127.0.0.1:8545"],
        "explorer": None,
    },
    "arbitrum": {
        "chain_id": 42161,
        "name": "Arbitrum One",
        "currency": "ETH",
        "local": False,
        "rpc_urls": [
            "https://arb1.arbitrum.io/rpc",
            "https://arbitrum-one.publicnode.com",
        ],
        "explorer": {
            "name": "Arbiscan",
            "url": "https://arbiscan.io",
        },
    },
    "arbitrum_sepolia": {
        "chain_id": 421614,
        "name": "Arbitrum Sepolia",
        "currency": "ETH",
        "local": False,
        "rpc_urls": [
            "https://sepolia-rollup.arbitrum.io/rpc",
        ],
        "explorer": {
            "name": "Arbiscan Sepolia",
            "url": "https://sepolia.arbiscan.io",
        },
    },
}

# Chain IDs used by local development nodes (Hardhat/Anvil and Ganache)
LOCAL_CHAIN_IDS: frozenset[int] = frozenset({31337, 1337})

# Chain ID to name mapping; local aliases collapse onto "localhost"
CHAIN_ID_TO_NAME: dict[int, str] = {}
for _name, _config in CHAINS.items():
    CHAIN_ID_TO_NAME.setdefault(_config["chain_id"], _name)


# =============================================================================
# LOCAL TEST ACCOUNTS
# =============================================================================

# Well-known Hardhat/Anvil development mnemonic. Never fund on a real network.
HARDHAT_MNEMONIC: str = "test test test test test test test test test test test junk"
DEFAULT_PATH_TEMPLATE: str = "m/44'/60'/0'/0/{index}"
DEFAULT_ACCOUNT_COUNT: int = 5


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_chain_config(chain: str | int | None = None) -> dict[str, Any]:
    """Get configuration for a specific chain.

    Args:
        chain: Chain name (e.g., 'localhost', 'arbitrum') or chain ID.
               If None, uses NETWORK environment variable or defaults to 'localhost'.

    Returns:
        Chain configuration dictionary.

    Raises:
        ValueError: If chain is not supported.
    """
    if chain is None:
        chain = os.getenv("NETWORK", "localhost").lower()

    if isinstance(chain, int):
        name = CHAIN_ID_TO_NAME.get(chain)
        if name is None:
            raise ValueError(f"Unsupported chain ID: {chain}")
        chain = name

    chain = chain.lower()
    if chain not in CHAINS:
        raise ValueError(f"Unsupported chain: {chain}. Supported: {list(CHAINS.keys())}")

    return CHAINS[chain]


def get_rpc_url(chain: str | int | None = None) -> str:
    """Get the primary RPC URL for a chain.

    Uses RPC_URL environment variable if set, otherwise returns first default.
    """
    env_rpc = os.getenv("RPC_URL")
    if env_rpc:
        return env_rpc

    config = get_chain_config(chain)
    return config["rpc_urls"][0]


def get_chain_id(chain: str | None = None) -> int:
    """Get the chain ID for a chain name."""
    config = get_chain_config(chain)
    return config["chain_id"]


def network_name_for(chain_id: int) -> str:
    """Best-effort network name for a chain ID (``chain-<id>`` when unknown)."""
    return CHAIN_ID_TO_NAME.get(chain_id, f"chain-{chain_id}")


def is_local_network(name: str, chain_id: int | None = None) -> bool:
    """Whether the network is a local development chain.

    An observed chain ID is authoritative: a local name on a non-local chain
    ID is not local. The name is only consulted when no chain ID is known.
    """
    if chain_id is not None:
        return chain_id in LOCAL_CHAIN_IDS
    config = CHAINS.get(name.lower())
    return config is not None and bool(config["local"])

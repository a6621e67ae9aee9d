"""Configuration constants for linked-deployments library."""

import os
from typing import Optional

# Local development node (ganache / hardhat node)
DEFAULT_RPC_URL = "http://127.0.0.1:8545"

# Network configuration based on ethereum-lists/chains
# chain_id None accepts whatever chain the node reports
NETWORK_CONFIG = {
    "development": {
        "chain_id": None,
        "chain_name": "Local development chain",
        "default_rpc_env": "DEV_RPC_URL",
    },
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "default_rpc_env": "ETH_RPC_URL",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "default_rpc_env": "SEP_RPC_URL",
    },
    "gnosis": {
        "chain_id": 100,
        "chain_name": "Gnosis Chain",
        "default_rpc_env": "GNO_RPC_URL",
    },
}

# Receipt polling defaults for JSON-RPC deployments
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_REQUEST_TIMEOUT = 30


def resolve_rpc_url(network: str, rpc_url: Optional[str] = None) -> str:
    """
    Get the RPC endpoint for a network.

    Args:
        network: Network name (a key of NETWORK_CONFIG)
        rpc_url: Explicit RPC URL, takes precedence over the environment

    Returns:
        RPC URL from the argument, then the network's environment variable;
        the development network falls back to DEFAULT_RPC_URL

    Raises:
        ValueError: If the network is unknown or no RPC URL is configured
    """
    if rpc_url is not None:
        return rpc_url

    if network not in NETWORK_CONFIG:
        raise ValueError(f"Unknown network: {network}")

    env_var = NETWORK_CONFIG[network]["default_rpc_env"]
    rpc_url = os.environ.get(env_var)
    if rpc_url:
        return rpc_url

    if network == "development":
        return DEFAULT_RPC_URL

    raise ValueError(
        f"RPC URL required for network '{network}': set ${env_var} environment "
        "variable or pass rpc_url parameter"
    )

"""Deploy collaborators that broadcast contract-creation transactions."""

import asyncio
import itertools
import logging
import time
from typing import Any, Dict, List, Optional, Protocol

import requests

from .constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    NETWORK_CONFIG,
)
from .exceptions import DeployTransportError, NetworkMismatchError

logger = logging.getLogger(__name__)


class Deployer(Protocol):
    """Anything that can deploy bytecode and report the resulting address."""

    async def deploy(self, bytecode: str, abi: List[Dict[str, Any]], network: str) -> str:
        ...


class JsonRpcDeployer:
    """
    Deploys contracts through a node's JSON-RPC endpoint.

    Transactions are signed by the node (eth_sendTransaction), as on a
    ganache or hardhat development chain or a node with an unlocked account.
    """

    def __init__(
        self,
        rpc_url: str,
        sender: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Initialize the deployer.

        Args:
            rpc_url: JSON-RPC endpoint URL
            sender: Account sending the transactions (defaults to the node's
                    first account)
            poll_interval: Seconds between receipt polls
            receipt_timeout: Seconds to wait for a transaction to be mined
            request_timeout: Seconds before a single HTTP request times out
        """
        self.rpc_url = rpc_url
        self.sender = sender
        self.poll_interval = poll_interval
        self.receipt_timeout = receipt_timeout
        self.request_timeout = request_timeout
        self._ids = itertools.count(1)
        self._checked_networks: set[str] = set()

    async def deploy(self, bytecode: str, abi: List[Dict[str, Any]], network: str) -> str:
        """Deploy without blocking the event loop."""
        return await asyncio.to_thread(self.deploy_sync, bytecode, abi, network)

    def deploy_sync(self, bytecode: str, abi: List[Dict[str, Any]], network: str) -> str:
        """
        Submit a contract-creation transaction and wait for its receipt.

        Args:
            bytecode: Linked, deploy-ready bytecode
            abi: Contract ABI (unused by the node, kept for interface parity)
            network: Target network name

        Returns:
            Address of the created contract

        Raises:
            NetworkMismatchError: If the node is on a different chain than network
            DeployTransportError: On HTTP, RPC, revert or timeout failures
        """
        self._check_chain(network)

        sender = self.sender
        if sender is None:
            accounts = self.call("eth_accounts", [])
            if not accounts:
                raise DeployTransportError(f"Node at {self.rpc_url} has no accounts")
            sender = accounts[0]

        tx_hash = self.call("eth_sendTransaction", [{"from": sender, "data": bytecode}])
        logger.debug("Submitted deployment transaction %s on %s", tx_hash, network)

        receipt = self._wait_for_receipt(tx_hash)

        if receipt.get("status") == "0x0":
            raise DeployTransportError(f"Deployment transaction {tx_hash} reverted")

        address = receipt.get("contractAddress")
        if not address:
            raise DeployTransportError(
                f"Receipt for {tx_hash} has no contract address"
            )
        return address

    def call(self, method: str, params: List[Any]) -> Any:
        """
        Make a JSON-RPC call.

        Raises:
            DeployTransportError: If the request fails or the node returns an error
        """
        try:
            response = requests.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params,
                    "id": next(self._ids),
                },
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            raise DeployTransportError(f"Network error during RPC call: {e}") from e

        if response.status_code != 200:
            raise DeployTransportError(
                f"RPC request {method} failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise DeployTransportError(f"RPC response to {method} is not JSON") from e

        if not isinstance(result, dict):
            raise DeployTransportError(f"Malformed RPC response to {method}: {result!r}")
        if "error" in result:
            raise DeployTransportError(f"RPC error from {method}: {result['error']}")
        if "result" not in result:
            raise DeployTransportError(f"RPC response to {method} has no result")

        return result["result"]

    def _check_chain(self, network: str) -> None:
        if network in self._checked_networks:
            return

        expected = NETWORK_CONFIG.get(network, {}).get("chain_id")
        if expected is not None:
            chain_id = int(self.call("eth_chainId", []), 16)
            if chain_id != expected:
                raise NetworkMismatchError(
                    f"Node at {self.rpc_url} is on chain {chain_id}, "
                    f"expected {expected} for network '{network}'"
                )
        self._checked_networks.add(network)

    def _wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        deadline = time.monotonic() + self.receipt_timeout
        while True:
            receipt = self.call("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise DeployTransportError(
                    f"Timed out waiting for receipt of {tx_hash}"
                )
            time.sleep(self.poll_interval)

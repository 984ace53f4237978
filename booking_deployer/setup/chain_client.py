#!/usr/bin/env python3
"""
Chain client adapter.

Thin wrapper over a web3 HTTP connection exposing only what the deployment
pipeline needs: network identity, code/balance/block queries, the signing
identities available for deployment and transaction submission.

Every failing query raises ChainQueryError naming the failed call. Nothing is
retried: a single failure aborts the operator-driven run.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from web3 import Web3

from booking_deployer.config.network import network_name_for

from .exceptions import ChainConnectionError, ChainQueryError
from .types import NetworkContext

logger = logging.getLogger(__name__)


def _normalize_privkey_hex(pk: str) -> str:
    if not isinstance(pk, str):
        raise ValueError("private key must be a hex string")
    pk = pk.strip()
    if pk.startswith("0x"):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("private key hex must be 64 characters (32 bytes)")
    int(pk, 16)  # validate hex
    return "0x" + pk


class ChainClient:
    """Connection to a single blockchain RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        network_name: str | None = None,
        *,
        private_key: str | None = None,
        request_timeout: int = 30,
        w3: Web3 | None = None,
    ):
        """
        Args:
            rpc_url: JSON-RPC endpoint URL
            network_name: Operator-supplied network name (resolved from the chain ID if None)
            private_key: Optional local signing key; used before node-managed accounts
            request_timeout: HTTP timeout per RPC request, in seconds
            w3: Pre-built Web3 instance (tests inject one)
        """
        self.rpc_url = rpc_url
        self._network_name = network_name
        self._signer: LocalAccount | None = None
        if private_key:
            self._signer = Account.from_key(_normalize_privkey_hex(private_key))
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        self.w3 = w3
        self._network: NetworkContext | None = None

    @property
    def network(self) -> NetworkContext:
        if self._network is None:
            raise ChainConnectionError("Not connected; call connect() first")
        return self._network

    @property
    def signer_address(self) -> str | None:
        return to_checksum_address(self._signer.address) if self._signer else None

    def connect(self) -> NetworkContext:
        """Check the endpoint and capture the network identity for this run."""
        try:
            connected = self.w3.is_connected()
        except Exception as e:
            raise ChainConnectionError(f"Cannot reach RPC endpoint {self.rpc_url}: {e}") from e
        if not connected:
            raise ChainConnectionError(f"Cannot reach RPC endpoint {self.rpc_url}")

        chain_id = int(self._query("eth_chainId", lambda: self.w3.eth.chain_id))
        name = self._network_name or network_name_for(chain_id)
        self._network = NetworkContext(name=name, chain_id=chain_id, rpc_url=self.rpc_url)
        logger.info(f"Connected to {name} (chain ID {chain_id}) via {self.rpc_url}")
        return self._network

    def _query(self, call: str, fn):
        try:
            return fn()
        except ChainQueryError:
            raise
        except Exception as e:
            logger.debug(f"{call} failed", exc_info=True)
            raise ChainQueryError(call, e) from e

    def get_code(self, address: str) -> bytes:
        addr = to_checksum_address(address)
        return bytes(self._query("eth_getCode", lambda: self.w3.eth.get_code(addr)))

    def get_balance(self, address: str) -> Decimal:
        """Balance in ether, exact."""
        addr = to_checksum_address(address)
        wei = self._query("eth_getBalance", lambda: self.w3.eth.get_balance(addr))
        return Decimal(Web3.from_wei(int(wei), "ether"))

    def get_block_height(self) -> int:
        return int(self._query("eth_blockNumber", lambda: self.w3.eth.block_number))

    def list_accounts(self, limit: int) -> list[str]:
        """Ordered signing identities: the local key first, then node-managed accounts."""
        if limit <= 0:
            return []
        accounts: list[str] = []
        if self._signer is not None:
            accounts.append(to_checksum_address(self._signer.address))
        if len(accounts) < limit:
            node_accounts = self._query("eth_accounts", lambda: list(self.w3.eth.accounts))
            for acct in node_accounts:
                addr = to_checksum_address(acct)
                if addr not in accounts:
                    accounts.append(addr)
        return accounts[:limit]

    def contract(self, address: str, abi: list[dict[str, Any]]):
        return self.w3.eth.contract(address=to_checksum_address(address), abi=abi)

    def build_creation_tx(
        self,
        abi: list[dict[str, Any]],
        bytecode: str,
        sender: str,
        gas_limit: int | None = None,
    ) -> dict[str, Any]:
        """Build the constructor transaction for a contract creation."""
        sender = to_checksum_address(sender)
        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        base_tx: dict[str, Any] = {
            "from": sender,
            "nonce": self._query(
                "eth_getTransactionCount",
                lambda: self.w3.eth.get_transaction_count(sender, "pending"),
            ),
            "chainId": self.network.chain_id,
        }
        if gas_limit:
            base_tx["gas"] = int(gas_limit)
        return self._query("eth_estimateGas", lambda: factory.constructor().build_transaction(base_tx))

    def send_transaction(self, tx: dict[str, Any]) -> str:
        """Submit a transaction, signing locally when the sender is the local key.

        Returns the 0x-prefixed transaction hash.
        """
        sender = to_checksum_address(tx["from"])
        if self._signer is not None and sender == to_checksum_address(self._signer.address):
            signed = self._signer.sign_transaction(tx)
            tx_hash = self._query(
                "eth_sendRawTransaction",
                lambda: self.w3.eth.send_raw_transaction(signed.raw_transaction),
            )
        else:
            tx_hash = self._query("eth_sendTransaction", lambda: self.w3.eth.send_transaction(tx))
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any:
        """Block until the transaction is mined or the timeout elapses."""
        return self._query(
            "wait_for_transaction_receipt",
            lambda: self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout),
        )

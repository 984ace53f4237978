#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Any, Protocol

from eth_utils import to_checksum_address

from booking_deployer.config.properties import DEFAULT_RECEIPT_TIMEOUT

from .exceptions import ChainQueryError, DeploymentError
from .types import ContractDefinition, DeploymentResult

logger = logging.getLogger(__name__)


class DeployClient(Protocol):
    def list_accounts(self, limit: int) -> list[str]: ...

    def build_creation_tx(self, abi: list[dict[str, Any]], bytecode: str, sender: str, gas_limit: int | None = None) -> dict[str, Any]: ...

    def send_transaction(self, tx: dict[str, Any]) -> str: ...

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any: ...


def _receipt_field(receipt: Any, name: str, default: Any = None) -> Any:
    value = getattr(receipt, name, None)
    if value is None and hasattr(receipt, "get"):
        value = receipt.get(name)
    return default if value is None else value


class ContractDeployer:
    """Submits a contract creation and waits for it to be mined.

    Not idempotent: every call to deploy() creates a new contract instance,
    so callers invoke it once per run and never retry it.
    """

    def __init__(self, client: DeployClient, *, timeout: float = DEFAULT_RECEIPT_TIMEOUT, gas_limit: int | None = None):
        self.client = client
        self.timeout = timeout
        self.gas_limit = gas_limit

    def deploy(self, definition: ContractDefinition) -> DeploymentResult:
        """Deploy ``definition`` from the first available signing identity.

        Raises:
            DeploymentError: No signer, submission failure, receipt timeout,
                             reverted creation or missing contract address.
        """
        try:
            signers = self.client.list_accounts(1)
        except ChainQueryError as e:
            raise DeploymentError(f"Could not list signing accounts: {e}") from e
        if not signers:
            raise DeploymentError("No signing account available (set PRIVATE_KEY or use a node with unlocked accounts)")
        deployer = to_checksum_address(signers[0])

        logger.info(f"Deploying {definition.name} from {deployer}")
        try:
            tx = self.client.build_creation_tx(definition.abi, definition.bytecode, deployer, self.gas_limit)
            tx_hash = self.client.send_transaction(tx)
        except ChainQueryError as e:
            raise DeploymentError(f"Contract creation could not be submitted: {e}") from e

        logger.info(f"Deploy tx: {tx_hash} (waiting up to {self.timeout}s for receipt)")
        try:
            receipt = self.client.wait_for_receipt(tx_hash, self.timeout)
        except ChainQueryError as e:
            raise DeploymentError(f"Deploy tx {tx_hash} was not finalized: {e}") from e

        status = int(_receipt_field(receipt, "status", 0))
        if status != 1:
            raise DeploymentError(f"Contract creation reverted (tx {tx_hash}, status {status})")

        address = _receipt_field(receipt, "contractAddress")
        if not address:
            raise DeploymentError(f"Receipt for {tx_hash} has no contract address")

        result = DeploymentResult(
            address=to_checksum_address(address),
            deployer=deployer,
            tx_hash=tx_hash,
            block_number=int(_receipt_field(receipt, "blockNumber", 0)),
            gas_used=int(_receipt_field(receipt, "gasUsed", 0)),
        )
        logger.info(f"Deployed {definition.name} at {result.address} (block {result.block_number})")
        return result

"""Shared pytest fixtures for booking-deployer tests."""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from booking_deployer.config.abis import BOOKING_PAYMENT_ABI
from booking_deployer.setup.types import ContractDefinition, NetworkContext

# Well-known accounts of the Hardhat/Anvil development mnemonic
HARDHAT_ACCOUNTS = [
    (
        "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    ),
    (
        "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    ),
    (
        "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    ),
]

DEPLOYER = HARDHAT_ACCOUNTS[0][0]
PLATFORM_WALLET = HARDHAT_ACCOUNTS[1][0]
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TX_HASH = "0x" + "ab" * 32
RUNTIME_CODE = bytes.fromhex("608060405234801561001057600080fd5b50")

LOCALHOST = NetworkContext(name="localhost", chain_id=31337, rpc_url="http://127.0.0.1:8545")
ARBITRUM = NetworkContext(name="arbitrum", chain_id=42161, rpc_url="https://arb1.arbitrum.io/rpc")

PROPERTIES_TEXT = (
    "# Server\n"
    "server.port=8082\n"
    "\n"
    "# Blockchain Configuration\n"
    "app.web3.chain-id=31337\n"
    "app.web3.rpc-url=http://127.0.0.1:8545\n"
    "app.web3.contract-address=0x0\n"
    "app.web3.private-key=0x0\n"
)


class FakeChainClient:
    """In-memory stand-in for ChainClient used by deployer, verifier and pipeline tests."""

    def __init__(
        self,
        network: NetworkContext = LOCALHOST,
        *,
        accounts: Optional[List[str]] = None,
        receipt: Any = None,
        code: bytes = RUNTIME_CODE,
        config: Optional[Dict[str, Any]] = None,
        balances: Optional[Dict[str, Decimal]] = None,
        block_height: int = 7,
    ):
        self.network = network
        self.accounts = [DEPLOYER] if accounts is None else accounts
        self.receipt = receipt if receipt is not None else {
            "status": 1,
            "contractAddress": CONTRACT_ADDRESS,
            "blockNumber": 1,
            "gasUsed": 1_234_567,
        }
        self.codes = {CONTRACT_ADDRESS.lower(): code}
        self.config = config if config is not None else {
            "PLATFORM_WALLET": PLATFORM_WALLET,
            "PLATFORM_FEE_PERCENT": 5,
            "admin": DEPLOYER,
        }
        self.balances = balances or {}
        self.block_height = block_height
        self.sent: List[Dict[str, Any]] = []
        self.waited_timeout: Optional[float] = None

    def connect(self) -> NetworkContext:
        return self.network

    def list_accounts(self, limit: int) -> List[str]:
        return self.accounts[:limit]

    def build_creation_tx(self, abi, bytecode, sender, gas_limit=None):
        return {"from": sender, "data": bytecode, "gas": gas_limit}

    def send_transaction(self, tx):
        self.sent.append(tx)
        return TX_HASH

    def wait_for_receipt(self, tx_hash, timeout):
        self.waited_timeout = timeout
        if isinstance(self.receipt, Exception):
            raise self.receipt
        return self.receipt

    def get_code(self, address: str) -> bytes:
        return self.codes.get(address.lower(), b"")

    def get_balance(self, address: str) -> Decimal:
        return self.balances.get(address, Decimal("10000"))

    def get_block_height(self) -> int:
        return self.block_height

    def contract(self, address, abi):
        contract = MagicMock()
        for name, value in self.config.items():
            fn = getattr(contract.functions, name)
            if isinstance(value, Exception):
                fn.return_value.call.side_effect = value
            else:
                fn.return_value.call.return_value = value
        return contract


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so each test starts from a clean logger."""
    yield
    logger = logging.getLogger("booking_deployer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep operator environment variables out of the tests."""
    for name in (
        "RPC_URL",
        "NETWORK",
        "PRIVATE_KEY",
        "MNEMONIC",
        "APP_PROPERTIES_PATH",
        "DEPLOYMENTS_DIR",
        "DEPLOY_RECEIPT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def definition() -> ContractDefinition:
    return ContractDefinition(
        name="BookingPaymentContract",
        abi=BOOKING_PAYMENT_ABI,
        bytecode="0x6080604052",
    )


@pytest.fixture
def properties_file(tmp_path: Path) -> Path:
    """A payment-service application.properties with placeholder web3 values."""
    path = tmp_path / "application.properties"
    path.write_text(PROPERTIES_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def deployments_dir(tmp_path: Path) -> Path:
    return tmp_path / "deployments"

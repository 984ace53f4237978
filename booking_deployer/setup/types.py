"""Data types for the booking payment deployer."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from .exceptions import ConfigReconcileError


@dataclass(frozen=True)
class NetworkContext:
    """Identity of the connected network, fixed for the whole run."""

    name: str  # e.g. "localhost", "arbitrum"
    chain_id: int
    rpc_url: str


@dataclass(frozen=True)
class AccountInfo:
    """Snapshot of an account at deployment time."""

    index: int
    address: str  # Checksummed address
    balance: Decimal  # Ether units
    private_key: str | None = None  # Only for derived local accounts
    is_admin: bool = False
    derivation_path: str | None = None


@dataclass
class ContractDefinition:
    """ABI and creation bytecode of the contract to deploy."""

    name: str
    abi: list[dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode
    source: str | None = None  # Artifact path it was loaded from


@dataclass(frozen=True)
class DeploymentResult:
    address: str
    deployer: str
    tx_hash: str
    block_number: int
    gas_used: int = 0


@dataclass(frozen=True)
class VerificationResult:
    has_code: bool
    code_size: int


@dataclass(frozen=True)
class ContractConfig:
    """Configuration read back from the deployed instance."""

    platform_wallet: str
    platform_fee_percent: int
    admin: str


@dataclass(frozen=True)
class Advisory:
    """Non-fatal condition surfaced to the operator."""

    kind: str
    message: str


@dataclass(frozen=True)
class DeploymentRecord:
    """Write-once description of a single deployment."""

    contract_name: str
    contract_address: str
    network: NetworkContext
    deployer_address: str
    deployed_at_block: int
    timestamp: str  # ISO-8601 UTC
    platform_wallet: str
    platform_fee_percent: int
    admin_address: str
    account_snapshots: tuple[AccountInfo, ...] = ()
    function_inventory: dict[str, tuple[str, ...]] = field(default_factory=dict)
    tx_hash: str | None = None
    code_size: int = 0


@dataclass(frozen=True)
class ConfigPatch:
    """A single ``key=value`` line to reconcile into a properties file."""

    key: str
    new_value: str

    def __post_init__(self) -> None:
        if not self.key or "\n" in self.key or "=" in self.key:
            raise ValueError(f"Invalid property key: {self.key!r}")
        if "\n" in self.new_value or "\r" in self.new_value:
            raise ValueError(f"Property value for {self.key} must not contain newlines")

    def as_line(self) -> str:
        return f"{self.key}={self.new_value}"


@dataclass(frozen=True)
class ReconcileResult:
    applied: bool
    path: Path
    reason: str | None = None
    updated_keys: tuple[str, ...] = ()
    missing_keys: tuple[str, ...] = ()

    def raise_for_failure(self) -> None:
        """Raise ConfigReconcileError if the patch set was not applied."""
        if not self.applied:
            raise ConfigReconcileError(f"Could not reconcile {self.path}: {self.reason}")


class PipelineState(Enum):
    INITIALIZED = "initialized"
    DEPLOYED = "deployed"
    VERIFIED = "verified"
    RECORDED = "recorded"
    CONFIG_RECONCILED = "config_reconciled"
    CONFIG_SKIPPED = "config_skipped"


@dataclass
class PipelineOutcome:
    """Final state of a pipeline run that did not abort."""

    state: PipelineState
    record: DeploymentRecord
    record_path: Path | None = None
    report_path: Path | None = None
    reconcile: ReconcileResult | None = None
    advisories: list[Advisory] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        # Advisories never turn a completed deployment into a failure
        return 0

#!/usr/bin/env python3
"""
Deployment records.

A DeploymentRecord is assembled once per deployment from what was observed
on chain and persisted as deployments/booking-payment-<network>.json. The JSON
field names are stable; the payment service tooling parses them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from booking_deployer.config.abis import FUNCTION_INVENTORY
from booking_deployer.config.properties import CONTRACT_NAME

from .accounts import ADMIN_NOTE
from .exceptions import VerificationError
from .storage import read_json, write_json_atomic
from .types import (
    AccountInfo,
    ContractConfig,
    DeploymentRecord,
    DeploymentResult,
    NetworkContext,
    VerificationResult,
)

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_deployment_record(
    network: NetworkContext,
    deployment: DeploymentResult,
    verification: VerificationResult,
    config: ContractConfig,
    accounts: Iterable[AccountInfo] = (),
    *,
    contract_name: str = CONTRACT_NAME,
    function_inventory: dict[str, tuple[str, ...]] = FUNCTION_INVENTORY,
    timestamp: str | None = None,
) -> DeploymentRecord:
    """Aggregate the pipeline's observations into a DeploymentRecord.

    Pure: no chain or file access. Configuration values come from the deployed
    instance (``config``), never from caller defaults.

    Raises:
        VerificationError: If the verification did not find code at the address.
    """
    if not verification.has_code:
        raise VerificationError(f"Refusing to record {deployment.address}: no code at address")

    return DeploymentRecord(
        contract_name=contract_name,
        contract_address=deployment.address,
        network=network,
        deployer_address=deployment.deployer,
        deployed_at_block=deployment.block_number,
        timestamp=timestamp or _utc_now_iso(),
        platform_wallet=config.platform_wallet,
        platform_fee_percent=config.platform_fee_percent,
        admin_address=config.admin,
        account_snapshots=tuple(accounts),
        function_inventory={k: tuple(v) for k, v in function_inventory.items()},
        tx_hash=deployment.tx_hash,
        code_size=verification.code_size,
    )


def _account_entry(account: AccountInfo) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "index": account.index,
        "address": account.address,
        "balance": str(account.balance),
        "isAdmin": account.is_admin,
    }
    if account.derivation_path:
        entry["derivationPath"] = account.derivation_path
    if account.is_admin:
        entry["note"] = ADMIN_NOTE
    return entry


def record_to_dict(record: DeploymentRecord) -> dict[str, Any]:
    """Serialise a record to its stable JSON layout. Private keys are never included."""
    return {
        "contract": {
            "name": record.contract_name,
            "address": record.contract_address,
            "network": record.network.name,
            "chainId": str(record.network.chain_id),
            "rpcUrl": record.network.rpc_url,
            "deployer": record.deployer_address,
            "timestamp": record.timestamp,
            "blockNumber": record.deployed_at_block,
            "txHash": record.tx_hash,
            "codeSize": record.code_size,
        },
        "configuration": {
            "platformWallet": record.platform_wallet,
            "platformFeePercent": str(record.platform_fee_percent),
            "admin": record.admin_address,
        },
        "accounts": [_account_entry(a) for a in record.account_snapshots],
        "functions": {k: list(v) for k, v in record.function_inventory.items()},
    }


def record_path(deployments_dir: Path, network_name: str) -> Path:
    return Path(deployments_dir) / f"booking-payment-{network_name}.json"


def save_record(record: DeploymentRecord, deployments_dir: Path) -> Path:
    """Persist the record, keyed by network name; replaces any previous record atomically."""
    path = record_path(deployments_dir, record.network.name)
    write_json_atomic(path, record_to_dict(record))
    logger.info(f"Deployment info saved to: {path}")
    return path


def load_record(path: Path) -> dict[str, Any]:
    """Load a persisted record, checking the fields reconciliation relies on.

    Raises:
        FileNotFoundError: If the record does not exist
        ValueError: If required fields are missing
    """
    data = read_json(Path(path))
    contract = data.get("contract") if isinstance(data, dict) else None
    if not isinstance(contract, dict):
        raise ValueError(f"Deployment record {path} has no 'contract' section")
    for field in ("address", "network", "chainId"):
        if not contract.get(field):
            raise ValueError(f"Deployment record {path} is missing contract.{field}")
    return data

#!/usr/bin/env python3
"""
Deployment pipeline.

    INITIALIZED -> DEPLOYED -> VERIFIED -> RECORDED -> CONFIG_RECONCILED | CONFIG_SKIPPED

Any failure before VERIFIED propagates and nothing is written. Once the record
is built, persistence, reporting and reconciliation problems become advisories
and the run still succeeds: a deployed contract cannot be rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Protocol

from booking_deployer.config.logging_config import log_deployment
from booking_deployer.config.network import (
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_PATH_TEMPLATE,
    HARDHAT_MNEMONIC,
    is_local_network,
)
from booking_deployer.config.properties import DEFAULT_RECEIPT_TIMEOUT

from .accounts import snapshot_accounts
from .deployer import ContractDeployer
from .reconcile import NOT_FOUND, build_config_patches, reconcile
from .records import build_deployment_record, save_record
from .report import save_report
from .types import (
    AccountInfo,
    Advisory,
    ContractDefinition,
    DeploymentRecord,
    NetworkContext,
    PipelineOutcome,
    PipelineState,
)
from .verifier import DeploymentVerifier

logger = logging.getLogger(__name__)


class PipelineClient(Protocol):
    def get_code(self, address: str) -> bytes: ...

    def get_balance(self, address: str) -> Any: ...

    def get_block_height(self) -> int: ...

    def list_accounts(self, limit: int) -> list[str]: ...

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any: ...

    def build_creation_tx(self, abi: list[dict[str, Any]], bytecode: str, sender: str, gas_limit: int | None = None) -> dict[str, Any]: ...

    def send_transaction(self, tx: dict[str, Any]) -> str: ...

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any: ...


class DeploymentPipeline:
    """Runs deploy, verify, record and reconcile once for one network."""

    def __init__(
        self,
        client: PipelineClient,
        network: NetworkContext,
        definition: ContractDefinition,
        *,
        deployments_dir: Path,
        properties_path: Path | None,
        seed_phrase: str = HARDHAT_MNEMONIC,
        path_template: str = DEFAULT_PATH_TEMPLATE,
        account_count: int = DEFAULT_ACCOUNT_COUNT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        gas_limit: int | None = None,
        patch_private_key: bool = False,
        append_missing: bool = False,
        write_report: bool = True,
    ):
        self.client = client
        self.network = network
        self.definition = definition
        self.deployments_dir = Path(deployments_dir)
        self.properties_path = Path(properties_path) if properties_path else None
        self.seed_phrase = seed_phrase
        self.path_template = path_template
        self.account_count = account_count
        self.patch_private_key = patch_private_key
        self.append_missing = append_missing
        self.write_report = write_report

        self.deployer = ContractDeployer(client, timeout=receipt_timeout, gas_limit=gas_limit)
        self.verifier = DeploymentVerifier(client)
        self.state = PipelineState.INITIALIZED
        self.advisories: list[Advisory] = []

    def _advise(self, kind: str, message: str) -> None:
        logger.warning(message)
        self.advisories.append(Advisory(kind=kind, message=message))

    def _snapshot(self, admin_address: str) -> list[AccountInfo]:
        if not is_local_network(self.network.name, self.network.chain_id) or self.account_count <= 0:
            return []
        return snapshot_accounts(
            self.client,
            self.network,
            seed_phrase=self.seed_phrase,
            path_template=self.path_template,
            count=self.account_count,
            admin_address=admin_address,
        )

    def _signing_key(self, record: DeploymentRecord) -> str | None:
        if not self.patch_private_key:
            return None
        deployer = record.deployer_address.lower()
        match = next((a for a in record.account_snapshots if a.address.lower() == deployer), None)
        if match is None or not match.private_key:
            self._advise(
                "private_key_unavailable",
                f"No derived key for deployer {record.deployer_address}; {self.properties_path} private key left unchanged",
            )
            return None
        return match.private_key

    def run(self) -> PipelineOutcome:
        logger.info(f"Deploying {self.definition.name} to {self.network.name} (chain ID {self.network.chain_id})")

        deployment = self.deployer.deploy(self.definition)
        self.state = PipelineState.DEPLOYED

        verification = self.verifier.verify(deployment.address)
        self.state = PipelineState.VERIFIED

        config = self.verifier.read_configuration(deployment.address)
        advisory = self.verifier.check_admin(config, deployment.deployer)
        if advisory is not None:
            self.advisories.append(advisory)

        accounts = self._snapshot(config.admin)
        if not deployment.block_number:
            deployment = replace(deployment, block_number=self.client.get_block_height())

        record = build_deployment_record(
            self.network,
            deployment,
            verification,
            config,
            accounts,
            contract_name=self.definition.name,
        )
        self.state = PipelineState.RECORDED
        log_deployment(
            logger,
            network=self.network.name,
            chain_id=self.network.chain_id,
            address=record.contract_address,
            deployer=record.deployer_address,
            block_number=record.deployed_at_block,
            tx_hash=record.tx_hash,
        )
        outcome = PipelineOutcome(state=self.state, record=record, advisories=self.advisories)

        try:
            outcome.record_path = save_record(record, self.deployments_dir)
        except OSError as e:
            self._advise("record_not_saved", f"Could not save deployment record: {e}")

        if self.write_report:
            try:
                outcome.report_path = save_report(record, self.deployments_dir)
            except OSError as e:
                self._advise("report_not_saved", f"Could not save deployment report: {e}")

        self._reconcile(record, outcome)
        outcome.state = self.state
        return outcome

    def _reconcile(self, record: DeploymentRecord, outcome: PipelineOutcome) -> None:
        if self.properties_path is None:
            self.state = PipelineState.CONFIG_SKIPPED
            return

        patches = build_config_patches(
            self.network,
            record.contract_address,
            private_key=self._signing_key(record),
        )
        result = reconcile(self.properties_path, patches, append_missing=self.append_missing)
        outcome.reconcile = result

        if result.applied:
            self.state = PipelineState.CONFIG_RECONCILED
        elif result.reason == NOT_FOUND:
            self.state = PipelineState.CONFIG_SKIPPED
            self._advise(
                "config_not_found",
                f"application.properties not found at: {self.properties_path}; update it manually with the contract address",
            )
        else:
            self.state = PipelineState.CONFIG_SKIPPED
            self._advise(
                "config_reconcile_failed",
                f"Could not update application.properties: {result.reason}",
            )

        if result.missing_keys:
            self._advise(
                "config_keys_missing",
                f"Keys not present in {self.properties_path}: {', '.join(result.missing_keys)}",
            )

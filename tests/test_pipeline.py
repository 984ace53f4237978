"""Integration tests for the deploy -> verify -> record -> reconcile pipeline."""

import json
from pathlib import Path

import pytest

from booking_deployer.setup.exceptions import DeploymentError, VerificationError
from booking_deployer.setup.pipeline import DeploymentPipeline
from booking_deployer.setup import pipeline as pipeline_module
from booking_deployer.setup import reconcile as reconcile_module
from booking_deployer.setup.types import NetworkContext, PipelineState

from conftest import (
    ARBITRUM,
    CONTRACT_ADDRESS,
    DEPLOYER,
    HARDHAT_ACCOUNTS,
    PLATFORM_WALLET,
    PROPERTIES_TEXT,
    FakeChainClient,
)


def make_pipeline(client, definition, deployments_dir, properties_path, **kwargs):
    kwargs.setdefault("account_count", 2)
    return DeploymentPipeline(
        client,
        client.network,
        definition,
        deployments_dir=deployments_dir,
        properties_path=properties_path,
        **kwargs,
    )


class TestSuccessfulRun:
    def test_local_run(self, fake_client, definition, deployments_dir: Path, properties_file: Path):
        outcome = make_pipeline(fake_client, definition, deployments_dir, properties_file).run()

        assert outcome.state is PipelineState.CONFIG_RECONCILED
        assert outcome.exit_code == 0
        assert outcome.advisories == []
        assert outcome.record.platform_fee_percent == 5
        assert outcome.record.platform_wallet == PLATFORM_WALLET
        assert len(outcome.record.account_snapshots) == 2
        assert outcome.reconcile.updated_keys == ("app.web3.contract-address",)

        assert outcome.record_path == deployments_dir / "booking-payment-localhost.json"
        saved = json.loads(outcome.record_path.read_text())
        assert saved["contract"]["address"] == CONTRACT_ADDRESS
        assert outcome.report_path is not None and outcome.report_path.exists()

        expected = PROPERTIES_TEXT.replace(
            "app.web3.contract-address=0x0", f"app.web3.contract-address={CONTRACT_ADDRESS}"
        )
        assert properties_file.read_text() == expected

    def test_admin_mismatch_is_advisory(self, definition, deployments_dir: Path, properties_file: Path):
        """Test that admin != deployer still succeeds, with an advisory."""
        client = FakeChainClient(
            config={"PLATFORM_WALLET": PLATFORM_WALLET, "PLATFORM_FEE_PERCENT": 5, "admin": PLATFORM_WALLET}
        )

        outcome = make_pipeline(client, definition, deployments_dir, properties_file).run()

        assert outcome.exit_code == 0
        assert outcome.state is PipelineState.CONFIG_RECONCILED
        assert [a.kind for a in outcome.advisories] == ["admin_mismatch"]

    def test_block_height_fallback(self, definition, deployments_dir: Path):
        client = FakeChainClient(
            receipt={"status": 1, "contractAddress": CONTRACT_ADDRESS, "blockNumber": 0},
            block_height=99,
        )

        outcome = make_pipeline(client, definition, deployments_dir, None).run()

        assert outcome.record.deployed_at_block == 99

    def test_real_network_has_no_account_snapshot(self, definition, deployments_dir: Path, properties_file: Path):
        client = FakeChainClient(ARBITRUM)

        outcome = make_pipeline(client, definition, deployments_dir, properties_file, account_count=5).run()

        assert outcome.record.account_snapshots == ()
        assert "app.web3.rpc-url=http://127.0.0.1:8545\n" in properties_file.read_text()
        assert "app.web3.chain-id=42161\n" in properties_file.read_text()

    def test_patch_private_key(self, fake_client, definition, deployments_dir: Path, properties_file: Path):
        outcome = make_pipeline(
            fake_client, definition, deployments_dir, properties_file, patch_private_key=True
        ).run()

        assert outcome.state is PipelineState.CONFIG_RECONCILED
        assert f"app.web3.private-key={HARDHAT_ACCOUNTS[0][1]}\n" in properties_file.read_text()

    def test_no_report(self, fake_client, definition, deployments_dir: Path):
        outcome = make_pipeline(fake_client, definition, deployments_dir, None, write_report=False).run()

        assert outcome.report_path is None
        assert [p.name for p in deployments_dir.iterdir()] == ["booking-payment-localhost.json"]


class TestConfigAdvisories:
    def test_properties_not_configured(self, fake_client, definition, deployments_dir: Path):
        outcome = make_pipeline(fake_client, definition, deployments_dir, None).run()

        assert outcome.state is PipelineState.CONFIG_SKIPPED
        assert outcome.reconcile is None
        assert outcome.advisories == []

    def test_properties_file_missing(self, fake_client, definition, deployments_dir: Path, tmp_path: Path):
        outcome = make_pipeline(fake_client, definition, deployments_dir, tmp_path / "missing.properties").run()

        assert outcome.state is PipelineState.CONFIG_SKIPPED
        assert outcome.exit_code == 0
        assert [a.kind for a in outcome.advisories] == ["config_not_found"]
        assert outcome.record_path.exists()

    def test_missing_keys_reported(self, fake_client, definition, deployments_dir: Path, tmp_path: Path):
        path = tmp_path / "application.properties"
        path.write_text("server.port=8082\n")

        outcome = make_pipeline(fake_client, definition, deployments_dir, path).run()

        assert outcome.state is PipelineState.CONFIG_RECONCILED
        assert [a.kind for a in outcome.advisories] == ["config_keys_missing"]
        assert path.read_text() == "server.port=8082\n"

    def test_private_key_unavailable_for_foreign_deployer(
        self, definition, deployments_dir: Path, properties_file: Path
    ):
        client = FakeChainClient(accounts=[PLATFORM_WALLET])

        outcome = make_pipeline(
            client, definition, deployments_dir, properties_file, account_count=1, patch_private_key=True
        ).run()

        assert "private_key_unavailable" in [a.kind for a in outcome.advisories]
        assert "app.web3.private-key=0x0\n" in properties_file.read_text()


class TestAbortedRun:
    def test_empty_code_writes_nothing(self, definition, deployments_dir: Path, properties_file: Path):
        """Test that a deployment with no code aborts before any file is written."""
        client = FakeChainClient(code=b"")
        pipeline = make_pipeline(client, definition, deployments_dir, properties_file)

        with pytest.raises(VerificationError):
            pipeline.run()

        assert pipeline.state is PipelineState.DEPLOYED
        assert not deployments_dir.exists()
        assert properties_file.read_text() == PROPERTIES_TEXT

    def test_reverted_deploy_writes_nothing(self, definition, deployments_dir: Path, properties_file: Path):
        client = FakeChainClient(receipt={"status": 0, "contractAddress": None})
        pipeline = make_pipeline(client, definition, deployments_dir, properties_file)

        with pytest.raises(DeploymentError):
            pipeline.run()

        assert pipeline.state is PipelineState.INITIALIZED
        assert not deployments_dir.exists()
        assert properties_file.read_text() == PROPERTIES_TEXT

    def test_deployer_is_recorded(self, fake_client, definition, deployments_dir: Path):
        outcome = make_pipeline(fake_client, definition, deployments_dir, None).run()
        assert outcome.record.deployer_address == DEPLOYER


class TestLocalityAndAdmin:
    def test_local_label_on_real_chain(self, definition, deployments_dir: Path, properties_file: Path):
        """Test that the observed chain ID, not the operator's label, decides locality."""
        mislabeled = NetworkContext(name="localhost", chain_id=42161, rpc_url="https://arb1.arbitrum.io/rpc")
        client = FakeChainClient(mislabeled)

        outcome = make_pipeline(
            client, definition, deployments_dir, properties_file, account_count=3, patch_private_key=True
        ).run()

        assert outcome.record.account_snapshots == ()
        text = properties_file.read_text()
        assert "app.web3.rpc-url=http://127.0.0.1:8545\n" in text
        assert "app.web3.private-key=0x0\n" in text
        for _, key in HARDHAT_ACCOUNTS:
            assert key not in outcome.report_path.read_text()

    def test_admin_flag_follows_contract_admin(self, definition, deployments_dir: Path):
        """Test that the snapshot marks the on-chain admin, not account 0."""
        admin, admin_key = HARDHAT_ACCOUNTS[1]
        client = FakeChainClient(
            accounts=[admin],
            config={"PLATFORM_WALLET": PLATFORM_WALLET, "PLATFORM_FEE_PERCENT": 5, "admin": admin},
        )

        outcome = make_pipeline(client, definition, deployments_dir, None, account_count=3).run()

        assert [a.is_admin for a in outcome.record.account_snapshots] == [False, True, False]
        report = outcome.report_path.read_text()
        assert f"app.web3.private-key={admin_key}" in report
        assert HARDHAT_ACCOUNTS[0][1] not in report

        saved = json.loads(outcome.record_path.read_text())
        assert [a["isAdmin"] for a in saved["accounts"]] == [False, True, False]


class TestPersistenceAdvisories:
    """Failures after the record is built never fail the run."""

    def test_record_not_saved(self, monkeypatch, fake_client, definition, deployments_dir: Path, properties_file: Path):
        def disk_full(record, directory):
            raise OSError("No space left on device")

        monkeypatch.setattr(pipeline_module, "save_record", disk_full)

        outcome = make_pipeline(fake_client, definition, deployments_dir, properties_file).run()

        assert outcome.exit_code == 0
        assert outcome.record_path is None
        assert [a.kind for a in outcome.advisories] == ["record_not_saved"]
        assert outcome.state is PipelineState.CONFIG_RECONCILED

    def test_report_not_saved(self, monkeypatch, fake_client, definition, deployments_dir: Path):
        def disk_full(record, directory):
            raise OSError("No space left on device")

        monkeypatch.setattr(pipeline_module, "save_report", disk_full)

        outcome = make_pipeline(fake_client, definition, deployments_dir, None).run()

        assert outcome.exit_code == 0
        assert outcome.report_path is None
        assert outcome.record_path.exists()
        assert [a.kind for a in outcome.advisories] == ["report_not_saved"]

    def test_config_write_failure(self, monkeypatch, fake_client, definition, deployments_dir: Path, properties_file: Path):
        def read_only(path, text, *, prefix="write_"):
            raise OSError("Read-only file system")

        monkeypatch.setattr(reconcile_module, "write_text_atomic", read_only)

        outcome = make_pipeline(fake_client, definition, deployments_dir, properties_file).run()

        assert outcome.exit_code == 0
        assert outcome.state is PipelineState.CONFIG_SKIPPED
        assert not outcome.reconcile.applied
        assert outcome.reconcile.reason == "Read-only file system"
        assert [a.kind for a in outcome.advisories] == ["config_reconcile_failed"]
        assert properties_file.read_text() == PROPERTIES_TEXT

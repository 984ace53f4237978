#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from booking_deployer.config.logging_config import get_cli_logger
from booking_deployer.config.network import (
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_PATH_TEMPLATE,
    HARDHAT_MNEMONIC,
    get_rpc_url,
)
from booking_deployer.config.properties import (
    get_deployments_dir,
    get_properties_path,
    get_receipt_timeout,
)

from .accounts import snapshot_accounts
from .artifacts import load_contract_definition
from .chain_client import ChainClient
from .exceptions import DeployToolError
from .pipeline import DeploymentPipeline
from .reconcile import build_config_patches, reconcile
from .records import load_record, record_path
from .types import NetworkContext, PipelineOutcome

RULE = "=" * 60


def _prepare(args: argparse.Namespace) -> logging.Logger:
    # Optionally load env file before resolving RPC_URL / PRIVATE_KEY / MNEMONIC
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    log_dir = Path(args.log_dir) if getattr(args, "log_dir", None) else None
    return get_cli_logger(debug=args.debug, log_dir=log_dir)


def _connect(args: argparse.Namespace, private_key: str | None = None) -> ChainClient:
    network = args.network or os.getenv("NETWORK")
    rpc_url = args.rpc_url or get_rpc_url(network or "localhost")
    client = ChainClient(rpc_url, network, private_key=private_key)
    client.connect()
    return client


def _seed_phrase(args: argparse.Namespace) -> str:
    env_name = args.mnemonic_env or "MNEMONIC"
    return os.getenv(env_name) or HARDHAT_MNEMONIC


def _print_summary(outcome: PipelineOutcome) -> None:
    record = outcome.record
    print()
    print(RULE)
    print("DEPLOYMENT SUCCESSFUL")
    print(RULE)
    print(f"Contract Address: {record.contract_address}")
    print(f"Network:          {record.network.name}")
    print(f"Chain ID:         {record.network.chain_id}")
    print(f"Block:            {record.deployed_at_block}")
    print(f"Platform Fee:     {record.platform_fee_percent}%")
    if outcome.record_path:
        print(f"Record:           {outcome.record_path}")
    if outcome.report_path:
        print(f"Report:           {outcome.report_path}")
    print(f"Pipeline state:   {outcome.state.value}")
    if outcome.advisories:
        print()
        print("Advisories:")
        for advisory in outcome.advisories:
            print(f"  - [{advisory.kind}] {advisory.message}")
    print(RULE)


def cmd_deploy(args: argparse.Namespace) -> int:
    logger = _prepare(args)
    try:
        private_key = os.getenv(args.private_key_env or "PRIVATE_KEY") or None
        definition = load_contract_definition(args.artifact)
        client = _connect(args, private_key)

        pipeline = DeploymentPipeline(
            client,
            client.network,
            definition,
            deployments_dir=get_deployments_dir(args.deployments_dir),
            properties_path=None if args.no_properties else get_properties_path(args.properties),
            seed_phrase=_seed_phrase(args),
            path_template=args.path_template,
            account_count=args.accounts,
            receipt_timeout=get_receipt_timeout(args.timeout),
            gas_limit=args.gas_limit,
            patch_private_key=args.patch_private_key,
            append_missing=args.append_missing,
            write_report=not args.no_report,
        )
        outcome = pipeline.run()
    except (DeployToolError, ValueError) as e:
        logger.error(f"Deployment failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_summary(outcome)
    return outcome.exit_code


def cmd_accounts(args: argparse.Namespace) -> int:
    logger = _prepare(args)
    try:
        client = _connect(args)
        accounts = snapshot_accounts(
            client,
            client.network,
            seed_phrase=_seed_phrase(args),
            path_template=args.path_template,
            count=args.count,
        )
    except (DeployToolError, ValueError) as e:
        logger.error(f"Could not list accounts: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Accounts on {client.network.name} (chain ID {client.network.chain_id}):")
    for acct in accounts:
        suffix = "  (admin)" if acct.is_admin else ""
        print(f"#{acct.index} {acct.address} {acct.balance} ETH{suffix}")
        if args.show_private_keys:
            print(f"    Private key: {acct.private_key}")
    return 0


def cmd_reconcile(args: argparse.Namespace) -> int:
    logger = _prepare(args)
    try:
        if args.record:
            path = Path(args.record)
        else:
            network = args.network or os.getenv("NETWORK") or "localhost"
            path = record_path(get_deployments_dir(args.deployments_dir), network)
        data = load_record(path)
        contract = data["contract"]
        network = NetworkContext(
            name=contract["network"],
            chain_id=int(contract["chainId"]),
            rpc_url=contract.get("rpcUrl") or "",
        )
        patches = build_config_patches(network, contract["address"])
        result = reconcile(get_properties_path(args.properties), patches, append_missing=args.append_missing)
        result.raise_for_failure()
    except FileNotFoundError as e:
        print(f"Deployment record not found: {e.filename}", file=sys.stderr)
        return 1
    except (DeployToolError, ValueError) as e:
        logger.error(f"Reconciliation failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result.updated_keys:
        print(f"Updated {', '.join(result.updated_keys)} in {result.path}")
    else:
        print(f"{result.path} already up to date")
    for key in result.missing_keys:
        print(f"Warning: {key} not present in {result.path}", file=sys.stderr)
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--env-file", help="Path to .env file to load before resolving env vars")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    p.add_argument("--log-dir", help="Directory for log files (default BOOKING_DEPLOYER_LOG_DIR or ./logs)")


def _add_network(p: argparse.ArgumentParser) -> None:
    p.add_argument("--network", help="Network name (default NETWORK env var, else resolved from the chain ID)")
    p.add_argument("--rpc-url", dest="rpc_url", help="RPC endpoint (default RPC_URL env var, else the network's default)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BookingPaymentContract deployment utilities")
    sub = parser.add_subparsers(dest="cmd")

    # deploy
    p_deploy = sub.add_parser("deploy", help="Deploy the contract, record it and update application.properties")
    _add_network(p_deploy)
    p_deploy.add_argument("--artifact", help="Hardhat artifact .json, .abi/.bin pair or .sol source")
    p_deploy.add_argument("--properties", help="application.properties to update (default APP_PROPERTIES_PATH)")
    p_deploy.add_argument("--no-properties", action="store_true", help="Skip application.properties reconciliation")
    p_deploy.add_argument("--deployments-dir", help="Directory for deployment records (default DEPLOYMENTS_DIR or ./deployments)")
    p_deploy.add_argument("--timeout", type=int, help="Seconds to wait for the deploy receipt (default DEPLOY_RECEIPT_TIMEOUT or 600)")
    p_deploy.add_argument("--gas-limit", type=int, help="Explicit gas limit for the creation transaction")
    p_deploy.add_argument("--private-key-env", dest="private_key_env", help="Env var name holding the deployer key (default PRIVATE_KEY)")
    p_deploy.add_argument("--mnemonic-env", help="Env var name holding the local test mnemonic (default MNEMONIC)")
    p_deploy.add_argument("--path-template", default=DEFAULT_PATH_TEMPLATE, help="Derivation path template with {index}")
    p_deploy.add_argument("--accounts", type=int, default=DEFAULT_ACCOUNT_COUNT, help="Local accounts to snapshot (0 to skip)")
    p_deploy.add_argument("--patch-private-key", action="store_true", help="Also write the deployer's derived key (local networks only)")
    p_deploy.add_argument("--append-missing", action="store_true", help="Append keys missing from application.properties")
    p_deploy.add_argument("--no-report", action="store_true", help="Do not write the markdown deployment report")
    _add_common(p_deploy)
    p_deploy.set_defaults(func=cmd_deploy)

    # accounts
    p_accounts = sub.add_parser("accounts", help="List derived local accounts with balances")
    _add_network(p_accounts)
    p_accounts.add_argument("--count", type=int, default=DEFAULT_ACCOUNT_COUNT, help="Number of accounts to derive")
    p_accounts.add_argument("--mnemonic-env", help="Env var name holding the mnemonic (default MNEMONIC)")
    p_accounts.add_argument("--path-template", default=DEFAULT_PATH_TEMPLATE, help="Derivation path template with {index}")
    p_accounts.add_argument("--show-private-keys", action="store_true", help="Print the derived private keys")
    _add_common(p_accounts)
    p_accounts.set_defaults(func=cmd_accounts)

    # reconcile
    p_rec = sub.add_parser("reconcile", help="Re-apply a saved deployment record to application.properties")
    p_rec.add_argument("--record", help="Deployment record JSON (default <deployments-dir>/booking-payment-<network>.json)")
    p_rec.add_argument("--network", help="Network whose record to use (default NETWORK or localhost)")
    p_rec.add_argument("--deployments-dir", help="Directory holding deployment records")
    p_rec.add_argument("--properties", help="application.properties to update (default APP_PROPERTIES_PATH)")
    p_rec.add_argument("--append-missing", action="store_true", help="Append keys missing from application.properties")
    _add_common(p_rec)
    p_rec.set_defaults(func=cmd_reconcile)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())

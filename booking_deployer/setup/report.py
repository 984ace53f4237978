#!/usr/bin/env python3
from __future__ import annotations

import logging
import time
from pathlib import Path

from booking_deployer.config.network import is_local_network
from booking_deployer.config.properties import (
    CHAIN_ID_KEY,
    CONTRACT_ADDRESS_KEY,
    PRIVATE_KEY_KEY,
    RPC_URL_KEY,
)

from .storage import write_text_atomic
from .types import DeploymentRecord

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    "public": "Public Functions",
    "admin": "Admin Functions",
    "constants": "Constants",
}


def _properties_block(record: DeploymentRecord) -> list[str]:
    network = record.network
    local = is_local_network(network.name, network.chain_id)
    lines = [
        "```properties",
        "# Blockchain Configuration",
        f"{CHAIN_ID_KEY}={network.chain_id}",
        f"{RPC_URL_KEY}={network.rpc_url}",
        f"{CONTRACT_ADDRESS_KEY}={record.contract_address}",
    ]
    admin_address = record.admin_address.lower()
    admin = next(
        (a for a in record.account_snapshots if a.address.lower() == admin_address and a.private_key),
        None,
    )
    if local and admin is not None:
        lines.append(f"{PRIVATE_KEY_KEY}={admin.private_key}")
    lines.append("```")
    if local and admin is not None:
        lines += [
            "",
            "**IMPORTANT:** The private key above is for the local development network ONLY.",
            "**NEVER use this in production!**",
        ]
    return lines


def render_markdown(record: DeploymentRecord) -> str:
    """Render a human-readable deployment note for the record."""
    network = record.network
    lines = [
        f"# {record.contract_name} Deployment",
        "",
        "## Deployment Information",
        "",
        f"**Date:** {record.timestamp}",
        f"**Network:** {network.name}",
        f"**Chain ID:** {network.chain_id}",
        f"**Block:** {record.deployed_at_block}",
    ]
    if record.tx_hash:
        lines.append(f"**Transaction:** {record.tx_hash}")
    lines += [
        "",
        "## Contract Address",
        "",
        "```",
        record.contract_address,
        "```",
        "",
        "## Configuration",
        "",
        f"- **Platform Wallet:** {record.platform_wallet}",
        f"- **Platform Fee:** {record.platform_fee_percent}%",
        f"- **Admin:** {record.admin_address}",
        f"- **Deployer:** {record.deployer_address}",
        "",
        "## Application Properties Configuration",
        "",
        "Add/Update these values in `payment-service/src/main/resources/application.properties`:",
        "",
        *_properties_block(record),
    ]

    if record.account_snapshots:
        lines += ["", "## Accounts", ""]
        for acct in record.account_snapshots:
            suffix = " (admin)" if acct.is_admin else ""
            lines.append(f"- #{acct.index} `{acct.address}` - {acct.balance} ETH{suffix}")

    lines += ["", "## Contract Functions"]
    for section, entries in record.function_inventory.items():
        lines += ["", f"### {SECTION_TITLES.get(section, section.title())}", ""]
        lines += [f"- `{entry}`" for entry in entries]

    lines += [
        "",
        "## Next Steps",
        "",
        "1. Update `application.properties` with the contract address above",
        "2. Restart payment-service",
        "3. Test the contract using the API endpoints",
        "",
    ]
    return "\n".join(lines)


def save_report(record: DeploymentRecord, deployments_dir: Path) -> Path:
    path = Path(deployments_dir) / f"DEPLOYMENT-{record.network.name}-{int(time.time() * 1000)}.md"
    write_text_atomic(path, render_markdown(record), prefix="report_")
    logger.info(f"Documentation saved to: {path}")
    return path

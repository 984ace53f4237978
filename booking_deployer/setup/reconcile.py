#!/usr/bin/env python3
"""
application.properties reconciliation.

Rewrites selected ``key=value`` lines of the payment service configuration in
place so that they match a fresh deployment. All other lines, comments and
ordering are preserved byte for byte. Applying the same patch set twice is a
no-op the second time.

Keys without a matching line are reported in ``missing_keys`` and left out of
the file unless ``append_missing`` is set.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from booking_deployer.config.network import is_local_network
from booking_deployer.config.properties import (
    CHAIN_ID_KEY,
    CONTRACT_ADDRESS_KEY,
    PRIVATE_KEY_KEY,
    RPC_URL_KEY,
)

from .storage import write_text_atomic
from .types import ConfigPatch, NetworkContext, ReconcileResult

logger = logging.getLogger(__name__)

NOT_FOUND = "not found"


def _key_pattern(key: str) -> re.Pattern[str]:
    # Whole line, key matched literally; the value stops before any line terminator
    return re.compile(rf"^{re.escape(key)}=[^\r\n]*", re.MULTILINE)


def apply_patches(
    text: str,
    patches: Iterable[ConfigPatch],
    *,
    append_missing: bool = False,
) -> tuple[str, list[str], list[str]]:
    """Apply patches to properties text.

    Returns:
        Tuple of (new_text, updated_keys, missing_keys) where updated_keys are
        the keys whose line content changed.
    """
    updated: list[str] = []
    missing: dict[str, str] = {}
    for patch in patches:
        line = patch.as_line()
        match = _key_pattern(patch.key).search(text)
        if match is None:
            missing[patch.key] = patch.new_value
            continue
        if match.group(0) != line:
            text = text[: match.start()] + line + text[match.end():]
            updated.append(patch.key)

    if append_missing and missing:
        if text and not text.endswith("\n"):
            text += "\n"
        for key, value in missing.items():
            text += f"{key}={value}\n"
            updated.append(key)
        missing = {}

    return text, updated, list(missing)


def reconcile(
    path: str | Path,
    patches: Iterable[ConfigPatch],
    *,
    append_missing: bool = False,
) -> ReconcileResult:
    """Reconcile a properties file with ``patches``.

    Never raises for file problems: a missing file gives ``applied=False`` with
    reason "not found"; read or write errors give ``applied=False`` with the
    error message. The file is only written after a successful read, and
    atomically.
    """
    path = Path(path)
    patches = list(patches)

    if not path.is_file():
        logger.warning(f"application.properties not found at: {path}")
        return ReconcileResult(applied=False, path=path, reason=NOT_FOUND)

    try:
        with open(path, encoding="utf-8", newline="") as f:
            original = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return ReconcileResult(applied=False, path=path, reason=str(e))

    text, updated, missing = apply_patches(original, patches, append_missing=append_missing)
    for key in missing:
        logger.warning(f"Key '{key}' not present in {path}; left unchanged")

    if text == original:
        logger.info(f"{path} already up to date")
        return ReconcileResult(
            applied=True,
            path=path,
            reason="already up to date",
            missing_keys=tuple(missing),
        )

    try:
        write_text_atomic(path, text, prefix="properties_")
    except OSError as e:
        logger.warning(f"Could not update {path}: {e}")
        return ReconcileResult(applied=False, path=path, reason=str(e), missing_keys=tuple(missing))

    logger.info(f"Updated {', '.join(updated)} in {path}")
    return ReconcileResult(
        applied=True,
        path=path,
        updated_keys=tuple(updated),
        missing_keys=tuple(missing),
    )


def build_config_patches(
    network: NetworkContext,
    contract_address: str,
    *,
    private_key: str | None = None,
) -> list[ConfigPatch]:
    """Map observed deployment facts onto application.properties keys.

    The RPC URL and signing key are only patched for local development
    networks; on real networks they are managed by the operator. An unknown
    RPC URL (older records carry none) leaves the existing line alone.
    """
    patches = [
        ConfigPatch(CONTRACT_ADDRESS_KEY, contract_address),
        ConfigPatch(CHAIN_ID_KEY, str(network.chain_id)),
    ]
    if is_local_network(network.name, network.chain_id):
        if network.rpc_url:
            patches.append(ConfigPatch(RPC_URL_KEY, network.rpc_url))
        if private_key:
            patches.append(ConfigPatch(PRIVATE_KEY_KEY, private_key))
    return patches

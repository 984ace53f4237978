#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from booking_deployer.config.properties import CONTRACT_NAME

from .exceptions import ArtifactError
from .types import ContractDefinition

logger = logging.getLogger(__name__)

DEFAULT_SOLC_VERSION = "0.8.20"
HARDHAT_ARTIFACT = Path("artifacts/contracts") / f"{CONTRACT_NAME}.sol" / f"{CONTRACT_NAME}.json"


def _prefixed(bytecode: str) -> str:
    bytecode = bytecode.strip()
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


def _checked(name: str, abi: Any, bytecode: Any, source: str) -> ContractDefinition:
    if not isinstance(abi, list):
        raise ArtifactError(f"ABI in {source} is not a list")
    if not isinstance(bytecode, str) or len(_prefixed(bytecode)) <= 2:
        raise ArtifactError(f"Creation bytecode missing in {source}")
    return ContractDefinition(name=name, abi=abi, bytecode=_prefixed(bytecode), source=source)


def load_hardhat_artifact(path: Path) -> ContractDefinition:
    """Load a Hardhat artifact JSON (``abi`` + ``bytecode``)."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ArtifactError(f"Artifact not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact is not valid JSON: {path}: {e}") from e
    name = data.get("contractName") or path.stem
    return _checked(name, data.get("abi"), data.get("bytecode"), str(path))


def load_abi_bin(abi_path: Path, bin_path: Path | None = None) -> ContractDefinition:
    """Load a build/<Name>.abi and build/<Name>.bin pair."""
    if bin_path is None:
        bin_path = abi_path.with_suffix(".bin")
    if not abi_path.exists() or not bin_path.exists():
        raise ArtifactError(f"Missing build artifacts: {abi_path} / {bin_path}")
    try:
        abi = json.loads(abi_path.read_text())
    except json.JSONDecodeError as e:
        raise ArtifactError(f"ABI file is not valid JSON: {abi_path}: {e}") from e
    return _checked(abi_path.stem, abi, bin_path.read_text(), str(abi_path))


def compile_solidity(
    source_path: Path,
    contract_name: str = CONTRACT_NAME,
    solc_version: str = DEFAULT_SOLC_VERSION,
) -> ContractDefinition:
    """Compile a single-file Solidity source with py-solc-x."""
    from solcx import compile_source, install_solc
    from solcx.exceptions import DownloadError, SolcError, SolcInstallationError, SolcNotInstalled

    if not source_path.exists():
        raise ArtifactError(f"Contract source not found: {source_path}")

    logger.info(f"Compiling {source_path} with solc {solc_version}")
    try:
        install_solc(solc_version)
        compiled = compile_source(
            source_path.read_text(),
            output_values=["abi", "bin"],
            solc_version=solc_version,
            optimize=True,
            optimize_runs=200,
        )
    except (SolcError, SolcInstallationError, SolcNotInstalled, DownloadError, OSError) as e:
        raise ArtifactError(f"Could not compile {source_path} with solc {solc_version}: {e}") from e
    for contract_id, interface in compiled.items():
        if contract_id.split(":")[-1] == contract_name:
            return _checked(contract_name, interface["abi"], interface["bin"], str(source_path))
    raise ArtifactError(f"Could not find {contract_name} in compiled output of {source_path}")


def load_contract_definition(path: str | Path | None = None, contract_name: str = CONTRACT_NAME) -> ContractDefinition:
    """Load a contract definition, picking the loader from the file type.

    ``.json`` is a Hardhat artifact, ``.abi``/``.bin`` a raw build pair and
    ``.sol`` a Solidity source compiled on the fly. Defaults to the Hardhat
    artifact path of the booking payment contract.
    """
    path = Path(path) if path is not None else HARDHAT_ARTIFACT
    match path.suffix:
        case ".json":
            return load_hardhat_artifact(path)
        case ".abi":
            return load_abi_bin(path)
        case ".bin":
            return load_abi_bin(path.with_suffix(".abi"), path)
        case ".sol":
            return compile_solidity(path, contract_name)
        case _:
            raise ArtifactError(f"Unsupported artifact type: {path}")

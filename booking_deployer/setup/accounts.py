#!/usr/bin/env python3
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
import logging
from typing import Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from booking_deployer.config.network import (
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_PATH_TEMPLATE,
    HARDHAT_MNEMONIC,
    is_local_network,
)

from .types import AccountInfo, NetworkContext

logger = logging.getLogger(__name__)

ADMIN_NOTE = "This is the admin account - use this private key in application.properties"


class BalanceSource(Protocol):
    def get_balance(self, address: str) -> Decimal: ...


def derive_privkey_from_mnemonic(mnemonic: str, path: str) -> tuple[str, str]:
    """Derive a private key and address from a BIP-32/44 path using a BIP-39 mnemonic.

    Returns (private_key_hex, checksum_address).
    """
    # Enable HD wallet features (eth-account marks as unaudited)
    Account.enable_unaudited_hdwallet_features()
    acct: LocalAccount = Account.from_mnemonic(mnemonic, account_path=path)
    priv_hex = "0x" + bytes(acct.key).hex()
    address = to_checksum_address(acct.address)
    return priv_hex, address


def derivation_path(path_template: str, index: int) -> str:
    if "{index}" not in path_template:
        raise ValueError(f"Derivation path template must contain '{{index}}': {path_template!r}")
    return path_template.format(index=index)


def derive_accounts(
    seed_phrase: str,
    path_template: str = DEFAULT_PATH_TEMPLATE,
    count: int = DEFAULT_ACCOUNT_COUNT,
    start: int = 0,
) -> list[AccountInfo]:
    """Derive ``count`` accounts from a seed phrase, in index order.

    Deterministic: the same phrase and template always give the same
    addresses and keys. Balances are left at zero; see snapshot_accounts.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    accounts: list[AccountInfo] = []
    for i in range(start, start + count):
        path = derivation_path(path_template, i)
        priv_hex, address = derive_privkey_from_mnemonic(seed_phrase, path)
        accounts.append(
            AccountInfo(
                index=i,
                address=address,
                balance=Decimal(0),
                private_key=priv_hex,
                is_admin=(i == 0),
                derivation_path=path,
            )
        )
    return accounts


def fetch_balances(source: BalanceSource, addresses: list[str], max_workers: int = 5) -> list[Decimal]:
    """Query balances concurrently; results follow the order of ``addresses``."""
    if not addresses:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(addresses)))) as ex:
        return list(ex.map(source.get_balance, addresses))


def snapshot_accounts(
    source: BalanceSource,
    network: NetworkContext,
    *,
    seed_phrase: str = HARDHAT_MNEMONIC,
    path_template: str = DEFAULT_PATH_TEMPLATE,
    count: int = DEFAULT_ACCOUNT_COUNT,
    max_workers: int = 5,
    admin_address: str | None = None,
) -> list[AccountInfo]:
    """Derive the local test accounts and attach their current balances.

    With ``admin_address`` the account matching it is flagged as admin;
    without it, account 0 is (the default admin of a fresh local node).

    Raises:
        ValueError: If the network is not a local development chain; test keys
                    must never be presented as real accounts.
    """
    if not is_local_network(network.name, network.chain_id):
        raise ValueError(
            f"Refusing to derive test accounts on non-local network '{network.name}' "
            f"(chain ID {network.chain_id})"
        )
    derived = derive_accounts(seed_phrase, path_template, count)
    balances = fetch_balances(source, [a.address for a in derived], max_workers=max_workers)
    admin = admin_address.lower() if admin_address else None
    logger.debug(f"Snapshot of {len(derived)} local accounts on {network.name}")
    return [
        AccountInfo(
            index=a.index,
            address=a.address,
            balance=bal,
            private_key=a.private_key,
            is_admin=a.is_admin if admin is None else a.address.lower() == admin,
            derivation_path=a.derivation_path,
        )
        for a, bal in zip(derived, balances)
    ]

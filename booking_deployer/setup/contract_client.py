#!/usr/bin/env python3
from __future__ import annotations

from typing import Any, Protocol

from eth_utils import to_checksum_address

from booking_deployer.config.abis import BOOKING_PAYMENT_ABI

from .exceptions import ChainQueryError


class ContractFactory(Protocol):
    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any: ...


class BookingPaymentClient:
    """Typed read access to a deployed BookingPaymentContract.

    Only the configuration surface described by BOOKING_PAYMENT_ABI is exposed.
    """

    def __init__(self, client: ContractFactory, address: str, abi: list[dict[str, Any]] = BOOKING_PAYMENT_ABI):
        self.address = to_checksum_address(address)
        self._contract = client.contract(self.address, abi)

    def _call(self, name: str) -> Any:
        try:
            return getattr(self._contract.functions, name)().call()
        except Exception as e:
            raise ChainQueryError(f"{name}()", e) from e

    def platform_wallet(self) -> str:
        return to_checksum_address(self._call("PLATFORM_WALLET"))

    def platform_fee_percent(self) -> int:
        return int(self._call("PLATFORM_FEE_PERCENT"))

    def admin(self) -> str:
        return to_checksum_address(self._call("admin"))

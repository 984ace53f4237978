#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Any, Protocol

from booking_deployer.config.abis import BOOKING_PAYMENT_ABI

from .contract_client import BookingPaymentClient
from .exceptions import VerificationError
from .types import Advisory, ContractConfig, VerificationResult

logger = logging.getLogger(__name__)


class VerifyClient(Protocol):
    def get_code(self, address: str) -> bytes: ...

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any: ...


class DeploymentVerifier:
    """Checks a deployment against chain state."""

    def __init__(self, client: VerifyClient):
        self.client = client

    def verify(self, address: str) -> VerificationResult:
        """Confirm runtime code exists at ``address``.

        Raises:
            VerificationError: If the address holds no code.
        """
        code = self.client.get_code(address)
        result = VerificationResult(has_code=len(code) > 0, code_size=len(code))
        if not result.has_code:
            raise VerificationError(f"Contract deployment failed - no code at address {address}")
        logger.info(f"Contract code verified ({result.code_size} bytes)")
        return result

    def read_configuration(self, address: str, abi: list[dict[str, Any]] = BOOKING_PAYMENT_ABI) -> ContractConfig:
        contract = BookingPaymentClient(self.client, address, abi)
        config = ContractConfig(
            platform_wallet=contract.platform_wallet(),
            platform_fee_percent=contract.platform_fee_percent(),
            admin=contract.admin(),
        )
        logger.info(
            f"Platform wallet: {config.platform_wallet} | "
            f"Platform fee: {config.platform_fee_percent}% | Admin: {config.admin}"
        )
        return config

    @staticmethod
    def check_admin(config: ContractConfig, deployer: str) -> Advisory | None:
        """Advisory when the contract admin is not the deploying account."""
        if config.admin.lower() == deployer.lower():
            logger.info("Admin matches deployer")
            return None
        advisory = Advisory(
            kind="admin_mismatch",
            message=f"Admin ({config.admin}) does not match deployer ({deployer})",
        )
        logger.warning(advisory.message)
        return advisory

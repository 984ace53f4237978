"""
Keys and defaults for the payment service's application.properties.
"""

import os
from pathlib import Path

CONTRACT_NAME = "BookingPaymentContract"

# Recognised keys in payment-service/src/main/resources/application.properties
CHAIN_ID_KEY = "app.web3.chain-id"
RPC_URL_KEY = "app.web3.rpc-url"
CONTRACT_ADDRESS_KEY = "app.web3.contract-address"
PRIVATE_KEY_KEY = "app.web3.private-key"

PROPERTY_KEYS: tuple[str, ...] = (
    CHAIN_ID_KEY,
    RPC_URL_KEY,
    CONTRACT_ADDRESS_KEY,
    PRIVATE_KEY_KEY,
)

DEFAULT_PROPERTIES_PATH = Path("..") / "payment-service" / "src" / "main" / "resources" / "application.properties"
DEFAULT_DEPLOYMENTS_DIR = Path("deployments")
DEFAULT_RECEIPT_TIMEOUT = 600  # seconds


def get_properties_path(cli_value: str | None = None) -> Path:
    """Resolve the properties file: CLI value > APP_PROPERTIES_PATH > default."""
    return Path(cli_value or os.getenv("APP_PROPERTIES_PATH") or DEFAULT_PROPERTIES_PATH)


def get_deployments_dir(cli_value: str | None = None) -> Path:
    """Resolve the deployments directory: CLI value > DEPLOYMENTS_DIR > default."""
    return Path(cli_value or os.getenv("DEPLOYMENTS_DIR") or DEFAULT_DEPLOYMENTS_DIR)


def get_receipt_timeout(cli_value: int | None = None) -> int:
    """Resolve the receipt timeout in seconds: CLI value > DEPLOY_RECEIPT_TIMEOUT > default."""
    if cli_value is not None:
        return int(cli_value)
    env_value = os.getenv("DEPLOY_RECEIPT_TIMEOUT")
    if env_value:
        return int(env_value)
    return DEFAULT_RECEIPT_TIMEOUT

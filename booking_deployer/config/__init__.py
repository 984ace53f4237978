"""
Configuration package for the booking payment deployer.
"""

from booking_deployer.config.network import (
    CHAINS,
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_PATH_TEMPLATE,
    HARDHAT_MNEMONIC,
    LOCAL_CHAIN_IDS,
    get_chain_config,
    get_chain_id,
    get_rpc_url,
    is_local_network,
    network_name_for,
)

from booking_deployer.config.properties import (
    CHAIN_ID_KEY,
    CONTRACT_ADDRESS_KEY,
    CONTRACT_NAME,
    PRIVATE_KEY_KEY,
    PROPERTY_KEYS,
    RPC_URL_KEY,
    get_deployments_dir,
    get_properties_path,
    get_receipt_timeout,
)

from booking_deployer.config.abis import (
    BOOKING_PAYMENT_ABI,
    FUNCTION_INVENTORY,
    INTERFACE_VERSION,
)

__all__ = [
    # Network
    'CHAINS',
    'DEFAULT_ACCOUNT_COUNT',
    'DEFAULT_PATH_TEMPLATE',
    'HARDHAT_MNEMONIC',
    'LOCAL_CHAIN_IDS',
    'get_chain_config',
    'get_chain_id',
    'get_rpc_url',
    'is_local_network',
    'network_name_for',

    # application.properties
    'CHAIN_ID_KEY',
    'CONTRACT_ADDRESS_KEY',
    'CONTRACT_NAME',
    'PRIVATE_KEY_KEY',
    'PROPERTY_KEYS',
    'RPC_URL_KEY',
    'get_deployments_dir',
    'get_properties_path',
    'get_receipt_timeout',

    # ABIs
    'BOOKING_PAYMENT_ABI',
    'FUNCTION_INVENTORY',
    'INTERFACE_VERSION',
]

"""
Contract ABI package for the booking payment deployer.
"""

from .booking_payment import (
    BOOKING_PAYMENT_ABI,
    FUNCTION_INVENTORY,
    INTERFACE_VERSION,
)

__all__ = [
    'BOOKING_PAYMENT_ABI',
    'FUNCTION_INVENTORY',
    'INTERFACE_VERSION',
]

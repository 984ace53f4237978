"""
Deployment tooling for the BookingPaymentContract.

Deploys the payment contract, verifies it against chain state, writes a
per-network deployment record and reconciles the payment service's
application.properties with the new address.
"""

__version__ = "0.3.0"

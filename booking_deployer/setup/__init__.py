"""
Deployment pipeline for the BookingPaymentContract.
"""

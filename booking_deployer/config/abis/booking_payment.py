"""
BookingPaymentContract interface description.

Versioned, fixed schema of the methods the deployer reads from the contract.
The full business interface (bookings, refunds, reclamations) is only listed
in FUNCTION_INVENTORY; it is never called by this tool.
"""

INTERFACE_VERSION = "1.0"

BOOKING_PAYMENT_ABI = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [],
        "name": "PLATFORM_WALLET",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "PLATFORM_FEE_PERCENT",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "admin",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {"inputs": [], "name": "getContractBalance", "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "uint256", "name": "bookingId", "type": "uint256"}], "name": "bookingExistsCheck", "outputs": [{"internalType": "bool", "name": "", "type": "bool"}], "stateMutability": "view", "type": "function"},
]

# Static categorisation of the deployed contract's known interface
FUNCTION_INVENTORY: dict[str, tuple[str, ...]] = {
    "public": (
        "createBookingPayment(uint256,address,address,uint256,uint256) - payable",
        "completeBooking(uint256) - only host or admin",
        "cancelBooking(uint256) - only guest or admin",
        "getBooking(uint256) - view",
        "bookingExistsCheck(uint256) - view",
        "getContractBalance() - view",
        "getBookingWithReclamation(uint256) - view",
        "getReclamationRefund(uint256) - view",
    ),
    "admin": (
        "transferAdmin(address) - only admin",
        "emergencyWithdraw() - only admin",
        "processReclamationRefund(uint256,address,uint256,uint256,bool) - only admin",
        "processPartialRefund(uint256,address,uint256,bool) - only admin",
        "setActiveReclamation(uint256,bool) - only admin",
    ),
    "constants": (
        "PLATFORM_WALLET() - constant",
        "PLATFORM_FEE_PERCENT() - constant",
        "admin() - public",
    ),
}

# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .customer import Customer
from .payment import Payment
from .transaction import Transaction
from .transaction_item import TransactionItem

__all__ = [
    "Customer",
    "Transaction",
    "TransactionItem",
    "Payment",
]

from .transaction import (
    PaymentSerializer,
    StockBatchUsageSerializer,
    TransactionItemSerializer,
    TransactionSerializer,
)

__all__ = [
    "TransactionSerializer",
    "TransactionItemSerializer",
    "StockBatchUsageSerializer",
    "PaymentSerializer",
]

from .allocation import AllocationResult, BatchAllocation
from .exceptions import (
    ConcurrentOversellError,
    InsufficientStockError,
    PersistenceFailureError,
    StockServiceError,
)
from .stock_fifo import (
    allocate_stock,
    calculate_average_cost,
    list_available_batches,
    record_batch_usage,
)
from .stock_intake import intake_stock

__all__ = [
    "AllocationResult",
    "BatchAllocation",
    "StockServiceError",
    "InsufficientStockError",
    "ConcurrentOversellError",
    "PersistenceFailureError",
    "list_available_batches",
    "allocate_stock",
    "record_batch_usage",
    "calculate_average_cost",
    "intake_stock",
]

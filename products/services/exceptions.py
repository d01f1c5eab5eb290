# products/services/exceptions.py

"""
STOCK SERVICE ERRORS

Centralized domain errors for the FIFO costing engine.

Propagation:
- Allocation shortfalls are returned as data (AllocationResult.success=False);
  InsufficientStockError is raised by callers that need to abort on them.
- Recorder failures are ALWAYS raised so the caller must roll back.
"""


class StockServiceError(Exception):
    """Base exception for all stock service failures."""


class InsufficientStockError(StockServiceError):
    """Raised when available batches cannot satisfy a requested quantity."""

    def __init__(self, message, *, requested=None, available=None, product_name=None):
        super().__init__(message)
        self.requested = requested
        self.available = available
        self.product_name = product_name


class ConcurrentOversellError(StockServiceError):
    """Raised when the conditional decrement finds less stock than was allocated."""

    def __init__(self, message, *, batch_id=None, quantity=None):
        super().__init__(message)
        self.batch_id = batch_id
        self.quantity = quantity


class PersistenceFailureError(StockServiceError):
    """Raised when storage rejects a usage insert or batch decrement."""

# products/views/__init__.py

"""
Products views package exports.
"""

from .stock_batch import AvailableBatchListView, StockIntakeView

__all__ = [
    "AvailableBatchListView",
    "StockIntakeView",
]

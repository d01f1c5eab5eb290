"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product
from .stock_batch import StockBatch
from .stock_batch_usage import StockBatchUsage
from .stock_entry import StockEntry

__all__ = [
    "Product",
    "StockEntry",
    "StockBatch",
    "StockBatchUsage",
]

# products/serializers/__init__.py

from .stock_batch import StockBatchSerializer, StockIntakeSerializer

__all__ = [
    "StockBatchSerializer",
    "StockIntakeSerializer",
]

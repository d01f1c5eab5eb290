# products/urls.py

"""
PRODUCTS URLS

Mounted under /api/products/:
- GET  <uuid:product_id>/batches/   available batches (FIFO order)
- POST stock-in/                    stock intake
"""

from django.urls import path

from products.views import AvailableBatchListView, StockIntakeView

urlpatterns = [
    path("stock-in/", StockIntakeView.as_view(), name="products-stock-in"),
    path(
        "<uuid:product_id>/batches/",
        AvailableBatchListView.as_view(),
        name="products-available-batches",
    ),
]

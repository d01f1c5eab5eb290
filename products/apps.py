# products/apps.py

"""
PRODUCTS APP CONFIG

Inventory side of the cooperative store:
- Products (farm inputs: pupuk / obat / pakan)
- Stock intake (stock-in events -> one batch each)
- Stock batches + batch usage ledger
- FIFO costing engine
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Inventory"

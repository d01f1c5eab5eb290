# sales/apps.py

"""
SALES APP CONFIG

Yarnen (pay-at-harvest) sales:
- Customers (debtors)
- Transactions + line items with FIFO-derived COGS / profit
- Payments against outstanding balances
"""

from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales"
    verbose_name = "Yarnen Sales"

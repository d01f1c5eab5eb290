# sales/urls.py

"""
SALES URLS

Mounted under /api/sales/:
- POST checkout/                           yarnen checkout
- POST transactions/<uuid:pk>/payments/    record a repayment
"""

from django.urls import path

from sales.views.checkout import CheckoutView
from sales.views.payment import TransactionPaymentView

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="sales-checkout"),
    path(
        "transactions/<uuid:pk>/payments/",
        TransactionPaymentView.as_view(),
        name="sales-transaction-payments",
    ),
]

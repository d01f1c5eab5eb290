# sales/tests/test_api.py

from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

import sentry_sdk
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import SimpleTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from products.models import Product, StockBatch
from sales.models import Customer, Transaction, TransactionItem

User = get_user_model()


class CoopApiTests(APITestCase):
    """
    HTTP surface.

    GUARANTEES:
    - Every endpoint except health requires an authenticated user
    - Stock problems on checkout surface as 409, bad input as 400
    """

    def setUp(self):
        self.user = User.objects.create_user(username="kasir", password="password123")
        self.client.force_authenticate(user=self.user)

        self.customer = Customer.objects.create(name="Pak Darto")
        self.product = Product.objects.create(
            name="Pupuk Urea 50kg",
            category=Product.Category.PUPUK,
            sell_price=Decimal("150.00"),
        )
        self.old_batch = StockBatch.objects.create(
            product=self.product,
            purchase_price=Decimal("100.00"),
            quantity_initial=5,
            quantity_remaining=5,
            batch_date=date.today() - timedelta(days=7),
        )
        self.new_batch = StockBatch.objects.create(
            product=self.product,
            purchase_price=Decimal("120.00"),
            quantity_initial=10,
            quantity_remaining=10,
        )

    def checkout(self, qty, items=None):
        payload = {
            "customer_id": str(self.customer.pk),
            "items": items if items is not None else [
                {"product_id": str(self.product.pk), "quantity": qty},
            ],
        }
        return self.client.post(reverse("sales-checkout"), payload, format="json")

    # =====================================================
    # PRODUCTS
    # =====================================================

    def test_available_batches_are_listed_oldest_first(self):
        url = reverse("products-available-batches", args=[self.product.pk])

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["stock"], 15)
        self.assertEqual(
            [b["id"] for b in response.data["batches"]],
            [str(self.old_batch.pk), str(self.new_batch.pk)],
        )
        self.assertEqual(response.data["batches"][0]["effective_sell_price"], "150.00")
        self.assertEqual(response.data["batches"][0]["remaining_value"], "500.00")
        self.assertEqual(response.data["batches"][1]["remaining_value"], "1200.00")

    def test_stock_in_creates_batch(self):
        response = self.client.post(
            reverse("products-stock-in"),
            {
                "product_id": str(self.product.pk),
                "quantity": 12,
                "purchase_price": "125.00",
                "sell_price": "160.00",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["quantity_remaining"], 12)
        self.assertEqual(response.data["sell_price"], "160.00")
        self.assertEqual(self.product.stock_batches.count(), 3)

    def test_stock_in_rejects_zero_quantity(self):
        response = self.client.post(
            reverse("products-stock-in"),
            {"product_id": str(self.product.pk), "quantity": 0, "purchase_price": "1.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.product.stock_batches.count(), 2)

    # =====================================================
    # CHECKOUT
    # =====================================================

    def test_checkout_returns_created_transaction(self):
        response = self.checkout(8)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["total_amount"], "1200.00")
        self.assertEqual(response.data["total_cogs"], "860.00")
        self.assertEqual(response.data["outstanding_amount"], "1200.00")
        self.assertEqual(response.data["gross_profit"], "340.00")
        self.assertEqual(response.data["status"], Transaction.STATUS_UNPAID)
        self.assertEqual(len(response.data["items"]), 1)
        self.assertEqual(len(response.data["items"][0]["batch_usages"]), 2)

    def test_checkout_insufficient_stock_is_conflict(self):
        response = self.checkout(16)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("Available: 15", response.data["detail"])
        self.assertFalse(Transaction.objects.exists())

    def test_checkout_empty_cart_is_bad_request(self):
        response = self.checkout(0, items=[])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Transaction.objects.exists())

    def test_checkout_zero_quantity_is_bad_request(self):
        response = self.checkout(0)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_checkout_storage_failure_is_service_unavailable(self):
        with mock.patch.object(
            TransactionItem.objects, "create", side_effect=OperationalError("database table is locked")
        ):
            response = self.checkout(2)

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertFalse(Transaction.objects.exists())
        self.old_batch.refresh_from_db()
        self.assertEqual(self.old_batch.quantity_remaining, 5)

    def test_checkout_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.checkout(1)

        self.assertIn(
            response.status_code,
            (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN),
        )

    # =====================================================
    # PAYMENTS
    # =====================================================

    def test_payment_updates_balance(self):
        sale_id = self.checkout(2).data["id"]
        url = reverse("sales-transaction-payments", args=[sale_id])

        response = self.client.post(url, {"amount": "120.00"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["payment"]["amount"], "120.00")
        self.assertEqual(response.data["transaction"]["status"], Transaction.STATUS_PARTIAL)
        self.assertEqual(response.data["transaction"]["outstanding_amount"], "180.00")

    def test_overpayment_is_bad_request(self):
        sale_id = self.checkout(1).data["id"]
        url = reverse("sales-transaction-payments", args=[sale_id])

        response = self.client.post(url, {"amount": "150.01"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    # =====================================================
    # HEALTH
    # =====================================================

    def test_health_is_public(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse("health-check"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ok")

    # =====================================================
    # API SCHEMA
    # =====================================================

    def test_openapi_schema_lists_endpoints(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse("schema"), {"format": "json"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        paths = response.json()["paths"]
        self.assertIn("/api/sales/checkout/", paths)
        self.assertIn("/api/products/stock-in/", paths)
        self.assertIn("/api/sales/transactions/{pk}/payments/", paths)


class ErrorReportingSettingsTests(SimpleTestCase):
    def test_sentry_is_off_without_dsn(self):
        self.assertEqual(settings.SENTRY_DSN, "")
        self.assertEqual(settings.SENTRY_ENVIRONMENT, "development")
        self.assertEqual(settings.SENTRY_TRACES_SAMPLE_RATE, 0.0)
        self.assertFalse(settings.SENTRY_SEND_PII)
        self.assertFalse(sentry_sdk.get_client().is_active())

# products/tests/test_stock_intake.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Product, StockBatch, StockEntry
from products.services.stock_fifo import allocate_stock
from products.services.stock_intake import intake_stock

User = get_user_model()


class StockIntakeTests(TestCase):
    """
    Stock-in.

    GUARANTEES:
    - One delivery creates exactly one StockEntry and one StockBatch
    - New batches start full (remaining == initial)
    - Invalid input creates nothing
    """

    def setUp(self):
        self.user = User.objects.create_user(username="gudang", password="password123")
        self.product = Product.objects.create(
            name="Pupuk NPK Phonska 50kg",
            category=Product.Category.PUPUK,
            sell_price=Decimal("190000.00"),
        )

    def test_intake_creates_entry_and_full_batch(self):
        batch = intake_stock(
            product=self.product,
            quantity=40,
            purchase_price="175000",
            batch_date=date(2026, 3, 1),
            notes=" delivery from distributor ",
            user=self.user,
        )

        self.assertEqual(batch.quantity_initial, 40)
        self.assertEqual(batch.quantity_remaining, 40)
        self.assertEqual(batch.purchase_price, Decimal("175000.00"))
        self.assertIsNone(batch.sell_price)
        self.assertEqual(batch.batch_date, date(2026, 3, 1))

        entry = StockEntry.objects.get()
        self.assertEqual(batch.stock_entry, entry)
        self.assertEqual(entry.quantity, 40)
        self.assertEqual(entry.created_by, self.user)
        self.assertEqual(entry.notes, "delivery from distributor")

    def test_intake_refreshes_product_buy_price(self):
        intake_stock(product=self.product, quantity=5, purchase_price="176500.00")

        self.product.refresh_from_db()
        self.assertEqual(self.product.buy_price, Decimal("176500.00"))

    def test_intake_accepts_product_id_and_sell_price_override(self):
        batch = intake_stock(
            product=self.product.pk,
            quantity=3,
            purchase_price="170000",
            sell_price="185000",
        )

        self.assertEqual(batch.product, self.product)
        self.assertEqual(batch.sell_price, Decimal("185000.00"))
        self.assertEqual(batch.effective_sell_price(self.product.sell_price), Decimal("185000.00"))

    def test_batch_without_override_sells_at_product_price(self):
        batch = intake_stock(product=self.product, quantity=4, purchase_price="170000")

        self.assertIsNone(batch.sell_price)
        self.assertEqual(batch.effective_sell_price(self.product.sell_price), self.product.sell_price)

        result = allocate_stock([batch], 2, self.product.sell_price)
        self.assertEqual(
            result.allocations[0].unit_sell_price,
            batch.effective_sell_price(self.product.sell_price),
        )

    def test_remaining_value_tracks_consumption(self):
        batch = intake_stock(product=self.product, quantity=4, purchase_price="170000")
        self.assertEqual(batch.total_remaining_value, Decimal("680000.00"))

        batch.quantity_remaining = 1
        self.assertEqual(batch.total_remaining_value, Decimal("170000.00"))

    def test_zero_quantity_is_rejected(self):
        with self.assertRaises(ValidationError):
            intake_stock(product=self.product, quantity=0, purchase_price="1000")

        self.assertFalse(StockBatch.objects.exists())
        self.assertFalse(StockEntry.objects.exists())

    def test_negative_purchase_price_is_rejected(self):
        with self.assertRaises(ValidationError):
            intake_stock(product=self.product, quantity=1, purchase_price="-1")

        self.assertFalse(StockBatch.objects.exists())

    def test_unknown_product_is_rejected(self):
        with self.assertRaises(ValidationError):
            intake_stock(
                product="00000000-0000-0000-0000-000000000000",
                quantity=1,
                purchase_price="1000",
            )

    def test_stock_entries_are_immutable(self):
        intake_stock(product=self.product, quantity=2, purchase_price="1000")
        entry = StockEntry.objects.get()

        entry.quantity = 99
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

# products/tests/test_seed_coop.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from products.models import Product, StockBatch, StockEntry
from products.services.stock_fifo import list_available_batches
from sales.models import Customer


class SeedCoopCommandTests(TestCase):
    def test_seeds_products_customers_and_two_batches_each(self):
        call_command("seed_coop", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 5)
        self.assertEqual(Customer.objects.count(), 3)
        self.assertEqual(StockBatch.objects.count(), 10)
        self.assertEqual(StockEntry.objects.count(), 10)

        urea = Product.objects.get(name="Pupuk Urea 50kg")
        older, newer = list_available_batches(urea)
        self.assertLess(older.batch_date, newer.batch_date)
        self.assertLess(older.purchase_price, newer.purchase_price)

    def test_is_idempotent(self):
        call_command("seed_coop", stdout=StringIO())
        call_command("seed_coop", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 5)
        self.assertEqual(StockBatch.objects.count(), 10)

    def test_skip_stock(self):
        call_command("seed_coop", "--skip-stock", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 5)
        self.assertFalse(StockBatch.objects.exists())

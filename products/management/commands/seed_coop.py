from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from products.models import Product
from products.services.stock_intake import intake_stock
from sales.models import Customer


class Command(BaseCommand):
    help = "Seed farm-input products, cooperative members, and FIFO stock batches"

    def add_arguments(self, parser):
        parser.add_argument(
            "--skip-stock",
            action="store_true",
            help="Only seed products and customers (no stock-in).",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products, customers and stock..."))

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        products_data = [
            ("Pupuk Urea 50kg", Product.Category.PUPUK, "150000", "165000"),
            ("Pupuk NPK Phonska 50kg", Product.Category.PUPUK, "175000", "190000"),
            ("Pestisida Decis 100ml", Product.Category.OBAT, "45000", "52000"),
            ("Herbisida Gramoxone 1L", Product.Category.OBAT, "85000", "95000"),
            ("Pakan Ayam Petelur 50kg", Product.Category.PAKAN, "380000", "410000"),
        ]

        product_objs = []
        for name, category, buy_price, sell_price in products_data:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "category": category,
                    "buy_price": Decimal(buy_price),
                    "sell_price": Decimal(sell_price),
                },
            )
            product_objs.append(product)

        # -------------------------------
        # CUSTOMERS
        # -------------------------------
        customers_data = [
            ("Pak Slamet", "081234567801", "Dusun Krajan RT 01"),
            ("Bu Sumiati", "081234567802", "Dusun Krajan RT 02"),
            ("Pak Joko", "081234567803", "Dusun Sumberejo RT 03"),
        ]

        for name, phone, address in customers_data:
            Customer.objects.get_or_create(
                name=name,
                defaults={"phone": phone, "address": address},
            )

        if options["skip_stock"]:
            self.stdout.write(self.style.SUCCESS("Products and customers seeded (stock skipped)."))
            return

        # -------------------------------
        # STOCK BATCHES (FIFO)
        # -------------------------------
        today = timezone.localdate()
        for product in product_objs:
            if product.stock_batches.exists():
                continue

            base_cost = Decimal(product.buy_price)
            for i in range(2):  # 2 deliveries per product, older one cheaper
                intake_stock(
                    product=product,
                    quantity=20 + i * 10,
                    purchase_price=base_cost + Decimal(i * 5000),
                    batch_date=today - timedelta(days=60 - i * 30),
                    notes=f"Seed delivery {i + 1}",
                )

        self.stdout.write(self.style.SUCCESS("Products, customers and stock seeded successfully."))

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("pupuk", "Pupuk (fertilizer)"),
                            ("obat", "Obat (pesticide)"),
                            ("pakan", "Pakan (feed)"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "buy_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Latest purchase price per unit (updated on stock-in).",
                        max_digits=14,
                    ),
                ),
                (
                    "sell_price",
                    models.DecimalField(decimal_places=2, help_text="Default selling price per unit.", max_digits=14),
                ),
                ("low_stock_threshold", models.PositiveIntegerField(default=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(fields=["category"], name="product_category_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("purchase_price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_entries",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "stock entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["product", "created_at"], name="stockentry_product_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "purchase_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Unit purchase cost for this batch (COGS basis).",
                        max_digits=14,
                    ),
                ),
                (
                    "sell_price",
                    models.DecimalField(blank=True, decimal_places=2, default=None, max_digits=14, null=True),
                ),
                ("quantity_initial", models.PositiveIntegerField(help_text="Quantity delivered (immutable)")),
                (
                    "quantity_remaining",
                    models.PositiveIntegerField(help_text="Remaining quantity (decrement-only, service-managed)"),
                ),
                ("batch_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_batches",
                        to="products.product",
                    ),
                ),
                (
                    "stock_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_batches",
                        to="products.stockentry",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "stock batches",
                "ordering": ["batch_date", "created_at"],
                "indexes": [
                    models.Index(fields=["product", "batch_date", "created_at"], name="stockbatch_fifo_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity_initial__gt=0),
                        name="chk_stockbatch_qty_initial_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity_remaining__gte=0),
                        name="chk_stockbatch_qty_remaining_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity_remaining__lte=models.F("quantity_initial")),
                        name="chk_stockbatch_remaining_lte_initial",
                    ),
                ],
            },
        ),
    ]

# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum


class Product(models.Model):
    """
    Represents a sellable farm input.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in StockBatch
    - Total stock = sum of quantity_remaining over the product's batches

    PRICING:
    - sell_price is the default selling price used by FIFO allocation
      when a batch carries no sell_price override.
    - buy_price mirrors the latest stock-in purchase price (informational;
      COGS always comes from the batch).
    """

    class Category(models.TextChoices):
        PUPUK = "pupuk", "Pupuk (fertilizer)"
        OBAT = "obat", "Obat (pesticide)"
        PAKAN = "pakan", "Pakan (feed)"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=16, choices=Category.choices)

    buy_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Latest purchase price per unit (updated on stock-in).",
    )

    sell_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Default selling price per unit.",
    )

    low_stock_threshold = models.PositiveIntegerField(default=10)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.category})"

    def clean(self):
        if self.sell_price is None or Decimal(self.sell_price) <= 0:
            raise ValidationError({"sell_price": "sell_price must be greater than zero"})

        if self.buy_price is not None and Decimal(self.buy_price) < 0:
            raise ValidationError({"buy_price": "buy_price cannot be negative"})

    @property
    def stock(self) -> int:
        """
        Total stock derived from batches (display only, non-authoritative).

        There is no independently maintained stock counter: the only
        authority on consumption is the conditional batch decrement.
        """
        return int(
            self.stock_batches.filter(quantity_remaining__gt=0)
            .aggregate(total=Sum("quantity_remaining"))
            .get("total")
            or 0
        )

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= int(self.low_stock_threshold or 0)

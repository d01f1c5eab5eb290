# products/models/stock_entry.py

"""
STOCK ENTRY (STOCK-IN EVENT)

One receipt of goods at the store.

GUARANTEES:
- Append-only (no updates, no deletes)
- Each entry produces exactly ONE StockBatch (see products/services/stock_intake.py)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockEntry(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_entries",
    )

    quantity = models.PositiveIntegerField()

    purchase_price = models.DecimalField(max_digits=14, decimal_places=2)

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "stock entries"
        indexes = [
            models.Index(fields=["product", "created_at"], name="stockentry_product_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockEntry records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockEntry records are immutable and cannot be deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | +{self.quantity} @ {self.purchase_price}"

# products/models/stock_batch_usage.py

"""
STOCK BATCH USAGE (FIFO CONSUMPTION LEDGER)

Immutable record of units drawn from one batch to fulfil one transaction item.

GUARANTEES:
- Append-only (no updates, no deletes)
- unit_cost is the cost captured at allocation time, never re-read from the
  batch later, so historical COGS is stable
- One TransactionItem may reference several usages (line spanning batches)
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .stock_batch import StockBatch


class StockBatchUsage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    stock_batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="usages",
    )

    transaction_item = models.ForeignKey(
        "sales.TransactionItem",
        on_delete=models.PROTECT,
        related_name="batch_usages",
    )

    quantity_used = models.PositiveIntegerField()

    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Unit cost snapshot at allocation time (immutable).",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["transaction_item", "created_at"], name="batchusage_item_idx"),
            models.Index(fields=["stock_batch", "created_at"], name="batchusage_batch_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_used__gt=0),
                name="chk_stockbatchusage_qty_used_gt_zero",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockBatchUsage records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockBatchUsage records are immutable and cannot be deleted"
        )

    @property
    def total_cost(self) -> Decimal:
        return Decimal(str(self.unit_cost)) * Decimal(int(self.quantity_used or 0))

    def __str__(self):
        return f"{self.stock_batch_id} -> {self.transaction_item_id} | {self.quantity_used} @ {self.unit_cost}"

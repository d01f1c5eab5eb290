# sales/models/transaction_item.py

"""
TRANSACTION ITEM (IMMUTABLE SNAPSHOT)

One sold line of a yarnen transaction.

Notes:
- Created by the checkout orchestrator only AFTER a successful FIFO allocation,
  so cost/profit snapshot fields are written once, at creation.
- subtotal is the allocation revenue (batch sell_price override or product
  default, per unit drawn); unit_price is its per-unit average.
- Which batches fulfilled the line lives in StockBatchUsage (batch_usages).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from products.models import Product


class TransactionItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction = models.ForeignKey(
        "sales.Transaction",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="transaction_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=14, decimal_places=2)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2)

    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="FIFO weighted-average unit cost at time of sale (snapshot).",
    )

    cost_of_goods = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total FIFO cost for this line (snapshot).",
    )

    profit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Line profit = subtotal - cost_of_goods.",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["transaction", "created_at"], name="txitem_transaction_idx"),
            models.Index(fields=["product", "created_at"], name="txitem_product_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_transactionitem_qty_gt_zero",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("TransactionItem records are immutable")

        # Keep profit consistent with the snapshot it is derived from.
        self.profit = Decimal(str(self.subtotal)) - Decimal(str(self.cost_of_goods))

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product} x {self.quantity}"

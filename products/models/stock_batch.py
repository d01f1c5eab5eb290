# products/models/stock_batch.py

"""
STOCK BATCH (DELIVERY-BASED INVENTORY)

Represents ONE incoming delivery of a product at one purchase price.

CANONICAL MODEL:
- StockBatch = one stock-in event
- quantity_initial, purchase_price, sell_price, batch_date are immutable after creation
- quantity_remaining is mutated ONLY by the FIFO usage recorder,
  through an atomic conditional UPDATE (never via save())
- Non-deletable (append-only ledger for audit)

FIFO ORDER:
- (batch_date, created_at) ascending; created_at breaks ties between
  batches received on the same batch_date.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from .product import Product
from .stock_entry import StockEntry


def resolve_sell_price(sell_price, default_sell_price) -> Decimal:
    """Selling price for units drawn from a batch: its override, else the product default."""
    if sell_price is not None:
        return Decimal(str(sell_price))
    return Decimal(str(default_sell_price))


class StockBatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_batches",
    )

    stock_entry = models.ForeignKey(
        StockEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_batches",
    )

    purchase_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Unit purchase cost for this batch (COGS basis).",
    )

    # Optional per-batch selling price; NULL means "use Product.sell_price".
    sell_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
    )

    quantity_initial = models.PositiveIntegerField(
        help_text="Quantity delivered (immutable)"
    )

    quantity_remaining = models.PositiveIntegerField(
        help_text="Remaining quantity (decrement-only, service-managed)",
    )

    batch_date = models.DateField(default=timezone.localdate)

    created_at = models.DateTimeField(auto_now_add=True)

    _IMMUTABLE_FIELDS = (
        "product_id",
        "purchase_price",
        "sell_price",
        "quantity_initial",
        "batch_date",
    )

    class Meta:
        ordering = ["batch_date", "created_at"]
        verbose_name_plural = "stock batches"
        indexes = [
            models.Index(fields=["product", "batch_date", "created_at"], name="stockbatch_fifo_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_initial__gt=0),
                name="chk_stockbatch_qty_initial_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_remaining__gte=0),
                name="chk_stockbatch_qty_remaining_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_remaining__lte=F("quantity_initial")),
                name="chk_stockbatch_remaining_lte_initial",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.quantity_initial is None or self.quantity_initial <= 0:
            raise ValidationError(
                {"quantity_initial": "quantity_initial must be greater than zero"}
            )

        if self.quantity_remaining is None or self.quantity_remaining < 0:
            raise ValidationError(
                {"quantity_remaining": "quantity_remaining cannot be negative"}
            )

        if self.quantity_remaining > self.quantity_initial:
            raise ValidationError(
                {"quantity_remaining": "quantity_remaining cannot exceed quantity_initial"}
            )

        if self.purchase_price is None or Decimal(self.purchase_price) < Decimal("0.00"):
            raise ValidationError({"purchase_price": "purchase_price cannot be negative"})

        if self.sell_price is not None and Decimal(self.sell_price) <= Decimal("0.00"):
            raise ValidationError({"sell_price": "sell_price must be greater than zero"})

    # -------------------------------------------------
    # IMMUTABILITY
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        self.full_clean()

        if not self._state.adding:
            original = StockBatch.objects.get(pk=self.pk)

            for field in self._IMMUTABLE_FIELDS:
                if getattr(self, field) != getattr(original, field):
                    raise ValidationError({field: f"{field} is immutable"})

            if self.quantity_remaining != original.quantity_remaining:
                raise ValidationError(
                    {
                        "quantity_remaining": (
                            "quantity_remaining is decrement-only via the FIFO usage recorder"
                        )
                    }
                )

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockBatch records are append-only and cannot be deleted")

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    def effective_sell_price(self, default_sell_price) -> Decimal:
        return resolve_sell_price(self.sell_price, default_sell_price)

    @property
    def total_remaining_value(self) -> Decimal:
        """Inventory valuation for the remaining quantity in this batch."""
        return Decimal(str(self.purchase_price)) * Decimal(int(self.quantity_remaining or 0))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.batch_date} | {self.quantity_remaining}/{self.quantity_initial}"

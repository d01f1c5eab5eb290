# products/services/stock_intake.py

"""
STOCK INTAKE / STOCK-IN (APPLICATION SERVICE)

Purpose:
- Intake stock ONLY via a stock-in event (one delivery = one batch).
- Capture the immutable purchase price (COGS basis) on the batch.
- Optional batch sell_price override for deliveries priced differently.
- Keep everything atomic and audit-safe.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from products.models import Product, StockBatch, StockEntry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v, *, field_name: str) -> Decimal:
    if v is None or v == "":
        raise ValidationError({field_name: f"{field_name} is required"})
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except Exception as exc:
        raise ValidationError({field_name: f"{field_name} must be a valid decimal"}) from exc


def _to_positive_int(value, *, field_name: str) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError({field_name: f"{field_name} must be a whole number"})
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field_name: f"{field_name} must be a whole number"})
    if v != value and str(v) != str(value).strip():
        raise ValidationError({field_name: f"{field_name} must be a whole number"})
    if v <= 0:
        raise ValidationError({field_name: f"{field_name} must be greater than zero"})
    return v


@transaction.atomic
def intake_stock(
    *,
    product,
    quantity,
    purchase_price,
    sell_price=None,
    batch_date=None,
    notes: str = "",
    user=None,
) -> StockBatch:
    """
    Receive a delivery.

    Creates:
    - StockEntry (the stock-in event)
    - StockBatch (quantity_remaining initialized to quantity_initial)

    Also refreshes Product.buy_price to the latest purchase price.
    """
    if not product:
        raise ValidationError("Product is required")

    if not isinstance(product, Product):
        try:
            product = Product.objects.get(pk=product)
        except Product.DoesNotExist:
            raise ValidationError({"product": "Invalid product ID"})

    qty = _to_positive_int(quantity, field_name="quantity")

    cost = _money(purchase_price, field_name="purchase_price")
    if cost < Decimal("0.00"):
        raise ValidationError({"purchase_price": "purchase_price cannot be negative"})

    override = None
    if sell_price not in (None, ""):
        override = _money(sell_price, field_name="sell_price")
        if override <= Decimal("0.00"):
            raise ValidationError({"sell_price": "sell_price must be greater than zero"})

    entry = StockEntry.objects.create(
        product=product,
        quantity=qty,
        purchase_price=cost,
        notes=(notes or "").strip(),
        created_by=user,
    )

    batch = StockBatch.objects.create(
        product=product,
        stock_entry=entry,
        purchase_price=cost,
        sell_price=override,
        quantity_initial=qty,
        quantity_remaining=qty,
        batch_date=batch_date or timezone.localdate(),
    )

    if product.buy_price != cost:
        product.buy_price = cost
        product.save(update_fields=["buy_price"])

    logger.info(
        "Stock received",
        extra={
            "product_id": str(product.pk),
            "batch_id": str(batch.pk),
            "quantity": qty,
            "purchase_price": str(cost),
        },
    )

    return batch

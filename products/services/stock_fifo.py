# products/services/stock_fifo.py

"""
FIFO STOCK ENGINE

Purpose:
- List a product's available batches in FIFO order (oldest batch_date first,
  created_at as tie-break).
- Allocate a requested quantity across those batches (PURE: no I/O, inputs
  never mutated) and compute COGS + revenue.
- Record an allocation: insert StockBatchUsage rows and decrement each batch
  with an atomic conditional UPDATE.
- Weighted-average unit cost of an allocation.

HARD RULES:
- Quantities are integer units.
- Money is Decimal end to end (no float drift across repeated allocations).
- quantity_remaining is NEVER written via read-modify-write in Python.
  The conditional decrement is the only authority on consumption:
      UPDATE stock_batch
         SET quantity_remaining = quantity_remaining - :qty
       WHERE id = :batch_id AND quantity_remaining >= :qty
  Zero rows updated means a concurrent sale consumed the stock first.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import F

from products.models import Product, StockBatch, StockBatchUsage
from products.models.stock_batch import resolve_sell_price

from .allocation import AllocationResult, BatchAllocation
from .exceptions import ConcurrentOversellError, PersistenceFailureError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


def _to_decimal(value, *, field_name: str) -> Decimal:
    if value is None or value == "":
        raise ValueError(f"{field_name} is required")
    if isinstance(value, float):
        # Going through str() keeps the shortest repr, not the binary expansion.
        value = str(value)
    try:
        return Decimal(str(value))
    except Exception as exc:
        raise ValueError(f"{field_name} must be a valid decimal") from exc


# ============================================================
# BATCH REPOSITORY
# ============================================================

def list_available_batches(product) -> list[StockBatch]:
    """
    Batches with positive remaining stock, oldest first.

    Non-authoritative snapshot: callers must re-read immediately before
    each allocation, never reuse a snapshot across checkout lines.
    """
    product_id = product.pk if isinstance(product, Product) else product
    if not product_id:
        raise ValueError("product is required")

    return list(
        StockBatch.objects.filter(product_id=product_id, quantity_remaining__gt=0)
        .order_by("batch_date", "created_at", "id")
    )


# ============================================================
# FIFO ALLOCATOR (PURE)
# ============================================================

def allocate_stock(batches, quantity_needed, default_sell_price) -> AllocationResult:
    """
    Allocate `quantity_needed` units across `batches` in the given order.

    `batches` must already be FIFO-sorted (see list_available_batches). Each
    batch needs `id`, `quantity_remaining`, `purchase_price` and an optional
    `sell_price` override; a missing/None override falls back to
    `default_sell_price`.

    Shortfall is returned as data (success=False, no allocations, zero totals).
    A non-positive quantity is a caller error and raises ValueError.
    """
    needed = _to_int_qty(quantity_needed)
    if needed <= 0:
        raise ValueError("quantity_needed must be greater than zero")

    default_price = _to_decimal(default_sell_price, field_name="default_sell_price")

    batch_list = list(batches or [])
    total_available = sum(
        max(_to_int_qty(getattr(b, "quantity_remaining", 0) or 0), 0) for b in batch_list
    )

    if total_available < needed:
        return AllocationResult(
            success=False,
            error=(
                f"Insufficient stock in batches. Need {needed}, "
                f"but only {total_available} available in batches."
            ),
            quantity_requested=needed,
            quantity_available=total_available,
        )

    allocations = []
    remaining = needed
    total_cogs = ZERO
    total_revenue = ZERO

    for batch in batch_list:
        if remaining <= 0:
            break

        available = _to_int_qty(getattr(batch, "quantity_remaining", 0) or 0)
        if available <= 0:
            continue

        to_use = min(remaining, available)

        unit_cost = _to_decimal(getattr(batch, "purchase_price", None), field_name="purchase_price")
        sell_price = resolve_sell_price(getattr(batch, "sell_price", None), default_price)

        allocations.append(
            BatchAllocation(
                batch_id=batch.id,
                quantity=to_use,
                unit_cost=unit_cost,
                unit_sell_price=sell_price,
            )
        )

        total_cogs += unit_cost * to_use
        total_revenue += sell_price * to_use
        remaining -= to_use

    return AllocationResult(
        allocations=tuple(allocations),
        total_cogs=total_cogs,
        total_revenue=total_revenue,
        success=True,
        quantity_requested=needed,
        quantity_available=total_available,
    )


# ============================================================
# BATCH USAGE RECORDER (TRANSACTIONAL)
# ============================================================

def record_batch_usage(transaction_item_id, allocations) -> None:
    """
    Persist one StockBatchUsage per allocation, then decrement each batch.

    Runs in its own atomic block (a savepoint when the caller already holds a
    transaction). Any failure rolls back every usage row and decrement made by
    this call before the error propagates:
    - ConcurrentOversellError: a conditional decrement matched no row
    - PersistenceFailureError: the database rejected a write
    """
    if not transaction_item_id:
        raise ValueError("transaction_item_id is required")

    allocation_list = list(allocations or [])
    if not allocation_list:
        raise ValueError("allocations are required")

    for allocation in allocation_list:
        if _to_int_qty(allocation.quantity) <= 0:
            raise ValueError("allocation quantity must be greater than zero")

    try:
        with transaction.atomic():
            StockBatchUsage.objects.bulk_create(
                [
                    StockBatchUsage(
                        transaction_item_id=transaction_item_id,
                        stock_batch_id=allocation.batch_id,
                        quantity_used=allocation.quantity,
                        unit_cost=allocation.unit_cost,
                    )
                    for allocation in allocation_list
                ]
            )

            for allocation in allocation_list:
                updated = StockBatch.objects.filter(
                    pk=allocation.batch_id,
                    quantity_remaining__gte=allocation.quantity,
                ).update(quantity_remaining=F("quantity_remaining") - allocation.quantity)

                if updated != 1:
                    logger.warning(
                        "Batch decrement rejected: insufficient remaining quantity",
                        extra={
                            "batch_id": str(allocation.batch_id),
                            "quantity": allocation.quantity,
                            "transaction_item_id": str(transaction_item_id),
                        },
                    )
                    raise ConcurrentOversellError(
                        f"Batch {allocation.batch_id} no longer has {allocation.quantity} "
                        "units remaining (consumed by a concurrent sale).",
                        batch_id=allocation.batch_id,
                        quantity=allocation.quantity,
                    )
    except DatabaseError as exc:
        logger.error(
            "Batch usage persistence failed",
            extra={"transaction_item_id": str(transaction_item_id)},
        )
        raise PersistenceFailureError(f"Failed to record batch usage: {exc}") from exc

    logger.debug(
        "Recorded batch usage",
        extra={
            "transaction_item_id": str(transaction_item_id),
            "batches": len(allocation_list),
            "quantity": sum(a.quantity for a in allocation_list),
        },
    )


# ============================================================
# AVERAGE COST
# ============================================================

def calculate_average_cost(allocations, quantity) -> Decimal:
    """
    Weighted average unit cost: sum(quantity * unit_cost) / quantity.
    Returns 0 for a zero quantity.
    """
    qty = _to_int_qty(quantity)
    if qty == 0:
        return ZERO

    total_cost = sum(
        (Decimal(str(a.unit_cost)) * a.quantity for a in allocations or []),
        ZERO,
    )
    return total_cost / qty

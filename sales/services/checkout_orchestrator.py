# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn a cart (ordered product/quantity lines) into a yarnen Transaction.
- Cost every line with the FIFO engine and consume the batches it drew from.

Hard rules:
- Quantities are integer units; a line quantity of zero is rejected here,
  at the boundary, before the allocator ever sees it.
- Lines are processed in cart order.
- Batches are re-read immediately before EACH line's allocation; a snapshot
  is never reused across lines.
- The whole checkout is ONE DB transaction: the transaction row, its items,
  batch usages and batch decrements succeed together or roll back together.
  No partial invoice is ever visible.

Lost decrement races:
- Each line is recorded inside a savepoint. If the conditional decrement is
  rejected (ConcurrentOversellError) the savepoint rolls back the item and its
  usages, and the line is re-allocated against fresh batch state, up to
  settings.FIFO_ALLOCATION_MAX_ATTEMPTS attempts.

Storage failures:
- Any DatabaseError (including one raised by the usage recorder) rolls the
  whole checkout back and is re-raised as CheckoutStorageError.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from products.models import Product
from products.services.exceptions import (
    ConcurrentOversellError,
    InsufficientStockError,
    PersistenceFailureError,
)
from products.services.stock_fifo import (
    allocate_stock,
    calculate_average_cost,
    list_available_batches,
    record_batch_usage,
)
from sales.models import Customer, Transaction, TransactionItem

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_int_qty(value) -> int:
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


class CheckoutError(Exception):
    """Base checkout exception"""


class EmptyCartError(CheckoutError):
    pass


class StockValidationError(CheckoutError):
    pass


class CheckoutStorageError(CheckoutError):
    """The database rejected a checkout write; nothing was saved."""


def _resolve_customer(customer) -> Customer:
    if customer is None:
        raise CheckoutError("customer is required for a yarnen sale")
    if isinstance(customer, Customer):
        return customer
    try:
        return Customer.objects.get(pk=customer)
    except (Customer.DoesNotExist, ValidationError):
        raise CheckoutError(f"Unknown customer: {customer}")


def _normalize_lines(lines) -> list[tuple[Product, int]]:
    """
    lines: list of dicts {product: Product|id, quantity: int}
    Returns [(Product, qty)] in cart order.
    """
    if not lines:
        raise EmptyCartError("Cart is empty")

    out = []
    for idx, line in enumerate(lines):
        product = line.get("product") or line.get("product_id")
        if product is None:
            raise CheckoutError(f"Cart line {idx} has no product")

        if not isinstance(product, Product):
            try:
                product = Product.objects.get(pk=product)
            except (Product.DoesNotExist, ValidationError):
                raise CheckoutError(f"Unknown product on cart line {idx}: {product}")

        try:
            qty = _to_int_qty(line.get("quantity"))
        except ValueError:
            raise StockValidationError(
                f"Invalid quantity for {product.name}. Quantity must be a whole number."
            )

        if qty <= 0:
            raise StockValidationError(
                f"Invalid quantity for {product.name}. Quantity must be at least 1."
            )

        out.append((product, qty))

    return out


def _checkout_line(*, sale: Transaction, product: Product, quantity: int) -> TransactionItem:
    max_attempts = int(getattr(settings, "FIFO_ALLOCATION_MAX_ATTEMPTS", 3) or 1)

    for attempt in range(1, max_attempts + 1):
        batches = list_available_batches(product)
        result = allocate_stock(batches, quantity, product.sell_price)

        if not result.success:
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. "
                f"Requested: {result.quantity_requested}, Available: {result.quantity_available}",
                requested=result.quantity_requested,
                available=result.quantity_available,
                product_name=product.name,
            )

        subtotal = _money(result.total_revenue)
        cogs = _money(result.total_cogs)

        try:
            with transaction.atomic():
                item = TransactionItem.objects.create(
                    transaction=sale,
                    product=product,
                    quantity=quantity,
                    unit_price=_money(result.total_revenue / quantity),
                    subtotal=subtotal,
                    unit_cost=_money(calculate_average_cost(result.allocations, quantity)),
                    cost_of_goods=cogs,
                )
                record_batch_usage(item.pk, result.allocations)
        except ConcurrentOversellError as exc:
            logger.warning(
                "Checkout line lost a batch decrement race; re-allocating",
                extra={
                    "invoice_number": sale.invoice_number,
                    "product_id": str(product.pk),
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "batch_id": str(exc.batch_id),
                },
            )
            continue

        return item

    raise StockValidationError(
        f"Stock for {product.name} is being consumed by concurrent sales. "
        "Please retry the checkout."
    )


def checkout(*, user, customer, lines, notes: str = "") -> Transaction:
    """
    Create a yarnen Transaction from cart lines.

    Raises:
    - EmptyCartError: no lines
    - StockValidationError: bad quantity, insufficient stock, or repeated lost races
    - CheckoutStorageError: the database rejected a write (rolled back)
    - CheckoutError: unknown or malformed customer/product
    """
    try:
        return _checkout_atomic(user=user, customer=customer, lines=lines, notes=notes)
    except (DatabaseError, PersistenceFailureError) as exc:
        logger.error(
            "Checkout failed on a storage error; rolled back",
            extra={"error": str(exc), "error_type": type(exc).__name__},
        )
        raise CheckoutStorageError(f"Checkout could not be saved: {exc}") from exc


@transaction.atomic
def _checkout_atomic(*, user, customer, lines, notes):
    customer = _resolve_customer(customer)
    normalized = _normalize_lines(lines)

    sale = Transaction.objects.create(
        customer=customer,
        created_by=user if getattr(user, "is_authenticated", False) else None,
        total_amount=Decimal("0.00"),
        total_cogs=Decimal("0.00"),
        paid_amount=Decimal("0.00"),
        status=Transaction.STATUS_UNPAID,
        notes=(notes or "").strip(),
    )

    total = Decimal("0.00")
    total_cogs = Decimal("0.00")

    try:
        for product, qty in normalized:
            item = _checkout_line(sale=sale, product=product, quantity=qty)
            total += item.subtotal
            total_cogs += item.cost_of_goods
    except InsufficientStockError as exc:
        raise StockValidationError(str(exc)) from exc

    sale.total_amount = _money(total)
    sale.total_cogs = _money(total_cogs)
    sale.save(update_fields=["total_amount", "total_cogs", "updated_at"])

    logger.info(
        "Checkout completed",
        extra={
            "invoice_number": sale.invoice_number,
            "customer_id": str(customer.pk),
            "lines": len(normalized),
            "total_amount": str(sale.total_amount),
            "total_cogs": str(sale.total_cogs),
        },
    )

    return sale

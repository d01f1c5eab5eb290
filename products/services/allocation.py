# products/services/allocation.py

"""
FIFO ALLOCATION VALUE TYPES

Transient, immutable results produced by allocate_stock() and consumed by
record_batch_usage(). Never persisted as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple

ZERO = Decimal("0")


@dataclass(frozen=True)
class BatchAllocation:
    """A decision to draw `quantity` units from one batch."""

    batch_id: object
    quantity: int
    unit_cost: Decimal
    unit_sell_price: Decimal

    @property
    def cost_amount(self) -> Decimal:
        return self.unit_cost * self.quantity

    @property
    def revenue_amount(self) -> Decimal:
        return self.unit_sell_price * self.quantity


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of attempting to satisfy a requested quantity."""

    allocations: Tuple[BatchAllocation, ...] = field(default_factory=tuple)
    total_cogs: Decimal = ZERO
    total_revenue: Decimal = ZERO
    success: bool = False
    error: Optional[str] = None
    quantity_requested: int = 0
    quantity_available: int = 0

    @property
    def quantity_allocated(self) -> int:
        return sum(a.quantity for a in self.allocations)

    @property
    def gross_profit(self) -> Decimal:
        return self.total_revenue - self.total_cogs

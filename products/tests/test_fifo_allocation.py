# products/tests/test_fifo_allocation.py

from dataclasses import FrozenInstanceError
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from django.test import SimpleTestCase

from products.services.allocation import BatchAllocation
from products.models.stock_batch import resolve_sell_price
from products.services.stock_fifo import allocate_stock, calculate_average_cost


def _batch(remaining, cost, sell_price=None):
    return SimpleNamespace(
        id=uuid4(),
        quantity_remaining=remaining,
        purchase_price=Decimal(cost),
        sell_price=None if sell_price is None else Decimal(sell_price),
    )


class AllocateStockTests(SimpleTestCase):
    """
    Pure FIFO allocator.

    GUARANTEES:
    - Oldest batch is drained first
    - Allocated quantities sum exactly to the request
    - COGS / revenue are exact Decimal sums
    - Shortfall is returned as data, never raised
    """

    def test_request_spanning_two_batches_drains_oldest_first(self):
        older = _batch(5, "100")
        newer = _batch(10, "120")

        result = allocate_stock([older, newer], 8, Decimal("150"))

        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual(
            [(a.batch_id, a.quantity, a.unit_cost) for a in result.allocations],
            [(older.id, 5, Decimal("100")), (newer.id, 3, Decimal("120"))],
        )
        self.assertEqual(result.total_cogs, Decimal("860"))
        self.assertEqual(result.total_revenue, Decimal("1200"))
        self.assertEqual(result.quantity_allocated, 8)

    def test_shortfall_returns_failure_without_allocations(self):
        result = allocate_stock([_batch(5, "100")], 8, Decimal("150"))

        self.assertFalse(result.success)
        self.assertEqual(result.allocations, ())
        self.assertEqual(result.total_cogs, Decimal("0"))
        self.assertEqual(result.total_revenue, Decimal("0"))
        self.assertEqual(result.quantity_requested, 8)
        self.assertEqual(result.quantity_available, 5)
        self.assertIn("Need 8", result.error)
        self.assertIn("only 5 available", result.error)

    def test_no_batches_is_a_shortfall(self):
        result = allocate_stock([], 1, Decimal("10"))

        self.assertFalse(result.success)
        self.assertEqual(result.quantity_available, 0)

    def test_sell_price_override_applies_only_to_its_batch(self):
        older = _batch(4, "100", sell_price="130")
        newer = _batch(10, "110")

        result = allocate_stock([older, newer], 6, Decimal("150"))

        self.assertTrue(result.success)
        self.assertEqual(result.allocations[0].unit_sell_price, Decimal("130"))
        self.assertEqual(result.allocations[1].unit_sell_price, Decimal("150"))
        # 4 x 130 + 2 x 150
        self.assertEqual(result.total_revenue, Decimal("820"))
        self.assertEqual(result.total_cogs, Decimal("620"))
        self.assertEqual(result.gross_profit, Decimal("200"))

    def test_exact_fit_uses_whole_batch(self):
        only = _batch(7, "25.50")

        result = allocate_stock([only], 7, "30")

        self.assertTrue(result.success)
        self.assertEqual(len(result.allocations), 1)
        self.assertEqual(result.allocations[0].quantity, 7)
        self.assertEqual(result.total_cogs, Decimal("178.50"))

    def test_empty_batches_are_skipped(self):
        drained = _batch(0, "90")
        fresh = _batch(3, "95")

        result = allocate_stock([drained, fresh], 2, Decimal("100"))

        self.assertTrue(result.success)
        self.assertEqual([a.batch_id for a in result.allocations], [fresh.id])

    def test_inputs_are_not_mutated_and_result_is_repeatable(self):
        batches = [_batch(5, "100"), _batch(10, "120")]

        first = allocate_stock(batches, 8, Decimal("150"))
        second = allocate_stock(batches, 8, Decimal("150"))

        self.assertEqual(first, second)
        self.assertEqual([b.quantity_remaining for b in batches], [5, 10])

    def test_cogs_has_no_float_drift(self):
        batches = [_batch(3, "0.10"), _batch(3, "0.20")]

        result = allocate_stock(batches, 6, "0.30")

        self.assertEqual(result.total_cogs, Decimal("0.90"))
        self.assertEqual(result.total_revenue, Decimal("1.80"))

    def test_zero_quantity_is_rejected(self):
        with self.assertRaises(ValueError):
            allocate_stock([_batch(5, "100")], 0, Decimal("150"))

    def test_negative_quantity_is_rejected(self):
        with self.assertRaises(ValueError):
            allocate_stock([_batch(5, "100")], -2, Decimal("150"))

    def test_fractional_quantity_is_rejected(self):
        with self.assertRaises(ValueError):
            allocate_stock([_batch(5, "100")], Decimal("1.5"), Decimal("150"))

    def test_allocation_values_are_frozen(self):
        result = allocate_stock([_batch(5, "100")], 2, Decimal("150"))

        with self.assertRaises(FrozenInstanceError):
            result.allocations[0].quantity = 99


class AverageCostTests(SimpleTestCase):
    def test_weighted_average_across_batches(self):
        allocations = [
            BatchAllocation(batch_id=uuid4(), quantity=5, unit_cost=Decimal("100"), unit_sell_price=Decimal("150")),
            BatchAllocation(batch_id=uuid4(), quantity=3, unit_cost=Decimal("120"), unit_sell_price=Decimal("150")),
        ]

        self.assertEqual(calculate_average_cost(allocations, 8), Decimal("107.5"))

    def test_zero_quantity_returns_zero(self):
        self.assertEqual(calculate_average_cost([], 0), Decimal("0"))

    def test_single_batch_average_is_its_cost(self):
        allocations = [
            BatchAllocation(batch_id=uuid4(), quantity=4, unit_cost=Decimal("42.25"), unit_sell_price=Decimal("50")),
        ]

        self.assertEqual(calculate_average_cost(allocations, 4), Decimal("42.25"))


class ResolveSellPriceTests(SimpleTestCase):
    def test_batch_override_wins(self):
        self.assertEqual(resolve_sell_price(Decimal("130"), "150"), Decimal("130"))

    def test_missing_override_falls_back_to_product_price(self):
        self.assertEqual(resolve_sell_price(None, "150"), Decimal("150"))

    def test_zero_override_is_still_an_override(self):
        self.assertEqual(resolve_sell_price(Decimal("0"), "150"), Decimal("0"))

# sales/tests/test_payments.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Product, StockBatch
from sales.models import Customer, Payment, Transaction
from sales.services.balance_service import (
    customer_outstanding_balance,
    top_debtors,
    total_outstanding_debt,
)
from sales.services.checkout_orchestrator import checkout
from sales.services.payment_service import PaymentError, record_payment

User = get_user_model()


class YarnenFixtureMixin:
    def setUp(self):
        self.user = User.objects.create_user(username="bendahara", password="password123")
        self.product = Product.objects.create(
            name="Pakan Ayam Petelur 50kg",
            category=Product.Category.PAKAN,
            sell_price=Decimal("150.00"),
        )
        StockBatch.objects.create(
            product=self.product,
            purchase_price=Decimal("100.00"),
            quantity_initial=100,
            quantity_remaining=100,
        )

    def sell(self, customer, qty):
        return checkout(
            user=self.user,
            customer=customer,
            lines=[{"product": self.product, "quantity": qty}],
        )


class RecordPaymentTests(YarnenFixtureMixin, TestCase):
    """
    Repayments.

    GUARANTEES:
    - paid_amount never exceeds total_amount
    - status follows the balance (unpaid -> partial -> paid)
    - Payments are write-once
    """

    def setUp(self):
        super().setUp()
        self.customer = Customer.objects.create(name="Pak Karyo")
        self.sale = self.sell(self.customer, 2)

    def test_partial_then_full_payment(self):
        record_payment(transaction=self.sale, amount="100", user=self.user, notes="panen pertama")

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.paid_amount, Decimal("100.00"))
        self.assertEqual(self.sale.status, Transaction.STATUS_PARTIAL)
        self.assertEqual(self.sale.outstanding_amount, Decimal("200.00"))

        payment = record_payment(transaction=self.sale.pk, amount=Decimal("200.00"))

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.status, Transaction.STATUS_PAID)
        self.assertEqual(self.sale.outstanding_amount, Decimal("0.00"))
        self.assertIsNone(payment.received_by)
        self.assertEqual(self.sale.payments.count(), 2)

    def test_overpayment_is_rejected(self):
        with self.assertRaises(PaymentError):
            record_payment(transaction=self.sale, amount="300.01")

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.paid_amount, Decimal("0.00"))
        self.assertFalse(Payment.objects.exists())

    def test_zero_amount_is_rejected(self):
        with self.assertRaises(PaymentError):
            record_payment(transaction=self.sale, amount="0")

    def test_paid_transaction_accepts_no_more_payments(self):
        record_payment(transaction=self.sale, amount="300")

        with self.assertRaises(PaymentError):
            record_payment(transaction=self.sale, amount="1")

    def test_payments_are_immutable(self):
        payment = record_payment(transaction=self.sale, amount="50")

        payment.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            payment.save()
        with self.assertRaises(ValidationError):
            payment.delete()

    def test_status_for(self):
        self.assertEqual(
            Transaction.status_for(total_amount="300", paid_amount="0"),
            Transaction.STATUS_UNPAID,
        )
        self.assertEqual(
            Transaction.status_for(total_amount="300", paid_amount="0.01"),
            Transaction.STATUS_PARTIAL,
        )
        self.assertEqual(
            Transaction.status_for(total_amount="300", paid_amount="300"),
            Transaction.STATUS_PAID,
        )


class BalanceServiceTests(YarnenFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.karyo = Customer.objects.create(name="Pak Karyo")
        self.sumi = Customer.objects.create(name="Bu Sumi")
        self.lunas = Customer.objects.create(name="Pak Lunas")

        self.sell(self.karyo, 2)  # 300
        karyo_second = self.sell(self.karyo, 1)  # 150
        record_payment(transaction=karyo_second, amount="50")

        self.sell(self.sumi, 6)  # 900

        paid_off = self.sell(self.lunas, 1)
        record_payment(transaction=paid_off, amount="150")

    def test_customer_outstanding_balance(self):
        self.assertEqual(customer_outstanding_balance(self.karyo), Decimal("400.00"))
        self.assertEqual(customer_outstanding_balance(self.sumi.pk), Decimal("900.00"))
        self.assertEqual(customer_outstanding_balance(self.lunas), Decimal("0.00"))

    def test_total_outstanding_debt(self):
        self.assertEqual(total_outstanding_debt(), Decimal("1300.00"))

    def test_top_debtors_orders_by_debt_and_skips_settled(self):
        rows = top_debtors()

        self.assertEqual([r["customer"] for r in rows], [self.sumi, self.karyo])
        self.assertEqual([r["total_debt"] for r in rows], [Decimal("900.00"), Decimal("400.00")])

    def test_top_debtors_respects_limit(self):
        rows = top_debtors(limit=1)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["customer"], self.sumi)

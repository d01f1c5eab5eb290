# sales/services/payment_service.py

"""
YARNEN PAYMENT SERVICE

Purpose:
- Record a repayment against an outstanding transaction (at harvest, or in
  instalments before it).

Rules:
- 0 < amount <= outstanding (total_amount - paid_amount), 2dp exact
- The transaction row is locked while its balance is checked and updated,
  so two cashiers cannot both accept the last instalment
- status is derived: unpaid / partial / paid
"""

from decimal import ROUND_HALF_UP, Decimal
import logging

from django.db import transaction as db_transaction

from sales.models import Payment, Transaction

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


class PaymentError(ValueError):
    pass


def _money(v) -> Decimal:
    try:
        return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except Exception as exc:
        raise PaymentError("amount must be a valid decimal") from exc


@db_transaction.atomic
def record_payment(*, transaction, amount, user=None, notes: str = "") -> Payment:
    if transaction is None:
        raise PaymentError("transaction is required")

    pk = transaction.pk if isinstance(transaction, Transaction) else transaction

    try:
        sale = Transaction.objects.select_for_update().get(pk=pk)
    except Transaction.DoesNotExist:
        raise PaymentError(f"Unknown transaction: {pk}")

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise PaymentError("Payment amount must be greater than zero")

    outstanding = _money(sale.total_amount) - _money(sale.paid_amount)
    if outstanding <= Decimal("0.00"):
        raise PaymentError(f"Transaction {sale.invoice_number} is already fully paid")

    if amt > outstanding:
        logger.warning(
            "Payment rejected: amount exceeds outstanding balance",
            extra={
                "invoice_number": sale.invoice_number,
                "amount": str(amt),
                "outstanding": str(outstanding),
            },
        )
        raise PaymentError(
            f"Payment exceeds outstanding balance. Outstanding: {outstanding}, Amount: {amt}"
        )

    payment = Payment.objects.create(
        transaction=sale,
        received_by=user if getattr(user, "is_authenticated", False) else None,
        amount=amt,
        notes=(notes or "").strip(),
    )

    sale.paid_amount = _money(sale.paid_amount) + amt
    sale.status = Transaction.status_for(
        total_amount=sale.total_amount,
        paid_amount=sale.paid_amount,
    )
    sale.save(update_fields=["paid_amount", "status", "updated_at"])

    logger.info(
        "Payment recorded",
        extra={
            "invoice_number": sale.invoice_number,
            "amount": str(amt),
            "status": sale.status,
        },
    )

    return payment

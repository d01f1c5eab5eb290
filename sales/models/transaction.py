# sales/models/transaction.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

User = settings.AUTH_USER_MODEL


def generate_invoice_number() -> str:
    prefix = getattr(settings, "INVOICE_PREFIX", "INV") or "INV"
    return f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


class Transaction(models.Model):
    """
    A yarnen sale: goods taken now, paid at harvest.

    GUARANTEES:
    - Created ONLY by the checkout orchestrator, inside one DB transaction
      together with its items, batch usages and batch decrements
    - total_amount / total_cogs are immutable once written
    - paid_amount / status move ONLY via the payment service

    STATUS:
    - unpaid:  paid_amount == 0
    - partial: 0 < paid_amount < total_amount
    - paid:    paid_amount >= total_amount
    """

    STATUS_UNPAID = "unpaid"
    STATUS_PARTIAL = "partial"
    STATUS_PAID = "paid"

    STATUS_CHOICES = [
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PARTIAL, "Partially paid"),
        (STATUS_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Staff member who recorded the sale",
    )

    invoice_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated invoice number",
    )

    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    total_cogs = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total cost of goods sold (FIFO-derived).",
    )

    paid_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_UNPAID,
    )

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="transaction_created_idx"),
            models.Index(fields=["status"], name="transaction_status_idx"),
            models.Index(fields=["customer", "status"], name="transaction_customer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(paid_amount__gte=0),
                name="chk_transaction_paid_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(paid_amount__lte=F("total_amount")),
                name="chk_transaction_paid_lte_total",
            ),
        ]

    @staticmethod
    def status_for(*, total_amount, paid_amount) -> str:
        paid = Decimal(str(paid_amount or "0"))
        total = Decimal(str(total_amount or "0"))
        if paid <= Decimal("0.00"):
            return Transaction.STATUS_UNPAID
        if paid >= total:
            return Transaction.STATUS_PAID
        return Transaction.STATUS_PARTIAL

    @property
    def outstanding_amount(self) -> Decimal:
        return Decimal(str(self.total_amount)) - Decimal(str(self.paid_amount))

    @property
    def gross_profit(self) -> Decimal:
        return Decimal(str(self.total_amount)) - Decimal(str(self.total_cogs))

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            self.invoice_number = generate_invoice_number()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice_number} | {self.total_amount}"

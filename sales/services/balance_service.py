# sales/services/balance_service.py

"""
DEBT BALANCE SERVICE (READ-ONLY)

Answers ONE question: "Who owes the cooperative how much?"

RULES:
- READ-ONLY: no writes, ever
- Debt = total_amount - paid_amount over transactions not yet paid
"""

from decimal import Decimal

from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import Coalesce

from sales.models import Customer, Transaction

ZERO = Decimal("0.00")

_OUTSTANDING = ExpressionWrapper(
    F("total_amount") - F("paid_amount"),
    output_field=DecimalField(max_digits=14, decimal_places=2),
)


def _open_transactions():
    return Transaction.objects.exclude(status=Transaction.STATUS_PAID)


def customer_outstanding_balance(customer) -> Decimal:
    customer_id = customer.pk if isinstance(customer, Customer) else customer
    total = (
        _open_transactions()
        .filter(customer_id=customer_id)
        .aggregate(total=Coalesce(Sum(_OUTSTANDING), ZERO))
        .get("total")
    )
    return Decimal(str(total or ZERO))


def total_outstanding_debt() -> Decimal:
    total = _open_transactions().aggregate(total=Coalesce(Sum(_OUTSTANDING), ZERO)).get("total")
    return Decimal(str(total or ZERO))


def top_debtors(limit: int = 5) -> list[dict]:
    """
    Customers with the largest outstanding balances.

    Output format:
    [{"customer": Customer, "total_debt": Decimal}, ...]
    """
    rows = (
        _open_transactions()
        .values("customer_id")
        .annotate(total_debt=Sum(_OUTSTANDING))
        .filter(total_debt__gt=0)
        .order_by("-total_debt")[: max(int(limit), 0)]
    )
    rows = list(rows)

    customers = Customer.objects.in_bulk([r["customer_id"] for r in rows])

    return [
        {
            "customer": customers[r["customer_id"]],
            "total_debt": Decimal(str(r["total_debt"])),
        }
        for r in rows
    ]

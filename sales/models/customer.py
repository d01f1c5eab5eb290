# sales/models/customer.py

import uuid

from django.db import models


class Customer(models.Model):
    """
    A cooperative member buying on yarnen credit.

    Debt is never stored here: it is derived from the member's
    transactions (see sales/services/balance_service.py).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    phone = models.CharField(max_length=32, null=True, blank=True)
    address = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

# sales/serializers/transaction.py

from rest_framework import serializers

from products.models import StockBatchUsage
from sales.models import Payment, Transaction, TransactionItem


class StockBatchUsageSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockBatchUsage
        fields = [
            "id",
            "stock_batch",
            "quantity_used",
            "unit_cost",
            "created_at",
        ]
        read_only_fields = fields


class TransactionItemSerializer(serializers.ModelSerializer):
    """
    Line item serializer (read-only).
    Includes the batches that fulfilled the line for audit display.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    batch_usages = StockBatchUsageSerializer(many=True, read_only=True)

    class Meta:
        model = TransactionItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
            "unit_cost",
            "cost_of_goods",
            "profit",
            "batch_usages",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "transaction",
            "received_by",
            "amount",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = TransactionItemSerializer(many=True, read_only=True)
    outstanding_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )
    gross_profit = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = Transaction
        fields = [
            "id",
            "invoice_number",
            "customer",
            "customer_name",
            "created_by",
            "total_amount",
            "total_cogs",
            "paid_amount",
            "outstanding_amount",
            "gross_profit",
            "status",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

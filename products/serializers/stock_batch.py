# products/serializers/stock_batch.py
"""
======================================================
PATH: products/serializers/stock_batch.py
======================================================
STOCK BATCH SERIALIZERS

Purpose:
- Read-only batch representation (FIFO listing).
- Validate stock-in input for the intake endpoint.

IMPORTANT (AUDIT):
- Batches are never edited through the API. quantity_remaining moves only
  through the FIFO usage recorder.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from products.models import Product, StockBatch


class StockBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    effective_sell_price = serializers.SerializerMethodField()
    remaining_value = serializers.DecimalField(
        source="total_remaining_value", max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = StockBatch
        fields = [
            "id",
            "product",
            "product_name",
            "stock_entry",
            "purchase_price",
            "sell_price",
            "effective_sell_price",
            "quantity_initial",
            "quantity_remaining",
            "remaining_value",
            "batch_date",
            "created_at",
        ]
        read_only_fields = fields

    def get_effective_sell_price(self, obj):
        return str(obj.effective_sell_price(obj.product.sell_price))


class StockIntakeSerializer(serializers.Serializer):
    """
    Stock-in input.

    sell_price is an OPTIONAL batch override; omit it to sell this delivery
    at the product's default price.
    """

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    purchase_price = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal("0.00"),
    )
    sell_price = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
    )
    batch_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_product_id(self, value):
        if not Product.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Invalid product ID")
        return value

    def validate_sell_price(self, value):
        if value is not None and value <= Decimal("0.00"):
            raise serializers.ValidationError("sell_price must be greater than zero")
        return value

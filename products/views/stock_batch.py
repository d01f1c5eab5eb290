"""
======================================================
PATH: products/views/stock_batch.py
======================================================
STOCK BATCH VIEWS

Purpose:
- List a product's available batches in FIFO consumption order.
- Receive stock (stock-in): one delivery -> one StockEntry + one StockBatch.

RULES:
- Batch quantities are never edited via the API.
- Listing is a display read (non-authoritative); only the FIFO usage
  recorder's conditional decrement is authoritative for consumption.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from products.models import Product
from products.serializers.stock_batch import StockBatchSerializer, StockIntakeSerializer
from products.services.stock_fifo import list_available_batches
from products.services.stock_intake import intake_stock


class AvailableBatchListView(APIView):
    """
    GET /api/products/<product_id>/batches/

    Batches with remaining stock, oldest first (batch_date, then created_at).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        batches = list_available_batches(product)
        return Response(
            {
                "product": str(product.pk),
                "product_name": product.name,
                "stock": sum(int(b.quantity_remaining) for b in batches),
                "batches": StockBatchSerializer(batches, many=True).data,
            }
        )


class StockIntakeView(APIView):
    """
    POST /api/products/stock-in/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(request=StockIntakeSerializer, responses={201: StockBatchSerializer})
    def post(self, request):
        serializer = StockIntakeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            batch = intake_stock(
                product=data["product_id"],
                quantity=data["quantity"],
                purchase_price=data["purchase_price"],
                sell_price=data.get("sell_price"),
                batch_date=data.get("batch_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except ValidationError as exc:
            detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
            return Response({"detail": detail}, status=status.HTTP_400_BAD_REQUEST)

        return Response(StockBatchSerializer(batch).data, status=status.HTTP_201_CREATED)

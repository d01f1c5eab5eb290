# sales/views/payment.py

from decimal import Decimal

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from sales.models import Transaction
from sales.serializers import PaymentSerializer, TransactionSerializer
from sales.services.payment_service import PaymentError, record_payment


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransactionPaymentView(APIView):
    """
    POST /api/sales/transactions/<uuid>/payments/

    Record a yarnen repayment. Response carries the payment and the
    refreshed transaction balance.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=PaymentInputSerializer,
        responses={201: OpenApiTypes.OBJECT},
        description="Record a repayment against an outstanding transaction",
    )
    def post(self, request, pk):
        sale = get_object_or_404(Transaction, pk=pk)

        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_payment(
                transaction=sale,
                amount=serializer.validated_data["amount"],
                user=request.user,
                notes=serializer.validated_data.get("notes", ""),
            )
        except PaymentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        sale.refresh_from_db()
        return Response(
            {
                "payment": PaymentSerializer(payment).data,
                "transaction": TransactionSerializer(sale).data,
            },
            status=status.HTTP_201_CREATED,
        )

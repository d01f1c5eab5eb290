# sales/views/checkout.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from sales.serializers import TransactionSerializer
from sales.services.checkout_orchestrator import (
    CheckoutError,
    CheckoutStorageError,
    EmptyCartError,
    StockValidationError,
    checkout,
)


class CheckoutLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CheckoutInputSerializer(serializers.Serializer):
    """
    Explicit checkout input serializer.

    Documents ONLY what the client is allowed to send. Prices, costs and
    totals are computed server-side from the FIFO allocation.
    """

    customer_id = serializers.UUIDField()
    items = CheckoutLineInputSerializer(many=True, allow_empty=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CheckoutView(APIView):
    """
    YARNEN CHECKOUT ENDPOINT (AUTHORITATIVE)

    GUARANTEES:
    - Atomic checkout (all lines or none)
    - FIFO batch consumption with per-line COGS / profit
    - A sale is never reported as saved unless every line's batch
      consumption committed
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: TransactionSerializer},
        description="Sell a cart on yarnen credit, consuming stock batches FIFO",
    )
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lines = [
            {"product": line["product_id"], "quantity": line["quantity"]}
            for line in data["items"]
        ]

        try:
            sale = checkout(
                user=request.user,
                customer=data["customer_id"],
                lines=lines,
                notes=data.get("notes", ""),
            )
        except EmptyCartError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except StockValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except CheckoutStorageError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except CheckoutError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TransactionSerializer(sale).data, status=status.HTTP_201_CREATED)

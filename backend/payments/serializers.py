from rest_framework import serializers

from orders.serializers import VersionedActionSerializer
from .models import PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = PaymentTransaction
        fields = [
            "id",
            "order",
            "order_number",
            "method",
            "amount",
            "tendered",
            "change",
            "reference",
            "drawer_session",
            "rider_settlement",
            "processed_by",
            "created_at",
        ]
        read_only_fields = fields


class ProcessPaymentSerializer(VersionedActionSerializer):
    method = serializers.ChoiceField(choices=PaymentTransaction.PaymentMethod.choices)
    tendered = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0)
    reference = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["method"] == PaymentTransaction.PaymentMethod.CASH and attrs.get("tendered") is None:
            raise serializers.ValidationError({"tendered": "Tendered amount is required for cash payments."})
        return attrs

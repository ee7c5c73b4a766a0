from rest_framework import serializers

from orders.serializers import OrderSerializer, VersionedActionSerializer
from .models import Driver, RiderSettlement, RiderShift, SettledOrder


class DriverSerializer(serializers.ModelSerializer):
    name = serializers.CharField(read_only=True)
    active_shift = serializers.SerializerMethodField()

    class Meta:
        model = Driver
        fields = [
            "id",
            "user",
            "name",
            "phone",
            "status",
            "cash_in_hand",
            "total_deliveries",
            "last_settled_at",
            "is_active",
            "active_shift",
        ]
        read_only_fields = ["status", "cash_in_hand", "total_deliveries", "last_settled_at"]

    def get_active_shift(self, obj):
        shift = obj.active_shift
        return str(shift.pk) if shift else None


class RiderShiftSerializer(serializers.ModelSerializer):
    driver_name = serializers.CharField(source="driver.name", read_only=True)

    class Meta:
        model = RiderShift
        fields = [
            "id",
            "driver",
            "driver_name",
            "status",
            "opening_float",
            "float_settled",
            "expected_cash",
            "closing_cash_received",
            "cash_difference",
            "opened_by",
            "closed_by",
            "opened_at",
            "closed_at",
            "notes",
        ]
        read_only_fields = fields


class SettledOrderSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = SettledOrder
        fields = ["order", "order_number", "amount"]


class RiderSettlementSerializer(serializers.ModelSerializer):
    settled_orders = SettledOrderSerializer(many=True, read_only=True)

    class Meta:
        model = RiderSettlement
        fields = [
            "id",
            "settlement_number",
            "driver",
            "shift",
            "amount_expected",
            "amount_collected",
            "shortage",
            "variance",
            "included_float",
            "has_discrepancy",
            "notes",
            "processed_by",
            "created_at",
            "settled_orders",
        ]
        read_only_fields = fields


class PendingSettlementSerializer(serializers.Serializer):
    orders = OrderSerializer(many=True)
    orders_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    shift = serializers.SerializerMethodField()
    unsettled_float = serializers.DecimalField(max_digits=12, decimal_places=2)
    expected = serializers.DecimalField(max_digits=12, decimal_places=2)
    cash_in_hand = serializers.DecimalField(max_digits=12, decimal_places=2)

    def get_shift(self, obj):
        return str(obj["shift"].pk) if obj.get("shift") else None


class SettleRiderSerializer(serializers.Serializer):
    amount_collected = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    order_ids = serializers.ListField(child=serializers.UUIDField(), required=False, allow_null=True)
    include_float = serializers.BooleanField(required=False, default=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OpenShiftSerializer(serializers.Serializer):
    opening_float = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CloseShiftSerializer(serializers.Serializer):
    closing_cash = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AssignDriverSerializer(VersionedActionSerializer):
    driver_id = serializers.UUIDField()

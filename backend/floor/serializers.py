from rest_framework import serializers
from .models import Reservation, Table


class TableSerializer(serializers.ModelSerializer):
    active_order_number = serializers.CharField(source="active_order.order_number", read_only=True, default=None)
    server_name = serializers.SerializerMethodField()

    class Meta:
        model = Table
        fields = [
            "id",
            "name",
            "section",
            "capacity",
            "status",
            "server",
            "server_name",
            "active_order",
            "active_order_number",
            "last_status_change",
        ]
        read_only_fields = ["status", "server", "active_order", "last_status_change"]

    def get_server_name(self, obj):
        return str(obj.server) if obj.server_id else None


class ReservationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Reservation
        fields = [
            "id",
            "table",
            "customer_name",
            "customer_phone",
            "party_size",
            "reservation_time",
            "duration_minutes",
            "buffer_minutes",
            "status",
            "notes",
        ]
        read_only_fields = ["status"]


class SeatPartySerializer(serializers.Serializer):
    guest_count = serializers.IntegerField(min_value=1)
    order_id = serializers.UUIDField(required=False, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    reservation_id = serializers.UUIDField(required=False, allow_null=True)


class GuestCountSerializer(serializers.Serializer):
    guest_count = serializers.IntegerField(min_value=1)
    expected_version = serializers.IntegerField(required=False, allow_null=True, min_value=0)

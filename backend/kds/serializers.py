from rest_framework import serializers

from orders.serializers import OrderItemSerializer, VersionedActionSerializer
from .models import KDSUndoEntry


class KDSTicketSerializer(serializers.Serializer):
    """One order as a station sees it: header plus only the lines it still has to make."""

    order_id = serializers.UUIDField(source="order.id")
    order_number = serializers.CharField(source="order.order_number")
    order_type = serializers.CharField(source="order.order_type")
    status = serializers.CharField(source="order.status")
    version = serializers.IntegerField(source="order.version")
    table_name = serializers.CharField(source="order.table.name", default=None)
    fired_at = serializers.DateTimeField(source="order.fired_at")
    items = OrderItemSerializer(many=True)


class KDSUndoEntrySerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = KDSUndoEntry
        fields = ["id", "terminal_id", "order", "order_number", "action", "station", "created_at"]
        read_only_fields = fields


class TerminalActionSerializer(VersionedActionSerializer):
    terminal_id = serializers.CharField(max_length=100)


class ReadyAllSerializer(TerminalActionSerializer):
    station = serializers.CharField(max_length=50)
    confirm = serializers.BooleanField(required=False, default=False)


class UndoSerializer(serializers.Serializer):
    terminal_id = serializers.CharField(max_length=100)

from rest_framework import serializers
from orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "position",
            "product",
            "product_name",
            "unit_price",
            "station",
            "category_name",
            "pricing_strategy",
            "quantity",
            "status",
            "notes",
            "fired_at",
            "ready_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer returned by every order action."""

    items = OrderItemSerializer(many=True, read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)
    table_name = serializers.CharField(source="table.name", read_only=True, default=None)
    driver_name = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "guest_count",
            "table",
            "table_name",
            "assigned_driver",
            "driver_name",
            "rider_shift",
            "is_settled_with_rider",
            "customer_name",
            "customer_phone",
            "delivery_address",
            "discount_type",
            "discount_value",
            "subtotal",
            "discount_amount",
            "service_charge",
            "tax",
            "delivery_fee",
            "total",
            "cancellation_reason",
            "cancelled_at",
            "last_action_desc",
            "version",
            "is_terminal",
            "created_at",
            "fired_at",
            "ready_at",
            "dispatched_at",
            "delivered_at",
            "paid_at",
            "items",
        ]
        read_only_fields = fields

    def get_driver_name(self, obj):
        if obj.assigned_driver_id is None:
            return None
        return str(obj.assigned_driver.user)


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderCreateSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices, default=Order.OrderType.DINE_IN)
    items = OrderItemInputSerializer(many=True, required=False)
    guest_count = serializers.IntegerField(min_value=1, default=1)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    discount_type = serializers.ChoiceField(choices=Order.DiscountType.choices, default=Order.DiscountType.AMOUNT)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    delivery_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )

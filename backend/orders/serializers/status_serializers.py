from rest_framework import serializers
from orders.models import Order, OrderItem


class VersionedActionSerializer(serializers.Serializer):
    """
    Base for order commands. ``expected_version`` is the order version the
    terminal last displayed; stale commands are rejected with HTTP 409.
    """

    expected_version = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class ItemEditSerializer(serializers.Serializer):
    position = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(required=False, min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True)
    remove = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs.get("position") is None and not attrs.get("product_id"):
            raise serializers.ValidationError("Either position (existing item) or product_id (new item) is required.")
        return attrs


class UpdateOrderItemsSerializer(VersionedActionSerializer):
    items = ItemEditSerializer(many=True)


class SetItemStatusSerializer(VersionedActionSerializer):
    status = serializers.ChoiceField(choices=OrderItem.ItemStatus.choices)


class VoidOrderSerializer(VersionedActionSerializer):
    reason = serializers.CharField(allow_blank=False, trim_whitespace=True)


class ApplyDiscountSerializer(VersionedActionSerializer):
    discount_type = serializers.ChoiceField(choices=Order.DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

import django_filters
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    Filters for the order list used by POS, dispatch and accounting screens.
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    created_at__gte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_at__lte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')
    awaiting_settlement = django_filters.BooleanFilter(method='filter_awaiting_settlement')

    class Meta:
        model = Order
        fields = ['status', 'order_type', 'assigned_driver', 'table', 'is_settled_with_rider']

    def filter_awaiting_settlement(self, queryset, name, value):
        """Delivered orders whose cash is still with the rider."""
        awaiting = queryset.filter(
            order_type=Order.OrderType.DELIVERY,
            status=Order.OrderStatus.DELIVERED,
            is_settled_with_rider=False,
        )
        if value:
            return awaiting
        return queryset.exclude(pk__in=awaiting.values('pk'))

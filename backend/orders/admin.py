from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("position", "product_name", "station", "quantity", "unit_price", "status", "notes")
    readonly_fields = fields
    can_delete = False

    def get_queryset(self, request):
        return OrderItem.all_objects.all()

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-only in the admin: every change must go through the
    lifecycle services so version stamps and ledgers stay consistent.
    """

    list_display = (
        "order_number",
        "tenant",
        "order_type",
        "status",
        "total",
        "assigned_driver",
        "is_settled_with_rider",
        "created_at",
    )
    list_display_links = ("order_number",)
    list_filter = ("tenant", "status", "order_type", "is_settled_with_rider")
    search_fields = ("order_number", "customer_name", "customer_phone")
    ordering = ("-created_at",)
    inlines = [OrderItemInline]
    readonly_fields = [field.name for field in Order._meta.fields]

    def get_queryset(self, request):
        return Order.all_objects.select_related("tenant", "assigned_driver__user", "table")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

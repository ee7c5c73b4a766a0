from django.contrib import admin
from .models import Driver, RiderSettlement, RiderShift, SettledOrder


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ("__str__", "tenant", "status", "cash_in_hand", "total_deliveries", "last_settled_at", "is_active")
    list_filter = ("tenant", "status", "is_active")
    search_fields = ("user__email", "user__first_name", "user__last_name", "phone")
    readonly_fields = ("status", "cash_in_hand", "total_deliveries", "last_settled_at")

    def get_queryset(self, request):
        return Driver.all_objects.select_related("tenant", "user")


@admin.register(RiderShift)
class RiderShiftAdmin(admin.ModelAdmin):
    list_display = ("driver", "tenant", "status", "opening_float", "expected_cash", "closing_cash_received", "cash_difference", "opened_at")
    list_filter = ("tenant", "status")
    readonly_fields = [field.name for field in RiderShift._meta.fields]

    def get_queryset(self, request):
        return RiderShift.all_objects.select_related("tenant", "driver__user")

    def has_add_permission(self, request):
        return False


class SettledOrderInline(admin.TabularInline):
    model = SettledOrder
    extra = 0
    fields = ("order", "amount")
    readonly_fields = fields
    can_delete = False

    def get_queryset(self, request):
        return SettledOrder.all_objects.all()

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(RiderSettlement)
class RiderSettlementAdmin(admin.ModelAdmin):
    """Settlements are immutable; the admin is a read-only audit view."""

    list_display = ("settlement_number", "driver", "tenant", "amount_expected", "amount_collected", "variance", "has_discrepancy", "created_at")
    list_filter = ("tenant", "has_discrepancy")
    search_fields = ("settlement_number",)
    readonly_fields = [field.name for field in RiderSettlement._meta.fields]
    inlines = [SettledOrderInline]

    def get_queryset(self, request):
        return RiderSettlement.all_objects.select_related("tenant", "driver__user")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

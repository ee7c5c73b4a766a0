from django.contrib import admin
from .models import RestaurantSettings


@admin.register(RestaurantSettings)
class RestaurantSettingsAdmin(admin.ModelAdmin):
    list_display = (
        'tenant', 'currency', 'tax_rate', 'service_charge_rate',
        'delivery_fee_default', 'require_rider_shift', 'kds_undo_depth',
    )

    def get_queryset(self, request):
        return RestaurantSettings.all_objects.select_related('tenant')

from django.contrib import admin
from .models import Reservation, Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "section", "capacity", "status", "active_order", "last_status_change")
    list_filter = ("tenant", "status", "section")
    readonly_fields = ("status", "active_order", "last_status_change")

    def get_queryset(self, request):
        return Table.all_objects.select_related("tenant", "active_order")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ("customer_name", "tenant", "table", "party_size", "reservation_time", "status")
    list_filter = ("tenant", "status")

    def get_queryset(self, request):
        return Reservation.all_objects.select_related("tenant", "table")

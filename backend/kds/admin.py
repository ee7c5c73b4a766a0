from django.contrib import admin

from .models import KDSUndoEntry


@admin.register(KDSUndoEntry)
class KDSUndoEntryAdmin(admin.ModelAdmin):
    list_display = ("terminal_id", "action", "order", "station", "tenant", "created_at")
    list_filter = ("tenant", "station")
    search_fields = ("terminal_id", "action", "order__order_number")
    readonly_fields = [field.name for field in KDSUndoEntry._meta.fields]

    def get_queryset(self, request):
        return KDSUndoEntry.all_objects.select_related("tenant", "order")

    def has_add_permission(self, request):
        return False

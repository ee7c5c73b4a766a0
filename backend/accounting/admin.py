from django.contrib import admin
from .models import CashDrawerSession, LedgerEntry, Payout, ZReport


class ReadOnlyAdmin(admin.ModelAdmin):
    """Cash records are written only by the accounting services."""

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CashDrawerSession)
class CashDrawerSessionAdmin(ReadOnlyAdmin):
    list_display = ("opened_at", "tenant", "status", "opening_balance", "expected_balance", "closing_actual_balance", "variance")
    list_filter = ("tenant", "status")

    def get_queryset(self, request):
        return CashDrawerSession.all_objects.select_related("tenant", "opened_by", "closed_by")


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "tenant", "account", "transaction_type", "reference_type", "amount", "driver", "session")
    list_filter = ("tenant", "account", "transaction_type", "reference_type")
    search_fields = ("reference_id", "description")

    def get_queryset(self, request):
        return LedgerEntry.all_objects.select_related("tenant", "driver__user", "session")


@admin.register(Payout)
class PayoutAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "tenant", "amount", "category", "processed_by")
    list_filter = ("tenant", "category")

    def get_queryset(self, request):
        return Payout.all_objects.select_related("tenant", "processed_by")


@admin.register(ZReport)
class ZReportAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "tenant", "expected_balance", "actual_balance", "variance", "closed_by")
    list_filter = ("tenant",)

    def get_queryset(self, request):
        return ZReport.all_objects.select_related("tenant", "session", "closed_by")

from django.contrib import admin
from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """
    Admin view for payment transactions. Transactions are immutable, so
    everything is read-only.
    """

    list_display = ("id", "order", "tenant", "method", "amount", "change", "processed_by", "created_at")
    list_filter = ("tenant", "method", "created_at")
    search_fields = ("id", "order__order_number", "reference")
    readonly_fields = [field.name for field in PaymentTransaction._meta.fields]

    def get_queryset(self, request):
        return PaymentTransaction.all_objects.select_related("order", "tenant")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        "email",
        "first_name",
        "last_name",
        "get_tenant_name",
        "role",
        "is_pos_staff",
        "is_active",
    )
    list_filter = ("tenant", "role", "is_pos_staff", "is_active")
    search_fields = ("email", "first_name", "last_name", "tenant__name")
    ordering = ("email",)
    fieldsets = (
        (None, {"fields": ("tenant", "email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "phone_number", "role", "is_pos_staff")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("tenant", "email", "role", "password1", "password2")}),
    )

    def get_queryset(self, request):
        """Show users from ALL tenants in Django admin"""
        return User.all_objects.select_related('tenant')

    def get_tenant_name(self, obj):
        return obj.tenant.name if obj.tenant else "NO TENANT"
    get_tenant_name.short_description = "Tenant"
    get_tenant_name.admin_order_field = "tenant__name"

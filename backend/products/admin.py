from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'tenant', 'order')
    list_filter = ('tenant',)

    def get_queryset(self, request):
        return Category.all_objects.select_related('tenant')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'tenant', 'category', 'price', 'station', 'pricing_strategy', 'is_available')
    list_filter = ('tenant', 'station', 'pricing_strategy', 'is_available')
    search_fields = ('name',)

    def get_queryset(self, request):
        return Product.all_objects.select_related('tenant', 'category')

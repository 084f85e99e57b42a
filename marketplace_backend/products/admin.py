# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "brand", "unit_price", "stock_quantity", "is_active")
    list_filter = ("is_active", "brand")
    search_fields = ("sku", "name", "part_number")

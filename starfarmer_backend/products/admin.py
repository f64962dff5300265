# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are never hard-deleted from admin; deactivate instead so order
  history keeps its product references.
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name_en",
        "category",
        "price",
        "discounted_price",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "category", "created_at")
    search_fields = ("sku", "name_en", "name_mr")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
    actions = ["deactivate_products"]

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Deactivate selected products")
    def deactivate_products(self, request, queryset):
        updated = queryset.filter(is_active=True).update(is_active=False)
        self.message_user(request, f"{updated} product(s) deactivated.")

# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "quantity", "unit_price", "total_price", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Payment fields are owned by the callback flow; only status is editable here.
    """

    list_display = (
        "id",
        "user",
        "payment_method",
        "payment_status",
        "status",
        "total",
        "created_at",
    )
    list_filter = ("status", "payment_status", "payment_method")
    search_fields = ("id", "merchant_transaction_id", "gateway_transaction_id", "user__email")
    ordering = ("-created_at",)
    inlines = [OrderItemInline]

    readonly_fields = (
        "id",
        "user",
        "shipping_address",
        "payment_method",
        "payment_gateway",
        "shipping_charge",
        "total",
        "merchant_transaction_id",
        "gateway_transaction_id",
        "payment_status",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

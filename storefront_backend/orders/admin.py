# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


# ======================================================
# ORDER ITEM INLINE
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = (
        "product_id",
        "product_name",
        "price",
        "quantity",
        "selected_color",
        "selected_features",
    )
    readonly_fields = fields
    can_delete = False


# ======================================================
# ORDER ADMIN
# ======================================================


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_id",
        "customer_name",
        "customer_email",
        "total_amount",
        "payment_option",
        "payment_status",
        "order_status",
        "created_at",
    )
    readonly_fields = (
        "order_id",
        "total_amount",
        "payment_option",
        "receipt_url",
        "receipt_file_name",
        "created_at",
        "updated_at",
    )
    search_fields = (
        "order_id",
        "customer_name",
        "customer_email",
        "customer_phone",
        "receiver_name",
        "receiver_phone",
    )
    list_filter = ("order_status", "payment_option", "payment_status", "created_at")
    inlines = [OrderItemInline]

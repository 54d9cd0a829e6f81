from django.contrib import admin
from .models import Order, OrderItem, OrderItemAddon, Table


class OrderItemAddonInline(admin.TabularInline):
    model = OrderItemAddon
    extra = 0
    readonly_fields = ("addon", "addon_name", "quantity", "unit_price", "total_price")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class OrderItemInline(admin.TabularInline):
    """
    Line items are shown read-only. Edits must go through the order services
    so stock and totals stay consistent.
    """

    model = OrderItem
    extra = 0
    fields = ("name", "quantity", "unit_price", "total_price", "notes")
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "status", "order_type", "table_name", "total", "created_at")
    list_filter = ("status", "order_type")
    search_fields = ("order_number", "customer_name", "customer_phone")
    readonly_fields = (
        "order_number",
        "status",
        "subtotal",
        "tax",
        "delivery_fee",
        "total",
        "created_at",
        "updated_at",
        "completed_at",
        "cancelled_at",
    )
    inlines = [OrderItemInline]


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ("name", "order", "quantity", "total_price")
    readonly_fields = ("order", "menu_item", "name", "unit_price", "quantity", "total_price")
    inlines = [OrderItemAddonInline]


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("name", "capacity", "status", "current_order")
    list_filter = ("status",)

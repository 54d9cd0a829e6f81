from decimal import Decimal

from rest_framework import serializers

from orders.models import Order, Table

from .order_item_serializers import OrderItemSerializer


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "order_type",
            "table",
            "table_name",
            "customer_name",
            "customer_phone",
            "delivery_address",
            "notes",
            "subtotal",
            "tax",
            "delivery_fee",
            "total",
            "items",
            "created_at",
            "updated_at",
            "completed_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight list row without nested items."""

    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "order_type",
            "table_name",
            "customer_name",
            "total",
            "item_count",
            "created_at",
            "completed_at",
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderCreateSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices, default=Order.OrderType.DINE_IN)
    status = serializers.ChoiceField(
        choices=[(s, s) for s in (Order.OrderStatus.DRAFT, Order.OrderStatus.PENDING)],
        default=Order.OrderStatus.PENDING,
    )
    table_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=Decimal("0.00"))
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = OrderLineSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        if attrs["order_type"] == Order.OrderType.DELIVERY and not attrs.get("delivery_address"):
            raise serializers.ValidationError({"delivery_address": "Delivery orders need an address."})
        return attrs


class AddItemSerializer(OrderLineSerializer):
    pass


class DeliveryFeeSerializer(serializers.Serializer):
    delivery_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class TableSerializer(serializers.ModelSerializer):
    class Meta:
        model = Table
        fields = ["id", "name", "capacity", "status", "current_order"]
        read_only_fields = ["status", "current_order"]

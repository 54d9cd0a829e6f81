from rest_framework import serializers

from orders.models import OrderItem, OrderItemAddon


class OrderItemAddonSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemAddon
        fields = ["id", "addon", "addon_name", "quantity", "unit_price", "total_price", "created_at"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    addons = OrderItemAddonSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order",
            "menu_item",
            "name",
            "unit_price",
            "quantity",
            "total_price",
            "notes",
            "addons",
            "created_at",
        ]
        read_only_fields = fields


class UpdateOrderItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class AddonSelectionSerializer(serializers.Serializer):
    addon_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class AttachAddonsSerializer(serializers.Serializer):
    addons = AddonSelectionSerializer(many=True, allow_empty=True)

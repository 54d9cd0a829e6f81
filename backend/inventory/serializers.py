from rest_framework import serializers

from .models import Ingredient, RecipeItem


class IngredientSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ingredient
        fields = [
            "id",
            "name",
            "unit",
            "current_stock",
            "minimum_stock",
            "cost_per_unit",
            "is_low_stock",
            "is_active",
            "updated_at",
        ]
        read_only_fields = fields


class RecipeItemSerializer(serializers.ModelSerializer):
    ingredient_name = serializers.CharField(source="ingredient.name", read_only=True)
    unit = serializers.CharField(source="ingredient.unit", read_only=True)

    class Meta:
        model = RecipeItem
        fields = ["id", "menu_item", "addon", "ingredient", "ingredient_name", "unit", "quantity"]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    quantity_change = serializers.DecimalField(max_digits=12, decimal_places=4)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate_quantity_change(self, value):
        if value == 0:
            raise serializers.ValidationError("Quantity change cannot be zero.")
        return value


class MenuItemRequestSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class AddonRequestSerializer(serializers.Serializer):
    addon_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class AvailabilityCheckSerializer(serializers.Serializer):
    """
    A prospective order line: menu items plus add-ons, each with a
    quantity already multiplied out by the caller.
    """

    menu_items = MenuItemRequestSerializer(many=True, required=False, default=list)
    addons = AddonRequestSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        if not attrs["menu_items"] and not attrs["addons"]:
            raise serializers.ValidationError("Provide at least one menu item or add-on.")
        return attrs

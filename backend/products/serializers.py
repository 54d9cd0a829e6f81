from rest_framework import serializers

from .models import Addon, AddonGroup, MenuItem


class MenuItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = ["id", "name", "description", "price", "is_active"]
        read_only_fields = fields


class AddonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Addon
        fields = ["id", "group", "name", "price", "display_order"]
        read_only_fields = fields


class AddonGroupSerializer(serializers.ModelSerializer):
    addons = serializers.SerializerMethodField()

    class Meta:
        model = AddonGroup
        fields = ["id", "name", "display_order", "addons"]
        read_only_fields = fields

    def get_addons(self, obj):
        # Only active add-ons are offered
        return AddonSerializer(Addon.objects.filter(group=obj), many=True).data

from rest_framework import serializers

from orders.models import Order


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Validates the requested status value only. Whether the transition is
    allowed is decided by OrderLifecycleService.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)

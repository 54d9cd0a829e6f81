"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemAddonSerializer,
    OrderItemSerializer,
    UpdateOrderItemSerializer,
    AddonSelectionSerializer,
    AttachAddonsSerializer,
)

# Order serializers
from .order_serializers import (
    OrderSerializer,
    OrderListSerializer,
    OrderCreateSerializer,
    OrderLineSerializer,
    AddItemSerializer,
    DeliveryFeeSerializer,
    TableSerializer,
)

# Status serializers
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    # Order items
    'OrderItemAddonSerializer',
    'OrderItemSerializer',
    'UpdateOrderItemSerializer',
    'AddonSelectionSerializer',
    'AttachAddonsSerializer',
    # Orders
    'OrderSerializer',
    'OrderListSerializer',
    'OrderCreateSerializer',
    'OrderLineSerializer',
    'AddItemSerializer',
    'DeliveryFeeSerializer',
    'TableSerializer',
    # Status
    'UpdateOrderStatusSerializer',
]

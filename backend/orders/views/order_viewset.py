import logging

from django.db.models import Count, Prefetch
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet, service_response
from orders.filters import OrderFilter
from orders.models import Order, OrderItem
from orders.serializers import (
    AddItemSerializer,
    DeliveryFeeSerializer,
    OrderCreateSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from orders.services import OrderItemService, OrderLifecycleService

from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(StatusActionsMixin, ReadOnlyBaseViewSet):
    """
    Orders for the order-entry terminal.

    Reads are plain REST. Every write goes through the engine services and
    answers with {"success": true, "data": ..., "warnings": [...]}.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "completed_at", "total", "order_number"]
    ordering = ["-created_at"]

    def get_queryset(self):
        if self.action == "list":
            return Order.objects.annotate(item_count=Count("items"))
        return Order.objects.prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.prefetch_related("addons"))
        )

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderSerializer

    def get_lifecycle_service(self):
        return OrderLifecycleService()

    def get_item_service(self):
        return OrderItemService()

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.get_lifecycle_service().create_order(
            items=[dict(line) for line in data["items"]],
            order_type=data["order_type"],
            status=data["status"],
            table_id=data["table_id"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            delivery_address=data["delivery_address"],
            delivery_fee=data["delivery_fee"],
            notes=data["notes"],
        )
        order = self.get_queryset().get(pk=result.data.pk)
        return service_response(result, OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="items")
    def add_item(self, request: Request, pk=None) -> Response:
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = self.get_item_service().add_item(pk, data["menu_item_id"], data["quantity"], data["notes"])
        return service_response(result, OrderItemSerializer(result.data).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="delivery-fee")
    def delivery_fee(self, request: Request, pk=None) -> Response:
        serializer = DeliveryFeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_lifecycle_service().update_delivery_fee(pk, serializer.validated_data["delivery_fee"])
        return service_response(result, OrderSerializer(result.data).data)

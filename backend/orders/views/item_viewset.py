from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import service_response
from orders.models import OrderItem
from orders.serializers import (
    AttachAddonsSerializer,
    OrderItemAddonSerializer,
    OrderItemSerializer,
    OrderSerializer,
    UpdateOrderItemSerializer,
)
from orders.services import AddonAttachmentService, OrderItemService


class OrderItemViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Line-item edits: change quantity, remove, attach and detach add-ons.
    """

    queryset = OrderItem.objects.prefetch_related("addons")
    serializer_class = OrderItemSerializer

    def get_item_service(self):
        return OrderItemService()

    def get_addon_service(self):
        return AddonAttachmentService()

    def partial_update(self, request: Request, pk=None) -> Response:
        serializer = UpdateOrderItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_item_service().update_quantity(pk, serializer.validated_data["quantity"])
        return service_response(result, OrderItemSerializer(result.data).data)

    def destroy(self, request: Request, pk=None) -> Response:
        result = self.get_item_service().remove_item(pk)
        return service_response(result, {"removed": True, "order": OrderSerializer(result.data["order"]).data})

    @action(detail=True, methods=["post"], url_path="addons")
    def attach_addons(self, request: Request, pk=None) -> Response:
        serializer = AttachAddonsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        selections = [dict(s) for s in serializer.validated_data["addons"]]
        result = self.get_addon_service().attach(pk, selections)
        order_item = OrderItem.objects.prefetch_related("addons").get(pk=pk)
        return service_response(
            result,
            {
                "order_item": OrderItemSerializer(order_item).data,
                "addons": OrderItemAddonSerializer(result.data["addons"], many=True).data,
            },
        )

    @action(detail=True, methods=["delete"], url_path=r"addons/(?P<addon_id>\d+)")
    def detach_addon(self, request: Request, pk=None, addon_id=None) -> Response:
        result = self.get_addon_service().detach(pk, int(addon_id))
        return service_response(
            result,
            {
                "removed": result.data["removed"],
                "order_item": OrderItemSerializer(result.data["order_item"]).data,
            },
        )

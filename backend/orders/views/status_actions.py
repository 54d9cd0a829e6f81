from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import service_response
from orders.serializers import OrderSerializer, UpdateOrderStatusSerializer


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet. Engine errors
    (invalid transition, terminal order, restore failure) propagate to the
    REST framework exception handler.
    """

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_lifecycle_service().update_status(pk, serializer.validated_data["status"])
        return service_response(result, OrderSerializer(result.data).data)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        result = self.get_lifecycle_service().cancel(pk)
        return service_response(result, OrderSerializer(result.data).data)

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request: Request, pk=None) -> Response:
        result = self.get_lifecycle_service().complete(pk)
        return service_response(result, OrderSerializer(result.data).data)

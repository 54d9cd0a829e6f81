from rest_framework import status
from rest_framework.decorators import action
from rest_framework.views import APIView

from core_backend.base import ReadOnlyBaseViewSet, service_response
from core_backend.results import ServiceResult

from .models import Ingredient, RecipeItem
from .recipes import RecipeResolver
from .serializers import (
    AvailabilityCheckSerializer,
    IngredientSerializer,
    RecipeItemSerializer,
    StockAdjustmentSerializer,
)
from .services import InventoryLedger


class IngredientViewSet(ReadOnlyBaseViewSet):
    """Stock levels, plus manual restock / write-off."""

    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    filterset_fields = ["unit", "low_stock_notified"]
    ordering_fields = ["name", "current_stock"]
    ordering = ["name"]

    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        ingredient = self.get_object()
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        movement = InventoryLedger().adjust(
            ingredient.id,
            serializer.validated_data["quantity_change"],
            reason=serializer.validated_data["reason"],
        )
        ingredient.refresh_from_db()
        result = ServiceResult(data=None, warnings=[movement.warning] if movement.warning else [])
        return service_response(result, IngredientSerializer(ingredient).data)


class RecipeItemViewSet(ReadOnlyBaseViewSet):
    queryset = RecipeItem.objects.select_related("ingredient")
    serializer_class = RecipeItemSerializer
    filterset_fields = ["menu_item", "addon", "ingredient"]


class AvailabilityCheckView(APIView):
    """
    Non-mutating stock check for a prospective order.

    Shortages come back as warnings; the order may still be placed.
    """

    def post(self, request, *args, **kwargs):
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        resolver = RecipeResolver()
        scaled = [(resolver.for_menu_item(line["menu_item_id"]), line["quantity"]) for line in data["menu_items"]]
        scaled += [(resolver.for_addon(line["addon_id"]), line["quantity"]) for line in data["addons"]]
        requirements = RecipeResolver.aggregate(scaled)

        warnings = InventoryLedger().check_availability(requirements)
        result = ServiceResult(
            data={
                "available": not warnings,
                "requirements": {str(k): str(v) for k, v in requirements.items()},
            },
            warnings=warnings,
        )
        return service_response(result, status=status.HTTP_200_OK)

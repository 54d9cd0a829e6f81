from core_backend.base import ReadOnlyBaseViewSet

from .models import AddonGroup, MenuItem
from .serializers import AddonGroupSerializer, MenuItemSerializer


class MenuItemViewSet(ReadOnlyBaseViewSet):
    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    ordering_fields = ["name", "price"]
    ordering = ["name"]


class AddonGroupViewSet(ReadOnlyBaseViewSet):
    queryset = AddonGroup.objects.all()
    serializer_class = AddonGroupSerializer
    ordering = ["display_order", "name"]

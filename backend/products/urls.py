from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AddonGroupViewSet, MenuItemViewSet

router = DefaultRouter()
router.register(r"menu-items", MenuItemViewSet)
router.register(r"addon-groups", AddonGroupViewSet)

app_name = "products"

urlpatterns = [
    path("", include(router.urls)),
]

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    IngredientViewSet,
    RecipeItemViewSet,
    AvailabilityCheckView,
)

# Create router and register viewsets
router = DefaultRouter()
router.register(r'ingredients', IngredientViewSet)
router.register(r'recipe-items', RecipeItemViewSet)

app_name = "inventory"

urlpatterns = [
    path('', include(router.urls)),
    # Stock check for order entry (reads only)
    path("availability/", AvailabilityCheckView.as_view(), name="availability-check"),
]

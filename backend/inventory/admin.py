from django.contrib import admin

from .models import Ingredient, RecipeItem


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "unit", "current_stock", "minimum_stock", "low_stock_notified", "is_active")
    list_filter = ("is_active", "low_stock_notified")
    search_fields = ("name",)
    readonly_fields = ("current_stock", "low_stock_notified")

    def get_queryset(self, request):
        """Archived ingredients stay visible here."""
        return Ingredient.all_objects.all()


@admin.register(RecipeItem)
class RecipeItemAdmin(admin.ModelAdmin):
    list_display = ("ingredient", "menu_item", "addon", "quantity", "is_active")
    list_filter = ("is_active",)
    autocomplete_fields = ("ingredient",)

    def get_queryset(self, request):
        return RecipeItem.all_objects.select_related("ingredient", "menu_item", "addon")

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from core_backend.utils.archiving import SoftDeleteMixin
from products.models import Addon, MenuItem


class Ingredient(SoftDeleteMixin):
    """
    A stock-tracked raw material.

    current_stock is signed: the kitchen may cook to order past zero, and the
    ledger records the deficit instead of refusing the sale.
    """

    name = models.CharField(max_length=200, unique=True)
    unit = models.CharField(
        max_length=50,
        help_text=_("Unit of measure, e.g., 'g', 'ml', 'slices', 'each'."),
    )
    current_stock = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        help_text=_("Stock on hand. May go negative."),
    )
    minimum_stock = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        help_text=_("Low-stock alert threshold."),
    )
    cost_per_unit = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        default=Decimal("0"),
    )
    low_stock_notified = models.BooleanField(
        default=False,
        help_text=_("Set once a low-stock alert went out; cleared when stock recovers."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Ingredient")
        verbose_name_plural = _("Ingredients")

    def __str__(self):
        return f"{self.name} ({self.current_stock} {self.unit})"

    @property
    def is_low_stock(self):
        return self.current_stock <= self.minimum_stock


class RecipeItem(SoftDeleteMixin):
    """
    How much of one ingredient one unit of a menu item or add-on consumes.

    Exactly one of menu_item / addon is set.
    """

    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="recipe_items",
    )
    addon = models.ForeignKey(
        Addon,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="recipe_items",
    )
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.PROTECT,
        related_name="recipe_items",
    )
    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        help_text=_("Quantity of the ingredient consumed per one unit."),
    )

    class Meta:
        verbose_name = _("Recipe Item")
        verbose_name_plural = _("Recipe Items")
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(menu_item__isnull=False, addon__isnull=True)
                    | Q(menu_item__isnull=True, addon__isnull=False)
                ),
                name="recipeitem_single_owner",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="recipeitem_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["menu_item", "ingredient"],
                condition=Q(menu_item__isnull=False),
                name="recipeitem_unique_menu_item_ingredient",
            ),
            models.UniqueConstraint(
                fields=["addon", "ingredient"],
                condition=Q(addon__isnull=False),
                name="recipeitem_unique_addon_ingredient",
            ),
        ]
        indexes = [
            models.Index(fields=["menu_item", "is_active"], name="recipeitem_menu_active_idx"),
            models.Index(fields=["addon", "is_active"], name="recipeitem_addon_active_idx"),
        ]

    def __str__(self):
        owner = self.menu_item or self.addon
        return f"{self.quantity} {self.ingredient.unit} of {self.ingredient.name} for {owner}"

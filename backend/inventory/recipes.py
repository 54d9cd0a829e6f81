"""
Recipe resolution: which ingredients, and how much of each, one unit of a
menu item or add-on consumes.

Nothing is cached. Every call reads the current transaction's view of the
recipe tables, so a recipe edited mid-session is picked up by the next
mutation.
"""
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from core_backend.utils.money import quantize_quantity, to_decimal

from .models import RecipeItem


@dataclass(frozen=True)
class RecipeRequirement:
    ingredient_id: int
    quantity_per_unit: Decimal


class RecipeResolver:

    def for_menu_item(self, menu_item_id) -> List[RecipeRequirement]:
        return self._resolve(menu_item_id=menu_item_id)

    def for_addon(self, addon_id) -> List[RecipeRequirement]:
        return self._resolve(addon_id=addon_id)

    def _resolve(self, **owner):
        rows = (
            RecipeItem.objects.filter(ingredient__is_active=True, **owner)
            .order_by("ingredient_id")
            .values_list("ingredient_id", "quantity")
        )
        return [RecipeRequirement(ingredient_id, quantity) for ingredient_id, quantity in rows]

    @staticmethod
    def scale(requirements: Iterable[RecipeRequirement], multiplier) -> Dict[int, Decimal]:
        return RecipeResolver.aggregate([(requirements, multiplier)])

    @staticmethod
    def aggregate(
        scaled: Iterable[Tuple[Iterable[RecipeRequirement], object]]
    ) -> Dict[int, Decimal]:
        """
        Sum requirements across several (requirements, multiplier) pairs.

        Returns {ingredient_id: total_quantity} with zero totals dropped,
        keyed in ascending ingredient id order.
        """
        totals = defaultdict(Decimal)
        for requirements, multiplier in scaled:
            factor = to_decimal(multiplier)
            for requirement in requirements:
                totals[requirement.ingredient_id] += requirement.quantity_per_unit * factor
        return {
            ingredient_id: quantize_quantity(totals[ingredient_id])
            for ingredient_id in sorted(totals)
            if totals[ingredient_id] != 0
        }

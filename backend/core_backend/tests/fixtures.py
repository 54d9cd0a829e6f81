"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for the catalog, ingredients,
recipes and tables the order engine works with. The core scenario is a
Burger whose Extra Cheese add-on consumes 2 slices of Cheese per unit.
"""
import pytest
from decimal import Decimal

from inventory.models import Ingredient, RecipeItem
from orders.models import Table
from orders.services import AddonAttachmentService, OrderItemService, OrderLifecycleService
from products.models import Addon, AddonGroup, MenuItem


# ============================================================================
# INGREDIENT FIXTURES
# ============================================================================

@pytest.fixture
def cheese(db):
    """Cheese slices, 100 in stock"""
    return Ingredient.objects.create(
        name="Cheese",
        unit="slices",
        current_stock=Decimal("100"),
        minimum_stock=Decimal("10"),
    )


@pytest.fixture
def bun(db):
    """Burger buns, 50 in stock"""
    return Ingredient.objects.create(
        name="Bun",
        unit="each",
        current_stock=Decimal("50"),
        minimum_stock=Decimal("5"),
    )


@pytest.fixture
def patty(db):
    """Beef patties, 40 in stock"""
    return Ingredient.objects.create(
        name="Beef Patty",
        unit="each",
        current_stock=Decimal("40"),
        minimum_stock=Decimal("5"),
    )


@pytest.fixture
def bacon(db):
    """Bacon strips, only 3 in stock"""
    return Ingredient.objects.create(
        name="Bacon",
        unit="strips",
        current_stock=Decimal("3"),
        minimum_stock=Decimal("0"),
    )


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def burger(db, bun, patty, cheese):
    """Burger at 10.00: 1 bun, 1 patty, 1 slice of cheese"""
    item = MenuItem.objects.create(name="Burger", price=Decimal("10.00"))
    RecipeItem.objects.create(menu_item=item, ingredient=bun, quantity=Decimal("1"))
    RecipeItem.objects.create(menu_item=item, ingredient=patty, quantity=Decimal("1"))
    RecipeItem.objects.create(menu_item=item, ingredient=cheese, quantity=Decimal("1"))
    return item


@pytest.fixture
def fries(db):
    """Fries at 4.50 with no tracked ingredients"""
    return MenuItem.objects.create(name="Fries", price=Decimal("4.50"))


@pytest.fixture
def toppings_group(db):
    return AddonGroup.objects.create(name="Extra Toppings")


@pytest.fixture
def extra_cheese(db, toppings_group, cheese):
    """Extra Cheese at 1.50 per unit, consuming 2 slices of cheese"""
    addon = Addon.objects.create(group=toppings_group, name="Extra Cheese", price=Decimal("1.50"))
    RecipeItem.objects.create(addon=addon, ingredient=cheese, quantity=Decimal("2"))
    return addon


@pytest.fixture
def extra_bacon(db, toppings_group, bacon):
    """Extra Bacon at 2.00 per unit, consuming 2 strips of bacon"""
    addon = Addon.objects.create(group=toppings_group, name="Extra Bacon", price=Decimal("2.00"))
    RecipeItem.objects.create(addon=addon, ingredient=bacon, quantity=Decimal("2"))
    return addon


@pytest.fixture
def inactive_addon(db, toppings_group):
    addon = Addon.objects.create(group=toppings_group, name="Truffle Oil", price=Decimal("5.00"))
    addon.archive()
    return addon


# ============================================================================
# TABLE FIXTURES
# ============================================================================

@pytest.fixture
def table_one(db):
    return Table.objects.create(name="T1", capacity=4)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def lifecycle_service():
    return OrderLifecycleService()


@pytest.fixture
def item_service():
    return OrderItemService()


@pytest.fixture
def addon_service():
    return AddonAttachmentService()


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def fries_order(lifecycle_service, fries):
    """Takeout order: 2 x Fries, no tracked ingredients"""
    return lifecycle_service.create_order(
        items=[{"menu_item_id": fries.id, "quantity": 2}],
        order_type="TAKEOUT",
    ).data


@pytest.fixture
def fries_item(fries_order):
    return fries_order.items.get()


@pytest.fixture
def burger_order(lifecycle_service, burger, table_one):
    """Dine-in order at T1: 2 x Burger"""
    return lifecycle_service.create_order(
        items=[{"menu_item_id": burger.id, "quantity": 2}],
        order_type="DINE_IN",
        table_id=table_one.id,
    ).data


@pytest.fixture
def burger_item(burger_order):
    return burger_order.items.get()

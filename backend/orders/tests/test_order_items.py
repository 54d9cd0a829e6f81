"""
Line Item Editing Tests

Adding, re-quantifying and removing line items on an open order.
"""
import pytest
from decimal import Decimal

from audit.models import AuditLogEntry
from core_backend.exceptions import Conflict, NotFound, ValidationFailed
from inventory.models import Ingredient
from orders.models import OrderItem


def _stock(ingredient):
    return Ingredient.all_objects.get(pk=ingredient.pk).current_stock


@pytest.mark.django_db
class TestAddItem:

    def test_add_item_consumes_and_retotals(self, item_service, fries_order, burger, bun, cheese):
        item = item_service.add_item(fries_order.id, burger.id, quantity=2, notes="well done").data

        assert item.notes == "well done"
        assert item.total_price == Decimal("20.00")
        assert _stock(bun) == Decimal("48")
        assert _stock(cheese) == Decimal("98")
        fries_order.refresh_from_db()
        assert fries_order.subtotal == Decimal("29.00")
        assert AuditLogEntry.objects.for_order(fries_order.id).filter(
            action=AuditLogEntry.Action.ITEM_ADDED
        ).exists()

    def test_item_keeps_price_snapshot(self, item_service, fries_order, burger):
        item = item_service.add_item(fries_order.id, burger.id).data
        burger.price = Decimal("12.00")
        burger.name = "Deluxe Burger"
        burger.save()

        item.refresh_from_db()
        assert item.unit_price == Decimal("10.00")
        assert item.name == "Burger"

    def test_unknown_menu_item(self, item_service, fries_order):
        with pytest.raises(NotFound) as exc_info:
            item_service.add_item(fries_order.id, 424242)

        assert exc_info.value.code == "MENU_ITEM_NOT_FOUND"

    def test_invalid_quantity(self, item_service, fries_order, burger):
        for quantity in (0, -3, "two", True, 1.5):
            with pytest.raises(ValidationFailed):
                item_service.add_item(fries_order.id, burger.id, quantity=quantity)

    def test_cannot_add_to_cancelled_order(self, item_service, lifecycle_service, fries_order, burger, bun):
        lifecycle_service.cancel(fries_order.id)

        with pytest.raises(Conflict):
            item_service.add_item(fries_order.id, burger.id)

        assert _stock(bun) == Decimal("50")


@pytest.mark.django_db
class TestUpdateQuantity:

    def test_increase_consumes_menu_recipe(self, item_service, burger_item, bun, cheese):
        item = item_service.update_quantity(burger_item.id, 5).data

        assert item.quantity == 5
        assert item.total_price == Decimal("50.00")
        assert _stock(bun) == Decimal("45")
        assert _stock(cheese) == Decimal("95")
        item.order.refresh_from_db()
        assert item.order.total == Decimal("50.00")

    def test_decrease_returns_menu_recipe(self, item_service, burger_item, bun):
        item_service.update_quantity(burger_item.id, 1)

        assert _stock(bun) == Decimal("49")

    def test_same_quantity_is_a_no_op(self, item_service, burger_item, bun):
        audit_count = AuditLogEntry.objects.count()

        item_service.update_quantity(burger_item.id, 2)

        assert _stock(bun) == Decimal("48")
        assert AuditLogEntry.objects.count() == audit_count

    def test_quantity_change_is_audited(self, item_service, burger_item):
        item_service.update_quantity(burger_item.id, 4)

        entry = AuditLogEntry.objects.get(action=AuditLogEntry.Action.ITEM_QUANTITY_CHANGED)
        assert entry.old_values == {"quantity": 2}
        assert entry.new_values == {"quantity": 4}

    def test_zero_quantity_rejected(self, item_service, burger_item):
        with pytest.raises(ValidationFailed):
            item_service.update_quantity(burger_item.id, 0)

    def test_unknown_item(self, item_service, db):
        with pytest.raises(NotFound):
            item_service.update_quantity(31337, 2)


@pytest.mark.django_db
class TestRemoveItem:

    def test_remove_returns_item_and_addon_stock(
        self, item_service, addon_service, burger_item, burger_order, extra_cheese, bun, cheese
    ):
        addon_service.attach(burger_item.id, [{"addon_id": extra_cheese.id}])
        assert _stock(cheese) == Decimal("94")

        result = item_service.remove_item(burger_item.id)

        assert result.data["removed"] is True
        assert _stock(cheese) == Decimal("100")
        assert _stock(bun) == Decimal("50")
        assert not OrderItem.objects.filter(pk=burger_item.pk).exists()
        assert result.data["order"].subtotal == Decimal("0.00")
        assert result.data["order"].total == Decimal("0.00")

        actions = list(AuditLogEntry.objects.for_order(burger_order.id).values_list("action", flat=True))
        assert AuditLogEntry.Action.ADDON_DETACHED in actions
        assert actions[-1] == AuditLogEntry.Action.ITEM_REMOVED

    def test_remove_from_completed_order_rejected(self, item_service, lifecycle_service, burger_item):
        lifecycle_service.complete(burger_item.order_id)

        with pytest.raises(Conflict):
            item_service.remove_item(burger_item.id)

        assert OrderItem.objects.filter(pk=burger_item.pk).exists()

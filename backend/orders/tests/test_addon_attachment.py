"""
Add-on Attachment Tests

These tests verify that attaching and detaching add-ons keeps ingredient
stock and line-item totals exactly in step, that add-on consumption scales
with the line item's quantity, and that rejected requests change nothing.
"""
import pytest
from decimal import Decimal

from audit.models import AuditLogEntry
from core_backend.exceptions import Conflict, NotFound, ValidationFailed
from inventory.models import Ingredient, RecipeItem
from orders.models import OrderItemAddon
from products.models import Addon


def _stock(ingredient):
    return Ingredient.all_objects.get(pk=ingredient.pk).current_stock


@pytest.mark.django_db
class TestExtraCheeseScenario:
    """
    Line of 2 x Fries (4.50, no recipe). Extra Cheese costs 1.50 and uses
    2 slices of Cheese per unit. Cheese starts at 100.
    """

    def test_attach_consumes_scaled_stock(self, addon_service, fries_item, extra_cheese, cheese):
        """
        CRITICAL: Attach consumes recipe x add-on qty x line qty

        Expected: Cheese 100 - (2 x 1 x 2) = 96, assignment total 1.50,
        line total 9.00 + 1.50 x 2 = 12.00
        """
        result = addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id, "quantity": 1}])

        assert _stock(cheese) == Decimal("96")
        assignment = result.data["addons"][0]
        assert assignment.addon_name == "Extra Cheese"
        assert assignment.unit_price == Decimal("1.50")
        assert assignment.total_price == Decimal("1.50")

        fries_item.refresh_from_db()
        assert fries_item.total_price == Decimal("12.00")
        fries_item.order.refresh_from_db()
        assert fries_item.order.subtotal == Decimal("12.00")
        assert fries_item.order.total == Decimal("12.00")

    def test_quantity_increase_rescales_addon(self, addon_service, item_service, fries_item, extra_cheese, cheese):
        """
        Line 2 -> 3 consumes 2 x 1 x 1 more cheese; total 4.50 x 3 + 1.50 x 3
        """
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id, "quantity": 1}])

        item = item_service.update_quantity(fries_item.id, 3).data

        assert _stock(cheese) == Decimal("94")
        assert item.quantity == 3
        assert item.total_price == Decimal("18.00")
        # Assignment rows stay per unit
        assignment = OrderItemAddon.objects.get(order_item=fries_item)
        assert assignment.quantity == 1
        assert assignment.total_price == Decimal("1.50")

    def test_cancel_after_rescale_restores_everything(
        self, addon_service, item_service, lifecycle_service, fries_item, extra_cheese, cheese
    ):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id, "quantity": 1}])
        item_service.update_quantity(fries_item.id, 3)

        lifecycle_service.cancel(fries_item.order_id)

        assert _stock(cheese) == Decimal("100")


@pytest.mark.django_db
class TestAttach:

    def test_custom_unit_price_and_quantity(self, addon_service, fries_item, extra_cheese, cheese):
        result = addon_service.attach(
            fries_item.id, [{"addon_id": extra_cheese.id, "quantity": 2, "unit_price": "1.25"}]
        )

        assignment = result.data["addons"][0]
        assert assignment.unit_price == Decimal("1.25")
        assert assignment.total_price == Decimal("2.50")
        assert _stock(cheese) == Decimal("92")
        fries_item.refresh_from_db()
        assert fries_item.total_price == Decimal("14.00")

    def test_multiple_addons_in_one_call(self, addon_service, fries_item, extra_cheese, extra_bacon, cheese, bacon):
        result = addon_service.attach(
            fries_item.id,
            [{"addon_id": extra_cheese.id}, {"addon_id": extra_bacon.id, "quantity": 1}],
        )

        assert len(result.data["addons"]) == 2
        assert _stock(cheese) == Decimal("96")
        assert _stock(bacon) == Decimal("-1")
        assert [w.ingredient_id for w in result.warnings] == [bacon.id]
        attached = AuditLogEntry.objects.for_order(fries_item.order_id).filter(
            action=AuditLogEntry.Action.ADDON_ATTACHED
        )
        assert attached.count() == 2

    def test_duplicate_attach_is_rejected_without_changes(self, addon_service, fries_item, extra_cheese, cheese):
        """
        CRITICAL: Attaching an add-on already on the line is a Conflict

        Expected: stock, totals and audit log unchanged by the second call
        """
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])
        audit_count = AuditLogEntry.objects.count()

        with pytest.raises(Conflict) as exc_info:
            addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        assert exc_info.value.code == "ADDON_ALREADY_ADDED"
        assert _stock(cheese) == Decimal("96")
        assert OrderItemAddon.objects.filter(order_item=fries_item).count() == 1
        assert AuditLogEntry.objects.count() == audit_count

    def test_batch_with_one_duplicate_attaches_nothing(
        self, addon_service, fries_item, extra_cheese, extra_bacon, bacon
    ):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        with pytest.raises(Conflict):
            addon_service.attach(fries_item.id, [{"addon_id": extra_bacon.id}, {"addon_id": extra_cheese.id}])

        assert _stock(bacon) == Decimal("3")
        assert not OrderItemAddon.objects.filter(addon=extra_bacon).exists()

    def test_same_addon_twice_in_one_call(self, addon_service, fries_item, extra_cheese):
        with pytest.raises(Conflict):
            addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}, {"addon_id": extra_cheese.id}])

    def test_inactive_addon_is_not_attachable(self, addon_service, fries_item, inactive_addon):
        with pytest.raises(NotFound) as exc_info:
            addon_service.attach(fries_item.id, [{"addon_id": inactive_addon.id}])

        assert exc_info.value.code == "ADDON_NOT_FOUND"

    def test_addon_in_inactive_group_is_not_attachable(self, addon_service, fries_item, extra_cheese, toppings_group):
        toppings_group.archive()

        with pytest.raises(NotFound):
            addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

    def test_unknown_order_item(self, addon_service, extra_cheese):
        with pytest.raises(NotFound) as exc_info:
            addon_service.attach(999999, [{"addon_id": extra_cheese.id}])

        assert exc_info.value.code == "ORDER_ITEM_NOT_FOUND"

    @pytest.mark.parametrize(
        "selections",
        [
            [],
            [{"quantity": 1}],
            [{"addon_id": "x"}],
            [{"addon_id": 1, "quantity": 0}],
            [{"addon_id": 1, "unit_price": "-0.50"}],
        ],
    )
    def test_invalid_selections(self, addon_service, fries_item, selections):
        with pytest.raises(ValidationFailed):
            addon_service.attach(fries_item.id, selections)

    def test_terminal_order_is_not_editable(self, addon_service, lifecycle_service, fries_item, extra_cheese, cheese):
        lifecycle_service.complete(fries_item.order_id)

        with pytest.raises(Conflict) as exc_info:
            addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        assert exc_info.value.code == "ORDER_NOT_EDITABLE"
        assert _stock(cheese) == Decimal("100")


@pytest.mark.django_db
class TestDetach:

    def test_attach_detach_round_trip(self, addon_service, fries_item, extra_cheese, cheese):
        """
        CRITICAL: Detaching restores stock and line total exactly
        """
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id, "quantity": 2}])

        result = addon_service.detach(fries_item.id, extra_cheese.id)

        assert result.data["removed"] is True
        assert _stock(cheese) == Decimal("100")
        fries_item.refresh_from_db()
        assert fries_item.total_price == Decimal("9.00")
        assert not fries_item.addons.exists()
        assert AuditLogEntry.objects.for_order(fries_item.order_id).filter(
            action=AuditLogEntry.Action.ADDON_DETACHED
        ).count() == 1

    def test_detach_missing_assignment_is_a_no_op(self, addon_service, fries_item, extra_cheese):
        result = addon_service.detach(fries_item.id, extra_cheese.id)

        assert result.data["removed"] is False
        assert not AuditLogEntry.objects.filter(action=AuditLogEntry.Action.ADDON_DETACHED).exists()

    def test_detach_after_rescale(self, addon_service, item_service, fries_item, extra_cheese, cheese):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])
        item_service.update_quantity(fries_item.id, 5)

        addon_service.detach(fries_item.id, extra_cheese.id)

        assert _stock(cheese) == Decimal("100")
        fries_item.refresh_from_db()
        assert fries_item.total_price == Decimal("22.50")

    def test_detach_archived_addon_still_works(self, addon_service, fries_item, extra_cheese, cheese):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])
        extra_cheese.archive()

        assert addon_service.detach(fries_item.id, extra_cheese.id).data["removed"] is True


@pytest.mark.django_db
class TestRescale:

    def test_quantity_decrease_returns_addon_stock(self, addon_service, item_service, fries_item, extra_cheese, cheese):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        item = item_service.update_quantity(fries_item.id, 1).data

        assert _stock(cheese) == Decimal("98")
        assert item.total_price == Decimal("6.00")

    def test_zero_delta_changes_nothing(self, addon_service, fries_item, extra_cheese, cheese):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])
        audit_count = AuditLogEntry.objects.count()

        addon_service.rescale_on_quantity_change(fries_item.id, 0)

        assert _stock(cheese) == Decimal("96")
        assert AuditLogEntry.objects.count() == audit_count

    def test_repeated_rescales_do_not_drift(self, addon_service, item_service, fries_item, toppings_group, cheese):
        """
        CRITICAL: Stock and totals depend only on the final quantity

        Scenario: Pickled Cheese at 0.33 x 3 per unit (0.25 cheese each),
        line quantity walked 2 -> 5 -> 1 -> 7 -> 3
        Expected: line 4.50 x 3 + 0.99 x 3 = 16.47, cheese 100 - 0.75 x 3
        """
        addon = Addon.objects.create(group=toppings_group, name="Pickled Cheese", price=Decimal("0.33"))
        RecipeItem.objects.create(addon=addon, ingredient=cheese, quantity=Decimal("0.25"))
        addon_service.attach(fries_item.id, [{"addon_id": addon.id, "quantity": 3}])

        for quantity in (5, 1, 7, 3):
            item_service.update_quantity(fries_item.id, quantity)

        fries_item.refresh_from_db()
        assert fries_item.total_price == Decimal("16.47")
        assert _stock(cheese) == Decimal("97.75")
        assert OrderItemAddon.objects.get(order_item=fries_item).total_price == Decimal("0.99")
        fries_item.order.refresh_from_db()
        assert fries_item.order.subtotal == Decimal("16.47")

    @pytest.mark.parametrize("delta", [1.5, "two", None, True])
    def test_invalid_delta_rejected(self, addon_service, fries_item, extra_cheese, cheese, delta):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        with pytest.raises(ValidationFailed):
            addon_service.rescale_on_quantity_change(fries_item.id, delta)

        assert _stock(cheese) == Decimal("96")

    def test_negative_string_delta_accepted(self, addon_service, fries_item, extra_cheese, cheese):
        addon_service.attach(fries_item.id, [{"addon_id": extra_cheese.id}])

        addon_service.rescale_on_quantity_change(fries_item.id, "-1")

        assert _stock(cheese) == Decimal("98")

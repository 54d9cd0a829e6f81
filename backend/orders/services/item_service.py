import logging

from audit.services import Action, AuditTrail
from core_backend.exceptions import NotFound
from core_backend.infrastructure.transactions import run_in_transaction
from core_backend.results import ServiceResult
from inventory.recipes import RecipeResolver
from inventory.services import InventoryLedger
from orders.models import OrderItem
from products.models import MenuItem

from .addon_service import AddonAttachmentService
from .calculation_service import OrderCalculationService
from .guards import ensure_editable, get_order, get_order_item, lock_order, lock_order_item, validate_quantity

logger = logging.getLogger(__name__)


def get_active_menu_item(menu_item_id):
    try:
        return MenuItem.objects.get(pk=menu_item_id)
    except (MenuItem.DoesNotExist, ValueError, TypeError):
        raise NotFound(
            f"Menu item {menu_item_id} not found or inactive",
            code="MENU_ITEM_NOT_FOUND",
            details={"menu_item_id": menu_item_id},
        )


class OrderItemService:
    """Service for managing line items on an existing order - adding, updating, removing."""

    def __init__(self, ledger=None, resolver=None, audit_trail=None, addon_service=None):
        self.audit = audit_trail or AuditTrail()
        self.ledger = ledger or InventoryLedger(self.audit)
        self.resolver = resolver or RecipeResolver()
        self.addons = addon_service or AddonAttachmentService(self.ledger, self.resolver, self.audit)

    def add_item(self, order_id, menu_item_id, quantity=1, notes="") -> ServiceResult:
        quantity = validate_quantity(quantity)
        get_order(order_id)
        get_active_menu_item(menu_item_id)
        return run_in_transaction(self._add_item, order_id, menu_item_id, quantity, notes or "")

    def _add_item(self, order_id, menu_item_id, quantity, notes):
        order = lock_order(order_id)
        ensure_editable(order)
        menu_item = get_active_menu_item(menu_item_id)

        order_item = OrderItem.objects.create(
            order=order,
            menu_item=menu_item,
            name=menu_item.name,
            unit_price=menu_item.price,
            quantity=quantity,
            total_price=OrderCalculationService.line_total(menu_item.price, quantity),
            notes=notes,
        )

        warnings = self.ledger.apply_consumption(
            RecipeResolver.scale(self.resolver.for_menu_item(menu_item.id), quantity),
            order_id=order.id,
            reason=f"Item {menu_item.name} x{quantity} added",
            details={"order_item_id": order_item.id},
        )
        OrderCalculationService.recalculate_order_totals(order)

        self.audit.record(
            Action.ITEM_ADDED,
            table_name="order_items",
            record_id=order_item.id,
            order_id=order.id,
            new_values={
                "menu_item_id": menu_item.id,
                "name": order_item.name,
                "quantity": quantity,
                "unit_price": str(order_item.unit_price),
            },
        )
        logger.info(f"Added {quantity} x {menu_item.name} to order {order.order_number}")
        return ServiceResult(data=order_item, warnings=warnings)

    def update_quantity(self, order_item_id, new_quantity) -> ServiceResult:
        """
        Change a line item's quantity.

        The menu item's own recipe is consumed or returned for the difference,
        then attached add-ons are rescaled in the same transaction. Setting the
        current quantity again changes nothing.
        """
        new_quantity = validate_quantity(new_quantity)
        get_order_item(order_item_id)
        return run_in_transaction(self._update_quantity, order_item_id, new_quantity)

    def _update_quantity(self, order_item_id, new_quantity):
        order, order_item = lock_order_item(order_item_id)
        ensure_editable(order)

        old_quantity = order_item.quantity
        if new_quantity == old_quantity:
            return ServiceResult(data=order_item)

        delta = new_quantity - old_quantity
        adjustment = RecipeResolver.scale(self.resolver.for_menu_item(order_item.menu_item_id), abs(delta))
        reason = f"Quantity of {order_item.name} changed {old_quantity} -> {new_quantity}"
        details = {"order_item_id": order_item.id, "quantity_delta": delta}

        warnings = []
        if delta > 0:
            warnings = self.ledger.apply_consumption(adjustment, order_id=order.id, reason=reason, details=details)
        else:
            self.ledger.return_consumption(adjustment, order_id=order.id, reason=reason, details=details)

        order_item.quantity = new_quantity
        order_item.save(update_fields=["quantity"])

        rescaled = self.addons.rescale_on_quantity_change(order_item.id, delta)
        warnings.extend(rescaled.warnings)

        self.audit.record(
            Action.ITEM_QUANTITY_CHANGED,
            table_name="order_items",
            record_id=order_item.id,
            order_id=order.id,
            old_values={"quantity": old_quantity},
            new_values={"quantity": new_quantity},
        )
        order_item.refresh_from_db()
        return ServiceResult(data=order_item, warnings=warnings)

    def remove_item(self, order_item_id) -> ServiceResult:
        """Remove a line item, returning the stock of the item and all its add-ons."""
        get_order_item(order_item_id)
        return run_in_transaction(self._remove_item, order_item_id)

    def _remove_item(self, order_item_id):
        order, order_item = lock_order_item(order_item_id)
        ensure_editable(order)

        for addon_id in list(order_item.addons.values_list("addon_id", flat=True)):
            self.addons.detach(order_item.id, addon_id)

        self.ledger.return_consumption(
            RecipeResolver.scale(self.resolver.for_menu_item(order_item.menu_item_id), order_item.quantity),
            order_id=order.id,
            reason=f"Item {order_item.name} x{order_item.quantity} removed",
            details={"order_item_id": order_item.id},
        )

        old_values = {
            "menu_item_id": order_item.menu_item_id,
            "name": order_item.name,
            "quantity": order_item.quantity,
            "total_price": str(order_item.total_price),
        }
        order_item_pk = order_item.pk
        order_item.delete()

        order.refresh_from_db()
        OrderCalculationService.recalculate_order_totals(order)

        self.audit.record(
            Action.ITEM_REMOVED,
            table_name="order_items",
            record_id=order_item_pk,
            order_id=order.id,
            old_values=old_values,
        )
        logger.info(f"Removed item {order_item_pk} from order {order.order_number}")
        return ServiceResult(data={"removed": True, "order": order})

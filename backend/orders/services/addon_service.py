from decimal import Decimal, InvalidOperation
import logging

from audit.services import Action, AuditTrail
from core_backend.exceptions import Conflict, NotFound, ValidationFailed
from core_backend.infrastructure.transactions import run_in_transaction
from core_backend.results import ServiceResult
from core_backend.utils.money import quantize_money
from inventory.recipes import RecipeResolver
from inventory.services import InventoryLedger
from orders.models import OrderItemAddon
from products.models import Addon

from .calculation_service import OrderCalculationService
from .guards import ensure_editable, get_order_item, lock_order_item, validate_delta, validate_quantity

logger = logging.getLogger(__name__)


class AddonAttachmentService:
    """
    Attaches add-ons to line items, detaches them, and keeps their stock
    consumption in step with the line item's quantity.

    Assignments store quantity and price per ONE unit of the line item.
    Stock is consumed at recipe_qty x addon_qty x line_qty.
    """

    def __init__(self, ledger=None, resolver=None, audit_trail=None):
        self.audit = audit_trail or AuditTrail()
        self.ledger = ledger or InventoryLedger(self.audit)
        self.resolver = resolver or RecipeResolver()

    # ------------------------------------------------------------------
    # Attach
    # ------------------------------------------------------------------

    def attach(self, order_item_id, selections) -> ServiceResult:
        """
        Attach one or more add-ons to a line item in a single transaction.

        Args:
            order_item_id: Line item to attach to
            selections: list of {"addon_id", "quantity", "unit_price"?}.
                unit_price defaults to the add-on's catalog price.

        Returns:
            ServiceResult with the created OrderItemAddon rows and any
            insufficient-stock warnings.
        """
        selections = self._normalize_selections(selections)
        get_order_item(order_item_id)
        self._load_addons([s["addon_id"] for s in selections])
        return run_in_transaction(self._attach, order_item_id, selections)

    def _attach(self, order_item_id, selections):
        order, order_item = lock_order_item(order_item_id)
        ensure_editable(order)

        addon_ids = [s["addon_id"] for s in selections]
        addons = self._load_addons(addon_ids)

        already_attached = set(
            order_item.addons.filter(addon_id__in=addon_ids).values_list("addon_id", flat=True)
        )
        if already_attached:
            raise Conflict(
                f"Add-on(s) already attached to {order_item.name}",
                code="ADDON_ALREADY_ADDED",
                details={"order_item_id": order_item.id, "addon_ids": sorted(already_attached)},
            )

        assignments = []
        scaled = []
        for selection in selections:
            addon = addons[selection["addon_id"]]
            unit_price = selection["unit_price"]
            if unit_price is None:
                unit_price = addon.price
            assignment = OrderItemAddon.objects.create(
                order_item=order_item,
                addon=addon,
                addon_name=addon.name,
                quantity=selection["quantity"],
                unit_price=unit_price,
                total_price=quantize_money(unit_price * selection["quantity"]),
            )
            assignments.append(assignment)
            scaled.append(
                (self.resolver.for_addon(addon.id), selection["quantity"] * order_item.quantity)
            )

        consumption = RecipeResolver.aggregate(scaled)
        warnings = self.ledger.apply_consumption(
            consumption,
            order_id=order.id,
            reason=f"Add-ons attached to {order_item.name}",
            details={"order_item_id": order_item.id},
        )

        OrderCalculationService.recalculate_item_total(order_item)
        OrderCalculationService.recalculate_order_totals(order)

        for assignment in assignments:
            self.audit.record(
                Action.ADDON_ATTACHED,
                table_name="order_item_addons",
                record_id=assignment.id,
                order_id=order.id,
                new_values={
                    "order_item_id": order_item.id,
                    "addon_id": assignment.addon_id,
                    "addon_name": assignment.addon_name,
                    "quantity": assignment.quantity,
                    "unit_price": str(assignment.unit_price),
                    "total_price": str(assignment.total_price),
                },
            )

        logger.info(
            f"Attached {len(assignments)} add-on(s) to item {order_item.id} on order {order.order_number}"
        )
        return ServiceResult(data={"order_item": order_item, "addons": assignments}, warnings=warnings)

    # ------------------------------------------------------------------
    # Detach
    # ------------------------------------------------------------------

    def detach(self, order_item_id, addon_id) -> ServiceResult:
        """
        Remove an add-on from a line item and return its stock.

        A missing assignment is not an error: the result's data carries
        removed=False and nothing changes.
        """
        get_order_item(order_item_id)
        return run_in_transaction(self._detach, order_item_id, addon_id)

    def _detach(self, order_item_id, addon_id):
        order, order_item = lock_order_item(order_item_id)
        ensure_editable(order)

        assignment = order_item.addons.filter(addon_id=addon_id).first()
        if assignment is None:
            return ServiceResult(data={"removed": False, "order_item": order_item})

        restore = RecipeResolver.scale(
            self.resolver.for_addon(assignment.addon_id),
            assignment.quantity * order_item.quantity,
        )
        self.ledger.return_consumption(
            restore,
            order_id=order.id,
            reason=f"Add-on {assignment.addon_name} removed from {order_item.name}",
            details={"order_item_id": order_item.id},
        )

        old_values = {
            "order_item_id": order_item.id,
            "addon_id": assignment.addon_id,
            "addon_name": assignment.addon_name,
            "quantity": assignment.quantity,
            "total_price": str(assignment.total_price),
        }
        assignment_id = assignment.id
        assignment.delete()

        OrderCalculationService.recalculate_item_total(order_item)
        OrderCalculationService.recalculate_order_totals(order)

        self.audit.record(
            Action.ADDON_DETACHED,
            table_name="order_item_addons",
            record_id=assignment_id,
            order_id=order.id,
            old_values=old_values,
        )
        logger.info(f"Detached add-on {addon_id} from item {order_item.id} on order {order.order_number}")
        return ServiceResult(data={"removed": True, "order_item": order_item})

    # ------------------------------------------------------------------
    # Rescale
    # ------------------------------------------------------------------

    def rescale_on_quantity_change(self, order_item_id, quantity_delta) -> ServiceResult:
        """
        Adjust add-on stock after a line item's quantity changed by quantity_delta.

        Call this once the new quantity is stored. Per-unit assignment rows are
        left alone; only stock and the line total move.
        """
        return run_in_transaction(self._rescale, order_item_id, validate_delta(quantity_delta))

    def _rescale(self, order_item_id, quantity_delta):
        order, order_item = lock_order_item(order_item_id)
        ensure_editable(order)

        if quantity_delta == 0:
            return ServiceResult(data=order_item)

        scaled = [
            (self.resolver.for_addon(addon_id), per_unit * abs(quantity_delta))
            for addon_id, per_unit in order_item.addons.values_list("addon_id", "quantity")
        ]
        adjustment = RecipeResolver.aggregate(scaled)

        warnings = []
        reason = f"Quantity of {order_item.name} changed by {quantity_delta:+d}"
        details = {"order_item_id": order_item.id, "quantity_delta": quantity_delta}
        if quantity_delta > 0:
            warnings = self.ledger.apply_consumption(adjustment, order_id=order.id, reason=reason, details=details)
        else:
            self.ledger.return_consumption(adjustment, order_id=order.id, reason=reason, details=details)

        OrderCalculationService.recalculate_item_total(order_item)
        OrderCalculationService.recalculate_order_totals(order)
        return ServiceResult(data=order_item, warnings=warnings)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_selections(selections):
        if not selections:
            raise ValidationFailed("At least one add-on selection is required")
        if not isinstance(selections, (list, tuple)):
            raise ValidationFailed("Add-on selections must be a list")

        normalized = []
        seen = set()
        for raw in selections:
            if not isinstance(raw, dict) or raw.get("addon_id") is None:
                raise ValidationFailed("Each selection needs an addon_id", details={"selection": str(raw)})
            try:
                addon_id = int(raw["addon_id"])
            except (TypeError, ValueError):
                raise ValidationFailed("addon_id must be an integer", details={"addon_id": str(raw["addon_id"])})
            if addon_id in seen:
                raise Conflict(
                    f"Add-on {addon_id} selected more than once",
                    code="ADDON_ALREADY_ADDED",
                    details={"addon_id": addon_id},
                )
            seen.add(addon_id)

            unit_price = raw.get("unit_price")
            if unit_price is not None:
                try:
                    unit_price = Decimal(str(unit_price))
                except (InvalidOperation, ValueError):
                    raise ValidationFailed("unit_price must be a number", details={"unit_price": str(unit_price)})
                if not unit_price.is_finite() or unit_price < 0:
                    raise ValidationFailed("unit_price cannot be negative", details={"unit_price": str(unit_price)})
                unit_price = quantize_money(unit_price)

            normalized.append(
                {
                    "addon_id": addon_id,
                    "quantity": validate_quantity(raw.get("quantity", 1)),
                    "unit_price": unit_price,
                }
            )
        return normalized

    @staticmethod
    def _load_addons(addon_ids):
        addons = Addon.objects.filter(id__in=addon_ids, group__is_active=True).in_bulk()
        missing = [addon_id for addon_id in addon_ids if addon_id not in addons]
        if missing:
            raise NotFound(
                f"Add-on(s) not found or inactive: {', '.join(str(m) for m in missing)}",
                code="ADDON_NOT_FOUND",
                details={"addon_ids": missing},
            )
        return addons

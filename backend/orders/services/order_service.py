from decimal import Decimal, InvalidOperation
import logging

from django.db import transaction
from django.utils import timezone

from audit.services import Action, AuditTrail
from core_backend.exceptions import (
    InvalidTransition,
    InventoryRestoreFailed,
    NotFound,
    ValidationFailed,
)
from core_backend.infrastructure.transactions import is_retryable, run_in_transaction
from core_backend.results import ServiceResult
from core_backend.utils.money import quantize_money
from inventory.recipes import RecipeResolver
from inventory.services import InventoryLedger
from orders.models import Order, OrderItem, Table
from products.models import MenuItem

from .calculation_service import OrderCalculationService
from .guards import ensure_editable, get_order, lock_order, validate_quantity

logger = logging.getLogger(__name__)

Status = Order.OrderStatus


class OrderLifecycleService:
    """
    Creates orders and moves them through their lifecycle.

    DRAFT -> PENDING -> PREPARING -> READY -> SERVED -> COMPLETED, skipping
    forward is allowed, going back is not. CANCELLED is reachable from any
    non-terminal state and returns every unit of stock the order consumed.
    COMPLETED and CANCELLED are terminal.
    """

    VALID_STATUS_TRANSITIONS = {
        Status.DRAFT: [
            Status.PENDING,
            Status.PREPARING,
            Status.READY,
            Status.SERVED,
            Status.COMPLETED,
            Status.CANCELLED,
        ],
        Status.PENDING: [
            Status.PREPARING,
            Status.READY,
            Status.SERVED,
            Status.COMPLETED,
            Status.CANCELLED,
        ],
        Status.PREPARING: [Status.READY, Status.SERVED, Status.COMPLETED, Status.CANCELLED],
        Status.READY: [Status.SERVED, Status.COMPLETED, Status.CANCELLED],
        Status.SERVED: [Status.COMPLETED, Status.CANCELLED],
        Status.COMPLETED: [],
        Status.CANCELLED: [],
    }

    INITIAL_STATUSES = (Status.DRAFT, Status.PENDING)

    def __init__(self, ledger=None, resolver=None, audit_trail=None):
        self.audit = audit_trail or AuditTrail()
        self.ledger = ledger or InventoryLedger(self.audit)
        self.resolver = resolver or RecipeResolver()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_order(
        self,
        items=None,
        order_type=Order.OrderType.DINE_IN,
        status=Status.PENDING,
        table_id=None,
        customer_name="",
        customer_phone="",
        delivery_address="",
        delivery_fee=Decimal("0.00"),
        notes="",
    ) -> ServiceResult:
        """
        Create an order with its line items and consume their ingredients.

        Ingredients are summed across all line items and each ingredient is
        decremented once. An order with no items is allowed.

        Args:
            items: list of {"menu_item_id", "quantity", "notes"?}

        Returns:
            ServiceResult with the Order and any insufficient-stock warnings.
        """
        if order_type not in Order.OrderType.values:
            raise ValidationFailed(f"'{order_type}' is not a valid order type", details={"order_type": order_type})
        if status not in self.INITIAL_STATUSES:
            raise ValidationFailed(
                "New orders must start as DRAFT or PENDING",
                details={"status": status},
            )
        delivery_fee = self._validate_fee(delivery_fee)
        lines = self._validate_lines(items or [])

        if table_id is not None and not Table.objects.filter(pk=table_id).exists():
            raise NotFound(f"Table {table_id} not found", code="TABLE_NOT_FOUND", details={"table_id": table_id})

        if order_type == Order.OrderType.DINE_IN:
            customer_name = customer_phone = delivery_address = ""
        elif order_type != Order.OrderType.DELIVERY:
            delivery_address = ""

        return run_in_transaction(
            self._create_order,
            lines,
            order_type=order_type,
            status=status,
            table_id=table_id,
            customer_name=customer_name or "",
            customer_phone=customer_phone or "",
            delivery_address=delivery_address or "",
            delivery_fee=delivery_fee,
            notes=notes or "",
        )

    def _create_order(self, lines, *, table_id, **fields):
        table = None
        if table_id is not None:
            table = Table.objects.select_for_update().get(pk=table_id)

        order = Order.objects.create(table=table, table_name=table.name if table else "", **fields)

        menu_items = MenuItem.objects.in_bulk({line["menu_item_id"] for line in lines})
        scaled = []
        for line in lines:
            menu_item = menu_items.get(line["menu_item_id"])
            if menu_item is None:
                raise NotFound(
                    f"Menu item {line['menu_item_id']} not found or inactive",
                    code="MENU_ITEM_NOT_FOUND",
                    details={"menu_item_id": line["menu_item_id"]},
                )
            OrderItem.objects.create(
                order=order,
                menu_item=menu_item,
                name=menu_item.name,
                unit_price=menu_item.price,
                quantity=line["quantity"],
                total_price=OrderCalculationService.line_total(menu_item.price, line["quantity"]),
                notes=line["notes"],
            )
            scaled.append((self.resolver.for_menu_item(menu_item.id), line["quantity"]))

        warnings = self.ledger.apply_consumption(
            RecipeResolver.aggregate(scaled),
            order_id=order.id,
            reason=f"Order {order.order_number} created",
        )

        OrderCalculationService.recalculate_order_totals(order)

        if table is not None:
            if table.current_order_id and table.current_order_id != order.id:
                logger.warning(f"Table {table.name} reassigned from order {table.current_order_id} to {order.order_number}")
            table.status = Table.TableStatus.OCCUPIED
            table.current_order = order
            table.save(update_fields=["status", "current_order"])

        self.audit.record(
            Action.ORDER_CREATED,
            table_name="orders",
            record_id=order.id,
            order_id=order.id,
            new_values={
                "order_number": order.order_number,
                "order_type": order.order_type,
                "status": order.status,
                "table": order.table_name,
                "items": len(lines),
                "subtotal": str(order.subtotal),
                "total": str(order.total),
            },
        )
        logger.info(
            f"Created order {order.order_number} ({order.order_type}) with {len(lines)} item(s), total {order.total}"
        )
        return ServiceResult(data=order, warnings=warnings)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def update_status(self, order_id, new_status) -> ServiceResult:
        """
        Move an order to new_status.

        Re-applying the current status of an open order is a no-op. Any
        change to a COMPLETED or CANCELLED order raises InvalidTransition.
        """
        if new_status not in Status.values:
            raise ValidationFailed(f"'{new_status}' is not a valid order status.", details={"status": new_status})
        get_order(order_id)

        try:
            return run_in_transaction(self._transition, order_id, new_status)
        except InventoryRestoreFailed as e:
            with transaction.atomic():
                self.audit.record(
                    Action.INVENTORY_RESTORE_FAILED,
                    table_name="inventory",
                    record_id=order_id,
                    order_id=order_id,
                    new_values=e.details,
                )
            logger.error(f"Cancelling order {order_id} failed while restoring stock: {e.message}")
            raise

    def cancel(self, order_id) -> ServiceResult:
        return self.update_status(order_id, Status.CANCELLED)

    def complete(self, order_id) -> ServiceResult:
        return self.update_status(order_id, Status.COMPLETED)

    def _transition(self, order_id, new_status):
        order = lock_order(order_id)
        old_status = order.status

        if order.is_terminal:
            raise InvalidTransition(
                f"Order {order.order_number} is already {old_status}",
                details={"order_id": str(order.id), "from": old_status, "to": new_status},
            )
        if new_status == old_status:
            return ServiceResult(data=order)
        if new_status not in self.VALID_STATUS_TRANSITIONS.get(old_status, []):
            raise InvalidTransition(
                f"Cannot transition order from {old_status} to {new_status}.",
                details={"order_id": str(order.id), "from": old_status, "to": new_status},
            )

        update_fields = ["status", "updated_at"]
        restored = {}
        if new_status == Status.CANCELLED:
            restored = self._restore_inventory(order)
            order.cancelled_at = timezone.now()
            update_fields.append("cancelled_at")
            self._release_table(order)
        elif new_status == Status.COMPLETED:
            order.completed_at = timezone.now()
            update_fields.append("completed_at")
            self._release_table(order)

        order.status = new_status
        order.save(update_fields=update_fields)

        self.audit.record(
            Action.ORDER_STATUS_UPDATED,
            table_name="orders",
            record_id=order.id,
            order_id=order.id,
            old_values={"status": old_status},
            new_values={
                "status": new_status,
                "restored_ingredients": {str(k): str(v) for k, v in restored.items()},
            },
        )
        logger.info(f"Order {order.order_number} moved {old_status} -> {new_status}")
        return ServiceResult(data=order)

    def _restore_inventory(self, order):
        """
        Bring the order's net consumption of every ingredient back to zero.

        Net consumption is read from the order's stock movements in the audit
        log, not re-derived from recipes, so recipe edits after the sale cannot
        skew the restoration. A negative net (more returned by edits than was
        consumed) is taken back out of stock.
        """
        consumption = self.audit.net_consumption_for_order(order.id)
        completed = 0
        for ingredient_id in sorted(consumption):
            amount = consumption[ingredient_id]
            move = self.ledger.increment if amount > 0 else self.ledger.decrement
            try:
                move(
                    ingredient_id,
                    abs(amount),
                    order_id=order.id,
                    reason=f"Order {order.order_number} cancelled",
                    action=Action.INVENTORY_RESTORE_CANCELLED_ORDER,
                )
            except Exception as e:
                if is_retryable(e):
                    raise
                raise InventoryRestoreFailed(
                    f"Could not restore stock for order {order.order_number}",
                    details={
                        "order_id": str(order.id),
                        "failed_ingredient_id": ingredient_id,
                        "error": str(e),
                        "completed_restorations": completed,
                        "total_restorations": len(consumption),
                    },
                ) from e
            completed += 1
        return consumption

    @staticmethod
    def _release_table(order):
        released = Table.objects.filter(current_order_id=order.id).update(
            status=Table.TableStatus.AVAILABLE, current_order=None
        )
        if released:
            logger.debug(f"Released table {order.table_name} from order {order.order_number}")

    # ------------------------------------------------------------------
    # Other edits
    # ------------------------------------------------------------------

    def update_delivery_fee(self, order_id, delivery_fee) -> ServiceResult:
        delivery_fee = self._validate_fee(delivery_fee)
        get_order(order_id)
        return run_in_transaction(self._update_delivery_fee, order_id, delivery_fee)

    def _update_delivery_fee(self, order_id, delivery_fee):
        order = lock_order(order_id)
        ensure_editable(order)
        old_fee = order.delivery_fee
        order.delivery_fee = delivery_fee
        order.save(update_fields=["delivery_fee", "updated_at"])
        OrderCalculationService.recalculate_order_totals(order)
        self.audit.record(
            Action.ORDER_UPDATED,
            table_name="orders",
            record_id=order.id,
            order_id=order.id,
            old_values={"delivery_fee": str(old_fee)},
            new_values={"delivery_fee": str(delivery_fee), "total": str(order.total)},
        )
        return ServiceResult(data=order)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_fee(delivery_fee):
        try:
            fee = Decimal(str(delivery_fee if delivery_fee is not None else "0"))
        except (InvalidOperation, ValueError):
            raise ValidationFailed("delivery_fee must be a number", details={"delivery_fee": str(delivery_fee)})
        if not fee.is_finite() or fee < 0:
            raise ValidationFailed("delivery_fee cannot be negative", details={"delivery_fee": str(delivery_fee)})
        return quantize_money(fee)

    @staticmethod
    def _validate_lines(items):
        if not isinstance(items, (list, tuple)):
            raise ValidationFailed("items must be a list")
        lines = []
        for raw in items:
            if not isinstance(raw, dict) or raw.get("menu_item_id") is None:
                raise ValidationFailed("Each item needs a menu_item_id", details={"item": str(raw)})
            try:
                menu_item_id = int(raw["menu_item_id"])
            except (TypeError, ValueError):
                raise ValidationFailed(
                    "menu_item_id must be an integer", details={"menu_item_id": str(raw["menu_item_id"])}
                )
            lines.append(
                {
                    "menu_item_id": menu_item_id,
                    "quantity": validate_quantity(raw.get("quantity", 1)),
                    "notes": raw.get("notes") or "",
                }
            )

        requested = {line["menu_item_id"] for line in lines}
        found = set(MenuItem.objects.filter(id__in=requested).values_list("id", flat=True))
        missing = sorted(requested - found)
        if missing:
            raise NotFound(
                f"Menu item(s) not found or inactive: {', '.join(str(m) for m in missing)}",
                code="MENU_ITEM_NOT_FOUND",
                details={"menu_item_ids": missing},
            )
        return lines

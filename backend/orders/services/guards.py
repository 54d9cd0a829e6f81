"""
Row lookup and locking shared by the order services.

Locks are always taken in the same order (order, then line item, then
ingredients by id inside the ledger) so two writers touching the same
order cannot deadlock each other.
"""
from django.core.exceptions import ValidationError as DjangoValidationError

from core_backend.exceptions import Conflict, NotFound, ValidationFailed
from orders.models import Order, OrderItem


def get_order(order_id):
    try:
        return Order.objects.get(pk=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        # Malformed ids are reported as missing
        raise NotFound(f"Order {order_id} not found", code="ORDER_NOT_FOUND", details={"order_id": str(order_id)})


def get_order_item(order_item_id):
    try:
        return OrderItem.objects.select_related("order").get(pk=order_item_id)
    except (OrderItem.DoesNotExist, ValueError, TypeError):
        raise NotFound(
            f"Order item {order_item_id} not found",
            code="ORDER_ITEM_NOT_FOUND",
            details={"order_item_id": order_item_id},
        )


def lock_order(order_id):
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFound(f"Order {order_id} not found", code="ORDER_NOT_FOUND", details={"order_id": str(order_id)})


def lock_order_item(order_item_id):
    """Lock the owning order, then the line item. Returns (order, order_item)."""
    order_id = get_order_item(order_item_id).order_id
    order = lock_order(order_id)
    try:
        order_item = OrderItem.objects.select_for_update().get(pk=order_item_id, order_id=order.id)
    except OrderItem.DoesNotExist:
        raise NotFound(
            f"Order item {order_item_id} not found",
            code="ORDER_ITEM_NOT_FOUND",
            details={"order_item_id": order_item_id},
        )
    order_item.order = order
    return order, order_item


def ensure_editable(order):
    if order.is_terminal:
        raise Conflict(
            f"Order {order.order_number} is {order.status} and can no longer be changed",
            code="ORDER_NOT_EDITABLE",
            details={"order_id": str(order.id), "status": order.status},
        )


def _whole_number(value, field):
    try:
        if isinstance(value, bool):
            raise ValueError
        number = int(value)
        if number != value and str(number) != str(value).strip():
            raise ValueError
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a whole number", details={field: str(value)})
    return number


def validate_quantity(quantity, field="quantity"):
    """Positive whole number, bools rejected."""
    value = _whole_number(quantity, field)
    if value < 1:
        raise ValidationFailed(f"{field} must be at least 1", details={field: value})
    return value


def validate_delta(delta, field="quantity_delta"):
    """Whole number of either sign, bools rejected."""
    return _whole_number(delta, field)

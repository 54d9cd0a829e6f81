import logging
from collections import defaultdict
from decimal import Decimal

from .models import AuditLogEntry

logger = logging.getLogger(__name__)

Action = AuditLogEntry.Action


class AuditTrail:
    """
    Writes and reads the append-only audit log.

    Entries are written through the caller's connection, so they commit or
    roll back together with the change they describe.
    """

    def record(
        self,
        action,
        *,
        table_name,
        record_id=None,
        order_id=None,
        ingredient=None,
        quantity_change=None,
        previous_value=None,
        new_value=None,
        old_values=None,
        new_values=None,
    ):
        entry = AuditLogEntry.objects.create(
            action=action,
            table_name=table_name,
            record_id="" if record_id is None else str(record_id),
            order_id=order_id,
            ingredient=ingredient,
            quantity_change=quantity_change,
            previous_value=previous_value,
            new_value=new_value,
            old_values=old_values or {},
            new_values=new_values or {},
        )
        logger.debug(f"Audit: {action} {table_name}:{entry.record_id} (order={order_id})")
        return entry

    def for_order(self, order_id):
        return AuditLogEntry.objects.for_order(order_id)

    def net_consumption_for_order(self, order_id):
        """
        Net stock consumed on behalf of an order, per ingredient id.

        Sums every stock movement tagged with the order (decrements are
        negative, restorations positive) and flips the sign. Ingredients
        whose movements cancel out are omitted.
        """
        totals = defaultdict(Decimal)
        movements = (
            AuditLogEntry.objects.for_order(order_id)
            .stock_movements()
            .values_list("ingredient_id", "quantity_change")
        )
        for ingredient_id, change in movements:
            totals[ingredient_id] -= change or Decimal("0")
        return {ingredient_id: amount for ingredient_id, amount in totals.items() if amount != 0}

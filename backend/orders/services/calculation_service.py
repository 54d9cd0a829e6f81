from decimal import Decimal
import logging

from core_backend.utils.money import ZERO, quantize_money

logger = logging.getLogger(__name__)


class OrderCalculationService:
    """
    Recomputes line-item and order totals from stored rows.

    Totals are always rebuilt from scratch rather than adjusted by deltas,
    so repeated edits cannot accumulate rounding drift:

        line total  = unit_price x quantity + (sum of add-on totals) x quantity
        subtotal    = sum of line totals
        total       = subtotal + delivery_fee   (tax is always zero)
    """

    @staticmethod
    def line_total(unit_price, quantity, addon_totals=()):
        per_unit_addons = sum((Decimal(t) for t in addon_totals), Decimal("0"))
        return quantize_money(Decimal(unit_price) * quantity + per_unit_addons * quantity)

    @staticmethod
    def recalculate_item_total(order_item):
        addon_totals = order_item.addons.values_list("total_price", flat=True)
        new_total = OrderCalculationService.line_total(
            order_item.unit_price, order_item.quantity, addon_totals
        )
        if new_total != order_item.total_price:
            order_item.total_price = new_total
            order_item.save(update_fields=["total_price"])
        return order_item

    @staticmethod
    def recalculate_order_totals(order):
        subtotal = sum(order.items.values_list("total_price", flat=True), ZERO)
        order.subtotal = quantize_money(subtotal)
        order.tax = ZERO
        order.total = quantize_money(order.subtotal + order.delivery_fee)
        order.save(update_fields=["subtotal", "tax", "total", "updated_at"])
        logger.debug(f"Order {order.order_number}: subtotal={order.subtotal} total={order.total}")
        return order

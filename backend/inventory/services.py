"""
Inventory ledger: the only code that changes ingredient stock.

Every movement is a row-locked read-modify-write inside the caller's
transaction and leaves exactly one audit entry behind. Movements are
unconditional: a decrement past zero succeeds, logs a warning and hands
back an InsufficientStockWarning so the caller can surface it.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction

from audit.services import Action, AuditTrail
from core_backend.exceptions import NotFound, ValidationFailed
from core_backend.infrastructure.transactions import run_in_transaction
from core_backend.results import InsufficientStockWarning
from core_backend.utils.money import quantize_quantity, to_decimal

from .models import Ingredient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockMovement:
    ingredient_id: int
    quantity_change: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    warning: Optional[InsufficientStockWarning] = None


class InventoryLedger:

    def __init__(self, audit_trail=None):
        self.audit = audit_trail or AuditTrail()

    @transaction.atomic
    def decrement(
        self,
        ingredient_id,
        amount,
        *,
        order_id=None,
        reason="",
        action=Action.INVENTORY_DECREASE,
        details=None,
    ) -> StockMovement:
        amount = self._validate_amount(amount)
        return self._move(ingredient_id, -amount, order_id=order_id, reason=reason, action=action, details=details)

    @transaction.atomic
    def increment(
        self,
        ingredient_id,
        amount,
        *,
        order_id=None,
        reason="",
        action=Action.INVENTORY_INCREASE,
        details=None,
    ) -> StockMovement:
        amount = self._validate_amount(amount)
        return self._move(ingredient_id, amount, order_id=order_id, reason=reason, action=action, details=details)

    def adjust(self, ingredient_id, quantity_change, reason="") -> StockMovement:
        """Manual restock (positive) or write-off (negative) outside any order."""
        try:
            change = quantize_quantity(quantity_change)
        except (ArithmeticError, TypeError, ValueError):
            raise ValidationFailed(f"Invalid stock amount: {quantity_change}", details={"quantity_change": str(quantity_change)})
        if change == 0:
            raise ValidationFailed("quantity_change cannot be zero")
        move = self.increment if change > 0 else self.decrement
        return run_in_transaction(move, ingredient_id, abs(change), reason=reason or "Manual adjustment")

    def apply_consumption(self, requirements: Dict[int, Decimal], *, order_id=None, reason="", details=None):
        """
        Decrement every ingredient in an aggregated requirement map once.

        Ingredients are locked in ascending id order. Returns the list of
        insufficient-stock warnings raised along the way.
        """
        warnings = []
        for ingredient_id in sorted(requirements):
            movement = self.decrement(
                ingredient_id,
                requirements[ingredient_id],
                order_id=order_id,
                reason=reason,
                details=details,
            )
            if movement.warning:
                warnings.append(movement.warning)
        return warnings

    def return_consumption(self, requirements: Dict[int, Decimal], *, order_id=None, reason="", details=None,
                           action=Action.INVENTORY_INCREASE):
        """Increment every ingredient in an aggregated requirement map once."""
        return [
            self.increment(
                ingredient_id,
                requirements[ingredient_id],
                order_id=order_id,
                reason=reason,
                action=action,
                details=details,
            )
            for ingredient_id in sorted(requirements)
        ]

    def check_availability(self, requirements: Dict[int, Decimal]) -> List[InsufficientStockWarning]:
        """
        Report requirements that exceed current stock. Reads only.

        Unknown ingredients are treated as having no stock.
        """
        ingredients = Ingredient.all_objects.in_bulk(list(requirements))
        warnings = []
        for ingredient_id in sorted(requirements):
            required = to_decimal(requirements[ingredient_id])
            ingredient = ingredients.get(ingredient_id)
            available = ingredient.current_stock if ingredient else Decimal("0")
            if required > available:
                warnings.append(
                    InsufficientStockWarning(
                        ingredient_id=ingredient_id,
                        ingredient_name=ingredient.name if ingredient else f"Ingredient #{ingredient_id}",
                        unit=ingredient.unit if ingredient else "",
                        required=required,
                        available=available,
                    )
                )
        return warnings

    @staticmethod
    def _validate_amount(amount):
        try:
            value = quantize_quantity(amount)
        except (ArithmeticError, TypeError, ValueError):
            raise ValidationFailed(f"Invalid stock amount: {amount}", details={"amount": str(amount)})
        if value <= 0:
            raise ValidationFailed(
                "Stock movements must be positive amounts",
                details={"amount": str(amount)},
            )
        return value

    def _move(self, ingredient_id, delta, *, order_id, reason, action, details):
        try:
            ingredient = Ingredient.all_objects.select_for_update().get(pk=ingredient_id)
        except Ingredient.DoesNotExist:
            raise NotFound(
                f"Ingredient {ingredient_id} not found",
                code="INVENTORY_NOT_FOUND",
                details={"ingredient_id": ingredient_id},
            )

        previous_stock = ingredient.current_stock
        new_stock = previous_stock + delta
        ingredient.current_stock = new_stock
        update_fields = ["current_stock", "updated_at"]

        alert_needed = False
        if new_stock <= ingredient.minimum_stock:
            if not ingredient.low_stock_notified and self._alerts_enabled():
                ingredient.low_stock_notified = True
                update_fields.append("low_stock_notified")
                alert_needed = True
        elif ingredient.low_stock_notified:
            ingredient.low_stock_notified = False
            update_fields.append("low_stock_notified")

        ingredient.save(update_fields=update_fields)

        warning = None
        if new_stock < 0:
            logger.warning(
                f"Ingredient '{ingredient.name}' is negative: {new_stock} {ingredient.unit} "
                f"(was {previous_stock}, change {delta}, order {order_id})"
            )
            if delta < 0:
                warning = InsufficientStockWarning(
                    ingredient_id=ingredient.id,
                    ingredient_name=ingredient.name,
                    unit=ingredient.unit,
                    required=-delta,
                    available=previous_stock,
                )

        new_values = {
            "reason": reason,
            "order_id": str(order_id) if order_id else None,
            "previous_stock": str(previous_stock),
            "change": str(delta),
            "new_stock": str(new_stock),
        }
        if details:
            new_values.update(details)

        self.audit.record(
            action,
            table_name="inventory",
            record_id=ingredient.id,
            order_id=order_id,
            ingredient=ingredient,
            quantity_change=delta,
            previous_value=previous_stock,
            new_value=new_stock,
            old_values={"current_stock": str(previous_stock)},
            new_values=new_values,
        )

        if alert_needed:
            from .tasks import send_low_stock_alert

            ingredient_pk = ingredient.id
            transaction.on_commit(lambda: send_low_stock_alert.delay(ingredient_pk))
            logger.info(f"Low stock alert queued for '{ingredient.name}' ({new_stock} {ingredient.unit})")

        return StockMovement(
            ingredient_id=ingredient.id,
            quantity_change=delta,
            previous_stock=previous_stock,
            new_stock=new_stock,
            warning=warning,
        )

    @staticmethod
    def _alerts_enabled():
        return getattr(settings, "POS_ENGINE", {}).get("LOW_STOCK_ALERTS_ENABLED", True)

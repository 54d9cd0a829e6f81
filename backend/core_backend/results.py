"""
Tagged result values returned by engine services.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List


@dataclass(frozen=True)
class InsufficientStockWarning:
    """
    Non-blocking signal that an ingredient has (or would have) less stock
    than required. Orders still go through; the kitchen cooks to order.
    """

    ingredient_id: int
    ingredient_name: str
    unit: str
    required: Decimal
    available: Decimal

    @property
    def shortfall(self) -> Decimal:
        return self.required - self.available

    def to_dict(self):
        return {
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "unit": self.unit,
            "required": str(self.required),
            "available": str(self.available),
            "shortfall": str(self.shortfall),
        }


@dataclass
class ServiceResult:
    """Successful outcome of an engine operation plus any stock warnings."""

    data: Any = None
    warnings: List[InsufficientStockWarning] = field(default_factory=list)

    success = True

    def extend(self, warnings):
        self.warnings.extend(warnings)
        return self

    def warnings_as_dicts(self):
        return [w.to_dict() for w in self.warnings]

"""
Orders services package - the transaction engine behind order entry.

- OrderLifecycleService: create orders, status transitions, cancel/complete
- OrderItemService: add, re-quantify and remove line items
- AddonAttachmentService: attach/detach add-ons, rescale on quantity change
- OrderCalculationService: line and order totals
"""

# Core order lifecycle
from .order_service import OrderLifecycleService

# Calculation operations
from .calculation_service import OrderCalculationService

# Item management
from .item_service import OrderItemService

# Add-on operations
from .addon_service import AddonAttachmentService

__all__ = [
    # Core
    'OrderLifecycleService',
    # Calculations
    'OrderCalculationService',
    # Items
    'OrderItemService',
    # Add-ons
    'AddonAttachmentService',
]

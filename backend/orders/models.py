import re
import uuid
from decimal import Decimal

from django.db import IntegrityError, models, transaction
from django.utils.translation import gettext_lazy as _

from products.models import Addon, MenuItem


class Table(models.Model):
    class TableStatus(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        OCCUPIED = "OCCUPIED", _("Occupied")
        RESERVED = "RESERVED", _("Reserved")

    name = models.CharField(max_length=50, unique=True)
    capacity = models.PositiveIntegerField(default=4)
    status = models.CharField(
        max_length=10, choices=TableStatus.choices, default=TableStatus.AVAILABLE
    )
    current_order = models.ForeignKey(
        "Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Order currently seated at this table."),
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.status})"


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        PENDING = "PENDING", _("Pending")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        SERVED = "SERVED", _("Served")
        COMPLETED = "COMPLETED", _("Completed")
        CANCELLED = "CANCELLED", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "DINE_IN", _("Dine In")
        TAKEOUT = "TAKEOUT", _("Takeout")
        DELIVERY = "DELIVERY", _("Delivery")

    TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True, blank=True, null=True)
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    order_type = models.CharField(
        max_length=10, choices=OrderType.choices, default=OrderType.DINE_IN
    )

    table = models.ForeignKey(
        Table,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    table_name = models.CharField(
        max_length=50, blank=True, help_text=_("Table name at the time the order was placed.")
    )

    customer_name = models.CharField(max_length=200, blank=True)
    customer_phone = models.CharField(max_length=50, blank=True)
    delivery_address = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Always zero; prices are tax-inclusive."),
    )
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} ({self.order_type}) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def save(self, *args, **kwargs):
        if self.order_number:
            super().save(*args, **kwargs)
            return

        max_retries = 5
        for _attempt in range(max_retries):
            self.order_number = self._generate_sequential_order_number()
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError as e:
                # Another writer took the number; try the next one
                if "order_number" not in str(e).lower() and "unique" not in str(e).lower():
                    raise
                self.order_number = None
        raise IntegrityError("Failed to generate a unique order number after multiple retries.")

    @staticmethod
    def _generate_sequential_order_number():
        """ORD-00001, ORD-00002, ... continuing from the highest existing number."""
        prefix = "ORD-"
        last_order = (
            Order.objects.filter(order_number__startswith=prefix)
            .order_by("-order_number")
            .only("order_number")
            .first()
        )

        next_number = 1
        if last_order and last_order.order_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_order.order_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:05d}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.PROTECT, related_name="order_items"
    )
    name = models.CharField(max_length=200, help_text=_("Menu item name at the time of sale."))
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Menu item price at the time of sale."),
    )
    quantity = models.PositiveIntegerField(default=1)
    total_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("unit_price x quantity plus add-on totals x quantity."),
    )
    notes = models.TextField(blank=True, help_text=_("Customer notes, e.g., 'no onions'"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="orderitem_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.quantity} of {self.name} in Order {self.order.order_number}"


class OrderItemAddon(models.Model):
    """
    An add-on attached to a line item.

    quantity and total_price are per ONE unit of the line item. The line
    item multiplies them by its own quantity when it computes its total and
    when stock is consumed, so changing the line quantity never rewrites
    these rows.
    """

    order_item = models.ForeignKey(
        OrderItem, on_delete=models.CASCADE, related_name="addons"
    )
    addon = models.ForeignKey(Addon, on_delete=models.PROTECT, related_name="order_item_addons")
    addon_name = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = _("Order Item Add-on")
        verbose_name_plural = _("Order Item Add-ons")
        constraints = [
            models.UniqueConstraint(fields=["order_item", "addon"], name="unique_addon_per_order_item"),
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="orderitemaddon_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.addon_name} on {self.order_item.name}"

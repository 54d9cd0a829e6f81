from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _


class AuditLogImmutableError(Exception):
    """Raised on any attempt to change or remove an audit entry."""


class AuditLogQuerySet(models.QuerySet):

    def update(self, **kwargs):
        raise AuditLogImmutableError("Audit log entries cannot be updated")

    def delete(self):
        raise AuditLogImmutableError("Audit log entries cannot be deleted")

    def for_order(self, order_id):
        return self.filter(order_id=order_id)

    def stock_movements(self):
        return self.filter(ingredient__isnull=False)


class AuditLogEntry(models.Model):
    """
    Append-only record of every state change the engine makes.

    Stock movements carry the ingredient, the signed quantity change and the
    stock before and after. order_id is a plain UUID (no foreign key) so
    entries outlive anything they describe.
    """

    class Action(models.TextChoices):
        ORDER_CREATED = "ORDER_CREATED", _("Order Created")
        ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED", _("Order Status Updated")
        ORDER_UPDATED = "ORDER_UPDATED", _("Order Updated")
        ITEM_ADDED = "ITEM_ADDED", _("Item Added")
        ITEM_QUANTITY_CHANGED = "ITEM_QUANTITY_CHANGED", _("Item Quantity Changed")
        ITEM_REMOVED = "ITEM_REMOVED", _("Item Removed")
        ADDON_ATTACHED = "ADDON_ATTACHED", _("Add-on Attached")
        ADDON_DETACHED = "ADDON_DETACHED", _("Add-on Detached")
        INVENTORY_DECREASE = "INVENTORY_DECREASE", _("Inventory Decrease")
        INVENTORY_INCREASE = "INVENTORY_INCREASE", _("Inventory Increase")
        INVENTORY_RESTORE_CANCELLED_ORDER = (
            "INVENTORY_RESTORE_CANCELLED_ORDER",
            _("Inventory Restored (Cancelled Order)"),
        )
        INVENTORY_RESTORE_FAILED = "INVENTORY_RESTORE_FAILED", _("Inventory Restore Failed")

    action = models.CharField(max_length=40, choices=Action.choices, db_index=True)
    table_name = models.CharField(
        max_length=50,
        help_text=_("Logical table the change applies to, e.g. 'orders', 'inventory'."),
    )
    record_id = models.CharField(max_length=64, blank=True)
    order_id = models.UUIDField(null=True, blank=True, db_index=True)
    ingredient = models.ForeignKey(
        "inventory.Ingredient",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    quantity_change = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        help_text=_("Signed stock change (negative for consumption)"),
    )
    previous_value = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    new_value = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    old_values = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = _("Audit Log Entry")
        verbose_name_plural = _("Audit Log Entries")
        indexes = [
            models.Index(fields=["order_id", "ingredient"], name="audit_order_ingredient_idx"),
            models.Index(fields=["table_name", "record_id"], name="audit_table_record_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.table_name}:{self.record_id}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise AuditLogImmutableError("Audit log entries cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise AuditLogImmutableError("Audit log entries cannot be deleted")

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.archiving import SoftDeleteMixin


class MenuItem(SoftDeleteMixin):
    name = models.CharField(max_length=200, help_text=_("Name shown on the menu and on tickets."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Current selling price. Orders snapshot this at sale time."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Menu Item")
        verbose_name_plural = _("Menu Items")

    def __str__(self):
        return self.name


class AddonGroup(SoftDeleteMixin):
    """A family of add-ons offered together, e.g. 'Extra toppings'."""

    name = models.CharField(max_length=100)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name = _("Add-on Group")
        verbose_name_plural = _("Add-on Groups")

    def __str__(self):
        return self.name


class Addon(SoftDeleteMixin):
    group = models.ForeignKey(
        AddonGroup, on_delete=models.PROTECT, related_name="addons"
    )
    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("Price per add-on unit. Used when an attachment does not override it."),
    )
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        unique_together = ("group", "name")

    def __str__(self):
        return f"{self.group.name} - {self.name}"

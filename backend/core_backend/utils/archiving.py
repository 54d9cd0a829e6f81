"""
Soft delete (archiving) for catalog and inventory rows.

Menu items, add-ons, add-on groups, ingredients and recipe rows are never
hard-deleted while orders reference them. Archiving flips `is_active`; the
default manager hides archived rows so the engine cannot attach, resolve or
sell them, while `all_objects` still reaches them for history.
"""

from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def archived(self):
        return self.filter(is_active=False)

    def archive(self):
        """Archive every row in the queryset. Returns the number updated."""
        return self.update(is_active=False, archived_at=timezone.now())

    def unarchive(self):
        return self.update(is_active=True, archived_at=None)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Manager that only returns active rows."""

    def get_queryset(self):
        return super().get_queryset().active()

    def archived_only(self):
        return SoftDeleteQuerySet(self.model, using=self._db).archived()


class SoftDeleteMixin(models.Model):
    """
    Abstract base adding `is_active` / `archived_at` plus two managers:

    - objects: active rows only
    - all_objects: everything, archived included
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive records are archived and ignored by ordering and recipes.",
    )
    archived_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When this record was archived.",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager.from_queryset(SoftDeleteQuerySet)()

    class Meta:
        abstract = True

    def archive(self):
        self.is_active = False
        self.archived_at = timezone.now()
        self.save(update_fields=["is_active", "archived_at"])

    def unarchive(self):
        self.is_active = True
        self.archived_at = None
        self.save(update_fields=["is_active", "archived_at"])

    @property
    def is_archived(self):
        return not self.is_active

    def delete(self, using=None, keep_parents=False):
        """Soft delete. Use force_delete() to remove the row."""
        self.archive()

    def force_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)

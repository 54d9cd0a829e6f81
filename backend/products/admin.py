from django.contrib import admin

from .models import Addon, AddonGroup, MenuItem


class ArchivedAwareAdmin(admin.ModelAdmin):
    """Show archived rows too so they can be restored."""

    def get_queryset(self, request):
        return self.model.all_objects.all()


@admin.register(MenuItem)
class MenuItemAdmin(ArchivedAwareAdmin):
    list_display = ("name", "price", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)


class AddonInline(admin.TabularInline):
    model = Addon
    extra = 0


@admin.register(AddonGroup)
class AddonGroupAdmin(ArchivedAwareAdmin):
    list_display = ("name", "display_order", "is_active")
    inlines = [AddonInline]


@admin.register(Addon)
class AddonAdmin(ArchivedAwareAdmin):
    list_display = ("name", "group", "price", "is_active")
    list_filter = ("group", "is_active")
    search_fields = ("name",)

from django.core.serializers.json import DjangoJSONEncoder
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLogEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[
                    ("ORDER_CREATED", "Order Created"),
                    ("ORDER_STATUS_UPDATED", "Order Status Updated"),
                    ("ORDER_UPDATED", "Order Updated"),
                    ("ITEM_ADDED", "Item Added"),
                    ("ITEM_QUANTITY_CHANGED", "Item Quantity Changed"),
                    ("ITEM_REMOVED", "Item Removed"),
                    ("ADDON_ATTACHED", "Add-on Attached"),
                    ("ADDON_DETACHED", "Add-on Detached"),
                    ("INVENTORY_DECREASE", "Inventory Decrease"),
                    ("INVENTORY_INCREASE", "Inventory Increase"),
                    ("INVENTORY_RESTORE_CANCELLED_ORDER", "Inventory Restored (Cancelled Order)"),
                    ("INVENTORY_RESTORE_FAILED", "Inventory Restore Failed"),
                ], db_index=True, max_length=40)),
                ("table_name", models.CharField(help_text="Logical table the change applies to, e.g. 'orders', 'inventory'.", max_length=50)),
                ("record_id", models.CharField(blank=True, max_length=64)),
                ("order_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("quantity_change", models.DecimalField(blank=True, decimal_places=4, help_text="Signed stock change (negative for consumption)", max_digits=12, null=True)),
                ("previous_value", models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ("new_value", models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ("old_values", models.JSONField(blank=True, default=dict, encoder=DjangoJSONEncoder)),
                ("new_values", models.JSONField(blank=True, default=dict, encoder=DjangoJSONEncoder)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("ingredient", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="audit_entries", to="inventory.ingredient")),
            ],
            options={
                "verbose_name": "Audit Log Entry",
                "verbose_name_plural": "Audit Log Entries",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["order_id", "ingredient"], name="audit_order_ingredient_idx"),
                    models.Index(fields=["table_name", "record_id"], name="audit_table_record_idx"),
                ],
            },
        ),
    ]

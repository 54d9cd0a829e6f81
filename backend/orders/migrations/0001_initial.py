from decimal import Decimal
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("capacity", models.PositiveIntegerField(default=4)),
                ("status", models.CharField(choices=[("AVAILABLE", "Available"), ("OCCUPIED", "Occupied"), ("RESERVED", "Reserved")], default="AVAILABLE", max_length=10)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ("status", models.CharField(choices=[("DRAFT", "Draft"), ("PENDING", "Pending"), ("PREPARING", "Preparing"), ("READY", "Ready"), ("SERVED", "Served"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled")], default="PENDING", max_length=10)),
                ("order_type", models.CharField(choices=[("DINE_IN", "Dine In"), ("TAKEOUT", "Takeout"), ("DELIVERY", "Delivery")], default="DINE_IN", max_length=10)),
                ("table_name", models.CharField(blank=True, help_text="Table name at the time the order was placed.", max_length=50)),
                ("customer_name", models.CharField(blank=True, max_length=200)),
                ("customer_phone", models.CharField(blank=True, max_length=50)),
                ("delivery_address", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("tax", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Always zero; prices are tax-inclusive.", max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("table", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="orders.table")),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at", "order_number"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
                    models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
                ],
            },
        ),
        migrations.AddField(
            model_name="table",
            name="current_order",
            field=models.ForeignKey(blank=True, help_text="Order currently seated at this table.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="orders.order"),
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Menu item name at the time of sale.", max_length=200)),
                ("unit_price", models.DecimalField(decimal_places=2, help_text="Menu item price at the time of sale.", max_digits=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="unit_price x quantity plus add-on totals x quantity.", max_digits=10)),
                ("notes", models.TextField(blank=True, help_text="Customer notes, e.g., 'no onions'")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="products.menuitem")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="orderitem_quantity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItemAddon",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("addon_name", models.CharField(max_length=100)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("addon", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_item_addons", to="products.addon")),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="addons", to="orders.orderitem")),
            ],
            options={
                "verbose_name": "Order Item Add-on",
                "verbose_name_plural": "Order Item Add-ons",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("order_item", "addon"), name="unique_addon_per_order_item"),
                    models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="orderitemaddon_quantity_positive"),
                ],
            },
        ),
    ]

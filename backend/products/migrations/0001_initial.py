from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AddonGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive records are archived and ignored by ordering and recipes.")),
                ("archived_at", models.DateTimeField(blank=True, help_text="When this record was archived.", null=True)),
                ("name", models.CharField(max_length=100)),
                ("display_order", models.PositiveIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Add-on Group",
                "verbose_name_plural": "Add-on Groups",
                "ordering": ["display_order", "name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive records are archived and ignored by ordering and recipes.")),
                ("archived_at", models.DateTimeField(blank=True, help_text="When this record was archived.", null=True)),
                ("name", models.CharField(help_text="Name shown on the menu and on tickets.", max_length=200)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, help_text="Current selling price. Orders snapshot this at sale time.", max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Menu Item",
                "verbose_name_plural": "Menu Items",
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Addon",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive records are archived and ignored by ordering and recipes.")),
                ("archived_at", models.DateTimeField(blank=True, help_text="When this record was archived.", null=True)),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, default=0, help_text="Price per add-on unit. Used when an attachment does not override it.", max_digits=10)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="addons", to="products.addongroup")),
            ],
            options={
                "ordering": ["display_order", "name"],
                "abstract": False,
                "unique_together": {("group", "name")},
            },
        ),
    ]

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive records are archived and ignored by ordering and recipes.")),
                ("archived_at", models.DateTimeField(blank=True, help_text="When this record was archived.", null=True)),
                ("name", models.CharField(max_length=200, unique=True)),
                ("unit", models.CharField(help_text="Unit of measure, e.g., 'g', 'ml', 'slices', 'each'.", max_length=50)),
                ("current_stock", models.DecimalField(decimal_places=4, default=Decimal("0"), help_text="Stock on hand. May go negative.", max_digits=12)),
                ("minimum_stock", models.DecimalField(decimal_places=4, default=Decimal("0"), help_text="Low-stock alert threshold.", max_digits=12)),
                ("cost_per_unit", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=10)),
                ("low_stock_notified", models.BooleanField(default=False, help_text="Set once a low-stock alert went out; cleared when stock recovers.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Ingredient",
                "verbose_name_plural": "Ingredients",
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="RecipeItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(db_index=True, default=True, help_text="Inactive records are archived and ignored by ordering and recipes.")),
                ("archived_at", models.DateTimeField(blank=True, help_text="When this record was archived.", null=True)),
                ("quantity", models.DecimalField(decimal_places=4, help_text="Quantity of the ingredient consumed per one unit.", max_digits=10)),
                ("addon", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="recipe_items", to="products.addon")),
                ("ingredient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="recipe_items", to="inventory.ingredient")),
                ("menu_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="recipe_items", to="products.menuitem")),
            ],
            options={
                "verbose_name": "Recipe Item",
                "verbose_name_plural": "Recipe Items",
                "abstract": False,
                "indexes": [
                    models.Index(fields=["menu_item", "is_active"], name="recipeitem_menu_active_idx"),
                    models.Index(fields=["addon", "is_active"], name="recipeitem_addon_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("addon__isnull", True), ("menu_item__isnull", False)),
                            models.Q(("addon__isnull", False), ("menu_item__isnull", True)),
                            _connector="OR",
                        ),
                        name="recipeitem_single_owner",
                    ),
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="recipeitem_quantity_positive"),
                    models.UniqueConstraint(
                        condition=models.Q(("menu_item__isnull", False)),
                        fields=("menu_item", "ingredient"),
                        name="recipeitem_unique_menu_item_ingredient",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("addon__isnull", False)),
                        fields=("addon", "ingredient"),
                        name="recipeitem_unique_addon_ingredient",
                    ),
                ],
            },
        ),
    ]

from __future__ import annotations

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name_en", models.CharField(db_index=True, max_length=255)),
                ("name_mr", models.CharField(max_length=255)),
                ("description_en", models.TextField()),
                ("description_mr", models.TextField()),
                ("benefits", models.JSONField(default=list)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("discounted_price", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("fertilizers", "Fertilizers"),
                            ("seeds", "Seeds"),
                            ("equipment", "Equipment"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("image", models.URLField(max_length=500)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["sku"], name="products_pr_sku_idx"),
                    models.Index(fields=["name_en"], name="products_pr_name_en_idx"),
                    models.Index(fields=["category"], name="products_pr_categor_idx"),
                ],
            },
        ),
    ]

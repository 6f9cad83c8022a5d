import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("workspaces", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Entity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("name", models.CharField(max_length=200)),
                ("display_name", models.CharField(max_length=200)),
                ("plural_display_name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                (
                    "resource",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="entities",
                        to="workspaces.resource",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "entities",
                "ordering": ("created_at", "id"),
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("deleted_at__isnull", True)),
                        fields=("resource", "name"),
                        name="uniq_live_entity_name_per_resource",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EntityField",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("display_name", models.CharField(max_length=200)),
                (
                    "data_type",
                    models.CharField(
                        choices=[
                            ("SingleLineText", "Single line text"),
                            ("MultiLineText", "Multi line text"),
                            ("Email", "Email"),
                            ("WholeNumber", "Whole number"),
                            ("DecimalNumber", "Decimal number"),
                            ("DateTime", "Date time"),
                            ("Boolean", "Boolean"),
                            ("OptionSet", "Option set"),
                            ("MultiSelectOptionSet", "Multi select option set"),
                            ("Lookup", "Lookup"),
                            ("Json", "JSON"),
                            ("Id", "Id"),
                            ("CreatedAt", "Created at"),
                            ("UpdatedAt", "Updated at"),
                        ],
                        max_length=32,
                    ),
                ),
                ("required", models.BooleanField(default=False)),
                ("unique", models.BooleanField(default=False)),
                ("searchable", models.BooleanField(default=False)),
                ("description", models.TextField(blank=True)),
                ("properties", models.JSONField(blank=True, default=dict)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "entity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fields",
                        to="entities.entity",
                    ),
                ),
            ],
            options={
                "ordering": ("position", "id"),
                "constraints": [
                    models.UniqueConstraint(fields=("entity", "name"), name="uniq_entity_field_name"),
                ],
            },
        ),
    ]

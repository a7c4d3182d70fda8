import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(max_length=32, unique=True)),
                (
                    "whatsapp_number",
                    models.CharField(blank=True, default="", max_length=32),
                ),
                ("address", models.TextField(blank=True, default="")),
                (
                    "gender",
                    models.CharField(
                        blank=True,
                        choices=[("male", "Male"), ("female", "Female")],
                        default="",
                        max_length=8,
                    ),
                ),
            ],
            options={
                "db_table": "clients",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="clients_created_idx"),
                    models.Index(fields=["name"], name="clients_name_idx"),
                ],
            },
        ),
    ]

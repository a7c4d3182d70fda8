import django.utils.timezone
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ActivityLogEntry",
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
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.CharField(default="System", max_length=150)),
                ("action", models.CharField(max_length=80)),
                (
                    "entity_type",
                    models.CharField(
                        choices=[
                            ("order", "Order"),
                            ("client", "Client"),
                            ("drawer", "Drawer"),
                            ("system", "System"),
                        ],
                        default="order",
                        max_length=16,
                    ),
                ),
                ("entity_id", models.CharField(blank=True, default="", max_length=64)),
                ("details", models.TextField(blank=True, default="")),
            ],
            options={
                "db_table": "activity_log",
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(fields=["-timestamp"], name="activity_log_ts_idx"),
                    models.Index(
                        fields=["entity_type", "entity_id"],
                        name="activity_log_entity_idx",
                    ),
                ],
            },
        ),
    ]

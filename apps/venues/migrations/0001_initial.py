from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Venue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("hotel", "Hotel"), ("cafe", "Cafe"), ("restaurant", "Restaurant"), ("hall", "Hall")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=120)),
                ("currency", models.CharField(default="INR", max_length=3)),
                (
                    "unit_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Price per night (hotel), per hour per table (cafe) or per day (hall).",
                        max_digits=10,
                    ),
                ),
                (
                    "average_cost_for_two",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Restaurants charge half of this per guest.",
                        max_digits=10,
                    ),
                ),
                ("capacity", models.PositiveIntegerField(default=1, help_text="Maximum guests per booking.")),
                (
                    "units",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Parallel bookable units: cafe tables or identical hall units.",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("opening_time", models.TimeField(blank=True, null=True)),
                ("closing_time", models.TimeField(blank=True, null=True)),
                (
                    "slot_duration_minutes",
                    models.PositiveSmallIntegerField(
                        default=60, validators=[django.core.validators.MinValueValidator(15)]
                    ),
                ),
                ("is_available", models.BooleanField(default=True)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("featured_image", models.URLField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        help_text="Venue admin who receives booking notifications.",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="venues",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Venue",
                "verbose_name_plural": "Venues",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["kind", "is_available"], name="venue_kind_available_idx")],
            },
        ),
        migrations.CreateModel(
            name="TableGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "capacity",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(20),
                        ]
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="table_groups",
                        to="venues.venue",
                    ),
                ),
            ],
            options={
                "verbose_name": "Table group",
                "verbose_name_plural": "Table groups",
                "ordering": ["capacity"],
            },
        ),
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("table_number", models.PositiveIntegerField()),
                ("is_booked", models.BooleanField(default=False)),
                ("version", models.PositiveIntegerField(default=0)),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tables",
                        to="venues.tablegroup",
                    ),
                ),
            ],
            options={
                "verbose_name": "Table",
                "verbose_name_plural": "Tables",
                "ordering": ["group__capacity", "table_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("group", "table_number"), name="unique_table_number_per_group")
                ],
            },
        ),
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("room_type", models.CharField(max_length=64)),
                ("price_per_night", models.DecimalField(decimal_places=2, max_digits=10)),
                ("max_guests", models.PositiveSmallIntegerField(default=2)),
                ("is_booked", models.BooleanField(default=False)),
                ("version", models.PositiveIntegerField(default=0)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rooms",
                        to="venues.venue",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["price_per_night", "id"],
            },
        ),
    ]

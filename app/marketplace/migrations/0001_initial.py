import uuid
from decimal import Decimal

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
            name="Provider",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "company",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Trading name shown to customers",
                        max_length=200,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending review"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("SUSPENDED", "Suspended"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Review status; only APPROVED providers are paid out in batches",
                        max_length=16,
                    ),
                ),
                (
                    "vehicle_type",
                    models.CharField(
                        choices=[
                            ("SMALL_VAN", "Small van"),
                            ("MEDIUM_TRUCK", "Medium truck"),
                            ("LARGE_TRUCK", "Large truck"),
                            ("OTHER", "Other"),
                        ],
                        default="OTHER",
                        help_text="Main vehicle used for suggested pricing",
                        max_length=16,
                    ),
                ),
                (
                    "earnings",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Total amount paid out to this provider",
                        max_digits=14,
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        help_text="PROVIDER account operating this business",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="provider_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "provider",
                "verbose_name_plural": "providers",
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("pickup", models.CharField(help_text="Pickup address", max_length=255)),
                (
                    "dropoff",
                    models.CharField(help_text="Drop-off address", max_length=255),
                ),
                (
                    "scheduled_for",
                    models.DateTimeField(
                        blank=True, help_text="When the move is scheduled", null=True
                    ),
                ),
                (
                    "move_type",
                    models.CharField(
                        choices=[
                            ("APARTMENT", "Apartment"),
                            ("OFFICE", "Office"),
                            ("SINGLE_ITEM", "Single item"),
                            ("OTHER", "Other"),
                        ],
                        default="APARTMENT",
                        help_text="Move type; drives the complexity multiplier",
                        max_length=16,
                    ),
                ),
                (
                    "vehicle_type",
                    models.CharField(
                        choices=[
                            ("SMALL_VAN", "Small van"),
                            ("MEDIUM_TRUCK", "Medium truck"),
                            ("LARGE_TRUCK", "Large truck"),
                            ("OTHER", "Other"),
                        ],
                        default="OTHER",
                        help_text="Vehicle used; drives the per-km rate and load fee",
                        max_length=16,
                    ),
                ),
                (
                    "distance_km",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Route distance in kilometres",
                        max_digits=8,
                    ),
                ),
                (
                    "helpers_count",
                    models.PositiveSmallIntegerField(
                        default=0, help_text="Number of helpers requested"
                    ),
                ),
                (
                    "pricing",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Price breakdown produced by marketplace.pricing",
                    ),
                ),
                (
                    "quoted_total",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Amount charged to the customer",
                        max_digits=12,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("IN_PROGRESS", "In progress"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Booking lifecycle status",
                        max_length=16,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PAID", "Paid"),
                            ("FAILED", "Failed"),
                            ("REFUNDED", "Refunded"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Mirror of the booking's payment status",
                        max_length=16,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        help_text="Customer who booked and pays for the move",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider performing the move",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="marketplace.provider",
                    ),
                ),
            ],
            options={
                "verbose_name": "booking",
                "verbose_name_plural": "bookings",
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
    ]

import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("marketplace", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
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
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Amount charged in major currency units",
                        max_digits=12,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PAID", "Paid"),
                            ("FAILED", "Failed"),
                            ("REFUNDED", "Refunded"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Current state of the payment (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "gateway",
                    models.CharField(
                        choices=[("PAYSTACK", "Paystack")],
                        default="PAYSTACK",
                        help_text="Gateway processing this payment",
                        max_length=16,
                    ),
                ),
                (
                    "gateway_reference",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Gateway transaction reference",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "refund_reference",
                    models.CharField(
                        blank=True,
                        help_text="Gateway refund reference; set once a refund is initiated",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "paid_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the gateway confirmed the charge",
                        null=True,
                    ),
                ),
                (
                    "booking",
                    models.OneToOneField(
                        help_text="Booking this payment settles",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment",
                        to="marketplace.booking",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider who performs the booking",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="marketplace.provider",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "abstract": False,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payment_amount_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentCard",
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
                    "account_number",
                    models.CharField(help_text="Bank account number", max_length=32),
                ),
                (
                    "account_name",
                    models.CharField(help_text="Account holder name", max_length=200),
                ),
                (
                    "bank_code",
                    models.CharField(help_text="Bank branch code", max_length=16),
                ),
                (
                    "bank_name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Bank display name",
                        max_length=100,
                    ),
                ),
                (
                    "recipient_code",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Gateway transfer recipient code",
                        max_length=64,
                    ),
                ),
                (
                    "is_default",
                    models.BooleanField(
                        default=False,
                        help_text="Whether payouts are sent to this account",
                    ),
                ),
                (
                    "is_verified",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the gateway accepted these bank details",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider owning this account",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_cards",
                        to="marketplace.provider",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment card",
                "verbose_name_plural": "Payment cards",
                "ordering": ["-is_default", "-created_at"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_default", True)),
                        fields=("provider",),
                        name="unique_default_card_per_provider",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentEvent",
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
                    "event_type",
                    models.CharField(
                        choices=[
                            ("PAYMENT_INITIATED", "Payment initiated"),
                            ("WEBHOOK_SUCCESS", "Webhook success"),
                            ("VERIFICATION", "Verification"),
                            ("REFUND_REQUEST", "Refund request"),
                            ("REFUND_UPDATE", "Refund update"),
                        ],
                        db_index=True,
                        help_text="Kind of event",
                        max_length=32,
                    ),
                ),
                (
                    "gateway",
                    models.CharField(
                        choices=[("PAYSTACK", "Paystack")],
                        default="PAYSTACK",
                        help_text="Gateway the event came from",
                        max_length=16,
                    ),
                ),
                (
                    "gateway_ref",
                    models.CharField(
                        blank=True,
                        help_text="Gateway reference used to suppress duplicates",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "payload",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Gateway data as received",
                    ),
                ),
                (
                    "payment",
                    models.ForeignKey(
                        help_text="Payment this event belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="events",
                        to="payments.payment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment event",
                "verbose_name_plural": "Payment events",
                "ordering": ["-created_at"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(
                        fields=("gateway", "gateway_ref"),
                        name="unique_payment_event_gateway_ref",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
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
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Payout amount in major currency units",
                        max_digits=12,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PROCESSING", "Processing"),
                            ("COMPLETED", "Completed"),
                            ("FAILED", "Failed"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Current state of the payout (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "transfer_code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Gateway transfer code",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Gateway transfer reference",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "reason",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Narration sent with the transfer",
                        max_length=255,
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the transfer completed",
                        null=True,
                    ),
                ),
                (
                    "failed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the payout failed",
                        null=True,
                    ),
                ),
                (
                    "failure_reason",
                    models.TextField(
                        blank=True,
                        help_text="Detailed reason if the payout failed",
                        null=True,
                    ),
                ),
                (
                    "payment_card",
                    models.ForeignKey(
                        blank=True,
                        help_text="Bank account the transfer was sent to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payouts",
                        to="payments.paymentcard",
                    ),
                ),
                (
                    "payments",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Payments covered by this payout",
                        related_name="payouts",
                        to="payments.payment",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider receiving the payout",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to="marketplace.provider",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payout",
                "verbose_name_plural": "Payouts",
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["provider", "status"],
                        name="payout_provider_status_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payout_amount_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Refund",
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
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Refunded amount in major currency units",
                        max_digits=12,
                    ),
                ),
                (
                    "gateway",
                    models.CharField(
                        choices=[("PAYSTACK", "Paystack")],
                        default="PAYSTACK",
                        help_text="Gateway processing the refund",
                        max_length=16,
                    ),
                ),
                (
                    "gateway_ref",
                    models.CharField(
                        db_index=True,
                        help_text="Gateway refund reference",
                        max_length=255,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("INITIATED", "Initiated"),
                            ("COMPLETED", "Completed"),
                            ("FAILED", "Failed"),
                            ("STUCK", "Stuck"),
                        ],
                        db_index=True,
                        default="INITIATED",
                        help_text="Current state of the refund (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "poll_attempts",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Number of status polls made",
                    ),
                ),
                (
                    "last_polled_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the gateway was last polled",
                        null=True,
                    ),
                ),
                (
                    "payment",
                    models.ForeignKey(
                        help_text="Payment being refunded",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refunds",
                        to="payments.payment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Refund",
                "verbose_name_plural": "Refunds",
                "ordering": ["-created_at"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "INITIATED")),
                        fields=("payment",),
                        name="unique_open_refund_per_payment",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookLog",
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
                    "gateway",
                    models.CharField(
                        choices=[("PAYSTACK", "Paystack")],
                        db_index=True,
                        help_text="Gateway the delivery claims to come from",
                        max_length=16,
                    ),
                ),
                (
                    "payload",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Parsed body, or {'raw': text} when it was not JSON",
                    ),
                ),
                (
                    "headers",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Request headers as received",
                    ),
                ),
            ],
            options={
                "verbose_name": "Webhook log",
                "verbose_name_plural": "Webhook logs",
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
    ]

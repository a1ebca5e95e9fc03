import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Production",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("organization_id", models.UUIDField(db_index=True)),
                ("title", models.CharField(max_length=255)),
                (
                    "reception_status",
                    models.CharField(
                        choices=[("OPEN", "Open"), ("CLOSED", "Closed")],
                        default="CLOSED",
                        max_length=16,
                    ),
                ),
                ("reception_start", models.DateTimeField(blank=True, null=True)),
                ("reception_end", models.DateTimeField(blank=True, null=True)),
                (
                    "reception_end_mode",
                    models.CharField(
                        choices=[
                            ("MANUAL", "Manual"),
                            ("PERFORMANCE_START", "Performance Start"),
                            ("BEFORE_PERFORMANCE", "Before Performance"),
                            ("DAY_BEFORE", "Day Before"),
                        ],
                        default="MANUAL",
                        max_length=32,
                    ),
                ),
                ("reception_end_minutes", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="Performance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_time", models.DateTimeField()),
                ("capacity", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "production",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="performances",
                        to="ticketing.production",
                    ),
                ),
            ],
            options={
                "ordering": ["start_time"],
                "indexes": [
                    models.Index(fields=["production", "start_time"], name="perf_production_start_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                ("price", models.PositiveIntegerField()),
                ("advance_price", models.PositiveIntegerField(blank=True, null=True)),
                ("door_price", models.PositiveIntegerField(blank=True, null=True)),
                ("is_public", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "production",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_types",
                        to="ticketing.production",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "name"],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("organization_id", models.UUIDField(db_index=True)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_name_kana", models.CharField(blank=True, default="", max_length=255)),
                ("customer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("remarks", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("CANCELED", "Canceled"),
                        ],
                        default="CONFIRMED",
                        max_length=16,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("PRE_RESERVATION", "Pre Reservation"),
                            ("PUBLIC_FORM", "Public Form"),
                            ("SAME_DAY", "Same Day"),
                        ],
                        default="PRE_RESERVATION",
                        max_length=16,
                    ),
                ),
                (
                    "checkin_status",
                    models.CharField(
                        choices=[
                            ("NOT_CHECKED_IN", "Not Checked In"),
                            ("PARTIALLY_CHECKED_IN", "Partially Checked In"),
                            ("CHECKED_IN", "Checked In"),
                        ],
                        default="NOT_CHECKED_IN",
                        max_length=32,
                    ),
                ),
                ("checked_in_tickets", models.PositiveIntegerField(default=0)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("UNPAID", "Unpaid"),
                            ("PARTIALLY_PAID", "Partially Paid"),
                            ("PAID", "Paid"),
                        ],
                        default="UNPAID",
                        max_length=16,
                    ),
                ),
                ("paid_amount", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "performance",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="ticketing.performance",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["performance", "status"], name="res_performance_status_idx"),
                    models.Index(fields=["organization_id", "-created_at"], name="res_org_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationTicket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ticket_type_id", models.UUIDField()),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("count", models.PositiveIntegerField()),
                ("price", models.PositiveIntegerField()),
                ("paid_count", models.PositiveIntegerField(default=0)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tickets",
                        to="ticketing.reservation",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("reservation", "ticket_type_id"),
                        name="unique_ticket_type_per_reservation",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CheckinLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[("CHECKIN", "Checkin"), ("RESET", "Reset")],
                        max_length=16,
                    ),
                ),
                ("count", models.IntegerField()),
                ("payment_info", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="checkin_logs",
                        to="ticketing.reservation",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
    ]

"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models


class Production(models.Model):
    """Persistence model for productions."""

    class ReceptionStatus(models.TextChoices):
        OPEN = "OPEN"
        CLOSED = "CLOSED"

    class ReceptionEndMode(models.TextChoices):
        MANUAL = "MANUAL"
        PERFORMANCE_START = "PERFORMANCE_START"
        BEFORE_PERFORMANCE = "BEFORE_PERFORMANCE"
        DAY_BEFORE = "DAY_BEFORE"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization_id = models.UUIDField(db_index=True)
    title = models.CharField(max_length=255)
    reception_status = models.CharField(
        max_length=16, choices=ReceptionStatus.choices, default=ReceptionStatus.CLOSED
    )
    reception_start = models.DateTimeField(blank=True, null=True)
    reception_end = models.DateTimeField(blank=True, null=True)
    reception_end_mode = models.CharField(
        max_length=32, choices=ReceptionEndMode.choices, default=ReceptionEndMode.MANUAL
    )
    reception_end_minutes = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self) -> str:
        return self.title


class Performance(models.Model):
    """Persistence model for one showing of a production."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    production = models.ForeignKey(
        Production, on_delete=models.CASCADE, related_name="performances"
    )
    start_time = models.DateTimeField()
    capacity = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["production", "start_time"], name="perf_production_start_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.production.title} - {self.start_time}"


class TicketType(models.Model):
    """Persistence model for ticket types."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    production = models.ForeignKey(
        Production, on_delete=models.CASCADE, related_name="ticket_types"
    )
    name = models.CharField(max_length=100)
    price = models.PositiveIntegerField()
    advance_price = models.PositiveIntegerField(blank=True, null=True)
    door_price = models.PositiveIntegerField(blank=True, null=True)
    is_public = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "name"]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Reservation(models.Model):
    """Persistence model for reservations.

    Ticket totals are not stored; they are summed from ReservationTicket rows.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING"
        CONFIRMED = "CONFIRMED"
        CANCELED = "CANCELED"

    class CheckinStatus(models.TextChoices):
        NOT_CHECKED_IN = "NOT_CHECKED_IN"
        PARTIALLY_CHECKED_IN = "PARTIALLY_CHECKED_IN"
        CHECKED_IN = "CHECKED_IN"

    class PaymentStatus(models.TextChoices):
        UNPAID = "UNPAID"
        PARTIALLY_PAID = "PARTIALLY_PAID"
        PAID = "PAID"

    class Source(models.TextChoices):
        PRE_RESERVATION = "PRE_RESERVATION"
        PUBLIC_FORM = "PUBLIC_FORM"
        SAME_DAY = "SAME_DAY"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization_id = models.UUIDField(db_index=True)
    performance = models.ForeignKey(
        Performance, on_delete=models.CASCADE, related_name="reservations"
    )
    customer_name = models.CharField(max_length=255)
    customer_name_kana = models.CharField(max_length=255, blank=True, default="")
    customer_email = models.EmailField(blank=True, null=True)
    remarks = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.CONFIRMED)
    source = models.CharField(
        max_length=16, choices=Source.choices, default=Source.PRE_RESERVATION
    )
    checkin_status = models.CharField(
        max_length=32, choices=CheckinStatus.choices, default=CheckinStatus.NOT_CHECKED_IN
    )
    checked_in_tickets = models.PositiveIntegerField(default=0)
    checked_in_at = models.DateTimeField(blank=True, null=True)
    payment_status = models.CharField(
        max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID
    )
    paid_amount = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["performance", "status"], name="res_performance_status_idx"),
            models.Index(fields=["organization_id", "-created_at"], name="res_org_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.customer_name} ({self.performance_id})"


class ReservationTicket(models.Model):
    """One ticket type line of a reservation, priced at booking time.

    The ticket type is referenced by id only so the line survives the ticket
    type being removed from the production.
    """

    reservation = models.ForeignKey(
        Reservation, on_delete=models.CASCADE, related_name="tickets"
    )
    ticket_type_id = models.UUIDField()
    position = models.PositiveSmallIntegerField(default=0)
    count = models.PositiveIntegerField()
    price = models.PositiveIntegerField()
    paid_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "ticket_type_id"], name="unique_ticket_type_per_reservation"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_type_id} x {self.count}"


class CheckinLog(models.Model):
    """Append-only audit trail of ledger mutations."""

    class Type(models.TextChoices):
        CHECKIN = "CHECKIN"
        RESET = "RESET"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation = models.ForeignKey(
        Reservation, on_delete=models.CASCADE, related_name="checkin_logs"
    )
    type = models.CharField(max_length=16, choices=Type.choices)
    count = models.IntegerField()
    payment_info = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.type} {self.count} ({self.reservation_id})"

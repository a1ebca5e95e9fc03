"""Reservation ledger transitions.

Each function takes a freshly read Reservation and returns the new
Reservation plus the audit entry to persist with it. Nothing here touches
storage; stores run these inside one transaction.

Clamping policy:
- checked_in_tickets stays within [0, total_tickets] for every operation.
- paid_amount never goes below 0 but is not capped at total_amount, so an
  over-payment simply reads as PAID.
- paid_count on a line stays within [0, count].
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime

from ticketing.domain.errors import InvalidInputError
from ticketing.domain.models import (
    CheckinLogEntry,
    CheckinLogType,
    CheckinStatus,
    LedgerResult,
    PaymentStatus,
    Reservation,
    ReservationSource,
    ReservationStatus,
    TicketLine,
)
from ticketing.domain.value_objects import (
    OrganizationId,
    PerformanceId,
    ReservationId,
    TicketTypeId,
)

Breakdown = Mapping[TicketTypeId, int]


def derive_checkin_status(checked_in_tickets: int, total_tickets: int) -> CheckinStatus:
    # Zero is tested first so a reservation without tickets is never CHECKED_IN.
    if checked_in_tickets == 0:
        return CheckinStatus.NOT_CHECKED_IN
    if checked_in_tickets >= total_tickets:
        return CheckinStatus.CHECKED_IN
    return CheckinStatus.PARTIALLY_CHECKED_IN


def derive_payment_status(paid_amount: int, total_amount: int) -> PaymentStatus:
    if paid_amount >= total_amount:
        return PaymentStatus.PAID
    if paid_amount > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise InvalidInputError(f"{name} cannot be negative")


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _apply_paid_counts(tickets: tuple[TicketLine, ...], deltas: Breakdown) -> tuple[TicketLine, ...]:
    """Shift each line's paid_count by its delta; unknown ids and zeros are ignored."""
    updated = []
    for line in tickets:
        delta = deltas.get(line.ticket_type_id, 0)
        if delta:
            line = replace(line, paid_count=_clamp(line.paid_count + delta, 0, line.count))
        updated.append(line)
    return tuple(updated)


def _serialize_breakdown(breakdown: Breakdown, sign: int = 1) -> dict[str, int]:
    return {str(ticket_type_id): sign * count for ticket_type_id, count in breakdown.items()}


def _with_counters(
    reservation: Reservation,
    *,
    checked_in_tickets: int,
    paid_amount: int,
    checked_in_at: datetime | None,
    tickets: tuple[TicketLine, ...] | None = None,
) -> Reservation:
    tickets = reservation.tickets if tickets is None else tickets
    updated = replace(
        reservation,
        tickets=tickets,
        checked_in_tickets=checked_in_tickets,
        checked_in_at=checked_in_at,
        paid_amount=paid_amount,
    )
    return replace(
        updated,
        checkin_status=derive_checkin_status(checked_in_tickets, updated.total_tickets),
        payment_status=derive_payment_status(paid_amount, updated.total_amount),
    )


def add_checked_in_tickets(reservation: Reservation, count: int, now: datetime) -> LedgerResult:
    """Check in ``count`` more tickets, truncating at the reservation's total."""
    _require_non_negative("count", count)
    checked_in = min(reservation.checked_in_tickets + count, reservation.total_tickets)
    updated = _with_counters(
        reservation,
        checked_in_tickets=checked_in,
        paid_amount=reservation.paid_amount,
        checked_in_at=reservation.checked_in_at or now,
    )
    entry = CheckinLogEntry(
        reservation_id=reservation.id,
        type=CheckinLogType.CHECKIN,
        count=count,
        created_at=now,
    )
    return LedgerResult(reservation=updated, log_entry=entry)


def reset_check_in(reservation: Reservation, now: datetime) -> LedgerResult:
    """Undo check-in and payment entirely (un-checking-in implies a refund)."""
    tickets = tuple(replace(line, paid_count=0) for line in reservation.tickets)
    updated = _with_counters(
        reservation,
        checked_in_tickets=0,
        paid_amount=0,
        checked_in_at=None,
        tickets=tickets,
    )
    entry = CheckinLogEntry(
        reservation_id=reservation.id,
        type=CheckinLogType.RESET,
        count=reservation.checked_in_tickets,
        created_at=now,
    )
    return LedgerResult(reservation=updated, log_entry=entry)


def process_checkin_with_payment(
    reservation: Reservation,
    checkin_count: int,
    paid_amount: int,
    breakdown: Breakdown,
    now: datetime,
) -> LedgerResult:
    """Check in tickets and take payment for them in one step."""
    _require_non_negative("checkin_count", checkin_count)
    _require_non_negative("paid_amount", paid_amount)
    for count in breakdown.values():
        _require_non_negative("breakdown count", count)

    checked_in = min(reservation.checked_in_tickets + checkin_count, reservation.total_tickets)
    updated = _with_counters(
        reservation,
        checked_in_tickets=checked_in,
        paid_amount=reservation.paid_amount + paid_amount,
        checked_in_at=reservation.checked_in_at or now,
        tickets=_apply_paid_counts(reservation.tickets, breakdown),
    )
    entry = CheckinLogEntry(
        reservation_id=reservation.id,
        type=CheckinLogType.CHECKIN,
        count=checkin_count,
        payment_info=_serialize_breakdown(breakdown),
        created_at=now,
    )
    return LedgerResult(reservation=updated, log_entry=entry)


def process_partial_reset(
    reservation: Reservation,
    reset_count: int,
    refund_amount: int,
    breakdown: Breakdown,
    now: datetime,
) -> LedgerResult:
    """Inverse of process_checkin_with_payment, clamped at zero."""
    _require_non_negative("reset_count", reset_count)
    _require_non_negative("refund_amount", refund_amount)
    for count in breakdown.values():
        _require_non_negative("breakdown count", count)

    checked_in = max(reservation.checked_in_tickets - reset_count, 0)
    negated = {ticket_type_id: -count for ticket_type_id, count in breakdown.items()}
    updated = _with_counters(
        reservation,
        checked_in_tickets=checked_in,
        paid_amount=max(reservation.paid_amount - refund_amount, 0),
        checked_in_at=None if checked_in == 0 else reservation.checked_in_at,
        tickets=_apply_paid_counts(reservation.tickets, negated),
    )
    entry = CheckinLogEntry(
        reservation_id=reservation.id,
        type=CheckinLogType.RESET,
        count=reset_count,
        payment_info=_serialize_breakdown(breakdown, sign=-1),
        created_at=now,
    )
    return LedgerResult(reservation=updated, log_entry=entry)


def register_payment(reservation: Reservation, received_amount: int) -> LedgerResult:
    """Add a lump-sum payment. Produces no audit entry."""
    _require_non_negative("received_amount", received_amount)
    updated = _with_counters(
        reservation,
        checked_in_tickets=reservation.checked_in_tickets,
        paid_amount=reservation.paid_amount + received_amount,
        checked_in_at=reservation.checked_in_at,
    )
    return LedgerResult(reservation=updated)


def revise_tickets(reservation: Reservation, tickets: tuple[TicketLine, ...]) -> Reservation:
    """Swap in edited ticket lines.

    Paid counts carry over per ticket type and are cut down to the new line
    counts; check-ins are cut down to the new total. paid_amount is kept, so
    a smaller order can read as PAID.
    """
    paid_counts = {line.ticket_type_id: line.paid_count for line in reservation.tickets}
    tickets = tuple(
        replace(line, paid_count=_clamp(paid_counts.get(line.ticket_type_id, 0), 0, line.count))
        for line in tickets
    )
    checked_in = min(reservation.checked_in_tickets, sum(line.count for line in tickets))
    return _with_counters(
        reservation,
        checked_in_tickets=checked_in,
        paid_amount=reservation.paid_amount,
        checked_in_at=reservation.checked_in_at if checked_in else None,
        tickets=tickets,
    )


def settled_same_day_reservation(
    *,
    reservation_id: ReservationId,
    organization_id: OrganizationId,
    performance_id: PerformanceId,
    customer_name: str,
    customer_name_kana: str,
    tickets: tuple[TicketLine, ...],
    now: datetime,
) -> Reservation:
    """Build a door-sale reservation that starts out checked in and paid."""
    tickets = tuple(replace(line, paid_count=line.count) for line in tickets)
    reservation = Reservation(
        id=reservation_id,
        organization_id=organization_id,
        performance_id=performance_id,
        customer_name=customer_name,
        customer_name_kana=customer_name_kana,
        tickets=tickets,
        status=ReservationStatus.CONFIRMED,
        source=ReservationSource.SAME_DAY,
        created_at=now,
        updated_at=now,
    )
    return _with_counters(
        reservation,
        checked_in_tickets=reservation.total_tickets,
        paid_amount=reservation.total_amount,
        checked_in_at=now,
    )

"""Check-in and payment ledger service.

Every mutation goes through ReservationStore.mutate_reservation, so the
transition always runs against the reservation as read inside the
transaction, never against a snapshot supplied by the caller.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    CheckinLogEntry,
    LedgerResult,
    OrganizationId,
    Performance,
    PerformanceId,
    Reservation,
    ReservationId,
)
from ticketing.domain import ledger
from ticketing.domain.errors import (
    PerformanceNotFoundError,
    ProductionNotFoundError,
    ReservationNotFoundError,
)
from ticketing.services.common import (
    ensure_capacity,
    parse_breakdown,
    parse_id,
    positive_counts,
    priced_ticket_lines,
    require_text,
)
from ticketing.stores.interfaces import ProductionStore, ReservationStore, Transition

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for check-in, payment and same-day ticket operations."""

    def __init__(
        self,
        reservations: ReservationStore,
        productions: ProductionStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._reservations = reservations
        self._productions = productions
        self._clock = clock

    def _mutate(
        self,
        operation: str,
        organization_id: str,
        reservation_id: str,
        transition: Transition,
    ) -> LedgerResult:
        org_id = parse_id(OrganizationId, organization_id, "organization")
        res_id = parse_id(ReservationId, reservation_id, "reservation")
        result = self._reservations.mutate_reservation(org_id, res_id, transition)
        if result is None:
            raise ReservationNotFoundError(str(res_id))
        reservation = result.reservation
        logger.info(
            "%s reservation=%s checked_in=%d/%d paid=%d/%d",
            operation,
            res_id,
            reservation.checked_in_tickets,
            reservation.total_tickets,
            reservation.paid_amount,
            reservation.total_amount,
        )
        return result

    def add_checked_in_tickets(
        self, organization_id: str, reservation_id: str, count: int
    ) -> LedgerResult:
        """Check in more tickets of a reservation.

        Raises:
            InvalidInputError: If an id is malformed or count is negative.
            ReservationNotFoundError: If the reservation does not exist.
        """
        now = self._clock()
        return self._mutate(
            "checkin",
            organization_id,
            reservation_id,
            lambda reservation: ledger.add_checked_in_tickets(reservation, count, now),
        )

    def reset_check_in(self, organization_id: str, reservation_id: str) -> LedgerResult:
        """Undo check-in and payment of a reservation.

        Raises:
            InvalidInputError: If an id is malformed.
            ReservationNotFoundError: If the reservation does not exist.
        """
        now = self._clock()
        return self._mutate(
            "reset",
            organization_id,
            reservation_id,
            lambda reservation: ledger.reset_check_in(reservation, now),
        )

    def process_checkin_with_payment(
        self,
        organization_id: str,
        reservation_id: str,
        checkin_count: int,
        paid_amount: int,
        breakdown: Mapping[str, int] | None = None,
    ) -> LedgerResult:
        """Check in tickets and record the payment taken at the door.

        Raises:
            InvalidInputError: If an id is malformed or a value is negative.
            ReservationNotFoundError: If the reservation does not exist.
        """
        payment = parse_breakdown(breakdown)
        now = self._clock()
        return self._mutate(
            "checkin_with_payment",
            organization_id,
            reservation_id,
            lambda reservation: ledger.process_checkin_with_payment(
                reservation, checkin_count, paid_amount, payment, now
            ),
        )

    def process_partial_reset(
        self,
        organization_id: str,
        reservation_id: str,
        reset_count: int,
        refund_amount: int,
        breakdown: Mapping[str, int] | None = None,
    ) -> LedgerResult:
        """Take back part of a check-in and refund part of the payment.

        Raises:
            InvalidInputError: If an id is malformed or a value is negative.
            ReservationNotFoundError: If the reservation does not exist.
        """
        refund = parse_breakdown(breakdown)
        now = self._clock()
        return self._mutate(
            "partial_reset",
            organization_id,
            reservation_id,
            lambda reservation: ledger.process_partial_reset(
                reservation, reset_count, refund_amount, refund, now
            ),
        )

    def register_payment(
        self, organization_id: str, reservation_id: str, received_amount: int
    ) -> LedgerResult:
        """Record a lump-sum payment without a per-ticket breakdown.

        Raises:
            InvalidInputError: If an id is malformed or the amount is negative.
            ReservationNotFoundError: If the reservation does not exist.
        """
        return self._mutate(
            "payment",
            organization_id,
            reservation_id,
            lambda reservation: ledger.register_payment(reservation, received_amount),
        )

    def issue_same_day_ticket(
        self,
        organization_id: str,
        performance_id: str,
        customer_name: str,
        breakdown: Mapping[str, int],
        customer_name_kana: str = "",
    ) -> Reservation:
        """Sell tickets at the door as an already checked-in, paid reservation.

        Raises:
            InvalidInputError: If input is missing or no ticket is requested.
            PerformanceNotFoundError: If the performance does not exist.
            TicketTypeNotFoundError: If a ticket type is not on the production.
            CapacityExceededError: If fewer seats remain than requested.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        perf_id = parse_id(PerformanceId, performance_id, "performance")
        customer_name = require_text(customer_name, "Customer name")
        counts = positive_counts(breakdown)

        performance = self._productions.get_performance(org_id, perf_id)
        if performance is None:
            raise PerformanceNotFoundError(str(perf_id))
        production = self._productions.get_production(org_id, performance.production_id)
        if production is None:
            raise ProductionNotFoundError(str(performance.production_id))
        tickets = priced_ticket_lines(
            production, counts, lambda ticket_type: ticket_type.effective_door_price
        )
        requested = sum(counts.values())
        now = self._clock()

        def build(locked: Performance, booked: int) -> Reservation:
            ensure_capacity(locked, booked, requested)
            return ledger.settled_same_day_reservation(
                reservation_id=ReservationId.new(),
                organization_id=org_id,
                performance_id=perf_id,
                customer_name=customer_name,
                customer_name_kana=(customer_name_kana or "").strip(),
                tickets=tickets,
                now=now,
            )

        reservation = self._reservations.add_reservation(org_id, perf_id, build)
        if reservation is None:
            raise PerformanceNotFoundError(str(perf_id))
        logger.info(
            "same_day_ticket reservation=%s performance=%s tickets=%d amount=%d",
            reservation.id,
            perf_id,
            reservation.total_tickets,
            reservation.total_amount,
        )
        return reservation

    def list_checkin_logs(self, organization_id: str, reservation_id: str) -> list[CheckinLogEntry]:
        """Return the audit trail of a reservation.

        Raises:
            InvalidInputError: If an id is malformed.
            ReservationNotFoundError: If the reservation does not exist.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        res_id = parse_id(ReservationId, reservation_id, "reservation")
        if self._reservations.get_reservation(org_id, res_id) is None:
            raise ReservationNotFoundError(str(res_id))
        return self._reservations.list_checkin_logs(org_id, res_id)

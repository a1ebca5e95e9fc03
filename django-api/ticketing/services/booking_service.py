"""Reservation booking service: staff registration, public form, edits and status changes."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    EffectiveReceptionStatus,
    OrganizationId,
    Performance,
    PerformanceId,
    Production,
    ProductionId,
    Reservation,
    ReservationId,
    ReservationSource,
    ReservationStatus,
    TicketLine,
)
from ticketing.domain import ledger
from ticketing.domain.errors import (
    PerformanceNotFoundError,
    ProductionNotFoundError,
    ReceptionClosedError,
    ReservationNotFoundError,
)
from ticketing.domain.reception import effective_reception_status, is_performance_reception_open
from ticketing.services.common import (
    ensure_capacity,
    parse_id,
    positive_counts,
    priced_ticket_lines,
    require_text,
)
from ticketing.stores.interfaces import ProductionStore, ReservationReviser, ReservationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceptionView:
    """What the public booking form needs to decide what to show."""

    production: Production
    status: EffectiveReceptionStatus
    open_performances: frozenset[PerformanceId]


class BookingService:
    """Service for creating reservations and changing their status."""

    def __init__(
        self,
        reservations: ReservationStore,
        productions: ProductionStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._reservations = reservations
        self._productions = productions
        self._clock = clock

    def _now(self) -> datetime:
        return timezone.localtime(self._clock())

    def get_reception(self, production_id: str) -> ReceptionView:
        """Return the reception state of a production's public form.

        Raises:
            InvalidInputError: If the production_id is not a valid UUID.
            ProductionNotFoundError: If the production does not exist.
        """
        prod_id = parse_id(ProductionId, production_id, "production")
        production = self._productions.get_public_production(prod_id)
        if production is None:
            raise ProductionNotFoundError(str(prod_id))
        now = self._now()
        return ReceptionView(
            production=production,
            status=effective_reception_status(production, now),
            open_performances=frozenset(
                performance.id
                for performance in production.performances
                if is_performance_reception_open(performance, production, now)
            ),
        )

    def _book(
        self,
        production: Production,
        performance_id: PerformanceId,
        tickets: tuple[TicketLine, ...],
        source: ReservationSource,
        customer_name: str,
        customer_name_kana: str,
        customer_email: str | None,
        remarks: str,
    ) -> Reservation:
        requested = sum(line.count for line in tickets)
        now = self._clock()

        def build(locked: Performance, booked: int) -> Reservation:
            ensure_capacity(locked, booked, requested)
            return Reservation(
                id=ReservationId.new(),
                organization_id=production.organization_id,
                performance_id=performance_id,
                customer_name=customer_name,
                customer_name_kana=customer_name_kana,
                customer_email=customer_email,
                remarks=remarks,
                tickets=tickets,
                status=ReservationStatus.CONFIRMED,
                source=source,
                created_at=now,
                updated_at=now,
            )

        reservation = self._reservations.add_reservation(
            production.organization_id, performance_id, build
        )
        if reservation is None:
            raise PerformanceNotFoundError(str(performance_id))
        logger.info(
            "reservation created reservation=%s performance=%s source=%s tickets=%d",
            reservation.id,
            performance_id,
            source.value,
            reservation.total_tickets,
        )
        return reservation

    def create_reservation(
        self,
        organization_id: str,
        performance_id: str,
        customer_name: str,
        tickets: Mapping[str, int],
        customer_name_kana: str = "",
        customer_email: str | None = None,
        remarks: str = "",
    ) -> Reservation:
        """Register a reservation taken by staff, priced at advance prices.

        Raises:
            InvalidInputError: If input is missing or no ticket is selected.
            PerformanceNotFoundError: If the performance does not exist.
            TicketTypeNotFoundError: If a ticket type is not on the production.
            CapacityExceededError: If fewer seats remain than requested.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        perf_id = parse_id(PerformanceId, performance_id, "performance")
        customer_name = require_text(customer_name, "Customer name")
        counts = positive_counts(tickets)

        performance = self._productions.get_performance(org_id, perf_id)
        if performance is None:
            raise PerformanceNotFoundError(str(perf_id))
        production = self._productions.get_production(org_id, performance.production_id)
        if production is None:
            raise ProductionNotFoundError(str(performance.production_id))

        lines = priced_ticket_lines(
            production, counts, lambda ticket_type: ticket_type.effective_advance_price
        )
        return self._book(
            production,
            perf_id,
            lines,
            ReservationSource.PRE_RESERVATION,
            customer_name,
            (customer_name_kana or "").strip(),
            customer_email or None,
            remarks or "",
        )

    def create_public_reservation(
        self,
        production_id: str,
        performance_id: str,
        customer_name: str,
        customer_email: str,
        tickets: Mapping[str, int],
        customer_name_kana: str = "",
        remarks: str = "",
    ) -> Reservation:
        """Accept a reservation from the public booking form.

        Raises:
            InvalidInputError: If input is missing or no ticket is selected.
            ProductionNotFoundError: If the production does not exist.
            ReceptionClosedError: If the form or the performance is closed.
            TicketTypeNotFoundError: If a ticket type is not on the production
                or is staff-only.
            CapacityExceededError: If fewer seats remain than requested.
        """
        prod_id = parse_id(ProductionId, production_id, "production")
        perf_id = parse_id(PerformanceId, performance_id, "performance")
        customer_email = require_text(customer_email, "Email address")
        customer_name = require_text(customer_name, "Customer name")
        counts = positive_counts(tickets)

        production = self._productions.get_public_production(prod_id)
        if production is None:
            raise ProductionNotFoundError(str(prod_id))
        now = self._now()
        if effective_reception_status(production, now) is not EffectiveReceptionStatus.OPEN:
            raise ReceptionClosedError()
        performance = production.find_performance(perf_id)
        if performance is None or not is_performance_reception_open(performance, production, now):
            raise ReceptionClosedError("Reception for the selected performance has ended")

        lines = priced_ticket_lines(
            production,
            counts,
            lambda ticket_type: ticket_type.effective_advance_price,
            public_only=True,
        )
        return self._book(
            production,
            perf_id,
            lines,
            ReservationSource.PUBLIC_FORM,
            customer_name,
            (customer_name_kana or "").strip(),
            customer_email,
            remarks or "",
        )

    def _revise(
        self,
        reservation: Reservation,
        performance_id: PerformanceId,
        revise: ReservationReviser,
    ) -> Reservation:
        revised = self._reservations.revise_reservation(
            reservation.organization_id, reservation.id, performance_id, revise
        )
        if revised is None:
            raise ReservationNotFoundError(str(reservation.id))
        return revised

    def update_reservation(
        self,
        organization_id: str,
        reservation_id: str,
        customer_name: str,
        tickets: Mapping[str, int],
        performance_id: str | None = None,
        customer_name_kana: str = "",
        customer_email: str | None = None,
        remarks: str = "",
    ) -> Reservation:
        """Edit customer details, performance and ticket lines of a reservation.

        Lines are re-priced at current advance prices. Check-ins and paid
        counts are cut down to fit the new lines; paid_amount is kept.

        Raises:
            InvalidInputError: If input is missing or no ticket is selected.
            ReservationNotFoundError: If the reservation does not exist.
            PerformanceNotFoundError: If the target performance does not exist.
            TicketTypeNotFoundError: If a ticket type is not on the production.
            CapacityExceededError: If an active reservation no longer fits.
        """
        current = self.get_reservation(organization_id, reservation_id)
        perf_id = current.performance_id
        if performance_id:
            perf_id = parse_id(PerformanceId, performance_id, "performance")
        customer_name = require_text(customer_name, "Customer name")
        counts = positive_counts(tickets)

        performance = self._productions.get_performance(current.organization_id, perf_id)
        if performance is None:
            raise PerformanceNotFoundError(str(perf_id))
        production = self._productions.get_production(
            current.organization_id, performance.production_id
        )
        if production is None:
            raise ProductionNotFoundError(str(performance.production_id))
        lines = priced_ticket_lines(
            production, counts, lambda ticket_type: ticket_type.effective_advance_price
        )
        now = self._clock()

        def revise(locked: Reservation, target: Performance, booked: int) -> Reservation:
            if locked.is_active:
                ensure_capacity(target, booked, sum(line.count for line in lines))
            edited = replace(
                locked,
                performance_id=target.id,
                customer_name=customer_name,
                customer_name_kana=(customer_name_kana or "").strip(),
                customer_email=customer_email or None,
                remarks=remarks or "",
                updated_at=now,
            )
            return ledger.revise_tickets(edited, lines)

        updated = self._revise(current, perf_id, revise)
        logger.info(
            "reservation updated reservation=%s performance=%s tickets=%d",
            updated.id,
            perf_id,
            updated.total_tickets,
        )
        return updated

    def cancel_reservation(self, organization_id: str, reservation_id: str) -> Reservation:
        """Cancel a reservation, releasing its seats.

        Raises:
            InvalidInputError: If an id is malformed.
            ReservationNotFoundError: If the reservation does not exist.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        res_id = parse_id(ReservationId, reservation_id, "reservation")
        reservation = self._reservations.set_reservation_status(
            org_id, res_id, ReservationStatus.CANCELED
        )
        if reservation is None:
            raise ReservationNotFoundError(str(res_id))
        logger.info("reservation canceled reservation=%s", res_id)
        return reservation

    def restore_reservation(self, organization_id: str, reservation_id: str) -> Reservation:
        """Bring a canceled reservation back as confirmed if its seats are still free.

        Raises:
            InvalidInputError: If an id is malformed.
            ReservationNotFoundError: If the reservation does not exist.
            CapacityExceededError: If its seats were booked in the meantime.
        """
        current = self.get_reservation(organization_id, reservation_id)
        now = self._clock()

        def revise(locked: Reservation, performance: Performance, booked: int) -> Reservation:
            if locked.is_active:
                return locked
            ensure_capacity(performance, booked, locked.total_tickets)
            return replace(locked, status=ReservationStatus.CONFIRMED, updated_at=now)

        restored = self._revise(current, current.performance_id, revise)
        logger.info("reservation restored reservation=%s", restored.id)
        return restored

    def get_reservation(self, organization_id: str, reservation_id: str) -> Reservation:
        """Return a reservation by ID.

        Raises:
            InvalidInputError: If an id is malformed.
            ReservationNotFoundError: If the reservation does not exist.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        res_id = parse_id(ReservationId, reservation_id, "reservation")
        reservation = self._reservations.get_reservation(org_id, res_id)
        if reservation is None:
            raise ReservationNotFoundError(str(res_id))
        return reservation

    def list_checkin_reservations(
        self, organization_id: str, performance_id: str
    ) -> list[Reservation]:
        """Return the check-in list of a performance.

        Raises:
            InvalidInputError: If an id is malformed.
            PerformanceNotFoundError: If the performance does not exist.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        perf_id = parse_id(PerformanceId, performance_id, "performance")
        if self._productions.get_performance(org_id, perf_id) is None:
            raise PerformanceNotFoundError(str(perf_id))
        return self._reservations.list_reservations_for_performance(org_id, perf_id)

    def search_reservations(self, organization_id: str, query: str) -> list[Reservation]:
        """Return reservations matching a customer name or email fragment."""
        org_id = parse_id(OrganizationId, organization_id, "organization")
        query = (query or "").strip()
        if not query:
            return []
        return self._reservations.search_reservations(org_id, query)

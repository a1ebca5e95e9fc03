"""Dashboard figures: seats sold per performance and likely duplicate bookings."""

from ticketing.domain import (
    DuplicateGroup,
    OrganizationId,
    PerformanceStats,
    ProductionId,
    Reservation,
)
from ticketing.domain.errors import ProductionNotFoundError
from ticketing.services.common import parse_id
from ticketing.stores.interfaces import ProductionStore, ReservationStore


def _same_booking(a: Reservation, b: Reservation) -> bool:
    if a.performance_id != b.performance_id:
        return False
    if a.ticket_breakdown() != b.ticket_breakdown():
        return False
    same_email = bool(a.customer_email) and a.customer_email == b.customer_email
    return a.customer_name == b.customer_name or same_email


def find_duplicates(reservations: list[Reservation]) -> list[DuplicateGroup]:
    """Group reservations that repeat the same booking.

    Each reservation joins at most one group, keyed on the first member.
    """
    grouped: set = set()
    groups = []
    for index, first in enumerate(reservations):
        if first.id in grouped:
            continue
        members = [first]
        for other in reservations[index + 1 :]:
            if other.id not in grouped and _same_booking(first, other):
                members.append(other)
                grouped.add(other.id)
        if len(members) > 1:
            grouped.add(first.id)
            groups.append(DuplicateGroup(id=f"group-{first.id}", reservations=tuple(members)))
    return groups


class ReportService:
    """Service for production dashboard figures."""

    def __init__(self, reservations: ReservationStore, productions: ProductionStore) -> None:
        self._reservations = reservations
        self._productions = productions

    def performance_stats(self, organization_id: str, production_id: str) -> list[PerformanceStats]:
        """Return sales per performance, ordered by start time.

        Raises:
            InvalidInputError: If an id is malformed.
            ProductionNotFoundError: If the production does not exist.
        """
        org_id = parse_id(OrganizationId, organization_id, "organization")
        prod_id = parse_id(ProductionId, production_id, "production")
        production = self._productions.get_production(org_id, prod_id)
        if production is None:
            raise ProductionNotFoundError(str(prod_id))
        booked = self._reservations.booked_counts(org_id, prod_id)
        performances = sorted(production.performances, key=lambda p: p.start_time)
        return [
            PerformanceStats(
                performance_id=performance.id,
                start_time=performance.start_time,
                capacity=performance.capacity.value,
                booked_count=booked.get(performance.id, 0),
            )
            for performance in performances
        ]

    def duplicate_reservations(self, organization_id: str, production_id: str) -> list[DuplicateGroup]:
        """Return groups of active reservations that look like double bookings."""
        org_id = parse_id(OrganizationId, organization_id, "organization")
        prod_id = parse_id(ProductionId, production_id, "production")
        if self._productions.get_production(org_id, prod_id) is None:
            raise ProductionNotFoundError(str(prod_id))
        return find_duplicates(
            self._reservations.list_active_reservations_for_production(org_id, prod_id)
        )

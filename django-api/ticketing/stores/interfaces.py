"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every read is scoped to
an organization; rows owned by another organization behave as missing.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from ticketing.domain import (
    CheckinLogEntry,
    LedgerResult,
    OrganizationId,
    Performance,
    PerformanceId,
    Production,
    ProductionId,
    Reservation,
    ReservationId,
    ReservationStatus,
    TicketType,
    TicketTypeId,
)

Transition = Callable[[Reservation], LedgerResult]
"""Computes the next ledger state from a freshly read reservation."""

ReservationBuilder = Callable[[Performance, int], Reservation]
"""Builds a new reservation given the locked performance and its booked count."""

PerformanceReviser = Callable[[Performance, int], Performance]
"""Rewrites a locked performance given the tickets booked on it."""

ReservationReviser = Callable[[Reservation, Performance, int], Reservation]
"""Rewrites a locked reservation given its target performance and the tickets
booked there by every other active reservation."""


class ReservationStore(ABC):
    """Interface for reservation persistence operations."""

    @abstractmethod
    def get_reservation(
        self, organization_id: OrganizationId, reservation_id: ReservationId
    ) -> Reservation | None:
        """Return a reservation by ID, or None if not found."""
        ...

    @abstractmethod
    def list_reservations_for_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> list[Reservation]:
        """Return non-canceled reservations ordered by kana, then name."""
        ...

    @abstractmethod
    def list_active_reservations_for_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> list[Reservation]:
        """Return non-canceled reservations of every performance, oldest first."""
        ...

    @abstractmethod
    def search_reservations(self, organization_id: OrganizationId, query: str) -> list[Reservation]:
        """Return reservations whose customer name or email contains query, newest first."""
        ...

    @abstractmethod
    def list_checkin_logs(
        self, organization_id: OrganizationId, reservation_id: ReservationId
    ) -> list[CheckinLogEntry]:
        """Return the audit trail of a reservation, oldest first."""
        ...

    @abstractmethod
    def mutate_reservation(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        transition: Transition,
    ) -> LedgerResult | None:
        """Apply transition atomically and persist its reservation and log entry.

        The reservation is locked and read inside the transaction. Returns
        None if the reservation does not exist. Exceptions raised by the
        transition abort the transaction.
        """
        ...

    @abstractmethod
    def add_reservation(
        self,
        organization_id: OrganizationId,
        performance_id: PerformanceId,
        build: ReservationBuilder,
    ) -> Reservation | None:
        """Create the reservation returned by build while the performance is locked.

        Returns None if the performance does not exist.
        """
        ...

    @abstractmethod
    def set_reservation_status(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        status: ReservationStatus,
    ) -> Reservation | None:
        """Update the booking status, or return None if not found."""
        ...

    @abstractmethod
    def revise_reservation(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        performance_id: PerformanceId,
        revise: ReservationReviser,
    ) -> Reservation | None:
        """Persist the reservation returned by revise.

        The target performance and the reservation are both locked before
        revise runs. Customer fields, performance, status, counters and
        ticket lines are all written. Returns None if either row is missing.
        Exceptions raised by revise abort the transaction.
        """
        ...

    @abstractmethod
    def booked_counts(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> dict[PerformanceId, int]:
        """Return tickets held by non-canceled reservations, per performance."""
        ...


class ProductionStore(ABC):
    """Interface for production, performance and ticket type persistence."""

    @abstractmethod
    def list_productions(self, organization_id: OrganizationId) -> list[Production]:
        """Return productions ordered by updated_at descending."""
        ...

    @abstractmethod
    def get_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> Production | None:
        """Return a production with its performances and ticket types."""
        ...

    @abstractmethod
    def get_public_production(self, production_id: ProductionId) -> Production | None:
        """Return a production for the public booking form, regardless of owner."""
        ...

    @abstractmethod
    def create_production(self, production: Production) -> Production:
        ...

    @abstractmethod
    def save_production(self, production: Production) -> Production:
        """Persist title and reception settings of an existing production."""
        ...

    @abstractmethod
    def delete_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> bool:
        """Delete a production with its performances and ticket types.

        Returns False, leaving everything untouched, when any performance
        still has an active reservation.
        """
        ...

    @abstractmethod
    def get_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> Performance | None:
        ...

    @abstractmethod
    def add_performance(self, performance: Performance) -> Performance:
        ...

    @abstractmethod
    def update_performance(
        self,
        organization_id: OrganizationId,
        performance_id: PerformanceId,
        revise: PerformanceReviser,
    ) -> Performance | None:
        """Persist the performance returned by revise while the row is locked.

        Returns None if the performance does not exist.
        """
        ...

    @abstractmethod
    def delete_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> bool:
        """Delete a performance with no active reservations.

        Canceled reservations are removed with it. Returns False, leaving
        everything untouched, when an active reservation exists.
        """
        ...

    @abstractmethod
    def add_ticket_type(self, ticket_type: TicketType) -> TicketType:
        ...

    @abstractmethod
    def save_ticket_type(self, ticket_type: TicketType) -> TicketType:
        ...

    @abstractmethod
    def delete_ticket_type(
        self, organization_id: OrganizationId, ticket_type_id: TicketTypeId
    ) -> bool:
        """Delete a ticket type no active reservation uses.

        Returns False when an active reservation still holds it.
        """
        ...

"""Production, performance and ticket type management."""

import logging
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from ticketing.domain import (
    Capacity,
    Money,
    OrganizationId,
    Performance,
    PerformanceId,
    Production,
    ProductionId,
    ReceptionEndMode,
    ReceptionStatus,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.errors import (
    InvalidInputError,
    PerformanceNotFoundError,
    ProductionNotFoundError,
    ResourceInUseError,
    TicketTypeNotFoundError,
)
from ticketing.services.common import parse_id, require_text
from ticketing.stores.interfaces import ProductionStore

logger = logging.getLogger(__name__)


def _capacity(value: int) -> Capacity:
    if value is None or value < 1:
        raise InvalidInputError("Capacity must be at least 1")
    return Capacity(value)


def _price(value: int, label: str) -> Money:
    if value is None or value < 0:
        raise InvalidInputError(f"{label} must be zero or more")
    return Money(value)


def _enum(enum_type, value, label: str):
    try:
        return enum_type(value)
    except ValueError:
        raise InvalidInputError(f"Invalid {label}") from None


class ProductionService:
    """Service for organizer-side production configuration."""

    def __init__(self, store: ProductionStore) -> None:
        self._store = store

    def _production(self, organization_id: str, production_id: str) -> Production:
        org_id = parse_id(OrganizationId, organization_id, "organization")
        prod_id = parse_id(ProductionId, production_id, "production")
        production = self._store.get_production(org_id, prod_id)
        if production is None:
            raise ProductionNotFoundError(str(prod_id))
        return production

    def _performance(self, organization_id: str, performance_id: str) -> Performance:
        org_id = parse_id(OrganizationId, organization_id, "organization")
        perf_id = parse_id(PerformanceId, performance_id, "performance")
        performance = self._store.get_performance(org_id, perf_id)
        if performance is None:
            raise PerformanceNotFoundError(str(perf_id))
        return performance

    def _ticket_type(self, production: Production, ticket_type_id: str) -> TicketType:
        tt_id = parse_id(TicketTypeId, ticket_type_id, "ticket type")
        ticket_type = production.find_ticket_type(tt_id)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(tt_id))
        return ticket_type

    def list_productions(self, organization_id: str) -> list[Production]:
        """Return the organization's productions, most recently updated first."""
        org_id = parse_id(OrganizationId, organization_id, "organization")
        return self._store.list_productions(org_id)

    def get_production(self, organization_id: str, production_id: str) -> Production:
        """Return a production with performances and ticket types.

        Raises:
            InvalidInputError: If an id is malformed.
            ProductionNotFoundError: If the production does not exist.
        """
        return self._production(organization_id, production_id)

    def create_production(self, organization_id: str, title: str) -> Production:
        """Create a production with reception closed."""
        org_id = parse_id(OrganizationId, organization_id, "organization")
        production = self._store.create_production(
            Production(
                id=ProductionId(uuid4()),
                organization_id=org_id,
                title=require_text(title, "Title"),
            )
        )
        logger.info("production created production=%s", production.id)
        return production

    def update_production(self, organization_id: str, production_id: str, title: str) -> Production:
        """Rename a production."""
        production = self._production(organization_id, production_id)
        return self._store.save_production(replace(production, title=require_text(title, "Title")))

    def delete_production(self, organization_id: str, production_id: str) -> None:
        """Delete a production with its performances and ticket types.

        Raises:
            InvalidInputError: If an id is malformed.
            ProductionNotFoundError: If the production does not exist.
            ResourceInUseError: If any performance has a non-canceled reservation.
        """
        production = self._production(organization_id, production_id)
        if not self._store.delete_production(production.organization_id, production.id):
            raise ResourceInUseError("The production already has reservations")
        logger.info("production deleted production=%s", production.id)

    def update_reception_status(
        self, organization_id: str, production_id: str, status: str
    ) -> Production:
        """Flip the manual reception switch."""
        production = self._production(organization_id, production_id)
        reception_status = _enum(ReceptionStatus, status, "reception status")
        return self._store.save_production(replace(production, reception_status=reception_status))

    def update_reception_schedule(
        self,
        organization_id: str,
        production_id: str,
        reception_start: datetime | None,
        reception_end: datetime | None,
        end_mode: str = ReceptionEndMode.MANUAL.value,
        end_minutes: int = 0,
    ) -> Production:
        """Set the scheduled reception window and how it ends.

        Raises:
            InvalidInputError: If the mode is unknown, the offset is negative,
                or the window ends before it starts.
            ProductionNotFoundError: If the production does not exist.
        """
        production = self._production(organization_id, production_id)
        mode = _enum(ReceptionEndMode, end_mode or ReceptionEndMode.MANUAL.value, "end mode")
        end_minutes = end_minutes or 0
        if end_minutes < 0:
            raise InvalidInputError("End minutes cannot be negative")
        if reception_start and reception_end and reception_end < reception_start:
            raise InvalidInputError("Reception end must be after reception start")
        updated = self._store.save_production(
            replace(
                production,
                reception_start=reception_start,
                reception_end=reception_end,
                reception_end_mode=mode,
                reception_end_minutes=end_minutes,
            )
        )
        logger.info(
            "reception schedule production=%s mode=%s start=%s end=%s",
            production.id,
            mode.value,
            reception_start,
            reception_end,
        )
        return updated

    def add_performance(
        self, organization_id: str, production_id: str, start_time: datetime, capacity: int
    ) -> Performance:
        production = self._production(organization_id, production_id)
        if start_time is None:
            raise InvalidInputError("Start time is required")
        return self._store.add_performance(
            Performance(
                id=PerformanceId(uuid4()),
                production_id=production.id,
                start_time=start_time,
                capacity=_capacity(capacity),
            )
        )

    def update_performance(
        self, organization_id: str, performance_id: str, start_time: datetime, capacity: int
    ) -> Performance:
        """Move a performance or resize it.

        Raises:
            InvalidInputError: If input is missing, or the new capacity is
                below the tickets already booked.
            PerformanceNotFoundError: If the performance does not exist.
        """
        performance = self._performance(organization_id, performance_id)
        if start_time is None:
            raise InvalidInputError("Start time is required")
        new_capacity = _capacity(capacity)

        def revise(locked: Performance, booked: int) -> Performance:
            if new_capacity.value < booked:
                raise InvalidInputError(
                    f"Capacity cannot be below the {booked} tickets already booked"
                )
            return replace(locked, start_time=start_time, capacity=new_capacity)

        org_id = parse_id(OrganizationId, organization_id, "organization")
        updated = self._store.update_performance(org_id, performance.id, revise)
        if updated is None:
            raise PerformanceNotFoundError(str(performance.id))
        return updated

    def delete_performance(self, organization_id: str, performance_id: str) -> None:
        """Delete a performance that has no active reservations.

        Raises:
            InvalidInputError: If an id is malformed.
            PerformanceNotFoundError: If the performance does not exist.
            ResourceInUseError: If a non-canceled reservation exists.
        """
        performance = self._performance(organization_id, performance_id)
        org_id = parse_id(OrganizationId, organization_id, "organization")
        if not self._store.delete_performance(org_id, performance.id):
            raise ResourceInUseError("The performance already has reservations")
        logger.info("performance deleted performance=%s", performance.id)

    def add_ticket_type(
        self,
        organization_id: str,
        production_id: str,
        name: str,
        advance_price: int,
        door_price: int,
    ) -> TicketType:
        production = self._production(organization_id, production_id)
        advance = _price(advance_price, "Advance price")
        return self._store.add_ticket_type(
            TicketType(
                id=TicketTypeId(uuid4()),
                production_id=production.id,
                name=require_text(name, "Name"),
                price=advance,
                advance_price=advance,
                door_price=_price(door_price, "Door price"),
            )
        )

    def update_ticket_type(
        self,
        organization_id: str,
        production_id: str,
        ticket_type_id: str,
        name: str,
        advance_price: int,
        door_price: int,
    ) -> TicketType:
        production = self._production(organization_id, production_id)
        ticket_type = self._ticket_type(production, ticket_type_id)
        advance = _price(advance_price, "Advance price")
        return self._store.save_ticket_type(
            replace(
                ticket_type,
                name=require_text(name, "Name"),
                price=advance,
                advance_price=advance,
                door_price=_price(door_price, "Door price"),
            )
        )

    def delete_ticket_type(
        self, organization_id: str, production_id: str, ticket_type_id: str
    ) -> None:
        """Remove a ticket type that no active reservation holds.

        Raises:
            TicketTypeNotFoundError: If the ticket type is not on the production.
            ResourceInUseError: If a non-canceled reservation uses it.
        """
        production = self._production(organization_id, production_id)
        ticket_type = self._ticket_type(production, ticket_type_id)
        if not self._store.delete_ticket_type(production.organization_id, ticket_type.id):
            raise ResourceInUseError("The ticket type is used by reservations")
        logger.info("ticket type deleted ticket_type=%s", ticket_type.id)

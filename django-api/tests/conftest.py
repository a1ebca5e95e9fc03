"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from datetime import datetime
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest
from rest_framework.test import APIClient

from ticketing.domain import (
    Capacity,
    CheckinLogEntry,
    LedgerResult,
    Money,
    OrganizationId,
    Performance,
    PerformanceId,
    Production,
    ProductionId,
    ReceptionStatus,
    Reservation,
    ReservationId,
    TicketType,
    TicketTypeId,
)
from ticketing.services import BookingService, LedgerService, ProductionService, ReportService
from ticketing.stores.interfaces import (
    PerformanceReviser,
    ProductionStore,
    ReservationBuilder,
    ReservationReviser,
    ReservationStore,
    Transition,
)

JST = ZoneInfo("Asia/Tokyo")

ORGANIZATION_UUID = UUID("8f14e45f-ceea-4e7a-9b3d-3c7c5e1f0a01")
OTHER_ORGANIZATION_UUID = UUID("c9f0f895-fb98-4b91-a0f3-1d5e8c6b2a02")


class FakeClock:
    """Callable clock whose time the test controls."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryTicketingStore(ReservationStore, ProductionStore):
    """Both store interfaces over plain dicts, for service tests."""

    def __init__(self) -> None:
        self.productions: dict[ProductionId, Production] = {}
        self.reservations: dict[ReservationId, Reservation] = {}
        self.logs: list[CheckinLogEntry] = []

    def _owned_production(self, organization_id, production_id) -> Production | None:
        production = self.productions.get(production_id)
        if production is None or production.organization_id != organization_id:
            return None
        return production

    def _owned_reservation(self, organization_id, reservation_id) -> Reservation | None:
        reservation = self.reservations.get(reservation_id)
        if reservation is None or reservation.organization_id != organization_id:
            return None
        return reservation

    def _booked(self, performance_id: PerformanceId) -> int:
        return sum(
            r.total_tickets
            for r in self.reservations.values()
            if r.performance_id == performance_id and r.is_active
        )

    # ReservationStore

    def get_reservation(self, organization_id, reservation_id):
        return self._owned_reservation(organization_id, reservation_id)

    def list_reservations_for_performance(self, organization_id, performance_id):
        rows = [
            r
            for r in self.reservations.values()
            if r.organization_id == organization_id
            and r.performance_id == performance_id
            and r.is_active
        ]
        return sorted(rows, key=lambda r: (r.customer_name_kana, r.customer_name))

    def list_active_reservations_for_production(self, organization_id, production_id):
        production = self._owned_production(organization_id, production_id)
        if production is None:
            return []
        performance_ids = {p.id for p in production.performances}
        return [
            r
            for r in self.reservations.values()
            if r.performance_id in performance_ids and r.is_active
        ]

    def search_reservations(self, organization_id, query):
        query = query.lower()
        rows = [
            r
            for r in self.reservations.values()
            if r.organization_id == organization_id
            and (query in r.customer_name.lower() or query in (r.customer_email or "").lower())
        ]
        return list(reversed(rows))

    def list_checkin_logs(self, organization_id, reservation_id):
        if self._owned_reservation(organization_id, reservation_id) is None:
            return []
        return [entry for entry in self.logs if entry.reservation_id == reservation_id]

    def mutate_reservation(self, organization_id, reservation_id, transition: Transition):
        reservation = self._owned_reservation(organization_id, reservation_id)
        if reservation is None:
            return None
        result: LedgerResult = transition(reservation)
        self.reservations[reservation_id] = result.reservation
        if result.log_entry is not None:
            self.logs.append(result.log_entry)
        return result

    def add_reservation(self, organization_id, performance_id, build: ReservationBuilder):
        performance = self.get_performance(organization_id, performance_id)
        if performance is None:
            return None
        reservation = build(performance, self._booked(performance_id))
        self.reservations[reservation.id] = reservation
        return reservation

    def set_reservation_status(self, organization_id, reservation_id, status):
        reservation = self._owned_reservation(organization_id, reservation_id)
        if reservation is None:
            return None
        updated = replace(reservation, status=status)
        self.reservations[reservation_id] = updated
        return updated

    def revise_reservation(
        self, organization_id, reservation_id, performance_id, revise: ReservationReviser
    ):
        performance = self.get_performance(organization_id, performance_id)
        reservation = self._owned_reservation(organization_id, reservation_id)
        if performance is None or reservation is None:
            return None
        booked = self._booked(performance_id) - (
            reservation.total_tickets
            if reservation.is_active and reservation.performance_id == performance_id
            else 0
        )
        revised = revise(reservation, performance, booked)
        self.reservations[reservation_id] = revised
        return revised

    def booked_counts(self, organization_id, production_id):
        production = self._owned_production(organization_id, production_id)
        if production is None:
            return {}
        counts = {p.id: self._booked(p.id) for p in production.performances}
        return {performance_id: count for performance_id, count in counts.items() if count}

    # ProductionStore

    def list_productions(self, organization_id):
        return [
            p for p in reversed(self.productions.values()) if p.organization_id == organization_id
        ]

    def get_production(self, organization_id, production_id):
        return self._owned_production(organization_id, production_id)

    def get_public_production(self, production_id):
        return self.productions.get(production_id)

    def create_production(self, production):
        self.productions[production.id] = production
        return production

    def save_production(self, production):
        existing = self.productions[production.id]
        updated = replace(
            production,
            performances=existing.performances,
            ticket_types=existing.ticket_types,
        )
        self.productions[production.id] = updated
        return updated

    def delete_production(self, organization_id, production_id):
        production = self._owned_production(organization_id, production_id)
        if production is None:
            return True
        performance_ids = {p.id for p in production.performances}
        held = [r for r in self.reservations.values() if r.performance_id in performance_ids]
        if any(r.is_active for r in held):
            return False
        for reservation in held:
            del self.reservations[reservation.id]
        del self.productions[production_id]
        return True

    def get_performance(self, organization_id, performance_id):
        for production in self.productions.values():
            if production.organization_id != organization_id:
                continue
            performance = production.find_performance(performance_id)
            if performance is not None:
                return performance
        return None

    def _replace_performances(self, production_id, performances):
        production = self.productions[production_id]
        self.productions[production_id] = replace(production, performances=tuple(performances))

    def add_performance(self, performance):
        production = self.productions[performance.production_id]
        self._replace_performances(performance.production_id, production.performances + (performance,))
        return performance

    def update_performance(self, organization_id, performance_id, revise: PerformanceReviser):
        performance = self.get_performance(organization_id, performance_id)
        if performance is None:
            return None
        updated = revise(performance, self._booked(performance_id))
        production = self.productions[performance.production_id]
        self._replace_performances(
            performance.production_id,
            [updated if p.id == performance_id else p for p in production.performances],
        )
        return updated

    def delete_performance(self, organization_id, performance_id):
        performance = self.get_performance(organization_id, performance_id)
        if performance is None:
            return True
        held = [r for r in self.reservations.values() if r.performance_id == performance_id]
        if any(r.is_active for r in held):
            return False
        for reservation in held:
            del self.reservations[reservation.id]
        production = self.productions[performance.production_id]
        self._replace_performances(
            performance.production_id,
            [p for p in production.performances if p.id != performance_id],
        )
        return True

    def _replace_ticket_types(self, production_id, ticket_types):
        production = self.productions[production_id]
        self.productions[production_id] = replace(production, ticket_types=tuple(ticket_types))

    def add_ticket_type(self, ticket_type):
        production = self.productions[ticket_type.production_id]
        self._replace_ticket_types(ticket_type.production_id, production.ticket_types + (ticket_type,))
        return ticket_type

    def save_ticket_type(self, ticket_type):
        production = self.productions[ticket_type.production_id]
        self._replace_ticket_types(
            ticket_type.production_id,
            [ticket_type if t.id == ticket_type.id else t for t in production.ticket_types],
        )
        return ticket_type

    def delete_ticket_type(self, organization_id, ticket_type_id):
        in_use = any(
            r.organization_id == organization_id
            and r.is_active
            and ticket_type_id in r.ticket_breakdown()
            for r in self.reservations.values()
        )
        if in_use:
            return False
        for production in list(self.productions.values()):
            if production.organization_id == organization_id:
                self._replace_ticket_types(
                    production.id, [t for t in production.ticket_types if t.id != ticket_type_id]
                )
        return True


def build_production(
    organization_id: OrganizationId,
    start_time: datetime,
    capacity: int = 10,
    **reception,
) -> Production:
    """A production with one performance and two ticket types.

    General sells at 3,000 in advance and 3,500 at the door; Student only has
    the legacy 2,000 price.
    """
    production_id = ProductionId(uuid4())
    performance = Performance(
        id=PerformanceId(uuid4()),
        production_id=production_id,
        start_time=start_time,
        capacity=Capacity(capacity),
    )
    general = TicketType(
        id=TicketTypeId(uuid4()),
        production_id=production_id,
        name="General",
        price=Money(3000),
        advance_price=Money(3000),
        door_price=Money(3500),
    )
    student = TicketType(
        id=TicketTypeId(uuid4()),
        production_id=production_id,
        name="Student",
        price=Money(2000),
    )
    return Production(
        id=production_id,
        organization_id=organization_id,
        title="The Seagull",
        reception_status=reception.pop("reception_status", ReceptionStatus.OPEN),
        performances=(performance,),
        ticket_types=(general, student),
        **reception,
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def org_id() -> OrganizationId:
    return OrganizationId(ORGANIZATION_UUID)


@pytest.fixture
def org(org_id: OrganizationId) -> str:
    return str(org_id)


@pytest.fixture
def other_org() -> str:
    return str(OTHER_ORGANIZATION_UUID)


@pytest.fixture(autouse=True)
def tokyo_time_zone(settings):
    settings.TIME_ZONE = "Asia/Tokyo"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=JST))


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def production(store: InMemoryTicketingStore, org_id: OrganizationId) -> Production:
    production = build_production(org_id, datetime(2024, 5, 10, 19, 0, tzinfo=JST))
    store.create_production(production)
    return production


@pytest.fixture
def ledger_service(store, clock) -> LedgerService:
    return LedgerService(store, store, clock=clock)


@pytest.fixture
def booking_service(store, clock) -> BookingService:
    return BookingService(store, store, clock=clock)


@pytest.fixture
def production_service(store) -> ProductionService:
    return ProductionService(store)


@pytest.fixture
def report_service(store) -> ReportService:
    return ReportService(store, store)


@pytest.fixture
def reservation(booking_service, production, org) -> Reservation:
    """Three General and one Student ticket: 4 tickets, 11,000 total."""
    general, student = production.ticket_types
    return booking_service.create_reservation(
        org,
        str(production.performances[0].id),
        customer_name="Anton Chekhov",
        customer_name_kana="チェーホフ",
        customer_email="anton@example.com",
        tickets={str(general.id): 3, str(student.id): 1},
    )

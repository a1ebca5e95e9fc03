"""Integration tests for the Django ORM stores.

These test persistence round trips, atomic ledger mutation and deletes.
Run with: pytest tests/test_stores.py -v
"""

from dataclasses import replace
from datetime import datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from ticketing import models
from ticketing.domain import (
    Capacity,
    CheckinLogType,
    CheckinStatus,
    Money,
    OrganizationId,
    PaymentStatus,
    PerformanceId,
    ProductionId,
    ReservationId,
    ReservationStatus,
    TicketLine,
)
from ticketing.domain import ledger
from ticketing.domain.errors import CapacityExceededError, InvalidInputError
from ticketing.services import BookingService, LedgerService, ProductionService
from ticketing.services.common import ensure_capacity
from ticketing.stores.django_store import DjangoProductionStore, DjangoReservationStore

JST = ZoneInfo("Asia/Tokyo")
NOW = datetime(2024, 5, 10, 18, 30, tzinfo=JST)


@pytest.fixture
def reservations() -> DjangoReservationStore:
    return DjangoReservationStore()


@pytest.fixture
def productions() -> DjangoProductionStore:
    return DjangoProductionStore()


@pytest.fixture
def seeded(productions, org):
    """An open production with one 10-seat performance and two ticket types."""
    service = ProductionService(productions)
    production = service.create_production(org, "The Cherry Orchard")
    service.update_reception_status(org, str(production.id), "OPEN")
    service.add_performance(org, str(production.id), datetime(2024, 5, 10, 19, 0, tzinfo=JST), 10)
    service.add_ticket_type(org, str(production.id), "General", 3000, 3500)
    service.add_ticket_type(org, str(production.id), "Student", 2000, 2000)
    return service.get_production(org, str(production.id))


@pytest.fixture
def booking(reservations, productions) -> BookingService:
    return BookingService(reservations, productions, clock=lambda: NOW)


@pytest.fixture
def ledger_db(reservations, productions) -> LedgerService:
    return LedgerService(reservations, productions, clock=lambda: NOW)


@pytest.fixture
def booked(booking, seeded, org):
    general, student = seeded.ticket_types
    return booking.create_reservation(
        org,
        str(seeded.performances[0].id),
        customer_name="Lyubov Ranevskaya",
        customer_name_kana="ラネーフスカヤ",
        customer_email="ranevskaya@example.com",
        tickets={str(general.id): 3, str(student.id): 1},
    )


@pytest.mark.django_db
class TestDjangoProductionStore:
    """Tests for DjangoProductionStore."""

    def test_get_production_includes_children(self, productions, seeded, org_id):
        production = productions.get_production(org_id, seeded.id)

        assert production.title == "The Cherry Orchard"
        assert [p.capacity.value for p in production.performances] == [10]
        assert [t.name for t in production.ticket_types] == ["General", "Student"]
        assert production.ticket_types[0].effective_door_price.amount == 3500

    def test_other_organization_sees_nothing(self, productions, seeded):
        other = OrganizationId(uuid4())
        assert productions.get_production(other, seeded.id) is None
        assert productions.get_performance(other, seeded.performances[0].id) is None
        assert productions.list_productions(other) == []

    def test_public_lookup_ignores_organization(self, productions, seeded):
        assert productions.get_public_production(seeded.id).id == seeded.id

    def test_unknown_production(self, productions, org_id):
        assert productions.get_production(org_id, ProductionId(uuid4())) is None

    def test_delete_performance_blocked_by_active_reservation(
        self, productions, booking, seeded, booked, org, org_id
    ):
        performance_id = seeded.performances[0].id

        assert productions.delete_performance(org_id, performance_id) is False
        assert models.Performance.objects.filter(pk=performance_id.value).exists()

        booking.cancel_reservation(org, str(booked.id))
        assert productions.delete_performance(org_id, performance_id) is True
        assert not models.Performance.objects.filter(pk=performance_id.value).exists()
        assert not models.Reservation.objects.filter(pk=booked.id.value).exists()

    def test_delete_missing_performance_is_noop(self, productions, org_id):
        assert productions.delete_performance(org_id, PerformanceId(uuid4())) is True

    def test_update_performance_passes_booked_count(self, productions, seeded, booked, org_id):
        performance = seeded.performances[0]
        seen = []

        def revise(locked, booked_count):
            seen.append(booked_count)
            return replace(locked, capacity=Capacity(20))

        updated = productions.update_performance(org_id, performance.id, revise)

        assert seen == [4]
        assert updated.capacity.value == 20
        assert models.Performance.objects.get(pk=performance.id.value).capacity == 20

    def test_update_missing_performance(self, productions, org_id):
        def revise(locked, booked_count):
            raise AssertionError("revise must not run")

        assert productions.update_performance(org_id, PerformanceId(uuid4()), revise) is None

    def test_delete_production_cascades_once_unbooked(
        self, productions, booking, seeded, booked, org, org_id
    ):
        assert productions.delete_production(org_id, seeded.id) is False
        assert models.Production.objects.filter(pk=seeded.id.value).exists()

        booking.cancel_reservation(org, str(booked.id))
        assert productions.delete_production(org_id, seeded.id) is True
        assert not models.Production.objects.filter(pk=seeded.id.value).exists()
        assert not models.Performance.objects.exists()
        assert not models.TicketType.objects.exists()
        assert not models.Reservation.objects.exists()

    def test_delete_production_other_organization(self, productions, seeded):
        assert productions.delete_production(OrganizationId(uuid4()), seeded.id) is True
        assert models.Production.objects.filter(pk=seeded.id.value).exists()

    def test_delete_ticket_type(self, productions, booking, seeded, booked, org, org_id):
        general = seeded.ticket_types[0]

        assert productions.delete_ticket_type(org_id, general.id) is False

        booking.cancel_reservation(org, str(booked.id))
        assert productions.delete_ticket_type(org_id, general.id) is True
        assert not models.TicketType.objects.filter(pk=general.id.value).exists()
        # The canceled reservation keeps its priced line.
        assert models.ReservationTicket.objects.filter(ticket_type_id=general.id.value).exists()


@pytest.mark.django_db
class TestDjangoReservationStore:
    """Tests for DjangoReservationStore."""

    def test_add_reservation_round_trip(self, reservations, seeded, booked, org_id):
        loaded = reservations.get_reservation(org_id, booked.id)

        assert loaded.customer_name == "Lyubov Ranevskaya"
        assert loaded.performance_id == seeded.performances[0].id
        assert [(line.count, line.price.amount) for line in loaded.tickets] == [(3, 3000), (1, 2000)]
        assert loaded.total_amount == 11000
        assert loaded.checkin_status is CheckinStatus.NOT_CHECKED_IN
        assert loaded.payment_status is PaymentStatus.UNPAID

    def test_add_reservation_missing_performance(self, reservations, org_id):
        def build(performance, booked_count):
            raise AssertionError("builder must not run")

        assert reservations.add_reservation(org_id, PerformanceId(uuid4()), build) is None

    def test_add_reservation_builder_failure_creates_nothing(self, reservations, seeded, org_id):
        def build(performance, booked_count):
            ensure_capacity(performance, booked_count, 11)

        with pytest.raises(CapacityExceededError):
            reservations.add_reservation(org_id, seeded.performances[0].id, build)
        assert models.Reservation.objects.count() == 0

    def test_mutate_reservation_persists_counters_lines_and_log(
        self, reservations, seeded, booked, org_id
    ):
        general = seeded.ticket_types[0]

        result = reservations.mutate_reservation(
            org_id,
            booked.id,
            lambda r: ledger.process_checkin_with_payment(r, 2, 6000, {general.id: 2}, NOW),
        )

        loaded = reservations.get_reservation(org_id, booked.id)
        assert loaded.checked_in_tickets == 2
        assert loaded.checked_in_at == NOW
        assert loaded.paid_amount == 6000
        assert loaded.payment_status is PaymentStatus.PARTIALLY_PAID
        assert {line.ticket_type_id: line.paid_count for line in loaded.tickets}[general.id] == 2

        (entry,) = reservations.list_checkin_logs(org_id, booked.id)
        assert entry.type is CheckinLogType.CHECKIN
        assert entry.count == 2
        assert entry.payment_info == {str(general.id): 2}
        assert entry.created_at is not None
        assert result.log_entry == entry

    def test_failed_transition_rolls_back(self, reservations, booked, org_id):
        def transition(reservation):
            ledger.add_checked_in_tickets(reservation, -1, NOW)

        with pytest.raises(InvalidInputError):
            reservations.mutate_reservation(org_id, booked.id, transition)

        loaded = reservations.get_reservation(org_id, booked.id)
        assert loaded.checked_in_tickets == 0
        assert models.CheckinLog.objects.count() == 0

    def test_mutate_missing_reservation(self, reservations, org_id):
        result = reservations.mutate_reservation(
            org_id, ReservationId.new(), lambda r: ledger.register_payment(r, 100)
        )
        assert result is None

    def test_mutate_other_organization(self, reservations, booked):
        result = reservations.mutate_reservation(
            OrganizationId(uuid4()), booked.id, lambda r: ledger.register_payment(r, 100)
        )
        assert result is None

    def test_set_reservation_status(self, reservations, booked, org_id):
        updated = reservations.set_reservation_status(org_id, booked.id, ReservationStatus.CANCELED)

        assert updated.status is ReservationStatus.CANCELED
        assert models.Reservation.objects.get(pk=booked.id.value).status == "CANCELED"

    def test_revise_reservation_rewrites_lines_and_counters(
        self, reservations, seeded, booked, org_id
    ):
        general, _ = seeded.ticket_types
        performance_id = seeded.performances[0].id
        seen = {}

        def revise(current, performance, booked_count):
            seen.update(performance=performance.id, booked=booked_count)
            return ledger.revise_tickets(
                replace(current, customer_name="Lyubov Andreyevna", remarks="Box seat"),
                (TicketLine(ticket_type_id=general.id, count=2, price=Money(3200)),),
            )

        reservations.revise_reservation(org_id, booked.id, performance_id, revise)

        # The reservation's own tickets are not part of the booked count.
        assert seen == {"performance": performance_id, "booked": 0}
        loaded = reservations.get_reservation(org_id, booked.id)
        assert loaded.customer_name == "Lyubov Andreyevna"
        assert loaded.remarks == "Box seat"
        assert [(line.count, line.price.amount) for line in loaded.tickets] == [(2, 3200)]
        assert models.ReservationTicket.objects.filter(reservation_id=booked.id.value).count() == 1

    def test_revise_reservation_failure_rolls_back(self, reservations, seeded, booked, org_id):
        def revise(current, performance, booked_count):
            ensure_capacity(performance, booked_count, 11)

        with pytest.raises(CapacityExceededError):
            reservations.revise_reservation(org_id, booked.id, seeded.performances[0].id, revise)

        loaded = reservations.get_reservation(org_id, booked.id)
        assert loaded.total_tickets == 4
        assert models.ReservationTicket.objects.filter(reservation_id=booked.id.value).count() == 2

    def test_revise_missing_rows(self, reservations, seeded, booked, org_id):
        def revise(current, performance, booked_count):
            raise AssertionError("revise must not run")

        performance_id = seeded.performances[0].id
        assert reservations.revise_reservation(org_id, ReservationId.new(), performance_id, revise) is None
        assert reservations.revise_reservation(org_id, booked.id, PerformanceId(uuid4()), revise) is None

    def test_booked_counts_exclude_canceled(self, reservations, booking, seeded, booked, org, org_id):
        general = seeded.ticket_types[0]
        performance_id = seeded.performances[0].id
        extra = booking.create_reservation(
            org, str(performance_id), "Varya", {str(general.id): 2}
        )

        assert reservations.booked_counts(org_id, seeded.id) == {performance_id: 6}

        booking.cancel_reservation(org, str(extra.id))
        assert reservations.booked_counts(org_id, seeded.id) == {performance_id: 4}

    def test_list_for_performance_orders_by_kana(self, reservations, booking, seeded, booked, org, org_id):
        general = seeded.ticket_types[0]
        performance_id = seeded.performances[0].id
        booking.create_reservation(
            org, str(performance_id), "Anya", {str(general.id): 1}, customer_name_kana="アーニャ"
        )

        names = [
            r.customer_name
            for r in reservations.list_reservations_for_performance(org_id, performance_id)
        ]

        assert names == ["Anya", "Lyubov Ranevskaya"]

    def test_search_matches_name_and_email(self, reservations, booked, org_id):
        assert [r.id for r in reservations.search_reservations(org_id, "ranevskaya@")] == [booked.id]
        assert [r.id for r in reservations.search_reservations(org_id, "lyubov")] == [booked.id]
        assert reservations.search_reservations(org_id, "lopakhin") == []


@pytest.mark.django_db
class TestLedgerServiceWithDjangoStores:
    """End-to-end ledger flows against the database."""

    def test_checkin_payment_and_reset_flow(self, ledger_db, reservations, seeded, booked, org, org_id):
        general, student = (str(t.id) for t in seeded.ticket_types)
        reservation_id = str(booked.id)

        ledger_db.process_checkin_with_payment(org, reservation_id, 3, 9000, {general: 3})
        ledger_db.register_payment(org, reservation_id, 2000)
        ledger_db.process_partial_reset(org, reservation_id, 1, 3000, {general: 1})
        final = ledger_db.add_checked_in_tickets(org, reservation_id, 5).reservation

        assert final.checked_in_tickets == 4
        assert final.checkin_status is CheckinStatus.CHECKED_IN
        assert final.paid_amount == 8000
        assert {str(l.ticket_type_id): l.paid_count for l in final.tickets} == {general: 2, student: 0}

        logs = ledger_db.list_checkin_logs(org, reservation_id)
        assert [(e.type, e.count) for e in logs] == [
            (CheckinLogType.CHECKIN, 3),
            (CheckinLogType.RESET, 1),
            (CheckinLogType.CHECKIN, 5),
        ]

        reset = ledger_db.reset_check_in(org, reservation_id)
        assert reset.log_entry.count == 4
        stored = reservations.get_reservation(org_id, booked.id)
        assert stored.paid_amount == 0
        assert all(line.paid_count == 0 for line in stored.tickets)

    def test_same_day_ticket_persisted_settled(self, ledger_db, reservations, seeded, booked, org, org_id):
        general = str(seeded.ticket_types[0].id)

        issued = ledger_db.issue_same_day_ticket(
            org, str(seeded.performances[0].id), "Yasha", {general: 2}
        )

        stored = reservations.get_reservation(org_id, issued.id)
        assert stored.paid_amount == 7000
        assert stored.payment_status is PaymentStatus.PAID
        assert stored.checked_in_tickets == 2
        assert [line.paid_count for line in stored.tickets] == [2]
        assert reservations.list_checkin_logs(org_id, issued.id) == []

        with pytest.raises(CapacityExceededError):
            ledger_db.issue_same_day_ticket(
                org, str(seeded.performances[0].id), "Firs", {general: 5}
            )

    def test_ticket_type_id_is_kept_on_lines(self, reservations, seeded, booked, org_id):
        stored = reservations.get_reservation(org_id, booked.id)
        assert [line.ticket_type_id for line in stored.tickets] == [
            t.id for t in seeded.ticket_types
        ]


@pytest.mark.django_db
class TestBookingServiceWithDjangoStores:
    """Capacity rules for edits and restores against the database."""

    def test_restore_rejected_once_seats_are_resold(
        self, booking, reservations, seeded, booked, org, org_id
    ):
        general = str(seeded.ticket_types[0].id)
        performance_id = seeded.performances[0].id
        booking.cancel_reservation(org, str(booked.id))
        booking.create_reservation(org, str(performance_id), "Varya", {general: 10})

        with pytest.raises(CapacityExceededError):
            booking.restore_reservation(org, str(booked.id))

        assert models.Reservation.objects.get(pk=booked.id.value).status == "CANCELED"
        assert reservations.booked_counts(org_id, seeded.id) == {performance_id: 10}

    def test_restore_when_seats_are_free(self, booking, seeded, booked, org):
        booking.cancel_reservation(org, str(booked.id))

        restored = booking.restore_reservation(org, str(booked.id))

        assert restored.status is ReservationStatus.CONFIRMED
        assert models.Reservation.objects.get(pk=booked.id.value).status == "CONFIRMED"

    def test_update_reservation_keeps_ledger_consistent(
        self, booking, ledger_db, reservations, seeded, booked, org, org_id
    ):
        general, student = (str(t.id) for t in seeded.ticket_types)
        ledger_db.process_checkin_with_payment(
            org, str(booked.id), 4, 11000, {general: 3, student: 1}
        )

        booking.update_reservation(
            org,
            str(booked.id),
            customer_name="Lyubov Ranevskaya",
            tickets={general: 2},
            customer_email="lyuba@example.com",
        )

        stored = reservations.get_reservation(org_id, booked.id)
        assert stored.customer_email == "lyuba@example.com"
        assert [(line.count, line.paid_count) for line in stored.tickets] == [(2, 2)]
        assert stored.checked_in_tickets == 2
        assert stored.checkin_status is CheckinStatus.CHECKED_IN
        assert stored.payment_status is PaymentStatus.PAID
        # Edits are not check-in events.
        assert len(reservations.list_checkin_logs(org_id, booked.id)) == 1

    def test_update_reservation_over_capacity_changes_nothing(
        self, booking, reservations, seeded, booked, org, org_id
    ):
        general = str(seeded.ticket_types[0].id)
        booking.create_reservation(org, str(seeded.performances[0].id), "Varya", {general: 5})

        with pytest.raises(CapacityExceededError):
            booking.update_reservation(org, str(booked.id), "Lyubov Ranevskaya", {general: 6})

        stored = reservations.get_reservation(org_id, booked.id)
        assert stored.total_tickets == 4
        assert stored.customer_email == "ranevskaya@example.com"

    def test_capacity_cannot_drop_below_booked(self, productions, seeded, booked, org):
        service = ProductionService(productions)
        performance = seeded.performances[0]

        with pytest.raises(InvalidInputError):
            service.update_performance(org, str(performance.id), performance.start_time, 3)

        assert models.Performance.objects.get(pk=performance.id.value).capacity == 10

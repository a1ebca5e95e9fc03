"""Django ORM implementation of the ticketing stores."""

from django.db import transaction
from django.db.models import Q, Sum

from ticketing import models
from ticketing.domain import (
    Capacity,
    CheckinLogEntry,
    CheckinLogType,
    CheckinStatus,
    LedgerResult,
    Money,
    OrganizationId,
    PaymentStatus,
    Performance,
    PerformanceId,
    Production,
    ProductionId,
    ReceptionEndMode,
    ReceptionStatus,
    Reservation,
    ReservationId,
    ReservationSource,
    ReservationStatus,
    TicketLine,
    TicketType,
    TicketTypeId,
)
from ticketing.stores.interfaces import (
    PerformanceReviser,
    ProductionStore,
    ReservationBuilder,
    ReservationReviser,
    ReservationStore,
    Transition,
)


def _money(value: int | None) -> Money | None:
    return None if value is None else Money(value)


def _amount(money: Money | None) -> int | None:
    return None if money is None else money.amount


def _ticket_type_to_domain(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        production_id=ProductionId(row.production_id),
        name=row.name,
        price=Money(row.price),
        advance_price=_money(row.advance_price),
        door_price=_money(row.door_price),
        is_public=row.is_public,
    )


def _performance_to_domain(row: models.Performance) -> Performance:
    return Performance(
        id=PerformanceId(row.id),
        production_id=ProductionId(row.production_id),
        start_time=row.start_time,
        capacity=Capacity(row.capacity),
    )


def _production_to_domain(row: models.Production, with_children: bool = True) -> Production:
    performances: tuple[Performance, ...] = ()
    ticket_types: tuple[TicketType, ...] = ()
    if with_children:
        performances = tuple(_performance_to_domain(p) for p in row.performances.all())
        ticket_types = tuple(_ticket_type_to_domain(t) for t in row.ticket_types.all())
    return Production(
        id=ProductionId(row.id),
        organization_id=OrganizationId(row.organization_id),
        title=row.title,
        reception_status=ReceptionStatus(row.reception_status),
        reception_start=row.reception_start,
        reception_end=row.reception_end,
        reception_end_mode=ReceptionEndMode(row.reception_end_mode),
        reception_end_minutes=row.reception_end_minutes,
        performances=performances,
        ticket_types=ticket_types,
        updated_at=row.updated_at,
    )


def _reservation_to_domain(
    row: models.Reservation, tickets: list[models.ReservationTicket]
) -> Reservation:
    return Reservation(
        id=ReservationId(row.id),
        organization_id=OrganizationId(row.organization_id),
        performance_id=PerformanceId(row.performance_id),
        customer_name=row.customer_name,
        customer_name_kana=row.customer_name_kana,
        customer_email=row.customer_email,
        remarks=row.remarks,
        tickets=tuple(
            TicketLine(
                ticket_type_id=TicketTypeId(t.ticket_type_id),
                count=t.count,
                price=Money(t.price),
                paid_count=t.paid_count,
            )
            for t in tickets
        ),
        status=ReservationStatus(row.status),
        source=ReservationSource(row.source),
        checkin_status=CheckinStatus(row.checkin_status),
        checked_in_tickets=row.checked_in_tickets,
        checked_in_at=row.checked_in_at,
        payment_status=PaymentStatus(row.payment_status),
        paid_amount=row.paid_amount,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _create_ticket_rows(
    row: models.Reservation, tickets: tuple[TicketLine, ...]
) -> list[models.ReservationTicket]:
    return models.ReservationTicket.objects.bulk_create(
        [
            models.ReservationTicket(
                reservation=row,
                ticket_type_id=line.ticket_type_id.value,
                position=position,
                count=line.count,
                price=line.price.amount,
                paid_count=line.paid_count,
            )
            for position, line in enumerate(tickets)
        ]
    )


def _booked_count(performance_pk, exclude_reservation_pk=None) -> int:
    rows = models.ReservationTicket.objects.filter(
        reservation__performance_id=performance_pk
    ).exclude(reservation__status=models.Reservation.Status.CANCELED)
    if exclude_reservation_pk is not None:
        rows = rows.exclude(reservation_id=exclude_reservation_pk)
    return rows.aggregate(total=Sum("count"))["total"] or 0


def _lock_performance(organization_id: OrganizationId, performance_id: PerformanceId):
    return (
        models.Performance.objects.select_for_update()
        .filter(
            pk=performance_id.value,
            production__organization_id=organization_id.value,
        )
        .first()
    )


def _log_to_domain(row: models.CheckinLog) -> CheckinLogEntry:
    return CheckinLogEntry(
        reservation_id=ReservationId(row.reservation_id),
        type=CheckinLogType(row.type),
        count=row.count,
        payment_info=row.payment_info,
        created_at=row.created_at,
    )


class DjangoReservationStore(ReservationStore):
    """Reservation store backed by the Django ORM."""

    def _queryset(self, organization_id: OrganizationId):
        return models.Reservation.objects.filter(
            organization_id=organization_id.value
        ).prefetch_related("tickets")

    def _to_domain_list(self, rows) -> list[Reservation]:
        return [_reservation_to_domain(row, list(row.tickets.all())) for row in rows]

    def get_reservation(
        self, organization_id: OrganizationId, reservation_id: ReservationId
    ) -> Reservation | None:
        row = self._queryset(organization_id).filter(pk=reservation_id.value).first()
        if row is None:
            return None
        return _reservation_to_domain(row, list(row.tickets.all()))

    def list_reservations_for_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> list[Reservation]:
        rows = (
            self._queryset(organization_id)
            .filter(performance_id=performance_id.value)
            .exclude(status=models.Reservation.Status.CANCELED)
            .order_by("customer_name_kana", "customer_name")
        )
        return self._to_domain_list(rows)

    def list_active_reservations_for_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> list[Reservation]:
        rows = (
            self._queryset(organization_id)
            .filter(performance__production_id=production_id.value)
            .exclude(status=models.Reservation.Status.CANCELED)
            .order_by("created_at")
        )
        return self._to_domain_list(rows)

    def search_reservations(self, organization_id: OrganizationId, query: str) -> list[Reservation]:
        rows = (
            self._queryset(organization_id)
            .filter(Q(customer_name__icontains=query) | Q(customer_email__icontains=query))
            .order_by("-created_at")
        )
        return self._to_domain_list(rows)

    def list_checkin_logs(
        self, organization_id: OrganizationId, reservation_id: ReservationId
    ) -> list[CheckinLogEntry]:
        rows = models.CheckinLog.objects.filter(
            reservation_id=reservation_id.value,
            reservation__organization_id=organization_id.value,
        ).order_by("created_at")
        return [_log_to_domain(row) for row in rows]

    def mutate_reservation(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        transition: Transition,
    ) -> LedgerResult | None:
        with transaction.atomic():
            row = (
                models.Reservation.objects.select_for_update()
                .filter(pk=reservation_id.value, organization_id=organization_id.value)
                .first()
            )
            if row is None:
                return None
            ticket_rows = list(row.tickets.all())
            result = transition(_reservation_to_domain(row, ticket_rows))
            self._write_counters(row, ticket_rows, result.reservation)
            log_entry = result.log_entry
            if log_entry is not None:
                log_row = models.CheckinLog.objects.create(
                    reservation=row,
                    type=log_entry.type.value,
                    count=log_entry.count,
                    payment_info=log_entry.payment_info,
                )
                log_entry = _log_to_domain(log_row)
        return LedgerResult(
            reservation=_reservation_to_domain(row, ticket_rows),
            log_entry=log_entry,
        )

    def _write_counters(
        self,
        row: models.Reservation,
        ticket_rows: list[models.ReservationTicket],
        reservation: Reservation,
    ) -> None:
        row.checked_in_tickets = reservation.checked_in_tickets
        row.checkin_status = reservation.checkin_status.value
        row.checked_in_at = reservation.checked_in_at
        row.paid_amount = reservation.paid_amount
        row.payment_status = reservation.payment_status.value
        row.save(
            update_fields=[
                "checked_in_tickets",
                "checkin_status",
                "checked_in_at",
                "paid_amount",
                "payment_status",
                "updated_at",
            ]
        )
        paid_counts = {line.ticket_type_id.value: line.paid_count for line in reservation.tickets}
        for ticket_row in ticket_rows:
            paid_count = paid_counts.get(ticket_row.ticket_type_id, ticket_row.paid_count)
            if paid_count != ticket_row.paid_count:
                ticket_row.paid_count = paid_count
                ticket_row.save(update_fields=["paid_count"])

    def add_reservation(
        self,
        organization_id: OrganizationId,
        performance_id: PerformanceId,
        build: ReservationBuilder,
    ) -> Reservation | None:
        with transaction.atomic():
            performance_row = _lock_performance(organization_id, performance_id)
            if performance_row is None:
                return None
            booked = _booked_count(performance_row.pk)
            reservation = build(_performance_to_domain(performance_row), booked)
            row = models.Reservation.objects.create(
                id=reservation.id.value,
                organization_id=organization_id.value,
                performance=performance_row,
                customer_name=reservation.customer_name,
                customer_name_kana=reservation.customer_name_kana,
                customer_email=reservation.customer_email,
                remarks=reservation.remarks,
                status=reservation.status.value,
                source=reservation.source.value,
                checkin_status=reservation.checkin_status.value,
                checked_in_tickets=reservation.checked_in_tickets,
                checked_in_at=reservation.checked_in_at,
                payment_status=reservation.payment_status.value,
                paid_amount=reservation.paid_amount,
            )
            ticket_rows = _create_ticket_rows(row, reservation.tickets)
        return _reservation_to_domain(row, ticket_rows)

    def set_reservation_status(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        status: ReservationStatus,
    ) -> Reservation | None:
        row = self._queryset(organization_id).filter(pk=reservation_id.value).first()
        if row is None:
            return None
        row.status = status.value
        row.save(update_fields=["status", "updated_at"])
        return _reservation_to_domain(row, list(row.tickets.all()))

    def revise_reservation(
        self,
        organization_id: OrganizationId,
        reservation_id: ReservationId,
        performance_id: PerformanceId,
        revise: ReservationReviser,
    ) -> Reservation | None:
        with transaction.atomic():
            # Performance first, in the same order as add_reservation.
            performance_row = _lock_performance(organization_id, performance_id)
            if performance_row is None:
                return None
            row = (
                models.Reservation.objects.select_for_update()
                .filter(pk=reservation_id.value, organization_id=organization_id.value)
                .first()
            )
            if row is None:
                return None
            booked = _booked_count(performance_row.pk, exclude_reservation_pk=row.pk)
            revised = revise(
                _reservation_to_domain(row, list(row.tickets.all())),
                _performance_to_domain(performance_row),
                booked,
            )
            row.performance = performance_row
            row.customer_name = revised.customer_name
            row.customer_name_kana = revised.customer_name_kana
            row.customer_email = revised.customer_email
            row.remarks = revised.remarks
            row.status = revised.status.value
            row.checkin_status = revised.checkin_status.value
            row.checked_in_tickets = revised.checked_in_tickets
            row.checked_in_at = revised.checked_in_at
            row.payment_status = revised.payment_status.value
            row.paid_amount = revised.paid_amount
            row.save()
            row.tickets.all().delete()
            ticket_rows = _create_ticket_rows(row, revised.tickets)
        return _reservation_to_domain(row, ticket_rows)

    def booked_counts(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> dict[PerformanceId, int]:
        rows = (
            models.ReservationTicket.objects.filter(
                reservation__organization_id=organization_id.value,
                reservation__performance__production_id=production_id.value,
            )
            .exclude(reservation__status=models.Reservation.Status.CANCELED)
            .values("reservation__performance_id")
            .annotate(total=Sum("count"))
        )
        return {
            PerformanceId(row["reservation__performance_id"]): row["total"] or 0 for row in rows
        }


class DjangoProductionStore(ProductionStore):
    """Production store backed by the Django ORM."""

    def _queryset(self):
        return models.Production.objects.prefetch_related("performances", "ticket_types")

    def list_productions(self, organization_id: OrganizationId) -> list[Production]:
        rows = self._queryset().filter(organization_id=organization_id.value).order_by("-updated_at")
        return [_production_to_domain(row) for row in rows]

    def get_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> Production | None:
        row = (
            self._queryset()
            .filter(pk=production_id.value, organization_id=organization_id.value)
            .first()
        )
        return None if row is None else _production_to_domain(row)

    def get_public_production(self, production_id: ProductionId) -> Production | None:
        row = self._queryset().filter(pk=production_id.value).first()
        return None if row is None else _production_to_domain(row)

    def create_production(self, production: Production) -> Production:
        row = models.Production.objects.create(
            id=production.id.value,
            organization_id=production.organization_id.value,
            title=production.title,
            reception_status=production.reception_status.value,
            reception_start=production.reception_start,
            reception_end=production.reception_end,
            reception_end_mode=production.reception_end_mode.value,
            reception_end_minutes=production.reception_end_minutes,
        )
        return _production_to_domain(row, with_children=False)

    def save_production(self, production: Production) -> Production:
        row = models.Production.objects.get(
            pk=production.id.value, organization_id=production.organization_id.value
        )
        row.title = production.title
        row.reception_status = production.reception_status.value
        row.reception_start = production.reception_start
        row.reception_end = production.reception_end
        row.reception_end_mode = production.reception_end_mode.value
        row.reception_end_minutes = production.reception_end_minutes
        row.save()
        return _production_to_domain(row)

    def delete_production(
        self, organization_id: OrganizationId, production_id: ProductionId
    ) -> bool:
        with transaction.atomic():
            row = (
                models.Production.objects.select_for_update()
                .filter(pk=production_id.value, organization_id=organization_id.value)
                .first()
            )
            if row is None:
                return True
            active = (
                models.Reservation.objects.filter(performance__production=row)
                .exclude(status=models.Reservation.Status.CANCELED)
                .exists()
            )
            if active:
                return False
            row.delete()
        return True

    def get_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> Performance | None:
        row = models.Performance.objects.filter(
            pk=performance_id.value, production__organization_id=organization_id.value
        ).first()
        return None if row is None else _performance_to_domain(row)

    def add_performance(self, performance: Performance) -> Performance:
        row = models.Performance.objects.create(
            id=performance.id.value,
            production_id=performance.production_id.value,
            start_time=performance.start_time,
            capacity=performance.capacity.value,
        )
        return _performance_to_domain(row)

    def update_performance(
        self,
        organization_id: OrganizationId,
        performance_id: PerformanceId,
        revise: PerformanceReviser,
    ) -> Performance | None:
        with transaction.atomic():
            row = _lock_performance(organization_id, performance_id)
            if row is None:
                return None
            performance = revise(_performance_to_domain(row), _booked_count(row.pk))
            row.start_time = performance.start_time
            row.capacity = performance.capacity.value
            row.save(update_fields=["start_time", "capacity", "updated_at"])
        return _performance_to_domain(row)

    def delete_performance(
        self, organization_id: OrganizationId, performance_id: PerformanceId
    ) -> bool:
        with transaction.atomic():
            row = _lock_performance(organization_id, performance_id)
            if row is None:
                return True
            if row.reservations.exclude(status=models.Reservation.Status.CANCELED).exists():
                return False
            row.delete()
        return True

    def add_ticket_type(self, ticket_type: TicketType) -> TicketType:
        row = models.TicketType.objects.create(
            id=ticket_type.id.value,
            production_id=ticket_type.production_id.value,
            name=ticket_type.name,
            price=ticket_type.price.amount,
            advance_price=_amount(ticket_type.advance_price),
            door_price=_amount(ticket_type.door_price),
            is_public=ticket_type.is_public,
        )
        return _ticket_type_to_domain(row)

    def save_ticket_type(self, ticket_type: TicketType) -> TicketType:
        row = models.TicketType.objects.get(pk=ticket_type.id.value)
        row.name = ticket_type.name
        row.price = ticket_type.price.amount
        row.advance_price = _amount(ticket_type.advance_price)
        row.door_price = _amount(ticket_type.door_price)
        row.is_public = ticket_type.is_public
        row.save()
        return _ticket_type_to_domain(row)

    def delete_ticket_type(
        self, organization_id: OrganizationId, ticket_type_id: TicketTypeId
    ) -> bool:
        with transaction.atomic():
            in_use = (
                models.ReservationTicket.objects.filter(
                    ticket_type_id=ticket_type_id.value,
                    reservation__organization_id=organization_id.value,
                )
                .exclude(reservation__status=models.Reservation.Status.CANCELED)
                .exists()
            )
            if in_use:
                return False
            models.TicketType.objects.filter(
                pk=ticket_type_id.value,
                production__organization_id=organization_id.value,
            ).delete()
        return True

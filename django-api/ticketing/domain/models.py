"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ticketing.domain.value_objects import (
    Capacity,
    Money,
    OrganizationId,
    PerformanceId,
    ProductionId,
    ReservationId,
    TicketTypeId,
)


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"


class CheckinStatus(str, Enum):
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    PARTIALLY_CHECKED_IN = "PARTIALLY_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class ReservationSource(str, Enum):
    PRE_RESERVATION = "PRE_RESERVATION"
    PUBLIC_FORM = "PUBLIC_FORM"
    SAME_DAY = "SAME_DAY"


class CheckinLogType(str, Enum):
    CHECKIN = "CHECKIN"
    RESET = "RESET"


class ReceptionStatus(str, Enum):
    """Manual open/close switch set by the organizer."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ReceptionEndMode(str, Enum):
    MANUAL = "MANUAL"
    PERFORMANCE_START = "PERFORMANCE_START"
    BEFORE_PERFORMANCE = "BEFORE_PERFORMANCE"
    DAY_BEFORE = "DAY_BEFORE"


class EffectiveReceptionStatus(str, Enum):
    """Reception state as seen by the public booking form."""

    OPEN = "OPEN"
    BEFORE_START = "BEFORE_START"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType.

    ``price`` is the legacy single price; it mirrors ``advance_price`` for
    ticket types created by this application and is the fallback when a door
    price was never configured.
    """

    id: TicketTypeId
    production_id: ProductionId
    name: str
    price: Money
    advance_price: Money | None = None
    door_price: Money | None = None
    is_public: bool = True

    @property
    def effective_advance_price(self) -> Money:
        return self.advance_price if self.advance_price is not None else self.price

    @property
    def effective_door_price(self) -> Money:
        return self.door_price if self.door_price is not None else self.price


@dataclass(frozen=True)
class Performance:
    """Domain representation of a Performance."""

    id: PerformanceId
    production_id: ProductionId
    start_time: datetime
    capacity: Capacity


@dataclass(frozen=True)
class Production:
    """Domain representation of a Production and its reception settings."""

    id: ProductionId
    organization_id: OrganizationId
    title: str
    reception_status: ReceptionStatus = ReceptionStatus.CLOSED
    reception_start: datetime | None = None
    reception_end: datetime | None = None
    reception_end_mode: ReceptionEndMode = ReceptionEndMode.MANUAL
    reception_end_minutes: int = 0
    performances: tuple[Performance, ...] = ()
    ticket_types: tuple[TicketType, ...] = ()
    updated_at: datetime | None = None

    def find_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        for ticket_type in self.ticket_types:
            if ticket_type.id == ticket_type_id:
                return ticket_type
        return None

    def find_performance(self, performance_id: PerformanceId) -> Performance | None:
        for performance in self.performances:
            if performance.id == performance_id:
                return performance
        return None


@dataclass(frozen=True)
class TicketLine:
    """One ticket type line of a reservation."""

    ticket_type_id: TicketTypeId
    count: int
    price: Money
    paid_count: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("Ticket count cannot be negative")
        if not 0 <= self.paid_count <= self.count:
            raise ValueError("Paid count must be between 0 and count")

    @property
    def subtotal(self) -> int:
        return self.count * self.price.amount


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation.

    Totals are always derived from the ticket lines.
    """

    id: ReservationId
    organization_id: OrganizationId
    performance_id: PerformanceId
    customer_name: str
    tickets: tuple[TicketLine, ...] = ()
    customer_name_kana: str = ""
    customer_email: str | None = None
    remarks: str = ""
    status: ReservationStatus = ReservationStatus.CONFIRMED
    source: ReservationSource = ReservationSource.PRE_RESERVATION
    checkin_status: CheckinStatus = CheckinStatus.NOT_CHECKED_IN
    checked_in_tickets: int = 0
    checked_in_at: datetime | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    paid_amount: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_tickets(self) -> int:
        return sum(line.count for line in self.tickets)

    @property
    def total_amount(self) -> int:
        return sum(line.subtotal for line in self.tickets)

    @property
    def is_active(self) -> bool:
        return self.status is not ReservationStatus.CANCELED

    def ticket_breakdown(self) -> dict[TicketTypeId, int]:
        return {line.ticket_type_id: line.count for line in self.tickets}


@dataclass(frozen=True)
class CheckinLogEntry:
    """Immutable audit record of one ledger mutation.

    ``payment_info`` maps ticket type ids (as strings) to the signed count
    delta that was applied to ``paid_count``.
    """

    reservation_id: ReservationId
    type: CheckinLogType
    count: int
    payment_info: dict[str, int] | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of one ledger operation."""

    reservation: Reservation
    log_entry: CheckinLogEntry | None = None


@dataclass(frozen=True)
class PerformanceStats:
    """Sales figures for one performance."""

    performance_id: PerformanceId
    start_time: datetime
    capacity: int
    booked_count: int

    @property
    def remaining_count(self) -> int:
        return self.capacity - self.booked_count

    @property
    def occupancy_rate(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return self.booked_count / self.capacity * 100


@dataclass(frozen=True)
class DuplicateGroup:
    """Reservations that look like the same booking made more than once."""

    id: str
    reservations: tuple[Reservation, ...]

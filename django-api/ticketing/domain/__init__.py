from ticketing.domain.models import (
    CheckinLogEntry,
    CheckinLogType,
    CheckinStatus,
    DuplicateGroup,
    EffectiveReceptionStatus,
    LedgerResult,
    PaymentStatus,
    Performance,
    PerformanceStats,
    Production,
    ReceptionEndMode,
    ReceptionStatus,
    Reservation,
    ReservationSource,
    ReservationStatus,
    TicketLine,
    TicketType,
)
from ticketing.domain.value_objects import (
    Capacity,
    Money,
    OrganizationId,
    PerformanceId,
    ProductionId,
    ReservationId,
    TicketTypeId,
)

__all__ = [
    "CheckinLogEntry",
    "CheckinLogType",
    "CheckinStatus",
    "DuplicateGroup",
    "EffectiveReceptionStatus",
    "LedgerResult",
    "PaymentStatus",
    "Performance",
    "PerformanceStats",
    "Production",
    "ReceptionEndMode",
    "ReceptionStatus",
    "Reservation",
    "ReservationSource",
    "ReservationStatus",
    "TicketLine",
    "TicketType",
    "Capacity",
    "Money",
    "OrganizationId",
    "PerformanceId",
    "ProductionId",
    "ReservationId",
    "TicketTypeId",
]

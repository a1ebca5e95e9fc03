"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    PERFORMANCE_NOT_FOUND = "PERFORMANCE_NOT_FOUND"
    PRODUCTION_NOT_FOUND = "PRODUCTION_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_INPUT = "INVALID_INPUT"
    RECEPTION_CLOSED = "RECEPTION_CLOSED"
    RESOURCE_IN_USE = "RESOURCE_IN_USE"


NOT_FOUND_CODES = frozenset(
    {
        ErrorCode.RESERVATION_NOT_FOUND,
        ErrorCode.PERFORMANCE_NOT_FOUND,
        ErrorCode.PRODUCTION_NOT_FOUND,
        ErrorCode.TICKET_TYPE_NOT_FOUND,
    }
)


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when an id does not resolve within the caller's organization."""


class ReservationNotFoundError(NotFoundError):
    """Raised when a reservation is not found."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_NOT_FOUND,
            message="Reservation not found",
        )
        object.__setattr__(self, "reservation_id", reservation_id)


class PerformanceNotFoundError(NotFoundError):
    """Raised when a performance is not found."""

    def __init__(self, performance_id: str) -> None:
        super().__init__(
            code=ErrorCode.PERFORMANCE_NOT_FOUND,
            message="Performance not found",
        )
        object.__setattr__(self, "performance_id", performance_id)


class ProductionNotFoundError(NotFoundError):
    """Raised when a production is not found."""

    def __init__(self, production_id: str) -> None:
        super().__init__(
            code=ErrorCode.PRODUCTION_NOT_FOUND,
            message="Production not found",
        )
        object.__setattr__(self, "production_id", production_id)


class TicketTypeNotFoundError(NotFoundError):
    """Raised when a ticket type is not defined on the production."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type not found",
        )
        object.__setattr__(self, "ticket_type_id", ticket_type_id)


class CapacityExceededError(DomainError):
    """Raised when a booking asks for more tickets than remain."""

    def __init__(self, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Requested tickets exceed the remaining capacity ({remaining})",
        )
        object.__setattr__(self, "remaining", remaining)


class InvalidInputError(DomainError):
    """Raised when operation parameters are malformed or missing."""

    def __init__(self, detail: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=detail)


class ReceptionClosedError(DomainError):
    """Raised when the public form or a performance is not accepting bookings."""

    def __init__(self, message: str = "Reservations are not being accepted") -> None:
        super().__init__(code=ErrorCode.RECEPTION_CLOSED, message=message)


class ResourceInUseError(DomainError):
    """Raised when deleting something that active reservations still reference."""

    def __init__(self, message: str = "Active reservations exist") -> None:
        super().__init__(code=ErrorCode.RESOURCE_IN_USE, message=message)

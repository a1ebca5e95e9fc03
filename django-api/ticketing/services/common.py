"""Input parsing and booking rules shared by the services."""

from collections.abc import Callable, Mapping
from typing import Protocol, TypeVar

from ticketing.domain import Money, Performance, Production, TicketLine, TicketType, TicketTypeId
from ticketing.domain.errors import (
    CapacityExceededError,
    InvalidInputError,
    TicketTypeNotFoundError,
)


class _ParsableId(Protocol):
    @classmethod
    def from_string(cls, value: str): ...


IdT = TypeVar("IdT", bound=_ParsableId)


def parse_id(id_type: type[IdT], value: object, label: str) -> IdT:
    """Parse a UUID string into an id value object.

    Raises:
        InvalidInputError: If the value is missing or not a UUID.
    """
    if value is None or value == "":
        raise InvalidInputError(f"{label} ID is required")
    try:
        return id_type.from_string(str(value))
    except ValueError:
        raise InvalidInputError(f"Invalid {label} ID format") from None


def parse_breakdown(breakdown: Mapping[str, int] | None) -> dict[TicketTypeId, int]:
    """Turn a ``{ticket_type_id: count}`` mapping from a request into domain keys."""
    parsed: dict[TicketTypeId, int] = {}
    for key, count in (breakdown or {}).items():
        ticket_type_id = parse_id(TicketTypeId, key, "ticket type")
        try:
            parsed[ticket_type_id] = int(count)
        except (TypeError, ValueError):
            raise InvalidInputError("Ticket counts must be integers") from None
    return parsed


def positive_counts(breakdown: Mapping[str, int] | None) -> dict[TicketTypeId, int]:
    """Keep only the ticket types with at least one ticket requested.

    Raises:
        InvalidInputError: If no ticket type has a positive count.
    """
    counts = {tt: count for tt, count in parse_breakdown(breakdown).items() if count > 0}
    if not counts:
        raise InvalidInputError("No tickets selected")
    return counts


def priced_ticket_lines(
    production: Production,
    counts: Mapping[TicketTypeId, int],
    price_of: Callable[[TicketType], Money],
    public_only: bool = False,
) -> tuple[TicketLine, ...]:
    """Snapshot the current price of each requested ticket type.

    With public_only, staff-only ticket types are treated as missing.

    Raises:
        TicketTypeNotFoundError: If a ticket type is not defined on the production.
    """
    lines = []
    for ticket_type_id, count in counts.items():
        ticket_type = production.find_ticket_type(ticket_type_id)
        if ticket_type is None or (public_only and not ticket_type.is_public):
            raise TicketTypeNotFoundError(str(ticket_type_id))
        lines.append(TicketLine(ticket_type_id=ticket_type_id, count=count, price=price_of(ticket_type)))
    return tuple(lines)


def ensure_capacity(performance: Performance, booked: int, requested: int) -> None:
    """Raises CapacityExceededError if requested exceeds what is left."""
    remaining = performance.capacity.value - booked
    if requested > remaining:
        raise CapacityExceededError(max(remaining, 0))


def require_text(value: str | None, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInputError(f"{label} is required")
    return value

"""Reception window rules for the public booking form.

All functions are pure: the caller passes ``now`` as an aware datetime and
DAY_BEFORE deadlines are computed in ``now``'s time zone.
"""

from collections.abc import Iterable
from datetime import datetime, time, timedelta, tzinfo

from ticketing.domain.models import (
    EffectiveReceptionStatus,
    Performance,
    Production,
    ReceptionEndMode,
    ReceptionStatus,
)

PERFORMANCE_LINKED_MODES = frozenset(
    {
        ReceptionEndMode.PERFORMANCE_START,
        ReceptionEndMode.BEFORE_PERFORMANCE,
        ReceptionEndMode.DAY_BEFORE,
    }
)


def reception_deadline(
    mode: ReceptionEndMode,
    start_time: datetime,
    minutes_before: int,
    tz: tzinfo,
) -> datetime:
    """Return the moment after which a performance can no longer be booked."""
    if mode is ReceptionEndMode.DAY_BEFORE:
        local_date = start_time.astimezone(tz).date()
        return datetime.combine(local_date, time.min, tzinfo=tz)
    if mode is ReceptionEndMode.BEFORE_PERFORMANCE:
        return start_time - timedelta(minutes=minutes_before)
    return start_time


def _deadline_passed(production: Production, performance: Performance, now: datetime) -> bool:
    deadline = reception_deadline(
        production.reception_end_mode,
        performance.start_time,
        production.reception_end_minutes,
        now.tzinfo,
    )
    return now > deadline


def _manual_end_passed(production: Production, now: datetime) -> bool:
    return production.reception_end is not None and now > production.reception_end


def _end_reached(
    production: Production,
    performances: Iterable[Performance],
    now: datetime,
) -> bool:
    """True when every given performance is past its deadline.

    Without performances a performance-linked mode falls back to the manual
    end time.
    """
    if production.reception_end_mode not in PERFORMANCE_LINKED_MODES:
        return _manual_end_passed(production, now)
    performances = tuple(performances)
    if not performances:
        return _manual_end_passed(production, now)
    return all(_deadline_passed(production, performance, now) for performance in performances)


def _started(production: Production, now: datetime) -> bool:
    if production.reception_start is not None:
        return now >= production.reception_start
    return production.reception_status is ReceptionStatus.OPEN


def _evaluate(
    production: Production,
    now: datetime,
    performance: Performance | None = None,
) -> EffectiveReceptionStatus:
    if production.reception_start is not None and now < production.reception_start:
        return EffectiveReceptionStatus.BEFORE_START

    performances = production.performances if performance is None else (performance,)
    if _end_reached(production, performances, now):
        return EffectiveReceptionStatus.CLOSED

    if _started(production, now):
        return EffectiveReceptionStatus.OPEN
    return EffectiveReceptionStatus.CLOSED


def effective_reception_status(production: Production, now: datetime) -> EffectiveReceptionStatus:
    """Reception state of the whole production.

    Closes in performance-linked modes only once every performance has
    passed its deadline.
    """
    return _evaluate(production, now)


def is_reception_open(production: Production, now: datetime) -> bool:
    return effective_reception_status(production, now) is EffectiveReceptionStatus.OPEN


def is_performance_reception_open(
    performance: Performance,
    production: Production,
    now: datetime,
) -> bool:
    """Whether one performance can still be booked on the public form."""
    return _evaluate(production, now, performance) is EffectiveReceptionStatus.OPEN

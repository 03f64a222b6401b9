"""
Module: legal_engines.business_hours
Responsibility:
    Convert a pair of instants into elapsed working hours under a business
    calendar (working weekdays, daily start/end hour, one reference
    timezone), plus the small calendar predicates and formatters built on
    the same normalization.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Leaf of the engine graph: stage_timing and time_tracking depend on it.

Invariants enforced:
    - Never negative: ``start >= end`` yields 0.0.
    - Locale independence: aware instants are converted to the reference
      timezone; naive instants are read as reference wall-clock time.
    - Bounded work: the day walk stops after MAX_DAY_ITERATIONS steps and
      raises instead of returning a truncated figure.
    - Results are rounded half-up to one decimal place.

Failure modes:
    - InvalidConfigError for an unusable WorkingHoursConfig.
    - RangeExceededError when the interval spans more than
      MAX_DAY_ITERATIONS calendar days.

Usage:
    from legal_engines.business_hours import calculate_business_hours

    hours = calculate_business_hours(handoff, now, config)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from legal_engines.tracer import traced_engine
from legal_kernel.domain.calendar import DEFAULT_WORKING_HOURS, WorkingHoursConfig
from legal_kernel.exceptions import RangeExceededError
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.business_hours")

MAX_DAY_ITERATIONS = 365

_ONE_DECIMAL = Decimal("0.1")


def round_hours(hours: float) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(str(hours)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def to_reference_time(
    value: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> datetime:
    """Return *value* as naive wall-clock time in the reference timezone."""
    if value.tzinfo is None:
        return value
    return value.astimezone(config.zone).replace(tzinfo=None)


def reference_date(
    value: datetime | date,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> date:
    """Calendar date of *value* in the reference timezone."""
    if isinstance(value, datetime):
        return to_reference_time(value, config).date()
    return value


def is_working_day(
    value: datetime | date,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> bool:
    return reference_date(value, config).isoweekday() in config.working_days


def is_weekend(
    value: datetime | date,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> bool:
    """Saturday or Sunday, regardless of the configured working days."""
    return reference_date(value, config).isoweekday() >= 6


def is_within_working_hours(
    value: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> bool:
    local = to_reference_time(value, config)
    if local.isoweekday() not in config.working_days:
        return False
    return config.start_hour <= local.hour < config.end_hour


@traced_engine("business_hours", "1.0", fingerprint_fields=("start", "end"))
def calculate_business_hours(
    start: datetime,
    end: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> float:
    """Elapsed working hours in ``[start, end)``.

    Preconditions:
        ``start`` and ``end`` are datetimes; aware and naive may be mixed
        (naive values are reference-timezone wall-clock time).

    Postconditions:
        Returns a non-negative float rounded to one decimal place.

    Raises:
        InvalidConfigError: if ``config`` fails validation.
        RangeExceededError: if the walk exceeds MAX_DAY_ITERATIONS days.
    """
    config.validate()
    local_start = to_reference_time(start, config)
    local_end = to_reference_time(end, config)
    if local_start >= local_end:
        return 0.0

    day_open = time(config.start_hour)
    day_close = time(config.end_hour)

    seconds = 0.0
    current = local_start
    iterations = 0
    while current < local_end:
        iterations += 1
        if iterations > MAX_DAY_ITERATIONS:
            logger.warning(
                "business_hours_range_exceeded",
                extra={
                    "start": local_start,
                    "end": local_end,
                    "max_iterations": MAX_DAY_ITERATIONS,
                },
            )
            raise RangeExceededError(start, end, MAX_DAY_ITERATIONS)

        day = current.date()
        if day.isoweekday() in config.working_days:
            overlap_start = max(current, datetime.combine(day, day_open))
            overlap_end = min(local_end, datetime.combine(day, day_close))
            if overlap_end > overlap_start:
                seconds += (overlap_end - overlap_start).total_seconds()

        current = datetime.combine(day + timedelta(days=1), day_open)

    return round_hours(seconds / 3600)


def count_business_days(
    start: date,
    end: date,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> int:
    """Number of working days in ``[start, end)``; 0 when ``end <= start``."""
    if end <= start:
        return 0
    working = frozenset(config.working_days)
    span = (end - start).days
    full_weeks, remainder = divmod(span, 7)
    count = full_weeks * len(working)
    for offset in range(remainder):
        if (start + timedelta(days=full_weeks * 7 + offset)).isoweekday() in working:
            count += 1
    return count


def format_business_hours(hours: float, include_label: bool = False) -> str:
    """Render hours with one decimal, e.g. ``"7.5"`` or ``"1.0 hour"``."""
    text = f"{round_hours(hours):.1f}"
    if not include_label:
        return text
    return f"{text} {'hour' if round_hours(hours) == 1 else 'hours'}"

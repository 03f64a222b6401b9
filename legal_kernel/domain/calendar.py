"""
Business calendar configuration (``legal_kernel.domain.calendar``).

Responsibility:
    Describes the working window used to count business hours: working
    hours of the day, ISO working weekdays (1 = Monday .. 7 = Sunday), and
    the single reference timezone every instant is normalized into.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  Loaded from YAML by
    ``legal_config`` and consumed by ``legal_engines.business_hours``.

Invariants enforced:
    - 0 <= start_hour < end_hour <= 23
    - working_days is non-empty and every entry is in 1..7
    - timezone resolves to a known IANA zone

Failure modes:
    - InvalidConfigError from ``validate()`` when any invariant fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from legal_kernel.exceptions import InvalidConfigError


@dataclass(frozen=True)
class WorkingHoursConfig:
    """
    Working window for business-hours arithmetic.

    Contract:
        Frozen.  Construction does not validate; ``validate()`` is called by
        every engine entry point so that a bad config fails at use.
    Guarantees:
        ``zone`` returns the resolved ``ZoneInfo`` of a validated config.
    """

    start_hour: int = 8
    end_hour: int = 17
    working_days: tuple[int, ...] = (1, 2, 3, 4, 5)
    timezone: str = "America/Los_Angeles"

    @property
    def zone(self) -> ZoneInfo:
        return _resolve_zone(self.timezone)

    def validate(self) -> None:
        """Raise InvalidConfigError if the config cannot be used."""
        for name in ("start_hour", "end_hour"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 23:
                raise InvalidConfigError(name, value, "must be an hour between 0 and 23")
        if self.start_hour >= self.end_hour:
            raise InvalidConfigError(
                "start_hour", self.start_hour, "must be before end_hour"
            )
        if not self.working_days:
            raise InvalidConfigError(
                "working_days", self.working_days, "at least one working day is required"
            )
        for day in self.working_days:
            if not isinstance(day, int) or not 1 <= day <= 7:
                raise InvalidConfigError(
                    "working_days", self.working_days, f"invalid ISO weekday {day!r}"
                )
        _resolve_zone(self.timezone)


def _resolve_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidConfigError("timezone", name, "unknown timezone") from exc


DEFAULT_WORKING_HOURS = WorkingHoursConfig()

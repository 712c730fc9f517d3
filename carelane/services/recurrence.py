"""
recurrence projector

A series is "N weeks on these weekdays". Weekly cadence: each chosen weekday
in each week cycle is one instance, so the count is occurrences x |weekdays|.

The projection is compared to the client's remaining authorized minutes.
Going over is reported (exceeds_authorization + overage), never blocked here;
whether it blocks is the composer's policy decision.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from carelane.schemas.scheduling import RecurrenceProjection, Weekday


def _effective_shape(weekdays: Iterable[Weekday], occurrences: int) -> tuple[int, int]:
    days = set(weekdays)
    if occurrences < 1 or not days:
        # degenerate input collapses to a single, non-recurring session
        return 1, 1
    return occurrences, len(days)


def project(
    duration_minutes: int,
    weekdays: Iterable[Weekday],
    occurrences: int,
    remaining_minutes: Optional[int] = None,
) -> RecurrenceProjection:
    weeks, per_week = _effective_shape(weekdays, occurrences)
    instance_count = weeks * per_week
    projected = instance_count * duration_minutes

    exceeds = remaining_minutes is not None and projected > remaining_minutes
    return RecurrenceProjection(
        recurring=instance_count > 1,
        instance_count=instance_count,
        projected_minutes=projected,
        remaining_minutes=remaining_minutes,
        exceeds_authorization=exceeds,
        overage_minutes=projected - remaining_minutes if exceeds else 0,
    )


def expand_occurrences(
    first_start: datetime,
    duration_minutes: int,
    weekdays: Iterable[Weekday],
    occurrences: int,
) -> list[tuple[datetime, datetime]]:
    """
    Turns the series rule into concrete (start, end) windows.

    We walk forward day by day from the first session's date and take the
    first occurrences x |weekdays| dates that land on a chosen weekday.
    The wall-clock start time is kept on every date (9:00 stays 9:00 across a
    DST change) because dates are combined with the original tzinfo rather
    than shifted by fixed 24h blocks.
    """
    weeks, per_week = _effective_shape(weekdays, occurrences)
    duration = timedelta(minutes=duration_minutes)

    if weeks * per_week == 1:
        return [(first_start, first_start + duration)]

    wanted = {d.index for d in weekdays}
    total = weeks * per_week
    wall_time = first_start.timetz()

    windows: list[tuple[datetime, datetime]] = []
    day = first_start.date()
    while len(windows) < total:
        if day.weekday() in wanted:
            start = datetime.combine(day, wall_time)
            windows.append((start, start + duration))
        day += timedelta(days=1)

    return windows

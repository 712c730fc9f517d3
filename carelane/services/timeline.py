"""
timeline layout engine

Maps sessions onto the scheduler board: one horizontal lane per staff member,
time running left to right across the visible days.

Coordinates are fractions of the lane width, not pixels, so the same geometry
works at any screen size:

    fraction = (day_index * minutes_per_day + minutes_since_day_start)
               / (minutes_per_day * horizon_days)

Notes:
- day_index is the calendar-day difference in the practice time zone, not
  elapsed hours / 24. A DST change inside the window does not shift a 9:00
  session to 8:00 or 10:00 on the board.
- width is floored so a 15 minute session is still something you can click.
- sessions starting at the exact same instant in one lane get a stack index
  (ordered by session id) and a small offset so none is fully hidden.
- everything here is pure. same sessions + same window -> identical output.
  the board re-renders often and must not jitter.

Dragging runs the transform backwards (pixel offset -> start time, snapped to
the grid). Whether the drop is accepted is decided in services.scheduler,
where the conflict check and the write happen under the store lock.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from carelane.core.config import Settings
from carelane.schemas.scheduling import LayoutGeometry, Session

logger = logging.getLogger(__name__)

# (label, start hour inclusive, end hour exclusive)
TIME_BANDS: list[tuple[str, int, int]] = [
    ("Morning focus", 7, 11),
    ("Core hours", 11, 17),
    ("Evening flex", 17, 21),
]
OFF_HOURS = "Off-hours"


@dataclass(frozen=True)
class TimelineGrid:
    day_start_hour: int = 7
    hours_per_day: int = 12
    min_width_fraction: float = 0.02
    snap_minutes: int = 5
    stack_offset_px: int = 6
    timezone: str = "America/Chicago"

    @classmethod
    def from_settings(cls, s: Settings) -> "TimelineGrid":
        return cls(
            day_start_hour=s.timeline_day_start_hour,
            hours_per_day=s.timeline_hours_per_day,
            min_width_fraction=s.timeline_min_width_fraction,
            snap_minutes=s.timeline_snap_minutes,
            stack_offset_px=s.timeline_stack_offset_px,
            timezone=s.timezone,
        )

    @property
    def minutes_per_day(self) -> int:
        return self.hours_per_day * 60

    def total_minutes(self, horizon_days: int) -> int:
        return self.minutes_per_day * horizon_days

    def wall_clock(self, moment: datetime) -> datetime:
        """Naive datetimes are taken as already being practice wall-clock time."""
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(ZoneInfo(self.timezone))


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def time_band(local: datetime) -> str:
    hour = local.hour + local.minute / 60
    for label, start, end in TIME_BANDS:
        if start <= hour < end:
            return label
    return OFF_HOURS


def _check_window(horizon_days: int) -> None:
    if horizon_days < 1:
        raise ValueError("horizon_days must be at least 1")


def _raw_position(session: Session, window_start: date, horizon_days: int, grid: TimelineGrid) -> tuple[float, float]:
    local = grid.wall_clock(session.start)
    total = grid.total_minutes(horizon_days)

    day_index = (local.date() - window_start).days
    start_minutes = (local.hour - grid.day_start_hour) * 60 + local.minute
    left = (day_index * grid.minutes_per_day + start_minutes) / total
    width = session.duration_minutes / total

    left = min(max(left, 0.0), 1.0)
    width = min(max(width, grid.min_width_fraction), 1.0)
    return left, width


def is_visible(session: Session, window_start: date, horizon_days: int, grid: TimelineGrid) -> bool:
    local_day = grid.wall_clock(session.start).date()
    return window_start <= local_day < window_start + timedelta(days=horizon_days)


def layout(
    sessions: Iterable[Session],
    window_start: date,
    horizon_days: int,
    lanes: Sequence[str],
    grid: TimelineGrid = TimelineGrid(),
) -> list[LayoutGeometry]:
    _check_window(horizon_days)
    lane_order = {lane_id: i for i, lane_id in enumerate(lanes)}

    visible = [
        s for s in sessions if s.staff_id in lane_order and is_visible(s, window_start, horizon_days, grid)
    ]
    visible.sort(key=lambda s: (lane_order[s.staff_id], s.start, s.id))

    # same-start buckets, per lane, keyed by the exact instant
    buckets: dict[tuple[str, datetime], list[str]] = defaultdict(list)
    for s in visible:
        buckets[(s.staff_id, s.start)].append(s.id)

    geometry: list[LayoutGeometry] = []
    for s in visible:
        bucket = buckets[(s.staff_id, s.start)]
        stack_index = bucket.index(s.id)
        left, width = _raw_position(s, window_start, horizon_days, grid)
        geometry.append(
            LayoutGeometry(
                session_id=s.id,
                lane_id=s.staff_id,
                left_fraction=left,
                width_fraction=width,
                stack_index=stack_index,
                stack_count=len(bucket),
                stack_offset_px=stack_index * grid.stack_offset_px,
                band=time_band(grid.wall_clock(s.start)),
            )
        )

    logger.debug("Laid out %s sessions across %s lanes", len(geometry), len(lanes))
    return geometry


def now_fraction(
    now: datetime,
    window_start: date,
    horizon_days: int,
    grid: TimelineGrid = TimelineGrid(),
) -> Optional[float]:
    """Where the 'current time' marker goes, or None when now is off the board."""
    _check_window(horizon_days)
    local = grid.wall_clock(now)

    day_index = (local.date() - window_start).days
    if day_index < 0 or day_index >= horizon_days:
        return None

    minute_offset = (local.hour - grid.day_start_hour) * 60 + local.minute
    if minute_offset < 0 or minute_offset > grid.minutes_per_day:
        return None

    return (day_index * grid.minutes_per_day + minute_offset) / grid.total_minutes(horizon_days)


def time_from_offset(
    pixel_offset: float,
    lane_width: float,
    window_start: date,
    horizon_days: int,
    grid: TimelineGrid = TimelineGrid(),
) -> datetime:
    """
    Inverse of the layout transform: where did the user drop the card?

    The offset is clamped to the lane, the day is clamped to the window, and
    the minute is snapped to the grid (round half up, 5 minutes by default).
    """
    _check_window(horizon_days)
    if lane_width <= 0:
        raise ValueError("lane_width must be positive")

    total = grid.total_minutes(horizon_days)
    x = min(max(pixel_offset, 0.0), lane_width)
    minutes_from_start = (x / lane_width) * total

    day_index = min(horizon_days - 1, max(0, int(minutes_from_start // grid.minutes_per_day)))
    minute_within_day = minutes_from_start - day_index * grid.minutes_per_day
    snapped = math.floor(minute_within_day / grid.snap_minutes + 0.5) * grid.snap_minutes

    day = window_start + timedelta(days=day_index)
    day_open = datetime.combine(day, time(grid.day_start_hour), tzinfo=ZoneInfo(grid.timezone))
    return day_open + timedelta(minutes=snapped)

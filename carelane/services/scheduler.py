"""
CareLane scheduler (v1)

What this file is for
This is where the scheduling core touches the schedule itself.

The other service modules are pure: they look at sessions and answer questions
(is this eligible, does this overlap, where does this card go, what would this
batch do). This module is the one place that then CHANGES things:
- committing a composer draft into new sessions
- accepting or rejecting a drag/drop on the board
- applying the succeeded part of a batch action
- building the board view for a window

Every write follows the same shape:
    with ctx.lock:
        check against the current sessions
        write only if the check passed

Doing the check and the write under one lock is the whole point. Two commits
for the same clinician at the same time cannot both see an empty slot.

Commit side effects (authorization decrement, staff load) are explicit,
pluggable functions instead of something that happens by accident. Whether
minutes are drawn down on commit is a setting, not an omission.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from carelane.core.errors import UnknownEntityError
from carelane.core.state import SchedulingContext
from carelane.schemas.composer import CommitResult
from carelane.schemas.scheduling import (
    BatchOperation,
    BatchParams,
    BatchResult,
    DragResult,
    LayoutGeometry,
    Session,
    SessionPatch,
    SessionStatus,
    Severity,
    StaffAvailability,
    TimelineView,
)
from carelane.services.batch import apply_batch
from carelane.services.catalog import get_service
from carelane.services.composer import Composer
from carelane.services.conflicts import check_session_conflicts
from carelane.services.eligibility import is_credentialed
from carelane.services.timeline import TimelineGrid, layout, now_fraction, time_from_offset

logger = logging.getLogger(__name__)

CommitEffect = Callable[[SchedulingContext, list[Session]], None]


# -------------------------
# Commit effects
# -------------------------


def decrement_authorization(ctx: SchedulingContext, sessions: list[Session]) -> None:
    for s in sessions:
        ctx.authorizations.debit(s.client_id, s.duration_minutes)


def add_staff_load(ctx: SchedulingContext, sessions: list[Session]) -> None:
    for s in sessions:
        ctx.adjust_load(s.staff_id, s.duration_minutes)


def default_commit_effects(ctx: SchedulingContext) -> list[CommitEffect]:
    effects: list[CommitEffect] = [add_staff_load]
    if ctx.settings.decrement_authorization_on_commit:
        effects.append(decrement_authorization)
    return effects


# -------------------------
# Drafts
# -------------------------


def open_draft(ctx: SchedulingContext, prefill_session_id: Optional[str] = None) -> Composer:
    composer = Composer(ctx)
    if prefill_session_id is not None:
        composer.prefill_from(ctx.sessions.get(prefill_session_id))
    ctx.drafts[composer.id] = composer
    return composer


def get_draft(ctx: SchedulingContext, draft_id: str) -> Composer:
    composer = ctx.drafts.get(draft_id)
    if composer is None:
        raise UnknownEntityError("draft", draft_id)
    return composer


def discard_draft(ctx: SchedulingContext, draft_id: str) -> None:
    if ctx.drafts.pop(draft_id, None) is None:
        raise UnknownEntityError("draft", draft_id)


def commit_draft(
    ctx: SchedulingContext,
    composer: Composer,
    effects: Optional[Sequence[CommitEffect]] = None,
) -> CommitResult:
    """
    Turns a reviewed draft into sessions.

    Either every occurrence is written or none is. A failed commit returns the
    validation list and leaves the schedule, the ledger and the draft untouched.
    """
    if effects is None:
        effects = default_commit_effects(ctx)

    with ctx.lock:
        issues = composer.commit_issues(ctx.sessions.list())
        errors = [i for i in issues if i.severity == Severity.error]
        if errors:
            logger.info("Commit of draft %s refused: %s", composer.id, errors[0].message)
            return CommitResult(committed=False, issues=issues)

        sessions = composer.build_sessions()
        for s in sessions:
            ctx.sessions.append(s)
        for effect in effects:
            effect(ctx, sessions)
        ctx.drafts.pop(composer.id, None)

    logger.info(
        "Committed draft %s: %s session(s) for client %s with %s",
        composer.id,
        len(sessions),
        sessions[0].client_id,
        sessions[0].staff_id,
    )
    return CommitResult(committed=True, sessions=sessions, issues=issues, series_id=sessions[0].series_id)


async def commit_draft_async(
    ctx: SchedulingContext,
    composer: Composer,
    delay_seconds: Optional[float] = None,
    effects: Optional[Sequence[CommitEffect]] = None,
) -> CommitResult:
    """
    Commit with the "Scheduling..." pause in front of it.

    The wait happens before anything is checked or written, so cancelling the
    task during the wait leaves no trace.
    """
    delay = ctx.settings.commit_delay_seconds if delay_seconds is None else delay_seconds
    await asyncio.sleep(delay)
    return commit_draft(ctx, composer, effects)


# -------------------------
# Board
# -------------------------


def _grid(ctx: SchedulingContext) -> TimelineGrid:
    return TimelineGrid.from_settings(ctx.settings)


def build_timeline(
    ctx: SchedulingContext,
    window_start: date,
    horizon_days: int,
    lanes: Optional[Sequence[str]] = None,
) -> TimelineView:
    lane_ids = list(lanes) if lanes else list(ctx.staff.keys())
    for lane_id in lane_ids:
        ctx.staff_member(lane_id)

    grid = _grid(ctx)
    return TimelineView(
        window_start=window_start,
        horizon_days=horizon_days,
        lanes=lane_ids,
        geometry=layout(ctx.sessions.list(), window_start, horizon_days, lane_ids, grid),
        now_fraction=now_fraction(ctx.clock.now(), window_start, horizon_days, grid),
    )


def _geometry_of(
    session: Session,
    sessions: Iterable[Session],
    window_start: date,
    horizon_days: int,
    grid: TimelineGrid,
) -> Optional[LayoutGeometry]:
    for g in layout(sessions, window_start, horizon_days, [session.staff_id], grid):
        if g.session_id == session.id:
            return g
    return None


def drag_session(
    ctx: SchedulingContext,
    session_id: str,
    pixel_offset: float,
    lane_width: float,
    window_start: date,
    horizon_days: int,
    lane_id: Optional[str] = None,
) -> DragResult:
    """
    A card was dropped at pixel_offset in a lane lane_width pixels wide.

    The drop becomes a start time (snapped), the duration is kept, and the
    staff / client / room checks run against everyone else. On a conflict the
    move is rejected and the card goes back to where it was.
    """
    grid = _grid(ctx)

    with ctx.lock:
        session = ctx.sessions.get(session_id)
        target_lane = lane_id or session.staff_id
        target_staff = ctx.staff_member(target_lane)

        prior = _geometry_of(session, ctx.sessions.list(), window_start, horizon_days, grid)

        # same rule as a batch reassign
        service = get_service(session.service_code)
        if target_lane != session.staff_id and not is_credentialed(target_staff, service):
            reason = f"{target_staff.name} ({target_staff.credential}) cannot deliver {service.code}."
            logger.info("Drag of %s to lane %s rejected: %s", session.id, target_lane, reason)
            return DragResult(accepted=False, session=session, geometry=prior, reason=reason)

        new_start = time_from_offset(pixel_offset, lane_width, window_start, horizon_days, grid)
        new_end = new_start + timedelta(minutes=session.duration_minutes)

        conflict = check_session_conflicts(
            new_start,
            new_end,
            ctx.sessions.list(),
            staff_id=target_lane,
            client_id=session.client_id,
            room_id=session.room_id,
            exclude_id=session.id,
        )
        if conflict is not None:
            logger.info("Drag of %s to %s rejected: %s", session.id, new_start.isoformat(), conflict.reason)
            return DragResult(
                accepted=False, session=session, geometry=prior, conflict=conflict, reason=conflict.reason
            )

        updated = ctx.sessions.update(session.id, SessionPatch(start=new_start, end=new_end, staff_id=target_lane))
        if target_lane != session.staff_id:
            ctx.adjust_load(session.staff_id, -session.duration_minutes)
            ctx.adjust_load(target_lane, session.duration_minutes)

        geometry = _geometry_of(updated, ctx.sessions.list(), window_start, horizon_days, grid)

    logger.info("Moved %s to %s in lane %s", updated.id, new_start.isoformat(), target_lane)
    return DragResult(accepted=True, session=updated, geometry=geometry)


# -------------------------
# Batch
# -------------------------


def _after_change(ctx: SchedulingContext, before: Session, after: Session) -> None:
    """Keeps staff load and the authorization ledger in step with one batch change."""
    if after.status == SessionStatus.cancelled and before.status != SessionStatus.cancelled:
        ctx.adjust_load(before.staff_id, -before.duration_minutes)
        if ctx.settings.decrement_authorization_on_commit and before.start > ctx.clock.now():
            # minutes for a session that will not happen go back to the client
            ctx.authorizations.credit(before.client_id, before.duration_minutes)
    elif after.staff_id != before.staff_id:
        ctx.adjust_load(before.staff_id, -before.duration_minutes)
        ctx.adjust_load(after.staff_id, after.duration_minutes)


def run_batch(
    ctx: SchedulingContext,
    op: BatchOperation,
    session_ids: Sequence[str],
    params: BatchParams,
    apply: bool = False,
) -> BatchResult:
    """
    Preview (apply=False) or apply a batch action.

    Applying writes only the succeeded sessions. Blocked ones stay exactly as
    they were and are reported back with their reason.
    """
    with ctx.lock:
        seen: set[str] = set()
        selected: list[Session] = []
        for sid in session_ids:
            if sid in seen:
                continue
            seen.add(sid)
            selected.append(ctx.sessions.get(sid))

        result = apply_batch(op, selected, ctx.sessions.list(), params, ctx.staff)
        if not apply:
            return result

        for s in result.succeeded:
            before = ctx.sessions.get(s.id)
            ctx.sessions.update(
                s.id,
                SessionPatch(start=s.start, end=s.end, staff_id=s.staff_id, status=s.status),
            )
            _after_change(ctx, before, s)

    logger.info("Batch %s applied: %s", op.value, result.message)
    return result.model_copy(update={"applied": True})


def staff_utilization(ctx: SchedulingContext) -> list[StaffAvailability]:
    """Roster ordered from least to most loaded, for the coverage panel."""
    return sorted(ctx.staff.values(), key=lambda s: (s.utilization_ratio, s.staff_id))


def sessions_between(ctx: SchedulingContext, start: Optional[datetime], end: Optional[datetime]) -> list[Session]:
    """Sessions overlapping [start, end). Bounds without an offset are practice wall-clock time."""
    tz = ZoneInfo(ctx.settings.timezone)
    if start is not None and start.tzinfo is None:
        start = start.replace(tzinfo=tz)
    if end is not None and end.tzinfo is None:
        end = end.replace(tzinfo=tz)

    sessions = ctx.sessions.list()
    if start is not None:
        sessions = [s for s in sessions if s.end > start]
    if end is not None:
        sessions = [s for s in sessions if s.start < end]
    return sorted(sessions, key=lambda s: (s.start, s.id))

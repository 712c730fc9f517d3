"""
conflict detector

one question, asked from several places (composer commit, drag/drop, batch move
and reassign): does this time window collide with an existing session for the
same staff member, client, or room?

rules:
- intervals are half-open: [start, end). back-to-back sessions do not conflict.
- cancelled sessions do not hold time.
- we return the FIRST conflict found, not all of them. the UI explains one
  reason at a time and conflicts are rare.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional

from carelane.schemas.scheduling import ConflictKind, ConflictReport, Session, SessionStatus

SessionPredicate = Callable[[Session], bool]


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def same_staff(staff_id: str) -> SessionPredicate:
    return lambda s: s.staff_id == staff_id


def same_client(client_id: str) -> SessionPredicate:
    return lambda s: s.client_id == client_id


def same_room(room_id: str) -> SessionPredicate:
    return lambda s: s.room_id == room_id


def find_conflict(
    start: datetime,
    end: datetime,
    sessions: Iterable[Session],
    predicate: SessionPredicate,
    exclude_id: Optional[str] = None,
) -> Optional[Session]:
    for other in sessions:
        if other.id == exclude_id:
            continue
        if other.status == SessionStatus.cancelled:
            continue
        if not predicate(other):
            continue
        if intervals_overlap(start, end, other.start, other.end):
            return other
    return None


def check_session_conflicts(
    start: datetime,
    end: datetime,
    sessions: Iterable[Session],
    staff_id: Optional[str] = None,
    client_id: Optional[str] = None,
    room_id: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> Optional[ConflictReport]:
    """
    Runs the staff, client and room checks independently, in that order.

    Any one of them blocks. The report names which identity collided so the
    message can say "staff busy" vs "client already booked".
    """
    pool = list(sessions)
    checks: list[tuple[ConflictKind, Optional[str], Callable[[str], SessionPredicate]]] = [
        (ConflictKind.staff, staff_id, same_staff),
        (ConflictKind.client, client_id, same_client),
        (ConflictKind.room, room_id, same_room),
    ]

    for kind, identity, make_predicate in checks:
        if identity is None:
            continue
        hit = find_conflict(start, end, pool, make_predicate(identity), exclude_id=exclude_id)
        if hit is not None:
            return ConflictReport(kind=kind, session=hit, reason=describe_conflict(kind, hit))

    return None


def describe_conflict(kind: ConflictKind, other: Session) -> str:
    when = other.start.strftime("%b %d %I:%M%p")
    if kind == ConflictKind.staff:
        return f"Staff {other.staff_id} is already booked with client {other.client_id} at {when} ({other.id})."
    if kind == ConflictKind.client:
        return f"Client {other.client_id} already has a session at {when} ({other.id})."
    return f"Room {other.room_id} is already in use at {when} ({other.id})."

"""
in-memory scheduling context (v1)

this module holds everything the scheduling core works against:
- roster: clients, staff (with their weekly load), rooms
- the authorization ledger
- the session store (the schedule itself)
- open composer drafts
- the clock
- one lock

the session store is the only shared mutable thing that matters. every
check-then-act (commit, drag, batch apply) takes `lock` so two near-simultaneous
requests cannot both pass a conflict check against the same stale snapshot.
fastapi runs sync routes in a thread pool, hence a real threading lock.

important limitations (v1):
- in-memory only, resets when the server restarts
- single global context (one practice)
- no auth

sessions are never deleted. they are appended, and later patched (time, staff,
room, status). cancelling is a status change.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

from carelane.core.clock import Clock, SystemClock
from carelane.core.config import Settings, settings
from carelane.core.errors import UnknownEntityError
from carelane.schemas.scheduling import Client, Room, Session, SessionPatch, StaffAvailability
from carelane.services.authorization import AuthorizationLedger
from carelane.services.catalog import get_service

if TYPE_CHECKING:
    from carelane.services.composer import Composer


class SessionStore:
    def __init__(self, sessions: Iterable[Session] = ()):
        self._sessions: dict[str, Session] = {}
        for s in sessions:
            self.append(s)

    def __len__(self) -> int:
        return len(self._sessions)

    def list(self) -> list[Session]:
        return list(self._sessions.values())

    def find(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownEntityError("session", session_id)
        return session

    def append(self, session: Session) -> Session:
        # a session pointing at a code we do not know is a data bug, not user input
        get_service(session.service_code)

        if session.id in self._sessions:
            raise ValueError(f"Session '{session.id}' already exists.")
        self._sessions[session.id] = session
        return session

    def update(self, session_id: str, patch: SessionPatch) -> Session:
        current = self.get(session_id)
        data = current.model_dump(exclude={"duration_minutes"})
        data.update(patch.model_dump(exclude_none=True))

        # re-validate so end > start still holds after the patch
        updated = Session.model_validate(data)
        self._sessions[session_id] = updated
        return updated


@dataclass
class SchedulingContext:
    """
    The working set for one practice.

    Think of this as:
    "what the front desk knows right now about who can be scheduled where"
    """
    clients: dict[str, Client] = field(default_factory=dict)
    staff: dict[str, StaffAvailability] = field(default_factory=dict)
    rooms: dict[str, Room] = field(default_factory=dict)
    authorizations: AuthorizationLedger = field(default_factory=AuthorizationLedger)
    sessions: SessionStore = field(default_factory=SessionStore)
    drafts: dict[str, "Composer"] = field(default_factory=dict)
    clock: Clock = field(default_factory=lambda: SystemClock(settings.timezone))
    settings: Settings = field(default_factory=lambda: settings)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def client(self, client_id: str) -> Client:
        try:
            return self.clients[client_id]
        except KeyError:
            raise UnknownEntityError("client", client_id) from None

    def staff_member(self, staff_id: str) -> StaffAvailability:
        try:
            return self.staff[staff_id]
        except KeyError:
            raise UnknownEntityError("staff", staff_id) from None

    def room(self, room_id: str) -> Room:
        try:
            return self.rooms[room_id]
        except KeyError:
            raise UnknownEntityError("room", room_id) from None

    def center_rooms(self) -> list[Room]:
        return [r for r in self.rooms.values() if "center" in r.location.lower()]

    def adjust_load(self, staff_id: str, delta_minutes: int) -> None:
        """Keeps a staff member's weekly load in step with assignments. Never below zero."""
        member = self.staff.get(staff_id)
        if member is None:
            return
        load = max(0, member.load_minutes_this_week + delta_minutes)
        self.staff[staff_id] = member.model_copy(update={"load_minutes_this_week": load})


# Single global context (v1)
_CONTEXT = SchedulingContext()


def get_context() -> SchedulingContext:
    """
    Returns the singleton context object.

    We keep it behind a function so:
    - later we can swap it for a DB-backed implementation
    - routers don't need to care where state comes from
    - tests can start from a clean one with reset_context()
    """
    return _CONTEXT


def reset_context(clock: Optional[Clock] = None) -> SchedulingContext:
    """
    Resets the singleton context.
    Useful for demos, tests, and team iteration.
    """
    global _CONTEXT
    _CONTEXT = SchedulingContext() if clock is None else SchedulingContext(clock=clock)
    return _CONTEXT

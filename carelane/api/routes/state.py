"""
state routes (v1)

these endpoints let us:
- load the roster once (clients, staff, rooms)
- load the authorizations the payer approved
- look at what the scheduler is working against right now
- reset everything for a clean demo

sessions are not posted here. they come out of the composer (or the demo
loader), so every session in the store has been through the same checks.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from carelane.core.state import get_context, reset_context
from carelane.schemas.scheduling import AuthorizationBalance, Client, Room, Session, StaffAvailability
from carelane.services.scheduler import staff_utilization

router = APIRouter(prefix="/state")


class StateResponse(BaseModel):
    """
    What we return when someone asks for current state.
    Keeping it explicit makes /docs easier to understand.
    """
    clients: list[Client]
    staff: list[StaffAvailability]
    rooms: list[Room]
    authorizations: list[AuthorizationBalance]
    sessions: list[Session]
    open_drafts: list[str]
    now: datetime


def _require_unique(ids: list[str], what: str) -> None:
    if len(ids) != len(set(ids)):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{what} IDs must be unique.",
        )


@router.get("", response_model=StateResponse)
def get_state() -> StateResponse:
    """
    Returns the current in-memory state.

    This is basically our "debug dashboard" for the backend.
    If something looks wrong, check /state first.
    """
    ctx = get_context()
    return StateResponse(
        clients=list(ctx.clients.values()),
        staff=list(ctx.staff.values()),
        rooms=list(ctx.rooms.values()),
        authorizations=ctx.authorizations.all(),
        sessions=sorted(ctx.sessions.list(), key=lambda s: (s.start, s.id)),
        open_drafts=list(ctx.drafts.keys()),
        now=ctx.clock.now(),
    )


@router.post("/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset_state() -> None:
    """
    Resets state for demos and dev work.

    Example:
    - teammate tries stuff
    - state gets messy
    - reset and start clean
    """
    reset_context()


@router.post("/clients", response_model=list[Client])
def set_clients(clients: list[Client]) -> list[Client]:
    """
    Replaces the client roster.

    Authorizations for clients that are no longer on the roster are dropped so
    the ledger never points at nobody. Existing sessions are kept: they are
    history, not roster.
    """
    _require_unique([c.id for c in clients], "Client")

    ctx = get_context()
    with ctx.lock:
        ctx.clients = {c.id: c for c in clients}
        ctx.authorizations.replace(a for a in ctx.authorizations.all() if a.client_id in ctx.clients)
    return clients


@router.post("/staff", response_model=list[StaffAvailability])
def set_staff(staff: list[StaffAvailability]) -> list[StaffAvailability]:
    """Replaces the staff roster (one timeline lane per staff member)."""
    _require_unique([s.staff_id for s in staff], "Staff")

    ctx = get_context()
    with ctx.lock:
        ctx.staff = {s.staff_id: s for s in staff}
    return staff


@router.post("/rooms", response_model=list[Room])
def set_rooms(rooms: list[Room]) -> list[Room]:
    _require_unique([r.id for r in rooms], "Room")

    ctx = get_context()
    with ctx.lock:
        ctx.rooms = {r.id: r for r in rooms}
    return rooms


@router.post("/authorizations", response_model=list[AuthorizationBalance])
def set_authorizations(authorizations: list[AuthorizationBalance]) -> list[AuthorizationBalance]:
    """
    Replaces the authorization ledger. One authorization per client.

    Every authorization must belong to a client already on the roster, so load
    clients first via POST /state/clients.
    """
    _require_unique([a.client_id for a in authorizations], "Authorization client")

    ctx = get_context()
    unknown = [a.client_id for a in authorizations if a.client_id not in ctx.clients]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown client_id '{unknown[0]}'. Add the client first via POST /state/clients.",
        )

    with ctx.lock:
        ctx.authorizations.replace(authorizations)
    return authorizations


@router.get("/staff/utilization", response_model=list[StaffAvailability])
def get_staff_utilization() -> list[StaffAvailability]:
    """Staff from least to most loaded this week, with their utilization band."""
    return staff_utilization(get_context())

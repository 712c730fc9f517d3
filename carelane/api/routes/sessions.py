"""
session routes

read the schedule, and move one session on the board (drag/drop).

a drag is sent as the board sees it: where the card was dropped (pixels from
the left edge of the lane), how wide the lane is, and which window the board
is showing. the server turns that into a start time, runs the conflict
checks, and either moves the session or says why not.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from carelane.core.errors import UnknownEntityError
from carelane.core.state import get_context
from carelane.schemas.scheduling import DragResult, Session
from carelane.services.scheduler import drag_session, sessions_between

router = APIRouter(prefix="/sessions")


class DragRequest(BaseModel):
    pixel_offset: float
    lane_width: float = Field(gt=0)
    window_start: date
    horizon_days: int = Field(default=7, ge=1, le=28)
    # drop into another staff member's lane; omitted means same lane
    lane_id: Optional[str] = None


@router.get("", response_model=list[Session])
def list_sessions(start: Optional[datetime] = None, end: Optional[datetime] = None) -> list[Session]:
    """Sessions overlapping [start, end), oldest first. Both bounds optional."""
    return sessions_between(get_context(), start, end)


@router.get("/{session_id}", response_model=Session)
def get_session(session_id: str) -> Session:
    session = get_context().sessions.find(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found.",
        )
    return session


@router.post("/{session_id}/drag", response_model=DragResult)
def drag(session_id: str, req: DragRequest) -> DragResult:
    """
    Moves a session to where it was dropped.

    A rejected move is still a 200: `accepted` is false, the session is
    unchanged, and `conflict` says who or what is in the way.
    """
    ctx = get_context()
    try:
        return drag_session(
            ctx,
            session_id,
            pixel_offset=req.pixel_offset,
            lane_width=req.lane_width,
            window_start=req.window_start,
            horizon_days=req.horizon_days,
            lane_id=req.lane_id,
        )
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

"""
timeline routes

the scheduler board: one lane per staff member, sessions positioned as
fractions of the lane width. the client only has to multiply by its pixel
width.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from carelane.core.errors import UnknownEntityError
from carelane.core.state import get_context
from carelane.schemas.scheduling import TimelineView
from carelane.services.composer import today_for
from carelane.services.scheduler import build_timeline
from carelane.services.timeline import week_start

router = APIRouter()


@router.get("/timeline", response_model=TimelineView)
def get_timeline(
    start: Optional[date] = None,
    horizon_days: int = Query(default=7, ge=1, le=28),
    lane: Optional[list[str]] = Query(default=None),
) -> TimelineView:
    """
    Board geometry for `horizon_days` days from `start`.

    defaults:
    - start: Monday of the current week
    - lanes: every staff member, in roster order (repeat ?lane= to pick some)
    """
    ctx = get_context()
    window_start = start or week_start(today_for(ctx))
    try:
        return build_timeline(ctx, window_start, horizon_days, lane)
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

"""Shared fixtures: a small practice pinned to Monday 2024-04-08, 08:00 Chicago time."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from carelane.core.clock import FixedClock
from carelane.core.state import SchedulingContext, reset_context
from carelane.schemas.scheduling import Modality, Session, SessionStatus
from carelane.services.demo import DEMO_WEEK, demo_dataset, load_dataset

TZ = ZoneInfo("America/Chicago")
NOW = datetime(2024, 4, 8, 8, 0, tzinfo=TZ)


def at(day: date, hh: int, mm: int = 0) -> datetime:
    """Wall-clock time in the practice time zone."""
    return datetime.combine(day, time(hh, mm), tzinfo=TZ)


def make_session(
    session_id: str,
    start: datetime,
    minutes: int = 60,
    staff_id: str = "STF-112",
    client_id: str = "CLI-9081",
    room_id: str | None = None,
    service_code: str = "97153",
    status: SessionStatus = SessionStatus.scheduled,
    modality: Modality = Modality.center,
) -> Session:
    return Session(
        id=session_id,
        client_id=client_id,
        staff_id=staff_id,
        room_id=room_id,
        start=start,
        end=start + timedelta(minutes=minutes),
        service_code=service_code,
        modality=modality,
        status=status,
    )


@pytest.fixture
def monday() -> date:
    return DEMO_WEEK


@pytest.fixture
def tuesday() -> date:
    return DEMO_WEEK + timedelta(days=1)


@pytest.fixture
def ctx() -> SchedulingContext:
    """Context with the sample practice loaded and the clock frozen at NOW."""
    context = SchedulingContext(clock=FixedClock(NOW))
    load_dataset(context, demo_dataset())
    return context


@pytest.fixture
def empty_ctx() -> SchedulingContext:
    return SchedulingContext(clock=FixedClock(NOW))


@pytest.fixture
def api():
    """TestClient over a fresh global context with the sample practice loaded."""
    from carelane.main import create_app

    context = reset_context(FixedClock(NOW))
    load_dataset(context, demo_dataset())
    yield TestClient(create_app())
    reset_context()

"""
demo dataset

this exists so the api is easy to try in swagger (/docs): one call loads a
small practice (clients, staff, rooms, authorizations, a few sessions) into
the in-memory context.

the records are the sample practice the front-end prototype shipped with.
its sessions sit in the week of Monday 2024-04-08. hardcoded dates go stale
fast, so the dataset can be shifted to any week: every date moves by the same
number of days, wall-clock times stay put.

nothing here is real patient data.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from carelane.core.clock import FixedClock
from carelane.core.state import SchedulingContext, SessionStore
from carelane.schemas.scheduling import (
    AuthorizationBalance,
    Client,
    ClientStatus,
    Modality,
    Room,
    RoomType,
    Session,
    SessionStatus,
    StaffAvailability,
)
from carelane.services.timeline import week_start

# the Monday the sample sessions were written against
DEMO_WEEK = date(2024, 4, 8)
DEMO_NOW = time(8, 0)


class DemoDataset(BaseModel):
    clients: list[Client]
    staff: list[StaffAvailability]
    rooms: list[Room]
    authorizations: list[AuthorizationBalance]
    sessions: list[Session]


def _hours(h: int) -> int:
    return h * 60


def demo_dataset(anchor: Optional[date] = None, tz: str = "America/Chicago") -> DemoDataset:
    """
    The sample practice, shifted so its sessions land in the week of `anchor`.
    No anchor means the original 2024-04-08 week.
    """
    shift = timedelta(days=(week_start(anchor) - DEMO_WEEK).days) if anchor else timedelta(0)
    zone = ZoneInfo(tz)

    def at(day_offset: int, hh: int, mm: int = 0) -> datetime:
        return datetime.combine(DEMO_WEEK + shift + timedelta(days=day_offset), time(hh, mm), tzinfo=zone)

    staff = [
        StaffAvailability(
            staff_id="STF-112",
            name="Jules Bernal, RBT",
            credential="RBT",
            location="Austin - North Center",
            load_minutes_this_week=_hours(28),
            target_minutes_this_week=_hours(32),
            travel_buffer_minutes=15,
        ),
        StaffAvailability(
            staff_id="STF-210",
            name="Sasha Kim, RBT",
            credential="RBT",
            location="In-home (North Loop)",
            load_minutes_this_week=_hours(20),
            target_minutes_this_week=_hours(30),
            travel_buffer_minutes=25,
            evv_required=True,
        ),
        StaffAvailability(
            staff_id="STF-031",
            name="Dr. Priya Mehta, BCBA",
            credential="BCBA",
            location="Multi-site",
            load_minutes_this_week=_hours(18),
            target_minutes_this_week=_hours(24),
        ),
        StaffAvailability(
            staff_id="STF-099",
            name="Dr. Mateo Ruiz, BCBA",
            credential="BCBA",
            location="In-home",
            load_minutes_this_week=_hours(22),
            target_minutes_this_week=_hours(24),
            travel_buffer_minutes=20,
            evv_required=True,
        ),
        StaffAvailability(
            staff_id="STF-041",
            name="Jordan Patel, BCBA",
            credential="BCBA",
            location="Telehealth",
            load_minutes_this_week=_hours(12),
            target_minutes_this_week=_hours(20),
        ),
        StaffAvailability(
            staff_id="STF-134",
            name="Nina Patel, BCBA",
            credential="BCBA",
            location="School Services",
            load_minutes_this_week=_hours(10),
            target_minutes_this_week=_hours(20),
        ),
    ]

    clients = [
        Client(
            id="CLI-9081",
            name="Mason Tillery",
            age=6,
            location="Austin - North Center",
            care_team_staff_ids={"STF-031", "STF-112"},
        ),
        Client(
            id="CLI-087",
            name="Nova Hernandez",
            age=5,
            location="North Loop In-home",
            care_team_staff_ids={"STF-099", "STF-210"},
        ),
        Client(
            id="CLI-1190",
            name="Harper Lyons",
            age=7,
            location="Telehealth · CST",
            care_team_staff_ids={"STF-041"},
        ),
        Client(
            id="CLI-1055",
            name="Atlas Pierce",
            age=9,
            location="Jefferson Elementary",
            status=ClientStatus.waitlist,
            care_team_staff_ids={"STF-134"},
        ),
        Client(
            id="CLI-2001",
            name="Harper Benny",
            age=7,
            location="Telehealth - CST",
            status=ClientStatus.waitlist,
        ),
        Client(
            id="CLI-2002",
            name="Noah Patel",
            age=5,
            location="Austin - North Center",
            status=ClientStatus.waitlist,
            care_team_staff_ids={"STF-031", "STF-112"},
        ),
    ]

    rooms = [
        Room(id="RM-101", name="Pod B · Sensory", location="Austin - North Center", capacity=3),
        Room(id="RM-201", name="Telehealth Suite A", location="Virtual · CST", type=RoomType.telehealth),
        Room(id="RM-301", name="Group Room 1", location="Austin - North Center", capacity=8, type=RoomType.group),
        Room(id="RM-401", name="School Resource Slot", location="Jefferson Elementary", capacity=4),
    ]

    authorizations = [
        AuthorizationBalance(
            client_id="CLI-9081",
            payer="Beacon Health",
            authorized_minutes=720,
            remaining_minutes=245,
            expires_on=date(2024, 6, 30) + shift,
            allowed_service_codes={"97153", "97155"},
        ),
        AuthorizationBalance(
            client_id="CLI-087",
            payer="United Healthcare",
            authorized_minutes=900,
            remaining_minutes=490,
            expires_on=date(2024, 7, 15) + shift,
            allowed_service_codes={"97155"},
        ),
        AuthorizationBalance(
            client_id="CLI-1190",
            payer="Aetna Better Health",
            authorized_minutes=480,
            remaining_minutes=180,
            expires_on=date(2024, 5, 28) + shift,
            allowed_service_codes={"97156"},
        ),
    ]

    sessions = [
        Session(
            id="APT-100245",
            client_id="CLI-9081",
            staff_id="STF-112",
            room_id="RM-101",
            start=at(0, 9),
            end=at(0, 11),
            service_code="97153",
            modality=Modality.center,
            status=SessionStatus.pending_validation,
            notes="BCBA overlap for toileting generalization. Caregiver wants daily summary.",
        ),
        Session(
            id="APT-100246",
            client_id="CLI-087",
            staff_id="STF-210",
            start=at(0, 12, 30),
            end=at(0, 14),
            service_code="97155",
            modality=Modality.home,
            evv_required=True,
            notes="Travel buffer 25 min. BCBA to model transitions for bus drop-off.",
        ),
        Session(
            id="APT-100247",
            client_id="CLI-1190",
            staff_id="STF-041",
            start=at(0, 18),
            end=at(0, 19),
            service_code="97156",
            modality=Modality.telehealth,
        ),
    ]

    return DemoDataset(
        clients=clients,
        staff=staff,
        rooms=rooms,
        authorizations=authorizations,
        sessions=sessions,
    )


def demo_now(anchor: Optional[date] = None, tz: str = "America/Chicago") -> datetime:
    """08:00 on the demo Monday (or on the Monday of anchor's week)."""
    monday = week_start(anchor) if anchor else DEMO_WEEK
    return datetime.combine(monday, DEMO_NOW, tzinfo=ZoneInfo(tz))


def load_dataset(ctx: SchedulingContext, dataset: DemoDataset, pin_clock: bool = False) -> SchedulingContext:
    """
    Replaces everything in the context with the dataset. Open drafts are dropped.

    pin_clock freezes "now" at 08:00 on the dataset's Monday, so the sample
    sessions are neither in the past nor far in the future.
    """
    with ctx.lock:
        ctx.clients = {c.id: c for c in dataset.clients}
        ctx.staff = {s.staff_id: s for s in dataset.staff}
        ctx.rooms = {r.id: r for r in dataset.rooms}
        ctx.authorizations.replace(dataset.authorizations)
        ctx.sessions = SessionStore(dataset.sessions)
        ctx.drafts.clear()
        if pin_clock and dataset.sessions:
            first = min(s.start for s in dataset.sessions)
            ctx.clock = FixedClock(demo_now(first.date(), ctx.settings.timezone))
    return ctx

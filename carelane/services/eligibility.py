"""
eligibility resolver

Given a client and a service, which staff members can deliver it, and in
what order should we suggest them?

Ranking (v1):
1) staff already on the client's care team come first
2) everyone else by ascending load ratio (less loaded first)
3) staff id as the final tie breaker so the list never reshuffles between calls

Availability is advisory. Over-capacity staff are pushed down the list, never
removed. Real schedules flex and the scheduler makes the final call.

An empty list is a valid answer ("no eligible staff"), not an error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from carelane.schemas.scheduling import (
    Client,
    EligibilityCandidate,
    ServiceTemplate,
    Session,
    StaffAvailability,
)
from carelane.services.conflicts import find_conflict, same_staff

NO_ELIGIBLE_STAFF = "No staff meet the credential filters for this service."


def load_status(load_ratio: float) -> str:
    if load_ratio > 1.0:
        return "Over capacity"
    if load_ratio > 0.8:
        return "Tight day"
    return "Healthy load"


def is_credentialed(staff: StaffAvailability, service: Optional[ServiceTemplate]) -> bool:
    if service is None:
        return True
    return staff.credential in service.allowed_credentials


def resolve_eligible_staff(
    client: Optional[Client],
    service: Optional[ServiceTemplate],
    roster: Iterable[StaffAvailability],
    proposed_window: Optional[tuple[datetime, datetime]] = None,
    sessions: Iterable[Session] = (),
) -> list[EligibilityCandidate]:
    care_team = client.care_team_staff_ids if client is not None else set()
    existing = list(sessions)

    candidates: list[EligibilityCandidate] = []
    for staff in roster:
        if not is_credentialed(staff, service):
            continue

        conflict_reason = None
        if proposed_window is not None:
            start, end = proposed_window
            hit = find_conflict(start, end, existing, same_staff(staff.staff_id))
            if hit is not None:
                conflict_reason = f"Busy with client {hit.client_id} until {hit.end.strftime('%I:%M%p')}."

        ratio = staff.utilization_ratio
        candidates.append(
            EligibilityCandidate(
                staff=staff,
                load_ratio=ratio,
                assigned=staff.staff_id in care_team,
                conflict=conflict_reason is not None,
                conflict_reason=conflict_reason,
                load_status=load_status(ratio),
            )
        )

    candidates.sort(key=lambda c: (not c.assigned, c.load_ratio, c.staff.staff_id))
    return candidates

"""
batch operations

Cancel / move / reassign applied to a set of selected sessions.

This is a partial-success model on purpose:
- every selected session is validated on its own
- a blocked session never stops the others
- the result lists what would succeed and what is blocked (with a reason that
  names the session), and the caller decides whether to apply the succeeded part

Nothing here writes to the store. services.scheduler does that under the lock.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Mapping, Sequence

from carelane.schemas.scheduling import (
    BatchOperation,
    BatchParams,
    BatchResult,
    BlockedItem,
    Session,
    SessionStatus,
    StaffAvailability,
)
from carelane.services.catalog import get_service
from carelane.services.conflicts import check_session_conflicts, find_conflict, same_staff


def _plural(n: int) -> str:
    return "" if n == 1 else "s"


def _summary(done: str, succeeded: list[Session], blocked: list[BlockedItem], nothing: str) -> str:
    if not succeeded:
        return nothing
    message = f"{len(succeeded)} session{_plural(len(succeeded))} {done}"
    if blocked:
        message += f" · {len(blocked)} skipped"
    return message


def _cancel(selected: Sequence[Session], params: BatchParams) -> tuple[list[Session], list[BlockedItem], str]:
    succeeded: list[Session] = []
    blocked: list[BlockedItem] = []

    for s in selected:
        if s.status == SessionStatus.completed:
            blocked.append(BlockedItem(session=s, reason=f"Session {s.id} ({s.client_id}) already completed; cannot cancel."))
        elif s.status == SessionStatus.cancelled:
            blocked.append(BlockedItem(session=s, reason=f"Session {s.id} ({s.client_id}) is already cancelled."))
        else:
            succeeded.append(s.model_copy(update={"status": SessionStatus.cancelled}))

    message = _summary(f"cancelled ({params.reason})", succeeded, blocked, "No sessions eligible for cancellation")
    return succeeded, blocked, message


def _move(
    selected: Sequence[Session],
    working: dict[str, Session],
    params: BatchParams,
) -> tuple[list[Session], list[BlockedItem], str]:
    succeeded: list[Session] = []
    blocked: list[BlockedItem] = []
    shift = timedelta(minutes=params.offset_minutes)

    for original in selected:
        s = working.get(original.id, original)
        new_start, new_end = s.start + shift, s.end + shift

        # batch-mates already moved are checked in their new slot, the rest in their old one
        conflict = check_session_conflicts(
            new_start,
            new_end,
            working.values(),
            staff_id=s.staff_id,
            client_id=s.client_id,
            exclude_id=s.id,
        )
        if conflict is not None:
            blocked.append(
                BlockedItem(session=s, reason=f"Session {s.id} ({s.client_id}) cannot move: {conflict.reason}")
            )
            continue

        moved = s.model_copy(update={"start": new_start, "end": new_end})
        working[s.id] = moved
        succeeded.append(moved)

    message = _summary(
        f"shifted {params.offset_minutes} min", succeeded, blocked, "No sessions can be moved without conflicts"
    )
    return succeeded, blocked, message


def _reassign(
    selected: Sequence[Session],
    working: dict[str, Session],
    params: BatchParams,
    staff_lookup: Mapping[str, StaffAvailability],
) -> tuple[list[Session], list[BlockedItem], str]:
    succeeded: list[Session] = []
    blocked: list[BlockedItem] = []

    replacement_id = params.replacement_staff_id
    replacement = staff_lookup.get(replacement_id) if replacement_id else None

    for original in selected:
        s = working.get(original.id, original)

        if not replacement_id:
            blocked.append(BlockedItem(session=s, reason="Choose replacement staff to proceed."))
            continue
        if replacement is None:
            blocked.append(BlockedItem(session=s, reason=f"Unknown replacement staff '{replacement_id}'."))
            continue
        if s.staff_id == replacement_id:
            blocked.append(
                BlockedItem(session=s, reason=f"Session {s.id} ({s.client_id}) already assigned to {replacement.name}.")
            )
            continue

        service = get_service(s.service_code)
        if replacement.credential not in service.allowed_credentials:
            blocked.append(
                BlockedItem(
                    session=s,
                    reason=f"{replacement.name} ({replacement.credential}) cannot deliver {service.code}.",
                )
            )
            continue

        hit = find_conflict(s.start, s.end, working.values(), same_staff(replacement_id), exclude_id=s.id)
        if hit is not None:
            blocked.append(
                BlockedItem(
                    session=s,
                    reason=f"{replacement.name} busy with {hit.client_id} at {hit.start.strftime('%b %d %I:%M%p')} ({hit.id}).",
                )
            )
            continue

        reassigned = s.model_copy(update={"staff_id": replacement_id})
        working[s.id] = reassigned
        succeeded.append(reassigned)

    target = replacement.name if replacement is not None else "new staff"
    message = _summary(
        f"reassigned to {target}", succeeded, blocked, "No sessions can be reassigned without conflicts"
    )
    return succeeded, blocked, message


def apply_batch(
    op: BatchOperation,
    selected: Sequence[Session],
    all_sessions: Iterable[Session],
    params: BatchParams,
    staff_lookup: Mapping[str, StaffAvailability],
) -> BatchResult:
    """
    Computes per-session outcomes for one batch action.

    all_sessions is the full schedule (selected ones included); it is copied,
    so the caller's sessions are never touched.
    """
    working = {s.id: s for s in all_sessions}

    if op == BatchOperation.cancel:
        succeeded, blocked, message = _cancel(selected, params)
    elif op == BatchOperation.move:
        succeeded, blocked, message = _move(selected, working, params)
    else:
        succeeded, blocked, message = _reassign(selected, working, params, staff_lookup)

    return BatchResult(operation=op, succeeded=succeeded, blocked=blocked, message=message)

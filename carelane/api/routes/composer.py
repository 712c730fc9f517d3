"""
composer routes

the appointment wizard over http.

flow (in swagger):
1) POST /composer/drafts                      -> new draft on the client step
2) PATCH /composer/drafts/{id}                -> send whatever the user picked
3) POST /composer/drafts/{id}/next            -> move on (422 + issues if the step is not done)
4) repeat 2-3 until the review step
5) GET /composer/drafts/{id}/review           -> the confirmation summary
6) POST /composer/drafts/{id}/commit          -> 201 with the new sessions, or 422 with why not

PATCH can be sent at any step and as often as you like. Going back never
clears anything.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from carelane.core.errors import InvalidSelectionError, UnknownEntityError, UnknownServiceCodeError
from carelane.core.state import get_context
from carelane.schemas.composer import (
    CommitResult,
    ComposerPatch,
    ComposerStatus,
    DurationOption,
    ReviewSummary,
    ServiceOption,
)
from carelane.schemas.scheduling import EligibilityCandidate, RecurrenceProjection, Severity
from carelane.services.composer import Composer
from carelane.services.scheduler import commit_draft, discard_draft, get_draft, open_draft

router = APIRouter(prefix="/composer/drafts")


class OpenDraftRequest(BaseModel):
    # "book similar": start from an existing session
    prefill_session_id: Optional[str] = None


def _composer(draft_id: str) -> Composer:
    try:
        return get_draft(get_context(), draft_id)
    except UnknownEntityError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Draft '{draft_id}' not found.",
        )


@router.post("", response_model=ComposerStatus, status_code=status.HTTP_201_CREATED)
def create_draft(req: Optional[OpenDraftRequest] = None) -> ComposerStatus:
    ctx = get_context()
    prefill = req.prefill_session_id if req else None
    try:
        composer = open_draft(ctx, prefill)
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return composer.status()


@router.get("/{draft_id}", response_model=ComposerStatus)
def read_draft(draft_id: str) -> ComposerStatus:
    return _composer(draft_id).status()


@router.patch("/{draft_id}", response_model=ComposerStatus)
def patch_draft(draft_id: str, patch: ComposerPatch) -> ComposerStatus:
    """
    Applies the sent fields, in wizard order.

    A selection the catalog rules out (unknown client, a service outside the
    chosen intent, a room for a home session) is a 422. Fields after the failing one
    are not applied.
    """
    composer = _composer(draft_id)
    with get_context().lock:
        try:
            composer.apply_patch(patch)
        except (InvalidSelectionError, UnknownEntityError, UnknownServiceCodeError) as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return composer.status()


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_draft(draft_id: str) -> None:
    try:
        discard_draft(get_context(), draft_id)
    except UnknownEntityError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Draft '{draft_id}' not found.",
        )


@router.post("/{draft_id}/next", response_model=ComposerStatus)
def next_step(draft_id: str) -> ComposerStatus:
    composer = _composer(draft_id)
    if not composer.advance():
        issues = composer.issues_for(composer.current_step)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": f"Step '{composer.current_step.value}' is not complete.",
                "issues": [i.model_dump(mode="json") for i in issues if i.severity == Severity.error],
            },
        )
    return composer.status()


@router.post("/{draft_id}/back", response_model=ComposerStatus)
def previous_step(draft_id: str) -> ComposerStatus:
    """Always allowed (a no-op on the first step). Keeps every selection."""
    composer = _composer(draft_id)
    composer.back()
    return composer.status()


@router.get("/{draft_id}/services", response_model=list[ServiceOption])
def service_options(draft_id: str) -> list[ServiceOption]:
    return _composer(draft_id).service_options()


@router.get("/{draft_id}/durations", response_model=list[DurationOption])
def duration_options(draft_id: str) -> list[DurationOption]:
    return _composer(draft_id).duration_options()


@router.get("/{draft_id}/staff", response_model=list[EligibilityCandidate])
def eligible_staff(draft_id: str) -> list[EligibilityCandidate]:
    """Credentialed staff, care team first, then least loaded. Empty is a valid answer."""
    return _composer(draft_id).eligible_staff()


@router.get("/{draft_id}/projection", response_model=RecurrenceProjection)
def projection(draft_id: str) -> RecurrenceProjection:
    return _composer(draft_id).projection()


@router.get("/{draft_id}/review", response_model=ReviewSummary)
def review(draft_id: str) -> ReviewSummary:
    composer = _composer(draft_id)
    try:
        return composer.review()
    except InvalidSelectionError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/{draft_id}/commit", response_model=CommitResult, status_code=status.HTTP_201_CREATED)
def commit(draft_id: str) -> CommitResult:
    """
    Creates the session(s). All or nothing.

    422 carries the same CommitResult shape (committed=false + issues), so a
    client can show the validation list without a second call.
    """
    result = commit_draft(get_context(), _composer(draft_id))
    if not result.committed:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=result.model_dump(mode="json"),
        )
    return result

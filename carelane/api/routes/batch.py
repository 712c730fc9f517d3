"""
batch routes

cancel / move / reassign a selection of sessions in one go.

preview first, then apply. both return the same shape: what would succeed,
what is blocked and why. apply only writes the succeeded part; blocked
sessions are left exactly as they were.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from carelane.core.errors import UnknownEntityError
from carelane.core.state import get_context
from carelane.schemas.scheduling import BatchOperation, BatchParams, BatchResult
from carelane.services.scheduler import run_batch

router = APIRouter(prefix="/batch")


class BatchRequest(BaseModel):
    operation: BatchOperation
    session_ids: list[str] = Field(min_length=1)
    params: BatchParams = Field(default_factory=BatchParams)


def _run(req: BatchRequest, apply: bool) -> BatchResult:
    try:
        return run_batch(get_context(), req.operation, req.session_ids, req.params, apply=apply)
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/preview", response_model=BatchResult)
def preview(req: BatchRequest) -> BatchResult:
    """Computes the outcome without touching the schedule."""
    return _run(req, apply=False)


@router.post("/apply", response_model=BatchResult)
def apply(req: BatchRequest) -> BatchResult:
    return _run(req, apply=True)

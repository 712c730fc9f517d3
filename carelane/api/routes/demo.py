"""
demo routes

this file exists for one reason:
making the project easy to try for other people (teammates, mentors, reviewers).

swagger (/docs) is awesome, but an empty scheduler is not much to look at,
and typing a whole roster by hand is a chore.

so:
- GET /demo/payload returns the sample practice as json
- POST /demo/load puts it into the in-memory state in one call

hardcoded dates are a trap because they go stale fast. by default the sample
sessions are moved into the current week. pass fresh=false to get the
original 2024-04-08 week, with the clock pinned to 08:00 that Monday so
nothing looks "in the past".

this is demo and developer-experience focused.
we are NOT calling any real EHRs or using PHI.
"""

from fastapi import APIRouter

from carelane.core.state import get_context
from carelane.services.composer import today_for
from carelane.services.demo import DemoDataset, demo_dataset, load_dataset

router = APIRouter(prefix="/demo")


def _dataset(fresh: bool) -> DemoDataset:
    ctx = get_context()
    anchor = today_for(ctx) if fresh else None
    return demo_dataset(anchor, ctx.settings.timezone)


@router.get("/payload", response_model=DemoDataset)
def demo_payload(fresh: bool = True) -> DemoDataset:
    """
    returns the sample practice.

    how to use (in swagger):
    1) call GET /demo/payload and look around
    2) or just call POST /demo/load and go straight to /timeline
    """
    return _dataset(fresh)


@router.post("/load", response_model=DemoDataset)
def demo_load(fresh: bool = True) -> DemoDataset:
    """
    replaces the current state with the sample practice.
    open composer drafts are dropped.
    """
    dataset = _dataset(fresh)
    load_dataset(get_context(), dataset, pin_clock=not fresh)
    return dataset

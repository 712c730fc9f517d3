"""
catalog routes

read-only views of the static domain catalog:
- intents (what a session is for)
- service templates (billing codes + who can deliver them, and where)
- location cards (modality -> POS code, EVV rule)

the composer filters these per client; these endpoints return the full lists.
"""

from typing import Optional

from fastapi import APIRouter

from carelane.schemas.scheduling import Intent, IntentCategory, LocationCard, ServiceTemplate
from carelane.services.catalog import INTENTS, LOCATION_CARDS, services_for_intent

router = APIRouter(prefix="/catalog")


@router.get("/intents", response_model=list[IntentCategory])
def list_intents() -> list[IntentCategory]:
    return INTENTS


@router.get("/services", response_model=list[ServiceTemplate])
def list_services(intent: Optional[Intent] = None) -> list[ServiceTemplate]:
    """All service templates, or only the ones for `intent`."""
    return services_for_intent(intent)


@router.get("/locations", response_model=list[LocationCard])
def list_locations() -> list[LocationCard]:
    return LOCATION_CARDS

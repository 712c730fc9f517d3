"""
domain catalog

static reference data the rest of the scheduling core looks things up in:
- intent categories (why are we scheduling this session)
- service templates (billing code, default duration, who may deliver it, where)
- location cards (point of service + whether EVV applies)

none of this is mutated at runtime. if a practice adds a code, it goes here.
"""

from __future__ import annotations

from typing import Optional

from carelane.core.errors import UnknownServiceCodeError
from carelane.schemas.scheduling import (
    Intent,
    IntentCategory,
    LocationCard,
    Modality,
    ServiceTemplate,
)

INTENTS: list[IntentCategory] = [
    IntentCategory(id=Intent.ongoing, label="Ongoing ABA therapy", description="Weekly prescription hours"),
    IntentCategory(
        id=Intent.assessment,
        label="Assessment / Reassessment",
        description="Initial or renewal authorizations",
    ),
    IntentCategory(
        id=Intent.parent,
        label="Parent training",
        description="Caregiver collaboration, telehealth friendly",
    ),
    IntentCategory(id=Intent.supervision, label="Supervision", description="BCBA oversight & fidelity checks"),
    IntentCategory(
        id=Intent.other,
        label="Other / Non-billable",
        description="Team syncs, transition planning",
    ),
]

SERVICE_CATALOG: list[ServiceTemplate] = [
    ServiceTemplate(
        code="97153",
        intent=Intent.ongoing,
        label="Direct ABA therapy",
        description="RBT-led sessions with BCBA oversight, 2-hr default.",
        default_duration_minutes=120,
        allowed_credentials=frozenset({"RBT", "BCBA"}),
        allowed_modalities=frozenset({Modality.center, Modality.home}),
        recommended_frequency="4x / week · 2 hr",
        billable=True,
    ),
    ServiceTemplate(
        code="97155",
        intent=Intent.supervision,
        label="Adaptive behavior treatment w/ protocol modification",
        description="BCBA intensive supervision or complex case work.",
        default_duration_minutes=90,
        allowed_credentials=frozenset({"BCBA"}),
        allowed_modalities=frozenset({Modality.center, Modality.home, Modality.school}),
        recommended_frequency="2x / week · 1.5 hr",
        billable=True,
    ),
    ServiceTemplate(
        code="97156",
        intent=Intent.parent,
        label="Family adaptive behavior treatment guidance",
        description="Parent/caregiver coaching, often telehealth.",
        default_duration_minutes=60,
        allowed_credentials=frozenset({"BCBA"}),
        allowed_modalities=frozenset({Modality.telehealth, Modality.center}),
        recommended_frequency="1x / week · 1 hr",
        billable=True,
    ),
    ServiceTemplate(
        code="97151",
        intent=Intent.assessment,
        label="ABA assessment / reevaluation",
        description="Initial or periodic re-assessments, BCBA only.",
        default_duration_minutes=150,
        allowed_credentials=frozenset({"BCBA"}),
        allowed_modalities=frozenset({Modality.center, Modality.home}),
        recommended_frequency="As prescribed",
        billable=True,
    ),
    ServiceTemplate(
        code="TEAM-HUDDLE",
        intent=Intent.other,
        label="Care team sync (non-billable)",
        description="Internal collaboration, progress, travel planning.",
        default_duration_minutes=45,
        allowed_credentials=frozenset({"BCBA", "RBT"}),
        allowed_modalities=frozenset({Modality.center, Modality.telehealth}),
        recommended_frequency="Ad-hoc",
        billable=False,
    ),
]

LOCATION_CARDS: list[LocationCard] = [
    LocationCard(
        modality=Modality.center,
        label="Center",
        pos="POS 11 · Office",
        description="Center pods with room inventory.",
        evv=False,
    ),
    LocationCard(
        modality=Modality.home,
        label="Home / Community",
        pos="POS 12 · Home",
        description="Client address, EVV pin + caregiver signature.",
        evv=True,
    ),
    LocationCard(
        modality=Modality.school,
        label="School",
        pos="POS 03 · School",
        description="District contacts + resource rooms.",
        evv=False,
    ),
    LocationCard(
        modality=Modality.telehealth,
        label="Telehealth",
        pos="POS 02 · Telehealth",
        description="Secure session link generated at booking.",
        evv=False,
    ),
]

_SERVICES_BY_CODE: dict[str, ServiceTemplate] = {s.code: s for s in SERVICE_CATALOG}
_LOCATIONS_BY_MODALITY: dict[Modality, LocationCard] = {c.modality: c for c in LOCATION_CARDS}


def get_service(code: str) -> ServiceTemplate:
    """
    Looks up a service template by billing code.

    An unknown code here means some session or draft references a code that
    was never in the catalog, so this raises instead of returning None.
    """
    try:
        return _SERVICES_BY_CODE[code]
    except KeyError:
        raise UnknownServiceCodeError(code) from None


def has_service(code: str) -> bool:
    return code in _SERVICES_BY_CODE


def services_for_intent(intent: Optional[Intent]) -> list[ServiceTemplate]:
    """No intent chosen yet means every service is on the table."""
    if intent is None:
        return list(SERVICE_CATALOG)
    return [s for s in SERVICE_CATALOG if s.intent == intent]


def location_card(modality: Modality) -> LocationCard:
    return _LOCATIONS_BY_MODALITY[modality]


def infer_modality(location_text: str) -> Modality:
    """
    Guesses the default care setting from a client's recorded location.

    Only seeds the composer's location step; the scheduler can override it there.
    """
    text = location_text.lower()
    if "home" in text:
        return Modality.home
    if "telehealth" in text or "virtual" in text:
        return Modality.telehealth
    if "school" in text:
        return Modality.school
    return Modality.center

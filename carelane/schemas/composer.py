"""
composer draft + status models

The draft is one typed object with one section per wizard step. Each step only
ever writes its own section, and navigating back never clears anything, so a
user can hop between steps without losing what they entered.
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from carelane.schemas.scheduling import (
    AuthorizationStatus,
    Intent,
    Modality,
    RecurrenceProjection,
    ServiceTemplate,
    Session,
    ValidationIssue,
    Weekday,
)


class ComposerStep(str, Enum):
    client = "client"
    service = "service"
    schedule = "schedule"
    staff = "staff"
    location = "location"
    recurrence = "recurrence"
    review = "review"


STEP_ORDER: list[ComposerStep] = list(ComposerStep)


class ClientSection(BaseModel):
    client_id: Optional[str] = None


class ServiceSection(BaseModel):
    intent: Optional[Intent] = None
    service_code: Optional[str] = None


class ScheduleSection(BaseModel):
    day: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = None


class StaffSection(BaseModel):
    staff_id: Optional[str] = None


class LocationSection(BaseModel):
    modality: Modality = Modality.center
    room_id: Optional[str] = None
    auto_telehealth_link: bool = True


class RecurrenceSection(BaseModel):
    enabled: bool = False
    weekdays: list[Weekday] = Field(default_factory=list)
    occurrences: int = 4


class ComposerDraft(BaseModel):
    client: ClientSection = Field(default_factory=ClientSection)
    service: ServiceSection = Field(default_factory=ServiceSection)
    schedule: ScheduleSection = Field(default_factory=ScheduleSection)
    staff: StaffSection = Field(default_factory=StaffSection)
    location: LocationSection = Field(default_factory=LocationSection)
    recurrence: RecurrenceSection = Field(default_factory=RecurrenceSection)
    notes: Optional[str] = None


class ComposerPatch(BaseModel):
    """
    One PATCH against a draft. Only the fields sent are applied, in wizard
    order, so sending the same patch twice leaves the draft the same.
    """

    client_id: Optional[str] = None
    intent: Optional[Intent] = None
    service_code: Optional[str] = None
    day: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = None
    staff_id: Optional[str] = None
    modality: Optional[Modality] = None
    room_id: Optional[str] = None
    auto_telehealth_link: Optional[bool] = None
    recurrence_enabled: Optional[bool] = None
    recurrence_weekdays: Optional[list[Weekday]] = None
    recurrence_occurrences: Optional[int] = None
    notes: Optional[str] = None


class StepState(BaseModel):
    step: ComposerStep
    label: str
    helper: str
    complete: bool
    issues: list[ValidationIssue] = Field(default_factory=list)


class ComposerStatus(BaseModel):
    draft_id: str
    current_step: ComposerStep
    step_index: int
    can_proceed: bool
    can_go_back: bool
    can_commit: bool
    steps: list[StepState]
    draft: ComposerDraft


class ServiceOption(BaseModel):
    service: ServiceTemplate
    covered: bool


class DurationOption(BaseModel):
    minutes: int
    disabled: bool
    reason: Optional[str] = None


class ReviewSummary(BaseModel):
    client_id: str
    client_name: str
    service_code: str
    service_label: str
    intent: Intent
    billable: bool
    start: datetime
    end: datetime
    duration_minutes: int
    modality: Modality
    pos: str
    room_name: Optional[str] = None
    evv_required: bool
    staff_id: str
    staff_name: str
    payer: Optional[str] = None
    remaining_minutes: Optional[int] = None
    remaining_after_minutes: Optional[int] = None
    authorization: AuthorizationStatus
    recurrence: RecurrenceProjection
    recurrence_weekdays: list[Weekday] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    notes: Optional[str] = None


class CommitResult(BaseModel):
    committed: bool
    sessions: list[Session] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)
    series_id: Optional[str] = None

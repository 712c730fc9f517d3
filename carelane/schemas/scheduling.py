from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class Intent(str, Enum):
    ongoing = "ongoing"
    assessment = "assessment"
    parent = "parent"
    supervision = "supervision"
    other = "other"


class Modality(str, Enum):
    center = "Center"
    home = "Home"
    school = "School"
    telehealth = "Telehealth"


class SessionStatus(str, Enum):
    scheduled = "Scheduled"
    in_progress = "In Progress"
    completed = "Completed"
    pending_validation = "Pending Validation"
    cancelled = "Cancelled"


class ClientStatus(str, Enum):
    active = "Active"
    waitlist = "Waitlist"
    paused = "Paused"


class RoomType(str, Enum):
    therapy = "Therapy"
    group = "Group"
    telehealth = "Telehealth"
    admin = "Admin"


class Weekday(str, Enum):
    mon = "Mon"
    tue = "Tue"
    wed = "Wed"
    thu = "Thu"
    fri = "Fri"
    sat = "Sat"
    sun = "Sun"

    @property
    def index(self) -> int:
        """Same numbering as date.weekday(): Monday is 0."""
        return list(Weekday).index(self)

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class UtilizationBand(str, Enum):
    underbooked = "Underbooked"
    healthy = "Healthy"
    overbooked = "Overbooked"


# -------------------------
# Catalog
# -------------------------


class IntentCategory(BaseModel):
    id: Intent
    label: str
    description: str


class ServiceTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    intent: Intent
    label: str
    description: str
    default_duration_minutes: int = Field(gt=0)
    allowed_credentials: frozenset[str]
    allowed_modalities: frozenset[Modality]
    recommended_frequency: str
    billable: bool


class LocationCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    modality: Modality
    label: str
    pos: str
    description: str
    evv: bool


# -------------------------
# Roster + authorizations
# -------------------------


class AuthorizationBalance(BaseModel):
    client_id: str
    payer: str
    authorized_minutes: int = Field(ge=0)
    remaining_minutes: int = Field(ge=0)
    expires_on: date
    allowed_service_codes: set[str] = Field(default_factory=set)

    @model_validator(mode="after")
    def _remaining_within_authorized(self) -> "AuthorizationBalance":
        if self.remaining_minutes > self.authorized_minutes:
            raise ValueError("remaining_minutes cannot exceed authorized_minutes")
        return self

    @computed_field
    @property
    def used_minutes(self) -> int:
        return self.authorized_minutes - self.remaining_minutes


class StaffAvailability(BaseModel):
    staff_id: str
    name: str
    credential: str
    location: str
    load_minutes_this_week: int = Field(default=0, ge=0)
    target_minutes_this_week: int = Field(gt=0)
    travel_buffer_minutes: int = Field(default=0, ge=0)
    evv_required: bool = False

    @computed_field
    @property
    def utilization_ratio(self) -> float:
        return self.load_minutes_this_week / self.target_minutes_this_week

    @computed_field
    @property
    def utilization_band(self) -> UtilizationBand:
        ratio = self.utilization_ratio
        if ratio < 0.75:
            return UtilizationBand.underbooked
        if ratio <= 0.95:
            return UtilizationBand.healthy
        return UtilizationBand.overbooked


class Client(BaseModel):
    id: str
    name: str
    age: Optional[int] = None
    # free text as the intake team records it ("North Loop In-home", "Telehealth - CST")
    location: str
    status: ClientStatus = ClientStatus.active
    care_team_staff_ids: set[str] = Field(default_factory=set)


class Room(BaseModel):
    id: str
    name: str
    location: str
    capacity: int = Field(default=1, ge=1)
    type: RoomType = RoomType.therapy


# -------------------------
# Sessions
# -------------------------


class Session(BaseModel):
    id: str
    client_id: str
    staff_id: str
    room_id: Optional[str] = None
    start: datetime
    end: datetime
    service_code: str
    modality: Modality
    status: SessionStatus = SessionStatus.scheduled
    evv_required: bool = False
    notes: Optional[str] = None

    # occurrences committed from one recurrence share this
    series_id: Optional[str] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "Session":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class SessionPatch(BaseModel):
    """The only fields that may change after a session exists."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    staff_id: Optional[str] = None
    room_id: Optional[str] = None
    status: Optional[SessionStatus] = None
    notes: Optional[str] = None


# -------------------------
# Derived / reported structures
# -------------------------


class IssueKind(str, Enum):
    missing = "missing"
    ineligible = "ineligible"
    authorization_exceeded = "authorization_exceeded"
    schedule_constraint = "schedule_constraint"
    conflict = "conflict"
    already_terminal = "already_terminal"


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class ValidationIssue(BaseModel):
    """
    One user-correctable problem, shown next to the control that caused it.

    error blocks the step (or the commit), warning is advisory.
    """

    kind: IssueKind
    severity: Severity = Severity.error
    message: str
    step: Optional[str] = None
    session_id: Optional[str] = None


class ConflictKind(str, Enum):
    staff = "staff"
    client = "client"
    room = "room"


class ConflictReport(BaseModel):
    kind: ConflictKind
    session: Session
    reason: str


class EligibilityCandidate(BaseModel):
    staff: StaffAvailability
    load_ratio: float
    assigned: bool
    conflict: bool = False
    conflict_reason: Optional[str] = None
    load_status: str


class RecurrenceProjection(BaseModel):
    recurring: bool
    instance_count: int
    projected_minutes: int
    remaining_minutes: Optional[int] = None
    exceeds_authorization: bool = False
    overage_minutes: int = 0


class LayoutGeometry(BaseModel):
    session_id: str
    lane_id: str
    left_fraction: float = Field(ge=0.0, le=1.0)
    width_fraction: float = Field(gt=0.0, le=1.0)
    stack_index: int = 0
    stack_count: int = 1
    stack_offset_px: int = 0
    band: str


class BatchOperation(str, Enum):
    cancel = "cancel"
    move = "move"
    reassign = "reassign"


class BatchParams(BaseModel):
    reason: str = "Staff unavailable"
    offset_minutes: int = 30
    replacement_staff_id: Optional[str] = None


class BlockedItem(BaseModel):
    session: Session
    reason: str


class BatchResult(BaseModel):
    operation: BatchOperation
    succeeded: list[Session]
    blocked: list[BlockedItem]
    message: str
    applied: bool = False


class AuthorizationStatus(BaseModel):
    """Short badge for a session's funding: 'Auth OK', 'Low auth', 'No units', ..."""

    label: str
    severity: str
    helper: str


class DragResult(BaseModel):
    """Outcome of dropping a session card. A rejected drop keeps the prior geometry."""

    accepted: bool
    session: Session
    geometry: Optional[LayoutGeometry] = None
    conflict: Optional[ConflictReport] = None
    reason: Optional[str] = None


class TimelineView(BaseModel):
    window_start: date
    horizon_days: int
    lanes: list[str]
    geometry: list[LayoutGeometry]
    now_fraction: Optional[float] = None

"""
schedule composer (the appointment wizard)

Steps, in order, no skipping:

    client -> service -> schedule -> staff -> location -> recurrence -> review

Each step has a completion predicate. The predicates are plain functions
(check_client, check_schedule, ...) over the draft and the scheduling context.
They return a list of ValidationIssue: severity "error" blocks Next,
"warning" is shown but does not block.

Navigation rules:
- next only when the current step has no errors
- back always works and never clears downstream selections
- commit only from review, and only when every step is clean

Two authorization policies live here and are intentionally separate:
- schedule step: a single session longer than the remaining minutes is a hard error
- recurrence step: a series projected past the remaining minutes is a warning
  (a hard error only when settings.block_recurrence_overage is on)

The composer never writes to the session store. services.scheduler does the
commit under the context lock.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from carelane.core.errors import InvalidSelectionError
from carelane.core.state import SchedulingContext
from carelane.schemas.composer import (
    STEP_ORDER,
    ComposerDraft,
    ComposerPatch,
    ComposerStatus,
    ComposerStep,
    DurationOption,
    ReviewSummary,
    ServiceOption,
    StepState,
)
from carelane.schemas.scheduling import (
    AuthorizationBalance,
    Client,
    ClientStatus,
    EligibilityCandidate,
    Intent,
    IssueKind,
    Modality,
    RecurrenceProjection,
    ServiceTemplate,
    Session,
    SessionStatus,
    Severity,
    StaffAvailability,
    ValidationIssue,
    Weekday,
)
from carelane.services.authorization import authorization_status, covers_service
from carelane.services.catalog import get_service, infer_modality, location_card, services_for_intent
from carelane.services.conflicts import check_session_conflicts
from carelane.services.eligibility import NO_ELIGIBLE_STAFF, is_credentialed, resolve_eligible_staff
from carelane.services.recurrence import expand_occurrences, project

logger = logging.getLogger(__name__)

STEP_META: dict[ComposerStep, tuple[str, str]] = {
    ComposerStep.client: ("Client", "Load context + auths"),
    ComposerStep.service: ("Intent & service", "Filter by coverage"),
    ComposerStep.schedule: ("When", "Respect clinic hours & auth"),
    ComposerStep.staff: ("Team", "Surface eligible staff"),
    ComposerStep.location: ("Location", "POS, EVV rules"),
    ComposerStep.recurrence: ("Recurrence", "Align w/ plan"),
    ComposerStep.review: ("Review & confirm", "Show validations"),
}

# a draft can outlive a roster or client list replaced through /state
STALE_CLIENT = "Selected client is no longer on file."
STALE_STAFF = "Selected clinician is no longer on the roster."
STALE_ROOM = "Selected room is no longer available."


def _issue(
    kind: IssueKind,
    step: ComposerStep,
    message: str,
    severity: Severity = Severity.error,
) -> ValidationIssue:
    return ValidationIssue(kind=kind, severity=severity, step=step.value, message=message)


# -------------------------
# Draft lookups (pure helpers)
# -------------------------


def draft_client(draft: ComposerDraft, ctx: SchedulingContext) -> Optional[Client]:
    cid = draft.client.client_id
    return ctx.clients.get(cid) if cid else None


def draft_authorization(draft: ComposerDraft, ctx: SchedulingContext) -> Optional[AuthorizationBalance]:
    cid = draft.client.client_id
    return ctx.authorizations.get(cid) if cid else None


def draft_service(draft: ComposerDraft) -> Optional[ServiceTemplate]:
    code = draft.service.service_code
    return get_service(code) if code else None


def draft_staff(draft: ComposerDraft, ctx: SchedulingContext) -> Optional[StaffAvailability]:
    sid = draft.staff.staff_id
    return ctx.staff.get(sid) if sid else None


def session_window(draft: ComposerDraft, tz: str) -> Optional[tuple[datetime, datetime]]:
    """First session's (start, end) in the practice time zone, once date, time and duration are set."""
    s = draft.schedule
    if s.day is None or s.start_time is None or not s.duration_minutes:
        return None
    start = datetime.combine(s.day, s.start_time, tzinfo=ZoneInfo(tz))
    return start, start + timedelta(minutes=s.duration_minutes)


def outside_clinic_hours(draft: ComposerDraft, open_hour: int, close_hour: int) -> bool:
    s = draft.schedule
    if s.start_time is None or not s.duration_minutes:
        return False
    start_minutes = s.start_time.hour * 60 + s.start_time.minute
    end_minutes = start_minutes + s.duration_minutes
    return start_minutes < open_hour * 60 or end_minutes > close_hour * 60


def recurrence_projection(draft: ComposerDraft, ctx: SchedulingContext) -> RecurrenceProjection:
    auth = draft_authorization(draft, ctx)
    remaining = auth.remaining_minutes if auth else None
    duration = draft.schedule.duration_minutes or 0
    r = draft.recurrence
    if not r.enabled:
        return project(duration, [], 1, remaining)
    return project(duration, r.weekdays, r.occurrences, remaining)


def today_for(ctx: SchedulingContext) -> date:
    now = ctx.clock.now()
    if now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(ctx.settings.timezone))
    return now.date()


# -------------------------
# Completion predicates
# -------------------------


def check_client(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.client
    client = draft_client(draft, ctx)
    if client is None and draft.client.client_id:
        return [_issue(IssueKind.ineligible, step, STALE_CLIENT)]
    if client is None:
        return [_issue(IssueKind.missing, step, "Select a client to load authorizations and care team.")]

    if draft_authorization(draft, ctx) is None:
        message = (
            "No active authorization detected; schedule will be non-billable."
            if client.status == ClientStatus.active
            else "Client is not billable yet."
        )
        return [_issue(IssueKind.authorization_exceeded, step, message, Severity.warning)]
    return []


def check_service(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.service
    issues: list[ValidationIssue] = []

    if draft_client(draft, ctx) is None:
        issues.append(_issue(IssueKind.missing, step, "Select a client first to see intents and services."))
    if draft.service.intent is None:
        issues.append(_issue(IssueKind.missing, step, "Pick what this session is for."))

    service = draft_service(draft)
    if service is None:
        issues.append(_issue(IssueKind.missing, step, "Pick the service that fits coverage."))
        return issues

    if draft.service.intent is not None and service.intent != draft.service.intent:
        issues.append(
            _issue(IssueKind.ineligible, step, f"{service.code} is not a {draft.service.intent.value} service.")
        )

    auth = draft_authorization(draft, ctx)
    if service.billable and auth is not None and not covers_service(auth, service.code):
        issues.append(
            _issue(
                IssueKind.authorization_exceeded,
                step,
                f"{service.code} is not on the {auth.payer} authorization.",
                Severity.warning,
            )
        )
    return issues


def check_schedule(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.schedule
    s = draft.schedule
    cfg = ctx.settings
    issues: list[ValidationIssue] = []

    if s.day is None:
        issues.append(_issue(IssueKind.missing, step, "Pick a date."))
    if not s.duration_minutes:
        issues.append(_issue(IssueKind.missing, step, "Pick a duration."))
    if s.start_time is None:
        issues.append(_issue(IssueKind.missing, step, "Pick a start time."))

    if s.day is not None:
        if s.day < today_for(ctx):
            issues.append(_issue(IssueKind.schedule_constraint, step, "Date is in the past. Choose today or later."))
        if s.day.weekday() in cfg.closed_weekdays:
            issues.append(
                _issue(
                    IssueKind.schedule_constraint,
                    step,
                    f"Clinic is closed on {s.day.strftime('%A')}s. Choose another date.",
                )
            )

    if outside_clinic_hours(draft, cfg.clinic_open_hour, cfg.clinic_close_hour):
        issues.append(
            _issue(
                IssueKind.schedule_constraint,
                step,
                f"Session must start after {cfg.clinic_open_hour}:00 and end by {cfg.clinic_close_hour}:00.",
            )
        )

    auth = draft_authorization(draft, ctx)
    if auth is not None and s.duration_minutes and s.duration_minutes > auth.remaining_minutes:
        issues.append(
            _issue(
                IssueKind.authorization_exceeded,
                step,
                f"{s.duration_minutes} min exceeds the {auth.remaining_minutes} min remaining on the authorization.",
            )
        )
    if auth is not None and s.day is not None and s.day > auth.expires_on:
        issues.append(
            _issue(
                IssueKind.authorization_exceeded,
                step,
                f"Authorization expires {auth.expires_on.isoformat()}, before this session.",
                Severity.warning,
            )
        )
    return issues


def check_staff(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.staff
    service = draft_service(draft)
    staff = draft_staff(draft, ctx)

    if staff is None and draft.staff.staff_id:
        return [_issue(IssueKind.ineligible, step, STALE_STAFF)]
    if staff is None:
        pool = resolve_eligible_staff(draft_client(draft, ctx), service, ctx.staff.values())
        message = "Choose the delivering clinician." if pool else NO_ELIGIBLE_STAFF
        kind = IssueKind.missing if pool else IssueKind.ineligible
        return [_issue(kind, step, message)]

    issues: list[ValidationIssue] = []
    if not is_credentialed(staff, service):
        issues.append(
            _issue(IssueKind.ineligible, step, f"{staff.name} ({staff.credential}) cannot deliver {service.code}.")
        )

    window = session_window(draft, ctx.settings.timezone)
    if window is not None:
        conflict = check_session_conflicts(window[0], window[1], ctx.sessions.list(), staff_id=staff.staff_id)
        if conflict is not None:
            issues.append(_issue(IssueKind.conflict, step, conflict.reason))

    if staff.utilization_ratio > 1.0:
        issues.append(
            _issue(IssueKind.ineligible, step, f"{staff.name} is over capacity this week.", Severity.warning)
        )
    return issues


def check_location(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.location
    loc = draft.location
    service = draft_service(draft)
    issues: list[ValidationIssue] = []

    if service is not None and loc.modality not in service.allowed_modalities:
        issues.append(
            _issue(IssueKind.ineligible, step, f"{loc.modality.value} is not offered for {service.code}.")
        )

    if loc.modality == Modality.center and ctx.center_rooms() and not loc.room_id:
        issues.append(_issue(IssueKind.missing, step, "Choose a center room."))

    window = session_window(draft, ctx.settings.timezone)
    if loc.room_id and window is not None:
        conflict = check_session_conflicts(window[0], window[1], ctx.sessions.list(), room_id=loc.room_id)
        if conflict is not None:
            issues.append(_issue(IssueKind.conflict, step, conflict.reason))
    return issues


def check_recurrence(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.recurrence
    r = draft.recurrence
    if not r.enabled:
        return []

    issues: list[ValidationIssue] = []
    if not r.weekdays:
        issues.append(_issue(IssueKind.missing, step, "Pick at least one weekday for the series."))
    if r.occurrences < 1:
        issues.append(_issue(IssueKind.missing, step, "A series needs at least one week."))

    projection = recurrence_projection(draft, ctx)
    if projection.exceeds_authorization:
        severity = Severity.error if ctx.settings.block_recurrence_overage else Severity.warning
        issues.append(
            _issue(
                IssueKind.authorization_exceeded,
                step,
                f"{projection.instance_count} instances · {projection.projected_minutes} min projected · "
                f"Exceeds auth by {projection.overage_minutes} min",
                severity,
            )
        )
    return issues


def check_review(draft: ComposerDraft, ctx: SchedulingContext) -> list[ValidationIssue]:
    step = ComposerStep.review
    missing = [
        label
        for label, value in (
            ("client", draft.client.client_id),
            ("service", draft.service.service_code),
            ("date", draft.schedule.day),
            ("start time", draft.schedule.start_time),
            ("clinician", draft.staff.staff_id),
        )
        if not value
    ]
    if missing:
        return [_issue(IssueKind.missing, step, f"Still missing: {', '.join(missing)}.")]

    stale = []
    if draft_client(draft, ctx) is None:
        stale.append(STALE_CLIENT)
    if draft_staff(draft, ctx) is None:
        stale.append(STALE_STAFF)
    if draft.location.room_id and draft.location.room_id not in ctx.rooms:
        stale.append(STALE_ROOM)
    return [_issue(IssueKind.ineligible, step, message) for message in stale]


STEP_CHECKS: dict[ComposerStep, Callable[[ComposerDraft, SchedulingContext], list[ValidationIssue]]] = {
    ComposerStep.client: check_client,
    ComposerStep.service: check_service,
    ComposerStep.schedule: check_schedule,
    ComposerStep.staff: check_staff,
    ComposerStep.location: check_location,
    ComposerStep.recurrence: check_recurrence,
    ComposerStep.review: check_review,
}


def has_errors(issues: list[ValidationIssue]) -> bool:
    return any(i.severity == Severity.error for i in issues)


# -------------------------
# The state machine
# -------------------------


class Composer:
    """
    One open appointment draft.

    Selection methods mirror what the user clicks. They raise only when the
    selection itself is impossible (unknown id, service outside the chosen
    intent). Everything else is left to the step predicates.
    """

    def __init__(self, ctx: SchedulingContext, draft_id: Optional[str] = None):
        self.ctx = ctx
        self.id = draft_id or f"DRF-{uuid4().hex[:8]}"
        self.draft = ComposerDraft()
        self.step_index = 0

    # ---- lookups ----

    @property
    def current_step(self) -> ComposerStep:
        return STEP_ORDER[self.step_index]

    @property
    def client(self) -> Optional[Client]:
        return draft_client(self.draft, self.ctx)

    @property
    def authorization(self) -> Optional[AuthorizationBalance]:
        return draft_authorization(self.draft, self.ctx)

    @property
    def service(self) -> Optional[ServiceTemplate]:
        return draft_service(self.draft)

    def window(self) -> Optional[tuple[datetime, datetime]]:
        return session_window(self.draft, self.ctx.settings.timezone)

    # ---- selections ----

    def select_client(self, client_id: str) -> None:
        client = self.ctx.client(client_id)
        if client.id == self.draft.client.client_id:
            return
        self.draft.client.client_id = client.id

        # only a default for the location step, the user can still change it there
        inferred = infer_modality(client.location)
        self.draft.location.modality = inferred
        if inferred != Modality.center:
            self.draft.location.room_id = None

    def select_intent(self, intent: Intent) -> None:
        if self.draft.service.intent != intent:
            self.draft.service.service_code = None
        self.draft.service.intent = intent

    def select_service(self, code: str) -> None:
        service = get_service(code)
        intent = self.draft.service.intent
        if intent is not None and service.intent != intent:
            raise InvalidSelectionError(f"Service {code} is not offered for intent '{intent.value}'.")

        self.draft.service.intent = service.intent
        self.draft.service.service_code = service.code

        auth = self.authorization
        remaining = auth.remaining_minutes if auth is not None else service.default_duration_minutes
        self.draft.schedule.duration_minutes = min(service.default_duration_minutes, remaining)

    def set_day(self, day: date) -> None:
        self.draft.schedule.day = day
        if not self.draft.recurrence.weekdays:
            self.draft.recurrence.weekdays = [Weekday.of(day)]

    def set_start_time(self, start_time: time) -> None:
        self.draft.schedule.start_time = start_time

    def set_duration(self, minutes: int) -> None:
        if minutes <= 0:
            raise InvalidSelectionError("Duration must be a positive number of minutes.")
        self.draft.schedule.duration_minutes = minutes

    def select_staff(self, staff_id: str) -> None:
        self.draft.staff.staff_id = self.ctx.staff_member(staff_id).staff_id

    def select_location(self, modality: Modality) -> None:
        self.draft.location.modality = modality
        if modality != Modality.center:
            self.draft.location.room_id = None

    def select_room(self, room_id: str) -> None:
        room = self.ctx.room(room_id)
        if self.draft.location.modality != Modality.center:
            raise InvalidSelectionError("Rooms are only booked for Center sessions.")
        self.draft.location.room_id = room.id

    def set_recurrence(
        self,
        enabled: Optional[bool] = None,
        weekdays: Optional[list[Weekday]] = None,
        occurrences: Optional[int] = None,
    ) -> None:
        r = self.draft.recurrence
        if enabled is not None:
            r.enabled = enabled
        if weekdays is not None:
            # keep Mon..Sun order and drop repeats
            r.weekdays = [d for d in Weekday if d in set(weekdays)]
        if occurrences is not None:
            r.occurrences = max(1, min(self.ctx.settings.max_recurrence_occurrences, occurrences))

    def set_notes(self, notes: Optional[str]) -> None:
        self.draft.notes = notes or None

    def apply_patch(self, patch: ComposerPatch) -> None:
        sent = patch.model_fields_set

        if "client_id" in sent and patch.client_id:
            self.select_client(patch.client_id)
        if "intent" in sent and patch.intent is not None:
            self.select_intent(patch.intent)
        if "service_code" in sent and patch.service_code:
            self.select_service(patch.service_code)
        if "day" in sent and patch.day is not None:
            self.set_day(patch.day)
        if "start_time" in sent and patch.start_time is not None:
            self.set_start_time(patch.start_time)
        if "duration_minutes" in sent and patch.duration_minutes is not None:
            self.set_duration(patch.duration_minutes)
        if "staff_id" in sent and patch.staff_id:
            self.select_staff(patch.staff_id)
        if "modality" in sent and patch.modality is not None:
            self.select_location(patch.modality)
        if "room_id" in sent and patch.room_id:
            self.select_room(patch.room_id)
        if "auto_telehealth_link" in sent and patch.auto_telehealth_link is not None:
            self.draft.location.auto_telehealth_link = patch.auto_telehealth_link
        if sent & {"recurrence_enabled", "recurrence_weekdays", "recurrence_occurrences"}:
            self.set_recurrence(patch.recurrence_enabled, patch.recurrence_weekdays, patch.recurrence_occurrences)
        if "notes" in sent:
            self.set_notes(patch.notes)

    def prefill_from(self, session: Session) -> None:
        """'Book similar': seed a new draft from an existing session. Lands on the client step."""
        self.select_client(session.client_id)
        self.select_service(session.service_code)
        local = session.start.astimezone(ZoneInfo(self.ctx.settings.timezone))
        self.set_day(local.date())
        self.set_start_time(local.time())
        self.set_duration(session.duration_minutes)
        if session.staff_id in self.ctx.staff:
            self.select_staff(session.staff_id)
        self.select_location(session.modality)
        if session.room_id and session.room_id in self.ctx.rooms and session.modality == Modality.center:
            self.select_room(session.room_id)

    # ---- options shown by the steps ----

    def service_options(self) -> list[ServiceOption]:
        """Services for the chosen intent, covered-by-authorization ones first."""
        auth = self.authorization
        options = [
            ServiceOption(service=s, covered=covers_service(auth, s.code))
            for s in services_for_intent(self.draft.service.intent)
        ]
        options.sort(key=lambda o: not o.covered)
        return options

    def duration_options(self) -> list[DurationOption]:
        auth = self.authorization
        options = []
        for minutes in self.ctx.settings.duration_options:
            disabled = auth is not None and minutes > auth.remaining_minutes
            reason = f"Only {auth.remaining_minutes} min remain on the authorization." if disabled else None
            options.append(DurationOption(minutes=minutes, disabled=disabled, reason=reason))
        return options

    def eligible_staff(self) -> list[EligibilityCandidate]:
        return resolve_eligible_staff(
            self.client,
            self.service,
            self.ctx.staff.values(),
            proposed_window=self.window(),
            sessions=self.ctx.sessions.list(),
        )

    def projection(self) -> RecurrenceProjection:
        return recurrence_projection(self.draft, self.ctx)

    # ---- predicates + navigation ----

    def issues_for(self, step: ComposerStep) -> list[ValidationIssue]:
        return STEP_CHECKS[step](self.draft, self.ctx)

    def is_complete(self, step: ComposerStep) -> bool:
        return not has_errors(self.issues_for(step))

    def can_proceed(self) -> bool:
        return self.step_index < len(STEP_ORDER) - 1 and self.is_complete(self.current_step)

    def can_commit(self) -> bool:
        return self.current_step == ComposerStep.review and all(self.is_complete(step) for step in STEP_ORDER)

    def advance(self) -> bool:
        """Moves to the next step if the current one is complete. Returns whether it moved."""
        if not self.can_proceed():
            return False
        self.step_index += 1
        logger.debug("Draft %s advanced to %s", self.id, self.current_step.value)
        return True

    def back(self) -> bool:
        if self.step_index == 0:
            return False
        self.step_index -= 1
        return True

    def status(self) -> ComposerStatus:
        steps = []
        for step in STEP_ORDER:
            issues = self.issues_for(step)
            label, helper = STEP_META[step]
            steps.append(StepState(step=step, label=label, helper=helper, complete=not has_errors(issues), issues=issues))

        return ComposerStatus(
            draft_id=self.id,
            current_step=self.current_step,
            step_index=self.step_index,
            can_proceed=self.can_proceed(),
            can_go_back=self.step_index > 0,
            can_commit=self.can_commit(),
            steps=steps,
            draft=self.draft,
        )

    # ---- review + commit material ----

    def review(self) -> ReviewSummary:
        missing = check_review(self.draft, self.ctx)
        window = self.window()
        if missing or window is None:
            raise InvalidSelectionError(missing[0].message if missing else "Pick a duration.")

        client = self.client
        service = self.service
        staff = draft_staff(self.draft, self.ctx)
        auth = self.authorization
        loc = self.draft.location
        card = location_card(loc.modality)
        duration = self.draft.schedule.duration_minutes

        room_name = None
        if loc.modality == Modality.center and loc.room_id:
            room_name = self.ctx.rooms[loc.room_id].name

        warnings = [
            issue
            for step in STEP_ORDER
            for issue in self.issues_for(step)
            if issue.severity == Severity.warning
        ]

        return ReviewSummary(
            client_id=client.id,
            client_name=client.name,
            service_code=service.code,
            service_label=service.label,
            intent=service.intent,
            billable=service.billable,
            start=window[0],
            end=window[1],
            duration_minutes=duration,
            modality=loc.modality,
            pos=card.pos,
            room_name=room_name,
            evv_required=card.evv,
            staff_id=staff.staff_id,
            staff_name=staff.name,
            payer=auth.payer if auth else None,
            remaining_minutes=auth.remaining_minutes if auth else None,
            remaining_after_minutes=auth.remaining_minutes - duration if auth else None,
            authorization=authorization_status(auth, window[1], duration),
            recurrence=self.projection(),
            recurrence_weekdays=self.draft.recurrence.weekdays if self.draft.recurrence.enabled else [],
            warnings=warnings,
            notes=self.draft.notes,
        )

    def occurrence_windows(self) -> list[tuple[datetime, datetime]]:
        window = self.window()
        if window is None:
            return []
        r = self.draft.recurrence
        duration = self.draft.schedule.duration_minutes
        if not r.enabled:
            return [window]
        return expand_occurrences(window[0], duration, r.weekdays, r.occurrences)

    def commit_issues(self, existing: list[Session]) -> list[ValidationIssue]:
        """
        Everything that would stop a commit right now, plus warnings.

        existing is the current schedule. Every occurrence of a series is
        checked; one conflict rejects the whole draft (no partial commits).
        """
        if self.current_step != ComposerStep.review:
            return [_issue(IssueKind.missing, self.current_step, "Review the draft before committing.")]

        issues = [issue for step in STEP_ORDER for issue in self.issues_for(step)]
        if has_errors(issues):
            return issues

        d = self.draft
        room_id = d.location.room_id if d.location.modality == Modality.center else None
        for start, end in self.occurrence_windows():
            conflict = check_session_conflicts(
                start,
                end,
                existing,
                staff_id=d.staff.staff_id,
                client_id=d.client.client_id,
                room_id=room_id,
            )
            if conflict is not None:
                issues.append(
                    _issue(
                        IssueKind.conflict,
                        ComposerStep.review,
                        f"Occurrence on {start.date().isoformat()}: {conflict.reason}",
                    )
                )
        return issues

    def build_sessions(self) -> list[Session]:
        d = self.draft
        windows = self.occurrence_windows()
        series_id = f"SER-{uuid4().hex[:8]}" if len(windows) > 1 else None
        card = location_card(d.location.modality)
        room_id = d.location.room_id if d.location.modality == Modality.center else None

        return [
            Session(
                id=f"APT-{uuid4().hex[:8]}",
                client_id=d.client.client_id,
                staff_id=d.staff.staff_id,
                room_id=room_id,
                start=start,
                end=end,
                service_code=d.service.service_code,
                modality=d.location.modality,
                status=SessionStatus.scheduled,
                evv_required=card.evv,
                notes=d.notes,
                series_id=series_id,
            )
            for start, end in windows
        ]

"""Tests for the session store, the scheduling context and the authorization ledger."""

from datetime import date, timedelta

import pytest
from conftest import at, make_session
from pydantic import ValidationError

from carelane.core.errors import UnknownEntityError, UnknownServiceCodeError
from carelane.core.state import SessionStore, get_context, reset_context
from carelane.schemas.scheduling import AuthorizationBalance, SessionPatch, SessionStatus, UtilizationBand
from carelane.services.authorization import AuthorizationLedger, authorization_status


def balance(remaining: int, authorized: int = 720, expires: date = date(2024, 6, 30)) -> AuthorizationBalance:
    return AuthorizationBalance(
        client_id="CLI-9081",
        payer="Beacon Health",
        authorized_minutes=authorized,
        remaining_minutes=remaining,
        expires_on=expires,
        allowed_service_codes={"97153"},
    )


class TestSessionStore:
    def test_append_and_get(self, monday):
        store = SessionStore()
        s = store.append(make_session("APT-1", at(monday, 9)))
        assert store.get("APT-1") == s
        assert len(store) == 1

    def test_unknown_service_code_fails_loudly(self, monday):
        with pytest.raises(UnknownServiceCodeError):
            SessionStore().append(make_session("APT-1", at(monday, 9), service_code="99999"))

    def test_duplicate_id_rejected(self, monday):
        store = SessionStore([make_session("APT-1", at(monday, 9))])
        with pytest.raises(ValueError):
            store.append(make_session("APT-1", at(monday, 13)))

    def test_missing_session(self):
        with pytest.raises(UnknownEntityError):
            SessionStore().get("APT-404")

    def test_update_revalidates(self, monday):
        store = SessionStore([make_session("APT-1", at(monday, 9), 60)])

        updated = store.update("APT-1", SessionPatch(status=SessionStatus.cancelled))
        assert updated.status == SessionStatus.cancelled
        assert updated.duration_minutes == 60

        with pytest.raises(ValidationError):
            store.update("APT-1", SessionPatch(end=at(monday, 8)))

    def test_end_must_follow_start(self, monday):
        with pytest.raises(ValidationError):
            make_session("APT-1", at(monday, 9), 0)


class TestContext:
    def test_lookups_raise_for_unknown_ids(self, ctx):
        with pytest.raises(UnknownEntityError):
            ctx.client("CLI-404")
        with pytest.raises(UnknownEntityError):
            ctx.staff_member("STF-404")

    def test_center_rooms(self, ctx):
        assert {r.id for r in ctx.center_rooms()} == {"RM-101", "RM-301"}

    def test_load_never_negative(self, ctx):
        ctx.adjust_load("STF-112", -100_000)
        assert ctx.staff["STF-112"].load_minutes_this_week == 0

    def test_utilization_band(self, ctx):
        assert ctx.staff["STF-112"].utilization_band == UtilizationBand.healthy
        assert ctx.staff["STF-041"].utilization_band == UtilizationBand.underbooked

    def test_reset_replaces_singleton(self):
        before = get_context()
        after = reset_context()
        assert after is get_context()
        assert after is not before


class TestAuthorizationLedger:
    def test_remaining_cannot_exceed_authorized(self):
        with pytest.raises(ValidationError):
            balance(remaining=800)

    def test_debit_clamps_at_zero(self):
        ledger = AuthorizationLedger([balance(100)])
        assert ledger.debit("CLI-9081", 250).remaining_minutes == 0

    def test_credit_clamps_at_authorized(self):
        ledger = AuthorizationLedger([balance(700)])
        assert ledger.credit("CLI-9081", 60).remaining_minutes == 720

    def test_debit_without_authorization_is_noop(self):
        assert AuthorizationLedger().debit("CLI-404", 60) is None

    @pytest.mark.parametrize(
        ("auth", "label"),
        [
            (None, "No auth"),
            (balance(245, expires=date(2024, 4, 1)), "Auth expired"),
            (balance(0), "No units"),
            (balance(200), "Low auth"),
            (balance(245), "Auth OK"),
        ],
    )
    def test_status_badge(self, monday, auth, label):
        end = at(monday, 11)
        assert authorization_status(auth, end, 120).label == label

    def test_used_minutes(self):
        assert balance(245).used_minutes == 475


class TestDemoDataset:
    def test_shifted_to_anchor_week(self):
        from carelane.services.demo import demo_dataset

        anchor = date(2026, 10, 21)
        data = demo_dataset(anchor)
        first = min(s.start for s in data.sessions)
        assert first.date() == date(2026, 10, 19)
        assert first.hour == 9
        assert data.authorizations[0].expires_on - date(2024, 6, 30) == timedelta(days=(date(2026, 10, 19) - date(2024, 4, 8)).days)

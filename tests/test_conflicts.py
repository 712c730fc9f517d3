"""Tests for the conflict detector."""

from datetime import timedelta

from conftest import at, make_session

from carelane.schemas.scheduling import ConflictKind, SessionStatus
from carelane.services.conflicts import (
    check_session_conflicts,
    find_conflict,
    intervals_overlap,
    same_staff,
)


class TestIntervalsOverlap:
    """Half-open [start, end) overlap."""

    def test_overlap_is_symmetric(self, monday):
        a = (at(monday, 9), at(monday, 11))
        b = (at(monday, 10), at(monday, 12))
        assert intervals_overlap(*a, *b) is True
        assert intervals_overlap(*b, *a) is True

    def test_back_to_back_does_not_overlap(self, monday):
        """One session ending at 11:00 and the next starting at 11:00 are fine."""
        assert intervals_overlap(at(monday, 9), at(monday, 11), at(monday, 11), at(monday, 12)) is False
        assert intervals_overlap(at(monday, 11), at(monday, 12), at(monday, 9), at(monday, 11)) is False

    def test_containment_overlaps(self, monday):
        assert intervals_overlap(at(monday, 9), at(monday, 12), at(monday, 10), at(monday, 10, 30)) is True


class TestFindConflict:
    def test_cancelled_sessions_hold_no_time(self, monday):
        cancelled = make_session("APT-1", at(monday, 9), 120, status=SessionStatus.cancelled)
        assert find_conflict(at(monday, 9), at(monday, 10), [cancelled], same_staff("STF-112")) is None

    def test_excluded_session_is_ignored(self, monday):
        existing = make_session("APT-1", at(monday, 9), 120)
        hit = find_conflict(at(monday, 9), at(monday, 10), [existing], same_staff("STF-112"), exclude_id="APT-1")
        assert hit is None

    def test_returns_first_overlapping_session(self, monday):
        first = make_session("APT-1", at(monday, 9), 60)
        second = make_session("APT-2", at(monday, 10), 60)
        hit = find_conflict(at(monday, 9, 30), at(monday, 10, 30), [first, second], same_staff("STF-112"))
        assert hit.id == "APT-1"


class TestCheckSessionConflicts:
    def test_staff_conflict_reported_first(self, monday):
        existing = make_session("APT-1", at(monday, 9), 120, room_id="RM-101")
        report = check_session_conflicts(
            at(monday, 10),
            at(monday, 11),
            [existing],
            staff_id="STF-112",
            client_id="CLI-9081",
            room_id="RM-101",
        )
        assert report.kind == ConflictKind.staff
        assert report.session.id == "APT-1"
        assert "APT-1" in report.reason

    def test_client_conflict_with_other_staff(self, monday):
        existing = make_session("APT-1", at(monday, 9), 120, staff_id="STF-031")
        report = check_session_conflicts(
            at(monday, 10), at(monday, 11), [existing], staff_id="STF-112", client_id="CLI-9081"
        )
        assert report.kind == ConflictKind.client

    def test_room_conflict_between_different_people(self, monday):
        existing = make_session("APT-1", at(monday, 9), 120, staff_id="STF-031", client_id="CLI-087", room_id="RM-101")
        report = check_session_conflicts(
            at(monday, 9, 30),
            at(monday, 10),
            [existing],
            staff_id="STF-112",
            client_id="CLI-9081",
            room_id="RM-101",
        )
        assert report.kind == ConflictKind.room

    def test_no_conflict_in_free_slot(self, monday):
        existing = make_session("APT-1", at(monday, 9), 120)
        start = existing.end
        assert check_session_conflicts(start, start + timedelta(hours=1), [existing], staff_id="STF-112") is None

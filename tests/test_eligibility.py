"""Tests for the eligibility resolver."""

from conftest import at

from carelane.schemas.scheduling import Client, StaffAvailability
from carelane.services.catalog import get_service
from carelane.services.eligibility import load_status, resolve_eligible_staff


def staff(staff_id: str, credential: str, load: int, target: int = 600) -> StaffAvailability:
    return StaffAvailability(
        staff_id=staff_id,
        name=f"Staff {staff_id}",
        credential=credential,
        location="Austin - North Center",
        load_minutes_this_week=load,
        target_minutes_this_week=target,
    )


class TestResolveEligibleStaff:
    def test_filters_by_credential(self):
        """97155 is BCBA only."""
        roster = [staff("S1", "RBT", 0), staff("S2", "BCBA", 300)]
        result = resolve_eligible_staff(None, get_service("97155"), roster)
        assert [c.staff.staff_id for c in result] == ["S2"]

    def test_care_team_first_then_load(self):
        """Assigned staff lead even when busier; the rest go by load ratio."""
        roster = [staff("S1", "RBT", 100), staff("S2", "RBT", 500), staff("S3", "RBT", 50)]
        client = Client(id="C1", name="Client", location="Center", care_team_staff_ids={"S2"})

        result = resolve_eligible_staff(client, get_service("97153"), roster)

        assert [c.staff.staff_id for c in result] == ["S2", "S3", "S1"]
        assert result[0].assigned is True
        assert all(not c.assigned for c in result[1:])

    def test_ties_break_on_staff_id(self):
        roster = [staff("S9", "RBT", 300), staff("S1", "RBT", 300)]
        result = resolve_eligible_staff(None, get_service("97153"), roster)
        assert [c.staff.staff_id for c in result] == ["S1", "S9"]

    def test_over_capacity_kept_but_last(self):
        roster = [staff("S1", "RBT", 700), staff("S2", "RBT", 100)]
        result = resolve_eligible_staff(None, get_service("97153"), roster)
        assert [c.staff.staff_id for c in result] == ["S2", "S1"]
        assert result[-1].load_status == "Over capacity"

    def test_no_eligible_staff_is_empty_list(self):
        roster = [staff("S1", "RBT", 0)]
        assert resolve_eligible_staff(None, get_service("97151"), roster) == []

    def test_conflict_flag_from_proposed_window(self, ctx, monday):
        """STF-112 is booked 9-11 on the demo Monday."""
        window = (at(monday, 10), at(monday, 11))
        result = resolve_eligible_staff(
            ctx.client("CLI-9081"),
            get_service("97153"),
            ctx.staff.values(),
            proposed_window=window,
            sessions=ctx.sessions.list(),
        )
        by_id = {c.staff.staff_id: c for c in result}
        assert by_id["STF-112"].conflict is True
        assert "CLI-9081" in by_id["STF-112"].conflict_reason
        assert by_id["STF-031"].conflict is False


class TestLoadStatus:
    def test_bands(self):
        assert load_status(0.5) == "Healthy load"
        assert load_status(0.8) == "Healthy load"
        assert load_status(0.85) == "Tight day"
        assert load_status(1.2) == "Over capacity"

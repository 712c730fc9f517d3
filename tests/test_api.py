"""Tests for the HTTP routes."""

from datetime import timedelta

from carelane.services.demo import DEMO_WEEK

TUESDAY = (DEMO_WEEK + timedelta(days=1)).isoformat()


def open_and_fill(api, **overrides):
    draft = api.post("/composer/drafts").json()
    body = {
        "client_id": "CLI-9081",
        "intent": "ongoing",
        "service_code": "97153",
        "day": TUESDAY,
        "start_time": "09:00:00",
        "staff_id": "STF-112",
        "modality": "Center",
        "room_id": "RM-101",
    }
    body.update(overrides)
    response = api.patch(f"/composer/drafts/{draft['draft_id']}", json=body)
    assert response.status_code == 200
    return response.json()


def walk_to_review(api, draft_id):
    for _ in range(6):
        response = api.post(f"/composer/drafts/{draft_id}/next")
        assert response.status_code == 200, response.json()
    return response.json()


class TestHealthAndCatalog:
    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_services_filtered_by_intent(self, api):
        response = api.get("/catalog/services", params={"intent": "parent"})
        assert [s["code"] for s in response.json()] == ["97156"]

    def test_locations(self, api):
        cards = {c["modality"]: c for c in api.get("/catalog/locations").json()}
        assert cards["Home"]["evv"] is True
        assert cards["Center"]["pos"].startswith("POS 11")


class TestStateRoutes:
    def test_get_state(self, api):
        data = api.get("/state").json()
        assert len(data["sessions"]) == 3
        assert {c["id"] for c in data["clients"]} >= {"CLI-9081", "CLI-087"}

    def test_duplicate_ids_rejected(self, api):
        room = {"id": "RM-1", "name": "Room", "location": "Austin - North Center"}
        response = api.post("/state/rooms", json=[room, room])
        assert response.status_code == 422

    def test_authorization_for_unknown_client(self, api):
        auth = {
            "client_id": "CLI-404",
            "payer": "Beacon Health",
            "authorized_minutes": 100,
            "remaining_minutes": 50,
            "expires_on": "2024-06-30",
        }
        assert api.post("/state/authorizations", json=[auth]).status_code == 422

    def test_utilization_least_loaded_first(self, api):
        ids = [s["staff_id"] for s in api.get("/state/staff/utilization").json()]
        assert ids[0] == "STF-134"

    def test_reset(self, api):
        assert api.post("/state/reset").status_code == 204
        assert api.get("/state").json()["sessions"] == []


class TestSessionRoutes:
    def test_get_missing_session(self, api):
        assert api.get("/sessions/APT-404").status_code == 404

    def test_bounds_without_offset_are_practice_time(self, api):
        monday = DEMO_WEEK.isoformat()
        response = api.get("/sessions", params={"start": f"{monday}T00:00:00", "end": f"{monday}T12:00:00"})
        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == ["APT-100245"]

    def test_drag_rejected_keeps_session(self, api):
        response = api.post(
            "/sessions/APT-100245/drag",
            json={
                "pixel_offset": 360,
                "lane_width": 5040,
                "window_start": DEMO_WEEK.isoformat(),
                "horizon_days": 7,
                "lane_id": "STF-210",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is False
        assert data["conflict"]["kind"] == "staff"

    def test_timeline(self, api):
        response = api.get("/timeline", params={"start": DEMO_WEEK.isoformat(), "lane": ["STF-112", "STF-210"]})
        assert response.status_code == 200
        data = response.json()
        assert data["lanes"] == ["STF-112", "STF-210"]
        assert [g["session_id"] for g in data["geometry"]] == ["APT-100245", "APT-100246"]

    def test_timeline_unknown_lane(self, api):
        assert api.get("/timeline", params={"lane": "STF-404"}).status_code == 404


class TestComposerRoutes:
    def test_next_blocked_until_client_chosen(self, api):
        draft = api.post("/composer/drafts")
        assert draft.status_code == 201
        draft_id = draft.json()["draft_id"]

        response = api.post(f"/composer/drafts/{draft_id}/next")
        assert response.status_code == 422
        assert response.json()["detail"]["issues"][0]["kind"] == "missing"

    def test_book_direct_therapy(self, api):
        draft = open_and_fill(api)
        status = walk_to_review(api, draft["draft_id"])
        assert status["current_step"] == "review"
        assert status["can_commit"] is True

        review = api.get(f"/composer/drafts/{draft['draft_id']}/review").json()
        assert review["remaining_after_minutes"] == 125

        response = api.post(f"/composer/drafts/{draft['draft_id']}/commit")
        assert response.status_code == 201
        [session] = response.json()["sessions"]
        assert session["status"] == "Scheduled"

        assert api.get(f"/composer/drafts/{draft['draft_id']}").status_code == 404
        assert len(api.get("/sessions").json()) == 4

    def test_commit_before_review_is_422(self, api):
        draft = open_and_fill(api)
        response = api.post(f"/composer/drafts/{draft['draft_id']}/commit")
        assert response.status_code == 422
        assert response.json()["detail"]["committed"] is False

    def test_service_outside_intent_is_422(self, api):
        draft = api.post("/composer/drafts").json()
        response = api.patch(
            f"/composer/drafts/{draft['draft_id']}", json={"intent": "parent", "service_code": "97153"}
        )
        assert response.status_code == 422

    def test_eligible_staff(self, api):
        draft = open_and_fill(api)
        ranked = api.get(f"/composer/drafts/{draft['draft_id']}/staff").json()
        assert ranked[0]["staff"]["staff_id"] == "STF-031"
        assert ranked[0]["assigned"] is True

    def test_prefill_and_delete(self, api):
        response = api.post("/composer/drafts", json={"prefill_session_id": "APT-100245"})
        assert response.status_code == 201
        draft = response.json()
        assert draft["draft"]["client"]["client_id"] == "CLI-9081"

        assert api.delete(f"/composer/drafts/{draft['draft_id']}").status_code == 204
        assert api.delete(f"/composer/drafts/{draft['draft_id']}").status_code == 404

    def test_prefill_unknown_session(self, api):
        response = api.post("/composer/drafts", json={"prefill_session_id": "APT-404"})
        assert response.status_code == 404

    def test_review_after_clinician_leaves_roster(self, api):
        draft = open_and_fill(api)
        walk_to_review(api, draft["draft_id"])

        roster = [s for s in api.get("/state").json()["staff"] if s["staff_id"] != "STF-112"]
        assert api.post("/state/staff", json=roster).status_code == 200

        response = api.get(f"/composer/drafts/{draft['draft_id']}/review")
        assert response.status_code == 422
        assert "no longer on the roster" in response.json()["detail"]


class TestBatchRoutes:
    def test_preview_then_apply(self, api):
        body = {"operation": "cancel", "session_ids": ["APT-100245", "APT-100246"], "params": {"reason": "Weather"}}

        preview = api.post("/batch/preview", json=body).json()
        assert preview["applied"] is False
        assert preview["message"] == "2 sessions cancelled (Weather)"
        assert api.get("/sessions/APT-100245").json()["status"] == "Pending Validation"

        applied = api.post("/batch/apply", json=body).json()
        assert applied["applied"] is True
        assert api.get("/sessions/APT-100245").json()["status"] == "Cancelled"

    def test_unknown_session_is_404(self, api):
        response = api.post("/batch/preview", json={"operation": "cancel", "session_ids": ["APT-404"]})
        assert response.status_code == 404


class TestDemoRoutes:
    def test_load_original_week_pins_clock(self, api):
        api.post("/state/reset")
        response = api.post("/demo/load", params={"fresh": False})
        assert response.status_code == 200

        state = api.get("/state").json()
        assert len(state["sessions"]) == 3
        assert state["now"].startswith("2024-04-08T08:00:00")

    def test_payload_has_roster(self, api):
        data = api.get("/demo/payload").json()
        assert len(data["staff"]) == 6
        assert len(data["authorizations"]) == 3

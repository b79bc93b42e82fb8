import datetime
from unittest.mock import AsyncMock, patch

import pytest
from beanie import PydanticObjectId

from internhub.models import LogbookEntry, LogbookReview, UserActivity

from conftest import auth_headers

START = datetime.date(2026, 1, 5)


@pytest.fixture(autouse=True)
def no_push():
    with patch("internhub.services.fcm.send_to_user", new=AsyncMock(return_value=False)), patch(
        "internhub.services.fcm.notify_users", new=AsyncMock(return_value={})
    ):
        yield


def body(day: datetime.date) -> dict:
    return {"date": day.isoformat(), "title": f"Work {day}", "content": "Did work", "hours_worked": 7.5}


async def submit_week(client, intern_user, days: int = 5) -> list[dict]:
    out = []
    for i in range(days):
        resp = await client.post(
            "/api/logbooks/", json=body(START + datetime.timedelta(days=i)), headers=auth_headers(intern_user)
        )
        assert resp.status_code == 201, resp.text
        out.append(resp.json())
    return out


class TestCreate:
    async def test_create_and_duplicate(self, client, intern_user, intern):
        resp = await client.post("/api/logbooks/", json=body(START), headers=auth_headers(intern_user))
        assert resp.status_code == 201
        assert resp.json()["week_number"] == 1

        dup = await client.post("/api/logbooks/", json=body(START), headers=auth_headers(intern_user))
        assert dup.status_code == 409
        assert dup.json()["existing_logbook"]["id"] == resp.json()["logbook"]["id"]

    async def test_invalid_hours(self, client, intern_user, intern):
        resp = await client.post(
            "/api/logbooks/", json={**body(START), "hours_worked": 30}, headers=auth_headers(intern_user)
        )
        assert resp.status_code == 422

    async def test_requires_auth(self, client):
        resp = await client.post("/api/logbooks/", json=body(START))
        assert resp.status_code == 401

    async def test_supervisor_forbidden(self, client, supervisor, intern):
        resp = await client.post(
            "/api/logbooks/", json={**body(START), "intern_id": str(intern.id)}, headers=auth_headers(supervisor)
        )
        assert resp.status_code == 403


class TestWeeklySheet:
    async def test_fifth_day_returns_pdf_url_and_download(self, client, intern_user, intern):
        results = await submit_week(client, intern_user)
        assert results[-1]["pdf_generated"] is True

        resp = await client.get("/api/logbooks/weeks/1/pdf", headers=auth_headers(intern_user))
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")

    async def test_generate_incomplete_week_is_400(self, client, intern_user, intern):
        await submit_week(client, intern_user, days=3)
        resp = await client.post("/api/logbooks/weeks/1/pdf", headers=auth_headers(intern_user))
        assert resp.status_code == 400
        assert resp.json()["missing_days"] == ["thursday", "friday"]

    async def test_download_missing_is_404(self, client, intern_user, intern):
        resp = await client.get("/api/logbooks/weeks/3/pdf", headers=auth_headers(intern_user))
        assert resp.status_code == 404

    async def test_supervisor_cannot_generate_sheet(self, client, intern_user, intern, supervisor):
        await submit_week(client, intern_user)
        resp = await client.post(
            f"/api/logbooks/weeks/1/pdf?intern_id={intern.id}", headers=auth_headers(supervisor)
        )
        assert resp.status_code == 403

    async def test_supervisor_downloads_specialty_sheet(self, client, intern_user, intern, supervisor):
        await submit_week(client, intern_user)
        resp = await client.get(f"/api/logbooks/weeks/1/pdf?intern_id={intern.id}", headers=auth_headers(supervisor))
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")

    async def test_week_status(self, client, intern_user, intern):
        await submit_week(client, intern_user, days=2)
        resp = await client.get("/api/logbooks/week-status?week_number=1", headers=auth_headers(intern_user))
        data = resp.json()
        assert data["entries_count"] == 2
        assert data["days_filled"] == ["monday", "tuesday"]
        assert data["is_complete"] is False


class TestMaintenance:
    async def test_review_updates_status_and_history(self, client, intern_user, intern, supervisor):
        [created] = await submit_week(client, intern_user, days=1)
        entry_id = created["logbook"]["id"]

        resp = await client.post(
            f"/api/logbooks/{entry_id}/reviews",
            json={"status": "needs_revision", "feedback": "More detail please"},
            headers=auth_headers(supervisor),
        )
        assert resp.status_code == 201
        resp = await client.post(
            f"/api/logbooks/{entry_id}/reviews", json={"status": "approved"}, headers=auth_headers(supervisor)
        )
        assert resp.status_code == 201

        entry = await LogbookEntry.get(PydanticObjectId(entry_id))
        assert entry.status.value == "approved"
        assert entry.reviewed_by == str(supervisor.id)
        assert await LogbookReview.find(LogbookReview.logbook_id == entry_id).count() == 2

    async def test_review_survives_push_failure(self, client, intern_user, intern, supervisor):
        [created] = await submit_week(client, intern_user, days=1)
        entry_id = created["logbook"]["id"]

        with patch(
            "internhub.services.fcm.send_to_user", new=AsyncMock(side_effect=RuntimeError("fcm transport down"))
        ):
            resp = await client.post(
                f"/api/logbooks/{entry_id}/reviews", json={"status": "approved"}, headers=auth_headers(supervisor)
            )

        assert resp.status_code == 201
        entry = await LogbookEntry.get(PydanticObjectId(entry_id))
        assert entry.status.value == "approved"
        assert await LogbookReview.find(LogbookReview.logbook_id == entry_id).count() == 1

    async def test_update_date_recomputes_week(self, client, intern_user, intern):
        [created] = await submit_week(client, intern_user, days=1)
        entry_id = created["logbook"]["id"]

        resp = await client.put(
            f"/api/logbooks/{entry_id}", json={"date": "2026-01-20"}, headers=auth_headers(intern_user)
        )
        assert resp.status_code == 200
        assert resp.json()["week_number"] == 3

    async def test_update_to_taken_date_conflicts(self, client, intern_user, intern):
        results = await submit_week(client, intern_user, days=2)
        resp = await client.put(
            f"/api/logbooks/{results[1]['logbook']['id']}",
            json={"date": START.isoformat()},
            headers=auth_headers(intern_user),
        )
        assert resp.status_code == 409

    async def test_delete_cascades_reviews(self, client, intern_user, intern, admin):
        [created] = await submit_week(client, intern_user, days=1)
        entry_id = created["logbook"]["id"]
        await client.post(f"/api/logbooks/{entry_id}/reviews", json={"status": "approved"}, headers=auth_headers(admin))

        resp = await client.delete(f"/api/logbooks/{entry_id}", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert await LogbookEntry.get(PydanticObjectId(entry_id)) is None
        assert await LogbookReview.find(LogbookReview.logbook_id == entry_id).count() == 0
        activities = await UserActivity.find(UserActivity.action == "Logbook deleted").to_list()
        assert [a.user_id for a in activities] == [str(intern_user.id)]

    async def test_recompute_week_numbers(self, client, intern, admin):
        await LogbookEntry(
            intern_id=str(intern.id), date=datetime.date(2026, 1, 19), title="t", content="c", week_number=None
        ).insert()
        await LogbookEntry(
            intern_id=str(intern.id), date=datetime.date(2026, 1, 6), title="t", content="c", week_number=1
        ).insert()

        resp = await client.post("/api/logbooks/recompute-weeks", headers=auth_headers(admin))
        assert resp.json()["updated"] == 1
        fixed = await LogbookEntry.find_one(LogbookEntry.week_number == 3)
        assert fixed is not None

    async def test_export_csv(self, client, intern_user, intern, admin):
        await submit_week(client, intern_user, days=2)
        resp = await client.get("/api/logbooks/export?format=csv", headers=auth_headers(admin))
        assert resp.status_code == 200
        lines = resp.text.strip().splitlines()
        assert lines[0].startswith("Date,Week,Intern")
        assert len(lines) == 3
        assert "Ivy Intern" in lines[1]

    async def test_supervisor_lists_only_own_specialty(self, client, intern_user, intern, supervisor):
        await submit_week(client, intern_user, days=1)
        await LogbookEntry(intern_id="other-intern", date=START, title="t", content="c", week_number=1).insert()

        resp = await client.get("/api/logbooks/", headers=auth_headers(supervisor))
        assert resp.status_code == 200
        assert {e["intern_id"] for e in resp.json()} == {str(intern.id)}

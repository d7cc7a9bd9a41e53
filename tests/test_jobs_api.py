"""Indexing job CRUD endpoints"""

import pytest

from app.api.dependencies import get_broadcaster
from app.main import app

from tests.conftest import USER_ID

JOBS_URL = "/api/v1/indexing/jobs"
JOBS = "indb_indexing_jobs"


class RecordingBroadcaster:
    def __init__(self):
        self.calls = []

    async def broadcast_job_list_update(self, user_id, action, job):
        self.calls.append(("job_list_update", user_id, action, job))
        return 1

    async def broadcast_job_update(self, job_id, user_id, status, data=None):
        self.calls.append(("job_update", job_id, user_id, status))
        return 1


@pytest.fixture
def recorder(client):
    recorder = RecordingBroadcaster()
    app.dependency_overrides[get_broadcaster] = lambda: recorder
    return recorder


def job_row(job_id, name, created_at, user_id=USER_ID, **fields):
    row = {
        "id": job_id,
        "user_id": user_id,
        "name": name,
        "type": "manual",
        "schedule_type": "one-time",
        "status": "pending",
        "source_data": {"urls": ["https://example.com"]},
        "total_urls": 1,
        "created_at": created_at,
    }
    row.update(fields)
    return row


class TestCreateJob:
    def test_manual_job(self, client, fake_db, recorder):
        response = client.post(JOBS_URL, json={
            "name": "Blog push",
            "type": "manual",
            "urls": ["https://example.com/a", "https://example.com/b", "https://example.com/a"],
        })

        assert response.status_code == 201
        job = response.json()["job"]
        assert job["status"] == "pending"
        assert job["total_urls"] == 2
        assert job["source_data"] == {"urls": ["https://example.com/a", "https://example.com/b"]}
        assert job["schedule_type"] == "one-time"
        assert job["processed_urls"] == job["successful_urls"] == job["failed_urls"] == 0
        assert job["next_run_at"] is None

        stored = fake_db.find(JOBS, id=job["id"])[0]
        assert stored["user_id"] == USER_ID
        assert recorder.calls[0][:3] == ("job_list_update", USER_ID, "created")

    def test_sitemap_job_with_schedule(self, client, recorder):
        response = client.post(JOBS_URL, json={
            "name": "Nightly sitemap",
            "type": "sitemap",
            "sitemapUrl": "https://example.com/sitemap.xml",
            "scheduleType": "daily",
            "startTime": "2026-11-01T02:00:00Z",
        })

        assert response.status_code == 201
        job = response.json()["job"]
        assert job["source_data"] == {"sitemap_url": "https://example.com/sitemap.xml"}
        assert job["total_urls"] == 0
        assert job["schedule_type"] == "daily"
        assert job["next_run_at"].startswith("2026-11-01T02:00:00")

    def test_one_time_ignores_start_time(self, client, recorder):
        response = client.post(JOBS_URL, json={
            "name": "Once",
            "type": "manual",
            "urls": ["https://example.com"],
            "startTime": "2026-11-01T02:00:00Z",
        })
        assert response.json()["job"]["next_run_at"] is None

    def test_invalid_urls_rejected(self, client, fake_db, recorder):
        response = client.post(JOBS_URL, json={
            "name": "Bad",
            "type": "manual",
            "urls": ["https://ok.com", "javascript-alert"],
        })

        assert response.status_code == 400
        assert response.json()["code"] == "validation"
        assert fake_db.rows(JOBS) == []
        assert recorder.calls == []

    @pytest.mark.parametrize("body", [
        {"name": "x", "type": "rss", "urls": ["https://a.com"]},
        {"name": "x", "type": "manual", "urls": ["https://a.com"], "scheduleType": "yearly"},
        {"name": "x/y", "type": "manual", "urls": ["https://a.com"]},
        {"name": "x", "type": "sitemap"},
        {"name": "x", "type": "manual", "urls": []},
    ])
    def test_rejected_bodies(self, client, recorder, body):
        assert client.post(JOBS_URL, json=body).status_code == 400


class TestListJobs:
    @pytest.fixture(autouse=True)
    def jobs(self, fake_db):
        fake_db.seed(
            JOBS,
            job_row("j1", "Alpha crawl", "2026-10-01T00:00:00Z"),
            job_row("j2", "Beta crawl", "2026-10-02T00:00:00Z", status="completed"),
            job_row("j3", "Gamma", "2026-10-03T00:00:00Z", schedule_type="daily"),
            job_row("j4", "Not mine", "2026-10-04T00:00:00Z", user_id="someone-else"),
        )

    def test_newest_first_own_jobs_only(self, client):
        body = client.get(JOBS_URL).json()

        assert [j["id"] for j in body["jobs"]] == ["j3", "j2", "j1"]
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}

    def test_pagination(self, client):
        body = client.get(JOBS_URL, params={"page": 2, "limit": 2}).json()

        assert [j["id"] for j in body["jobs"]] == ["j1"]
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}

    def test_limits_clamped(self, client):
        body = client.get(JOBS_URL, params={"page": 0, "limit": 500}).json()
        assert body["pagination"]["page"] == 1
        assert body["pagination"]["limit"] == 100

    def test_search_is_case_insensitive(self, client):
        body = client.get(JOBS_URL, params={"search": "CRAWL"}).json()
        assert {j["id"] for j in body["jobs"]} == {"j1", "j2"}

    def test_search_wildcards_are_literal(self, client):
        assert client.get(JOBS_URL, params={"search": "%"}).json()["jobs"] == []
        assert client.get(JOBS_URL, params={"search": "G_mma"}).json()["jobs"] == []

    def test_status_and_schedule_filters(self, client):
        assert [j["id"] for j in client.get(JOBS_URL, params={"status": "completed"}).json()["jobs"]] == ["j2"]
        assert [j["id"] for j in client.get(JOBS_URL, params={"schedule": "daily"}).json()["jobs"]] == ["j3"]

    def test_all_sentinels_ignored(self, client):
        body = client.get(JOBS_URL, params={"status": "All Status", "schedule": "All Schedules"}).json()
        assert body["pagination"]["total"] == 3


class TestSingleJob:
    @pytest.fixture(autouse=True)
    def jobs(self, fake_db):
        fake_db.seed(
            JOBS,
            job_row(
                "failed-job", "Retry me", "2026-10-01T00:00:00Z",
                status="failed", processed_urls=5, successful_urls=3, failed_urls=2,
                progress_percentage=100, started_at="2026-10-01T01:00:00Z",
                completed_at="2026-10-01T02:00:00Z", error_message="quota exceeded",
            ),
            job_row("other", "Theirs", "2026-10-01T00:00:00Z", user_id="someone-else"),
        )

    def test_get(self, client):
        response = client.get(f"{JOBS_URL}/failed-job")
        assert response.status_code == 200
        assert response.json()["job"]["name"] == "Retry me"

    def test_other_users_job_is_404(self, client):
        assert client.get(f"{JOBS_URL}/other").status_code == 404
        assert client.delete(f"{JOBS_URL}/other").status_code == 404

    def test_retry_resets_progress(self, client, fake_db, recorder):
        response = client.put(f"{JOBS_URL}/failed-job", json={"status": "pending"})

        assert response.status_code == 200
        row = fake_db.find(JOBS, id="failed-job")[0]
        assert row["status"] == "pending"
        assert row["processed_urls"] == row["successful_urls"] == row["failed_urls"] == 0
        assert row["progress_percentage"] == 0
        assert row["started_at"] is None
        assert row["completed_at"] is None
        assert recorder.calls == [("job_update", "failed-job", USER_ID, "pending")]

    def test_pause_keeps_counters(self, client, fake_db, recorder):
        client.put(f"{JOBS_URL}/failed-job", json={"status": "paused", "name": "Renamed", "scheduleType": "weekly"})

        row = fake_db.find(JOBS, id="failed-job")[0]
        assert row["status"] == "paused"
        assert row["name"] == "Renamed"
        assert row["schedule_type"] == "weekly"
        assert row["processed_urls"] == 5

    def test_invalid_status_rejected(self, client, recorder):
        assert client.put(f"{JOBS_URL}/failed-job", json={"status": "exploded"}).status_code == 400

    def test_delete(self, client, fake_db, recorder):
        response = client.delete(f"{JOBS_URL}/failed-job")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert fake_db.find(JOBS, id="failed-job") == []
        assert recorder.calls[0][:3] == ("job_list_update", USER_ID, "deleted")

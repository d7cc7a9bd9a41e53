"""Daily URL quota endpoint"""

from datetime import timedelta

from app.utils.datetime_helper import utc_today

from tests.conftest import USER_ID

QUOTA_URL = "/api/v1/indexing/quota"
PROFILES = "indb_auth_user_profiles"


def profile(fake_db):
    return fake_db.find(PROFILES, user_id=USER_ID)[0]


class TestQuota:
    def test_usage_within_limit(self, client, fake_db):
        profile(fake_db).update(daily_quota_used=250, daily_quota_reset_date=utc_today().isoformat())

        body = client.get(QUOTA_URL).json()

        assert body == {
            "user_id": USER_ID,
            "package_id": "pkg-pro",
            "package_name": "Pro",
            "daily_quota_used": 250,
            "daily_quota_limit": 1000,
            "is_unlimited": False,
            "quota_exhausted": False,
            "remaining_quota": 750,
        }

    def test_exhausted(self, client, fake_db):
        profile(fake_db).update(daily_quota_used=1000, daily_quota_reset_date=utc_today().isoformat())

        body = client.get(QUOTA_URL).json()

        assert body["quota_exhausted"] is True
        assert body["remaining_quota"] == 0

    def test_stale_usage_reset(self, client, fake_db):
        yesterday = utc_today() - timedelta(days=1)
        profile(fake_db).update(daily_quota_used=999, daily_quota_reset_date=yesterday.isoformat())

        body = client.get(QUOTA_URL).json()

        assert body["daily_quota_used"] == 0
        assert profile(fake_db)["daily_quota_used"] == 0
        assert profile(fake_db)["daily_quota_reset_date"] == utc_today().isoformat()

    def test_never_reset_profile_initialised(self, client, fake_db):
        profile(fake_db).update(daily_quota_used=3, daily_quota_reset_date=None)

        assert client.get(QUOTA_URL).json()["daily_quota_used"] == 0
        assert profile(fake_db)["daily_quota_reset_date"] == utc_today().isoformat()

    def test_unlimited_package(self, client, fake_db):
        profile(fake_db).update(
            package_id="pkg-unlimited",
            daily_quota_used=50000,
            daily_quota_reset_date=utc_today().isoformat(),
        )

        body = client.get(QUOTA_URL).json()

        assert body["is_unlimited"] is True
        assert body["quota_exhausted"] is False
        assert body["daily_quota_limit"] == -1
        assert body["remaining_quota"] == -1

    def test_no_package(self, client, fake_db):
        profile(fake_db).update(package_id=None, daily_quota_reset_date=utc_today().isoformat())

        body = client.get(QUOTA_URL).json()

        assert body["daily_quota_limit"] == 0
        assert body["package_name"] is None

    def test_missing_profile(self, client, current_user):
        current_user["id"] = "ghost"
        assert client.get(QUOTA_URL).status_code == 404

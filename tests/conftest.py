import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_midtrans_client
from app.infra.supabase.client import get_supabase_client
from app.infra.supabase.repositories import RepositoryFactory
from app.main import app
from app.middleware.auth import get_current_user_id
from app.services import site_settings

from tests.fakes import FakeMidtrans, FakeSupabase

USER_ID = "user-1"
ADMIN_ID = "admin-1"
PACKAGE_ID = "pkg-pro"


@pytest.fixture
def fake_db():
    db = FakeSupabase()
    db.seed(
        "indb_payment_packages",
        {"id": PACKAGE_ID, "name": "Pro", "slug": "pro", "quota_limits": {"daily_urls": 1000}},
        {"id": "pkg-unlimited", "name": "Enterprise", "slug": "enterprise", "quota_limits": {"daily_urls": -1}},
    )
    db.seed(
        "indb_auth_user_profiles",
        {
            "user_id": USER_ID,
            "full_name": "Test User",
            "role": "user",
            "package_id": PACKAGE_ID,
            "daily_quota_used": 0,
            "daily_quota_reset_date": None,
        },
        {"user_id": ADMIN_ID, "full_name": "Admin", "role": "admin"},
    )
    return db


@pytest.fixture
def repos(fake_db):
    return RepositoryFactory(fake_db)


@pytest.fixture
def fake_midtrans():
    return FakeMidtrans()


@pytest.fixture
def current_user():
    """Mutable holder for the authenticated user id"""
    return {"id": USER_ID}


@pytest.fixture
def client(fake_db, fake_midtrans, current_user):
    app.dependency_overrides[get_supabase_client] = lambda: fake_db
    app.dependency_overrides[get_midtrans_client] = lambda: fake_midtrans
    app.dependency_overrides[get_current_user_id] = lambda: current_user["id"]
    site_settings.clear_cache()

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    site_settings.clear_cache()

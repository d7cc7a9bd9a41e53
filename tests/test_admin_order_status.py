"""Admin approval and rejection of manual-payment orders"""

import pytest

from tests.conftest import ADMIN_ID, PACKAGE_ID, USER_ID

TRANSACTIONS = "indb_payment_transactions"


def url(transaction_id="tx-manual"):
    return f"/api/v1/admin/orders/{transaction_id}/status"


@pytest.fixture
def as_admin(current_user):
    current_user["id"] = ADMIN_ID


@pytest.fixture
def manual_order(fake_db):
    fake_db.seed(TRANSACTIONS, {
        "id": "tx-manual",
        "user_id": USER_ID,
        "package_id": PACKAGE_ID,
        "transaction_status": "proof_uploaded",
        "amount": 300000,
        "payment_reference": "INV-42",
        "billing_period": "quarterly",
    })
    profile = fake_db.find("indb_auth_user_profiles", user_id=USER_ID)[0]
    profile["daily_quota_used"] = 17
    return fake_db.find(TRANSACTIONS, id="tx-manual")[0]


class TestAuthorization:
    def test_non_admin_forbidden(self, client, manual_order):
        response = client.patch(url(), json={"status": "completed"})
        assert response.status_code == 403
        assert manual_order["transaction_status"] == "proof_uploaded"

    def test_super_admin_allowed(self, client, fake_db, current_user, manual_order):
        fake_db.seed("indb_auth_user_profiles", {"user_id": "root", "role": "super_admin"})
        current_user["id"] = "root"
        assert client.patch(url(), json={"status": "failed"}).status_code == 200


@pytest.mark.usefixtures("as_admin")
class TestUpdateOrderStatus:
    def test_approve_activates_plan(self, client, fake_db, manual_order):
        response = client.patch(url(), json={"status": "completed", "notes": "Transfer verified"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Order approved successfully and plan activated"
        assert body["transaction"]["transaction_status"] == "completed"

        assert manual_order["verified_by"] == ADMIN_ID
        assert manual_order["verified_at"] and manual_order["processed_at"]
        assert manual_order["notes"] == "Transfer verified"

        profile = fake_db.find("indb_auth_user_profiles", user_id=USER_ID)[0]
        assert profile["package_id"] == PACKAGE_ID
        assert profile["daily_quota_used"] == 0
        assert profile["daily_quota_reset_date"] is not None
        assert profile["expires_at"] > profile["subscribed_at"]

        events = {log["event_type"] for log in fake_db.rows("indb_security_activity_logs")}
        assert {"order_status_update", "plan_activation"} <= events

    def test_reject(self, client, fake_db, manual_order):
        response = client.patch(url(), json={"status": "failed", "notes": "Blurry receipt"})

        assert response.status_code == 200
        assert response.json()["message"] == "Order rejected successfully"
        assert manual_order["transaction_status"] == "failed"
        assert manual_order.get("processed_at") is None

        profile = fake_db.find("indb_auth_user_profiles", user_id=USER_ID)[0]
        assert profile["daily_quota_used"] == 17

    def test_invalid_status_rejected(self, client, manual_order):
        response = client.patch(url(), json={"status": "pending"})
        assert response.status_code == 400
        assert manual_order["transaction_status"] == "proof_uploaded"

    def test_missing_transaction(self, client):
        assert client.patch(url("missing"), json={"status": "completed"}).status_code == 404

    @pytest.mark.parametrize("final_status", ["completed", "failed"])
    def test_final_orders_cannot_change(self, client, manual_order, final_status):
        manual_order["transaction_status"] = final_status

        response = client.patch(url(), json={"status": "completed"})

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot update transactions that are already completed or failed"

    def test_activation_failure_rolls_back(self, client, fake_db, manual_order):
        manual_order["package_id"] = "pkg-deleted"

        response = client.patch(url(), json={"status": "completed"})

        assert response.status_code == 500
        assert response.json()["error"].startswith("Payment approved but plan activation failed")
        assert manual_order["transaction_status"] == "proof_uploaded"
        assert manual_order["verified_by"] is None
        assert manual_order["verified_at"] is None
        assert manual_order["processed_at"] is None
        assert manual_order["notes"].startswith("Plan activation failed:")

    def test_activity_log_failure_is_not_fatal(self, client, fake_db, manual_order):
        fake_db.fail("indb_security_activity_logs", "insert")
        response = client.patch(url(), json={"status": "failed"})
        assert response.status_code == 200

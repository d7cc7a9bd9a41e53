"""Midtrans notification signature checks"""

import hashlib

from app.features.billing.signature import compute_signature, verify_signature

SERVER_KEY = "SB-Mid-server-abc123"


def _payload(**overrides):
    payload = {
        "order_id": "ORDER-1001",
        "status_code": "200",
        "gross_amount": "150000.00",
    }
    payload["signature_key"] = compute_signature(
        payload["order_id"], payload["status_code"], payload["gross_amount"], SERVER_KEY
    )
    payload.update(overrides)
    return payload


class TestComputeSignature:
    def test_matches_sha512_of_concatenated_fields(self):
        expected = hashlib.sha512(b"ORDER-1001200150000.00" + SERVER_KEY.encode()).hexdigest()
        assert compute_signature("ORDER-1001", "200", "150000.00", SERVER_KEY) == expected

    def test_is_lowercase_hex(self):
        signature = compute_signature("A", "201", "10.00", SERVER_KEY)
        assert len(signature) == 128
        assert signature == signature.lower()


class TestVerifySignature:
    def test_valid_signature(self):
        assert verify_signature(_payload(), SERVER_KEY) is True

    def test_uppercase_signature_accepted(self):
        payload = _payload()
        payload["signature_key"] = payload["signature_key"].upper()
        assert verify_signature(payload, SERVER_KEY) is True

    def test_tampered_amount_rejected(self):
        assert verify_signature(_payload(gross_amount="1.00"), SERVER_KEY) is False

    def test_wrong_server_key_rejected(self):
        assert verify_signature(_payload(), "another-key") is False

    def test_missing_field_rejected(self):
        payload = _payload()
        del payload["status_code"]
        assert verify_signature(payload, SERVER_KEY) is False

    def test_empty_server_key_rejected(self):
        assert verify_signature(_payload(), "") is False

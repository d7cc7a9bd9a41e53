"""Midtrans notification signature verification"""
import hashlib
import hmac
from typing import Any, Mapping


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 hex digest of order_id + status_code + gross_amount + server_key"""
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


def verify_signature(payload: Mapping[str, Any], server_key: str) -> bool:
    """
    Check the signature_key of a notification body.

    Missing fields never verify. The comparison is constant-time.
    """
    order_id = payload.get("order_id")
    status_code = payload.get("status_code")
    gross_amount = payload.get("gross_amount")
    signature_key = payload.get("signature_key")

    if not server_key or not all([order_id, status_code, gross_amount, signature_key]):
        return False

    expected = compute_signature(str(order_id), str(status_code), str(gross_amount), server_key)
    return hmac.compare_digest(expected, str(signature_key).lower())

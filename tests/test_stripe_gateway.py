"""StripeGateway webhook verification against real Stripe-Signature headers."""

import hashlib
import hmac
import json
import time

import pytest

from marketpay.domain.errors import AuthenticationError
from marketpay.gateway.stripe_adapter import StripeGateway

SECRET = "whsec_test_secret"


def _sign(payload: str, secret: str = SECRET, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture()
def stripe_gateway():
    return StripeGateway(api_key="sk_test_dummy", webhook_secret=SECRET)


def test_valid_signature_returns_event(stripe_gateway):
    payload = json.dumps({"id": "evt_1", "type": "account.updated", "data": {"object": {"id": "acct_1"}}})

    event = stripe_gateway.construct_event(payload.encode("utf-8"), _sign(payload))

    assert event["type"] == "account.updated"
    assert event["data"]["object"]["id"] == "acct_1"


def test_wrong_secret_is_rejected(stripe_gateway):
    payload = json.dumps({"id": "evt_1", "type": "account.updated"})
    with pytest.raises(AuthenticationError):
        stripe_gateway.construct_event(payload.encode("utf-8"), _sign(payload, secret="whsec_other"))


def test_tampered_payload_is_rejected(stripe_gateway):
    payload = json.dumps({"id": "evt_1", "type": "payment_intent.succeeded"})
    header = _sign(payload)
    tampered = payload.replace("evt_1", "evt_2")
    with pytest.raises(AuthenticationError):
        stripe_gateway.construct_event(tampered.encode("utf-8"), header)


def test_stale_timestamp_is_rejected(stripe_gateway):
    payload = json.dumps({"id": "evt_1"})
    header = _sign(payload, timestamp=int(time.time()) - 3600)
    with pytest.raises(AuthenticationError):
        stripe_gateway.construct_event(payload.encode("utf-8"), header)


def test_missing_header_is_rejected(stripe_gateway):
    with pytest.raises(AuthenticationError):
        stripe_gateway.construct_event(b"{}", "")


def test_non_utf8_payload_is_rejected(stripe_gateway):
    with pytest.raises(AuthenticationError):
        stripe_gateway.construct_event(b"\xff\xfe", "t=1,v1=abc")

"""
Unit Tests for the Exbitron Request Signer

These tests verify that the RequestSigner:
- Builds public URLs with path placeholders and query strings
- Sends JSON bodies for POST and query strings for GET/DELETE
- Produces deterministic HMAC-SHA256 signatures for a fixed nonce
- Never reuses a nonce within one signer

Run with:
    pytest tests/unit/test_signer.py -v
"""

import hashlib
import hmac
import json

import pytest

from core.errors import AuthenticationFault
from exchanges.exbitron.description import EXBITRON
from exchanges.exbitron.signer import RequestSigner, compute_signature, extract_params, implode_params

PUBLIC = "https://exbitron.com/api/v2/peatio/public"
PRIVATE = "https://exbitron.com/api/v2/peatio"


def frozen_clock(value=1666544755000):
    return lambda: value


# ============================================
# Path helpers
# ============================================

class TestPathTemplates:
    """Placeholder extraction and substitution"""

    def test_extract_params(self):
        assert extract_params("markets/{market}/trades") == ["market"]
        assert extract_params("markets") == []

    def test_implode_params_leaves_unknown_placeholders(self):
        assert implode_params("market/orders/{id}", {"id": 42}) == "market/orders/42"
        assert implode_params("market/orders/{id}", {}) == "market/orders/{id}"


# ============================================
# Public requests
# ============================================

class TestPublicRequests:
    """Unsigned envelopes"""

    def test_get_with_query(self):
        signer = RequestSigner(EXBITRON)
        env = signer.sign("markets", params={"type": "spot", "limit": 500})

        assert env.url == f"{PUBLIC}/markets?type=spot&limit=500"
        assert env.method == "GET"
        assert env.body is None
        assert env.headers == {"Accept": "application/json"}

    def test_placeholders_are_not_repeated_in_query(self):
        signer = RequestSigner(EXBITRON)
        env = signer.sign("markets/{market}/order-book", params={"market": "ltcusdt", "bids_limit": 5})

        assert env.url == f"{PUBLIC}/markets/ltcusdt/order-book?bids_limit=5"

    def test_none_values_are_dropped(self):
        signer = RequestSigner(EXBITRON)
        env = signer.sign("markets/{market}/trades", params={"market": "ltcusdt", "limit": None})

        assert env.url == f"{PUBLIC}/markets/ltcusdt/trades"

    def test_hostname_comes_from_description(self):
        description = EXBITRON.model_copy(update={"hostname": "sandbox.exbitron.test"})
        env = RequestSigner(description).sign("timestamp")

        assert env.url == "https://sandbox.exbitron.test/api/v2/peatio/public/timestamp"

    def test_public_requests_need_no_credentials(self):
        env = RequestSigner(EXBITRON).sign("health/ready")
        assert "X-Auth-ApiKey" not in env.headers


# ============================================
# Private requests
# ============================================

class TestPrivateRequests:
    """Signed envelopes"""

    def test_signature_headers(self):
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())
        env = signer.sign("account/balances", api="private")

        expected = hmac.new(b"secret", b"1666544755000key", hashlib.sha256).hexdigest()
        assert env.url == f"{PRIVATE}/account/balances"
        assert env.headers["X-Auth-ApiKey"] == "key"
        assert env.headers["X-Auth-Nonce"] == "1666544755000"
        assert env.headers["X-Auth-Signature"] == expected

    def test_signature_is_deterministic(self):
        a = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())
        b = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())

        assert a.sign("account/balances", api="private") == b.sign("account/balances", api="private")

    @pytest.mark.parametrize("nonce,api_key,secret", [
        ("2", "key", "secret"),
        ("1", "other-key", "secret"),
        ("1", "key", "other-secret"),
    ])
    def test_signature_changes_with_each_input(self, nonce, api_key, secret):
        assert compute_signature(nonce, api_key, secret) != compute_signature("1", "key", "secret")

    def test_compute_signature_is_lowercase_hex(self):
        signature = compute_signature("1", "key", "secret")
        assert len(signature) == 64
        assert signature == signature.lower()

    def test_post_sends_compact_json_body(self):
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())
        env = signer.sign(
            "market/orders",
            api="private",
            method="POST",
            params={"market": "ltcusdt", "side": "buy", "volume": "1.5", "price": None},
        )

        assert env.url == f"{PRIVATE}/market/orders"
        assert env.body == '{"market":"ltcusdt","side":"buy","volume":"1.5"}'
        assert env.headers["Content-type"] == "application/json"

    def test_post_with_placeholder_only(self):
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())
        env = signer.sign("market/orders/{id}/cancel", api="private", method="POST", params={"id": 7})

        assert env.url == f"{PRIVATE}/market/orders/7/cancel"
        assert json.loads(env.body) == {}

    def test_delete_uses_query_string(self):
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock())
        env = signer.sign("account/beneficiaries/{id}", api="private", method="DELETE", params={"id": 3, "otp": "123456"})

        assert env.url == f"{PRIVATE}/account/beneficiaries/3?otp=123456"
        assert env.body is None

    def test_missing_credentials_raise(self):
        with pytest.raises(AuthenticationFault):
            RequestSigner(EXBITRON).sign("account/balances", api="private")

        with pytest.raises(AuthenticationFault):
            RequestSigner(EXBITRON, api_key="key").sign("account/balances", api="private")


class TestNonce:
    """Nonce monotonicity"""

    def test_nonce_increases_when_clock_stalls(self):
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=frozen_clock(1000))

        assert signer.nonce() == "1000"
        assert signer.nonce() == "1001"
        assert signer.nonce() == "1002"

    def test_nonce_follows_clock_when_it_advances(self):
        ticks = iter([1000, 5000])
        signer = RequestSigner(EXBITRON, api_key="key", secret="secret", clock=lambda: next(ticks))

        assert signer.nonce() == "1000"
        assert signer.nonce() == "5000"

"""
Unit Tests for the Exbitron Error Classifier

Run with:
    pytest tests/unit/test_error_classifier.py -v
"""

import pytest

from core.errors import (
    AuthenticationFault,
    ExchangeFault,
    InsufficientFunds,
    InvalidOrder,
    OrderNotFound,
    RateLimitFault,
)
from exchanges.exbitron.description import EXBITRON
from exchanges.exbitron.error_classifier import ErrorClassifier, error_tokens


@pytest.fixture
def classifier():
    return ErrorClassifier(EXBITRON)


class TestRateLimits:
    """418 and 429 are throttling regardless of the body"""

    @pytest.mark.parametrize("status", [418, 429])
    def test_rate_limit_statuses(self, classifier, status):
        fault = classifier.classify(status, {"errors": ["market.order.invalid_side"]})
        assert isinstance(fault, RateLimitFault)
        assert fault.exchange == "exbitron"

    def test_rate_limit_without_body(self, classifier):
        assert isinstance(classifier.classify(429, None), RateLimitFault)


class TestVendorTokens:
    """Error tokens map through the exceptions table"""

    def test_misspelled_order_token_is_order_not_found(self, classifier):
        fault = classifier.classify(422, {"errors": ["market.order.invaild_id_or_uuid"]})

        assert isinstance(fault, OrderNotFound)
        assert "market.order.invaild_id_or_uuid" in fault.message
        assert fault.message.startswith("exbitron ")

    def test_insufficient_balance(self, classifier):
        fault = classifier.classify(422, {"errors": ["market.account.insufficient_balance"]})
        assert isinstance(fault, InsufficientFunds)

    @pytest.mark.parametrize("token", [
        "market.order.invalid_side",
        "market.order.invalid_type",
        "market.order.non_positive_volume",
        "market.order.not_positive_price",
    ])
    def test_invalid_order_tokens(self, classifier, token):
        assert isinstance(classifier.classify(422, {"errors": [token]}), InvalidOrder)

    def test_unknown_token_is_generic_exchange_fault(self, classifier):
        fault = classifier.classify(422, {"errors": ["market.some.new_error"]})

        assert type(fault) is ExchangeFault
        assert fault.body == {"errors": ["market.some.new_error"]}

    def test_only_first_token_is_used(self, classifier):
        fault = classifier.classify(422, {"errors": ["market.order.invalid_side", "market.account.insufficient_balance"]})
        assert isinstance(fault, InvalidOrder)

    def test_raw_json_string_body(self, classifier):
        fault = classifier.classify(404, '{"errors": ["market.order.invaild_id_or_uuid"]}')
        assert isinstance(fault, OrderNotFound)


class TestNoClassification:
    """Responses the body cannot classify"""

    def test_success_with_error_field_is_not_a_fault(self, classifier):
        assert classifier.classify(200, {"errors": ["market.order.invalid_side"]}) is None

    def test_unparsable_body(self, classifier):
        assert classifier.classify(500, "<html>Bad Gateway</html>") is None
        assert classifier.classify(500, "") is None
        assert classifier.classify(500, None) is None

    def test_body_without_tokens(self, classifier):
        assert classifier.classify(500, {"message": "oops"}) is None

    def test_status_fallback(self, classifier):
        assert classifier.classify_status(200, None) is None
        assert isinstance(classifier.classify_status(401, None), AuthenticationFault)
        assert isinstance(classifier.classify_status(403, None), AuthenticationFault)
        assert type(classifier.classify_status(502, "<html>")) is ExchangeFault


class TestErrorTokens:
    """error_tokens reads both body shapes"""

    def test_errors_list(self):
        assert error_tokens({"errors": ["a", "b"]}) == ["a", "b"]

    def test_error_string(self):
        assert error_tokens({"error": "jwt.decode_and_verify"}) == ["jwt.decode_and_verify"]

    def test_other_shapes(self):
        assert error_tokens([]) == []
        assert error_tokens({"errors": "not a list"}) == []

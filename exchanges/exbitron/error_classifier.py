"""
Exbitron Error Classifier

Maps a transport status code and the venue's error body onto the canonical
fault taxonomy (core/errors.py). Classification runs exactly once, right after
the transport returns and before any normalization.

Venue error body:
    {"errors": ["market.order.invaild_id_or_uuid"]}

Rules:
    - 418 / 429                      -> RateLimitFault, body ignored
    - non-success with error token   -> exact match in the exceptions table,
                                        unmatched token -> ExchangeFault
    - no parsable body               -> None (status alone decides)
"""

import json
from typing import Any, Dict, List, Optional

from core.errors import (
    AdapterFault,
    AuthenticationFault,
    ExchangeFault,
    FAULTS_BY_NAME,
    RateLimitFault,
)
from exchanges.exbitron.description import ExchangeDescription

RATE_LIMIT_STATUSES = (418, 429)


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def error_tokens(body: Any) -> List[str]:
    """Vendor error strings carried by a parsed body."""
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list):
            return [str(token) for token in errors if isinstance(token, (str, int))]
        error = body.get("error")
        if isinstance(error, str):
            return [error]
    return []


class ErrorClassifier:
    """
    Table-driven classifier for one venue.

    The exceptions table is taken from the venue description and resolved to
    fault classes once, at construction.
    """

    def __init__(self, description: ExchangeDescription):
        self.exchange = description.id
        self.exact: Dict[str, type] = {
            token: FAULTS_BY_NAME[name] for token, name in description.exceptions.items()
        }

    def classify(self, status_code: int, raw_body: Any) -> Optional[AdapterFault]:
        """
        Return the fault a response represents, or None when the body adds
        nothing to the status code.
        """
        if status_code in RATE_LIMIT_STATUSES:
            return RateLimitFault(
                f"{self.exchange} {status_code} rate limited",
                exchange=self.exchange,
                body=raw_body,
            )

        body = self._parse(raw_body)
        if body is None or is_success(status_code):
            return None

        tokens = error_tokens(body)
        if not tokens:
            return None

        feedback = f"{self.exchange} {json.dumps(body, default=str)}"
        fault_class = self.exact.get(tokens[0])
        if fault_class is None:
            return ExchangeFault(feedback, exchange=self.exchange, body=body)
        return fault_class(feedback, exchange=self.exchange, body=body)

    def classify_status(self, status_code: int, raw_body: Any) -> Optional[AdapterFault]:
        """Fallback for non-success responses the body could not classify."""
        if is_success(status_code):
            return None
        message = f"{self.exchange} HTTP {status_code}"
        if status_code in (401, 403):
            return AuthenticationFault(message, exchange=self.exchange, body=raw_body)
        return ExchangeFault(message, exchange=self.exchange, body=raw_body)

    @staticmethod
    def _parse(raw_body: Any) -> Any:
        if isinstance(raw_body, (bytes, bytearray)):
            raw_body = raw_body.decode(errors="replace")
        if isinstance(raw_body, str):
            if not raw_body.strip():
                return None
            try:
                return json.loads(raw_body)
            except ValueError:
                return None
        return raw_body

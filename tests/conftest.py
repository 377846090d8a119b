"""
Shared fixtures for the unit tests.

FakeTransport replaces the HTTP collaborator: routes are registered per
(method, path) and every executed envelope is recorded for assertions.
Paths are given relative to /api/v2/peatio/, e.g. "public/markets" or
"market/orders".
"""

import json
from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import pytest

from exchanges.exbitron import ExbitronExchange
from exchanges.exbitron.catalog import MarketCatalog
from exchanges.exbitron.description import EXBITRON
from tests.payloads import RAW_CURRENCIES, RAW_MARKETS

API_PREFIX = "/api/v2/peatio/"

TOTP_SECRET = "JBSWY3DPEHPK3PXP"


class RecordedCall(NamedTuple):
    url: str
    method: str
    headers: Dict[str, str]
    body: Optional[str]

    @property
    def path(self) -> str:
        return urlsplit(self.url).path[len(API_PREFIX):]

    @property
    def query(self) -> Dict[str, str]:
        return {key: values[0] for key, values in parse_qs(urlsplit(self.url).query).items()}

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


class FakeTransport:
    """In-memory transport returning canned (status, body) pairs."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.calls: List[RecordedCall] = []

    def add(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def calls_to(self, path: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.path == path]

    @property
    def last(self) -> RecordedCall:
        return self.calls[-1]

    async def execute(self, url, method, headers, body):
        call = RecordedCall(url, method, dict(headers), body)
        self.calls.append(call)
        status, payload = self.routes.get((method, call.path), (404, {"errors": ["record.not_found"]}))
        if isinstance(payload, Exception):
            raise payload
        return status, payload


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def transport():
    fake = FakeTransport()
    fake.add("GET", "public/markets", RAW_MARKETS)
    fake.add("GET", "public/currencies", RAW_CURRENCIES)
    return fake


@pytest.fixture
def exchange(transport):
    """Adapter with credentials and a TOTP secret, wired to the fake transport"""
    return ExbitronExchange(
        description=EXBITRON,
        api_key="key",
        secret="secret",
        totp_secret=TOTP_SECRET,
        transport=transport,
    )


@pytest.fixture
def catalog():
    catalog = MarketCatalog(EXBITRON)
    catalog.refresh(RAW_MARKETS, RAW_CURRENCIES)
    return catalog

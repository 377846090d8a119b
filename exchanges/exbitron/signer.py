"""
Exbitron Request Signer

Turns (path template, api, method, params) into a complete request envelope.
No network I/O happens here.

Authentication (private api):
    X-Auth-ApiKey     the API key
    X-Auth-Nonce      current time in milliseconds, as a decimal string
    X-Auth-Signature  hex(HMAC-SHA256(key=secret, msg=nonce + api_key))
"""

import hashlib
import hmac
import json
import re
import time
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional
from urllib.parse import urlencode

from core.errors import AuthenticationFault
from exchanges.exbitron.description import ExchangeDescription

# Methods whose leftover params go into the query string; the rest send JSON
QUERY_METHODS = ("GET", "DELETE")

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


class RequestEnvelope(NamedTuple):
    url: str
    method: str
    headers: Dict[str, str]
    body: Optional[str]


def extract_params(path: str) -> List[str]:
    """Names of the {placeholders} in a path template."""
    return _PLACEHOLDER.findall(path)


def implode_params(path: str, params: Mapping[str, Any]) -> str:
    """Substitute {placeholders} present in params, leaving the others untouched."""
    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        return str(params[name]) if name in params else match.group(0)

    return _PLACEHOLDER.sub(replace, path)


def compute_signature(nonce: str, api_key: str, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of nonce + api_key keyed by secret."""
    message = (nonce + api_key).encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def milliseconds() -> int:
    return int(time.time() * 1000)


class RequestSigner:
    """
    Builds request envelopes for one set of credentials.

    The nonce is the current millisecond timestamp, bumped by one whenever the
    clock has not advanced since the previous signed request, so two requests
    signed by the same instance never share a nonce.

    Example:
        >>> signer = RequestSigner(EXBITRON, api_key="key", secret="secret")
        >>> env = signer.sign("markets/{market}/tickers", params={"market": "btcusdt"})
        >>> env.url
        'https://exbitron.com/api/v2/peatio/public/markets/btcusdt/tickers'
    """

    def __init__(
        self,
        description: ExchangeDescription,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        clock: Callable[[], int] = milliseconds
    ):
        self.description = description
        self.api_key = api_key or None
        self.secret = secret or None
        self._clock = clock
        self._last_nonce = 0

    def check_required_credentials(self) -> None:
        if not self.api_key:
            raise AuthenticationFault(
                f"{self.description.id} requires an API key for private endpoints",
                exchange=self.description.id,
            )
        if not self.secret:
            raise AuthenticationFault(
                f"{self.description.id} requires an API secret for private endpoints",
                exchange=self.description.id,
            )

    def nonce(self) -> str:
        value = self._clock()
        if value <= self._last_nonce:
            value = self._last_nonce + 1
        self._last_nonce = value
        return str(value)

    def sign(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None
    ) -> RequestEnvelope:
        params = dict(params or {})
        method = method.upper()

        consumed = extract_params(path)
        query = {key: value for key, value in params.items() if key not in consumed and value is not None}
        url = self.description.url(api) + "/" + implode_params(path, params)

        headers = {"Accept": "application/json"}
        body = None
        if method in QUERY_METHODS:
            if query:
                url += "?" + urlencode(query)
        else:
            headers["Content-type"] = "application/json"
            body = json.dumps(query, separators=(",", ":"))

        if api == "private":
            self.check_required_credentials()
            nonce = self.nonce()
            headers["X-Auth-ApiKey"] = self.api_key
            headers["X-Auth-Nonce"] = nonce
            headers["X-Auth-Signature"] = compute_signature(nonce, self.api_key, self.secret)

        return RequestEnvelope(url=url, method=method, headers=headers, body=body)

"""
Exbitron REST API Client

Low-level request pipeline shared by every adapter operation:

    RequestSigner.sign -> transport.execute -> ErrorClassifier -> raw body

The client returns the venue's parsed JSON untouched; normalization is done
by the caller (ExbitronExchange) with ExbitronNormalizer.

Faults are raised once, right after the transport returns. Nothing is
retried here.

Usage:
    async with ExbitronAPIClient(EXBITRON, api_key="...", secret="...") as client:
        markets = await client.public_get("markets", {"type": "spot", "limit": 500})
        balances = await client.private_get("account/balances")
"""

import time
from typing import Any, Mapping, Optional

from core.errors import AdapterFault, ArgumentFault
from core.logging import get_logger, log_api_request, log_api_response
from core.transport import AiohttpTransport, Transport
from exchanges.exbitron.description import ExchangeDescription
from exchanges.exbitron.error_classifier import ErrorClassifier
from exchanges.exbitron.signer import RequestSigner


class ExbitronAPIClient:
    """
    Signed request executor for the Exbitron v2 (Peatio) API.

    Attributes:
        description: Immutable venue metadata (endpoint table, URLs, errors)
        signer: RequestSigner holding the credentials
        classifier: ErrorClassifier for this venue
        transport: Collaborator performing the HTTP round-trip
    """

    def __init__(
        self,
        description: ExchangeDescription,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        transport: Optional[Transport] = None,
        timeout: float = 10
    ):
        self.description = description
        self.signer = RequestSigner(description, api_key=api_key, secret=secret)
        self.classifier = ErrorClassifier(description)
        self.transport = transport if transport is not None else AiohttpTransport(timeout=timeout)
        self.logger = get_logger(__name__)

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self) -> None:
        if isinstance(self.transport, AiohttpTransport):
            await self.transport.open()

    async def close(self) -> None:
        if isinstance(self.transport, AiohttpTransport):
            await self.transport.close()

    # ============================================
    # Request Pipeline
    # ============================================

    async def request(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Sign, send and classify one request.

        Args:
            path: Declared endpoint template (e.g., "markets/{market}/trades")
            api: "public" or "private"
            method: HTTP method
            params: Path placeholders plus query/body parameters

        Returns:
            Parsed JSON body of a successful response

        Raises:
            ArgumentFault: If the endpoint is not declared for this venue
            AuthenticationFault: If a private call lacks credentials
            AdapterFault subclasses: As classified from the response
        """
        method = method.upper()
        if not self.description.declares(api, method, path):
            raise ArgumentFault(
                f"{self.description.id} has no {api} {method} endpoint '{path}'",
                exchange=self.description.id,
            )

        envelope = self.signer.sign(path, api=api, method=method, params=params)
        log_api_request(self.description.id, envelope.method, envelope.url, envelope.body)

        started = time.monotonic()
        status, body = await self.transport.execute(
            envelope.url, envelope.method, envelope.headers, envelope.body
        )
        log_api_response(self.description.id, envelope.method, envelope.url, status, time.monotonic() - started)

        fault = self.classifier.classify(status, body) or self.classifier.classify_status(status, body)
        if fault is not None:
            self._log_fault(fault)
            raise fault
        return body

    def _log_fault(self, fault: AdapterFault) -> None:
        self.logger.error(f"{self.description.id} request failed: {fault.to_dict()}")

    # ============================================
    # Shortcuts
    # ============================================

    async def public_get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request(path, "public", "GET", params)

    async def private_get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request(path, "private", "GET", params)

    async def private_post(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request(path, "private", "POST", params)

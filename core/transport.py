"""
HTTP Transport

The adapter core never opens sockets itself. It hands a signed request
envelope to a transport collaborator:

    status_code, parsed_body = await transport.execute(url, method, headers, body)

and gets back the HTTP status plus the JSON-decoded body (None when the body
is empty or not JSON). Network failures surface as TransportFault.

AiohttpTransport is the default collaborator. It performs exactly one attempt
per call: retry and backoff policy belongs to the caller.

Usage:
    async with AiohttpTransport(timeout=10) as transport:
        status, body = await transport.execute(url, "GET", headers, None)
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional, Protocol, Tuple

import aiohttp

from core.errors import TransportFault
from core.logging import get_logger


class Transport(Protocol):
    """Anything that can execute a request envelope."""

    async def execute(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        body: Optional[str]
    ) -> Tuple[int, Any]:
        ...


def parse_json_body(text: str) -> Any:
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


class AiohttpTransport:
    """
    aiohttp-backed transport.

    Attributes:
        timeout: Total timeout per request in seconds
        session: aiohttp ClientSession, created on first use or in __aenter__
    """

    def __init__(self, timeout: float = 10, session: Optional[aiohttp.ClientSession] = None):
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None
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
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
            self.logger.debug("AiohttpTransport session created")

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.logger.debug("AiohttpTransport session closed")
        self.session = None

    # ============================================
    # Request Execution
    # ============================================

    async def execute(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        body: Optional[str]
    ) -> Tuple[int, Any]:
        """
        Send one request.

        Returns:
            (status_code, parsed_body) where parsed_body is None if not JSON

        Raises:
            TransportFault: On connection errors and timeouts
        """
        await self.open()
        started = time.monotonic()
        try:
            async with self.session.request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                text = await resp.text()
                self.logger.debug(f"{method} {url} -> {resp.status} in {time.monotonic() - started:.3f}s")
                return resp.status, parse_json_body(text)

        except asyncio.TimeoutError as e:
            raise TransportFault(f"Timeout after {self.timeout}s on {method} {url}") from e

        except aiohttp.ClientError as e:
            raise TransportFault(f"Request failed on {method} {url}: {e}") from e

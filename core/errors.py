"""
Adapter Fault Taxonomy

Every error the adapter surfaces to a caller is an AdapterFault subclass.
Vendor-specific error strings never leak out as bare strings; they are
classified once (see exchanges/<venue>/error_classifier.py) into one of
these types.

Hierarchy:
    AdapterFault
    ├── TransportFault          - network failure reported by the transport
    ├── RateLimitFault          - venue throttling (HTTP 418 / 429)
    ├── AuthenticationFault     - missing/invalid credentials or TOTP secret
    ├── ArgumentFault           - caller omitted or passed an invalid argument
    │   └── BadSymbol           - symbol/market unknown to the catalog
    └── ExchangeFault           - vendor error not covered below
        ├── InsufficientFunds
        ├── InvalidOrder
        └── OrderNotFound

Usage:
    from core.errors import OrderNotFound

    try:
        await exchange.cancel_order("42")
    except OrderNotFound as fault:
        logger.warning(fault.to_dict())
"""

from typing import Any, Dict, Optional


class AdapterFault(Exception):
    """
    Base class for all adapter faults.

    Attributes:
        message: Human readable description
        exchange: Exchange identifier the fault originated from
        body: Raw (parsed) response body, kept for diagnostics
    """

    def __init__(self, message: str, exchange: Optional[str] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.exchange = exchange
        self.body = body

    def to_dict(self) -> Dict[str, Any]:
        """Structured form used in log records."""
        result: Dict[str, Any] = {
            "error": self.message,
            "error_type": self.__class__.__name__,
        }
        if self.exchange:
            result["exchange"] = self.exchange
        if self.body is not None:
            result["body"] = self.body
        return result


class TransportFault(AdapterFault):
    """Network-level failure (connection refused, timeout, DNS, ...)."""


class RateLimitFault(AdapterFault):
    """The venue throttled the request."""


class AuthenticationFault(AdapterFault):
    """Credentials are missing or were rejected."""


class ArgumentFault(AdapterFault):
    """A required argument is missing or invalid."""


class BadSymbol(ArgumentFault):
    """The symbol is not present in the loaded market catalog."""


class ExchangeFault(AdapterFault):
    """Unclassified vendor error."""


class InsufficientFunds(ExchangeFault):
    pass


class InvalidOrder(ExchangeFault):
    pass


class OrderNotFound(ExchangeFault):
    pass


# Lookup by class name, used by the static venue exception tables
FAULTS_BY_NAME: Dict[str, type] = {
    cls.__name__: cls
    for cls in (
        TransportFault,
        RateLimitFault,
        AuthenticationFault,
        ArgumentFault,
        BadSymbol,
        ExchangeFault,
        InsufficientFunds,
        InvalidOrder,
        OrderNotFound,
    )
}

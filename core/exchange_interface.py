"""
Exchange Interface: Abstract Contract for All Exchange Adapters

This module defines the abstract base class every venue adapter implements.
By enforcing a consistent interface, we ensure:
- All adapters expose the same canonical operations
- Callers (API routes, bots, scripts) never depend on a venue's wire format
- Unsupported features degrade gracefully via the `has` capability map

Design Philosophy:
    "Program to an interface, not an implementation"

    Callers work with ExchangeInterface and canonical records (core/schemas.py);
    the venue-specific adapter handles signing, error classification and
    normalization behind it.

Capabilities System:
    Each adapter declares which operations it supports via `has`:

        has = {"fetch_ticker": True, "withdraw": False, ...}

    Optional operations default to raising NotImplementedError.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from core.schemas import (
    Balance,
    Candle,
    Currency,
    DepositAddress,
    ExchangeStatus,
    Market,
    Order,
    OrderBook,
    Ticker,
    Trade,
    Transaction,
)


class ExchangeInterface(ABC):
    """
    Abstract Base Class for Exchange Adapters

    Class Attributes:
        name: Unique identifier for the exchange (lowercase, e.g., "exbitron")
        has: Dictionary indicating which operations this adapter supports

    Abstract Methods (MUST be implemented by all adapters):
        - load_markets, fetch_markets, fetch_currencies
        - fetch_ticker, fetch_order_book, fetch_trades, fetch_ohlcv
        - fetch_balance, create_order, cancel_order, fetch_order

    Conventions:
        - symbols are canonical "BASE/QUOTE" strings
        - since/limit arguments are milliseconds / record counts
        - every method raises core.errors faults, never raw vendor errors
    """

    # ============================================
    # Class Attributes (must be set by subclasses)
    # ============================================

    name: str
    """Unique exchange identifier (lowercase). Example: "exbitron" """

    has: Dict[str, bool] = {}
    """Dictionary indicating which operations this adapter supports"""

    # ============================================
    # Catalog
    # ============================================

    @abstractmethod
    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load (or return the cached) market catalog, keyed by symbol.

        Args:
            reload: Force a refresh even if markets are already loaded
        """
        ...

    @abstractmethod
    async def fetch_markets(self) -> List[Market]:
        ...

    @abstractmethod
    async def fetch_currencies(self) -> Dict[str, Currency]:
        ...

    # ============================================
    # Market Data
    # ============================================

    @abstractmethod
    async def fetch_ticker(self, symbol: str) -> Ticker:
        """
        Fetch 24h statistics for one market.

        Args:
            symbol: Canonical symbol (e.g., "LTC/USDT")

        Raises:
            BadSymbol: If the symbol is not in the catalog
        """
        ...

    async def fetch_tickers(self, symbols: Optional[Sequence[str]] = None) -> Dict[str, Ticker]:
        raise NotImplementedError(f"{self.name} does not support fetch_tickers")

    @abstractmethod
    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        """
        Fetch a full order book snapshot.

        Args:
            symbol: Canonical symbol
            limit: Depth per side; the adapter's default depth when None
        """
        ...

    @abstractmethod
    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        ...

    @abstractmethod
    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Candle]:
        """
        Fetch candles as Candle(timestamp_ms, open, high, low, close, volume).

        Raises:
            ArgumentFault: If the timeframe is not supported by the venue
        """
        ...

    async def fetch_time(self) -> Optional[int]:
        raise NotImplementedError(f"{self.name} does not support fetch_time")

    async def fetch_status(self) -> ExchangeStatus:
        raise NotImplementedError(f"{self.name} does not support fetch_status")

    # ============================================
    # Account & Trading
    # ============================================

    @abstractmethod
    async def fetch_balance(self) -> Balance:
        ...

    @abstractmethod
    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Any,
        price: Optional[Any] = None
    ) -> Order:
        ...

    @abstractmethod
    async def cancel_order(self, id: str, symbol: Optional[str] = None) -> Order:
        ...

    @abstractmethod
    async def fetch_order(self, id: str, symbol: Optional[str] = None) -> Order:
        ...

    async def fetch_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Order]:
        raise NotImplementedError(f"{self.name} does not support fetch_orders")

    async def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        raise NotImplementedError(f"{self.name} does not support fetch_my_trades")

    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        raise NotImplementedError(f"{self.name} does not support fetch_deposit_address")

    async def fetch_transactions(
        self,
        code: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        raise NotImplementedError(f"{self.name} does not support fetch_transactions")

    async def withdraw(
        self,
        code: str,
        amount: Any,
        address: str,
        tag: Optional[str] = None,
        beneficiary_id: Optional[str] = None
    ) -> Transaction:
        raise NotImplementedError(f"{self.name} does not support withdraw")

    # ============================================
    # Optional Lifecycle Methods
    # ============================================

    async def initialize(self) -> None:
        """
        Initialize the adapter (open HTTP sessions).

        Notes:
            - Default implementation does nothing
            - Called automatically by ExchangeManager
            - Should be idempotent (safe to call multiple times)
        """
        pass

    async def shutdown(self) -> None:
        """
        Release resources (close HTTP sessions).

        Notes:
            - Default implementation does nothing
            - Called automatically by ExchangeManager during shutdown
        """
        pass

    async def health_check(self) -> bool:
        """
        Check if the exchange API is accessible and healthy.

        Notes:
            - Default implementation returns True
            - Don't raise exceptions; return False on errors
        """
        return True

    # ============================================
    # Helper Methods
    # ============================================

    def supports(self, feature: str) -> bool:
        """
        Check if this adapter supports an operation.

        Example:
            >>> if exchange.supports("fetch_ohlcv"):
            ...     candles = await exchange.fetch_ohlcv("LTC/USDT", "1h")
        """
        return self.has.get(feature, False)

    def __repr__(self) -> str:
        """String representation of the exchange."""
        return f"<{self.__class__.__name__}(name='{self.name}')>"

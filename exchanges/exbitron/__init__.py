"""
Exbitron Exchange Adapter

This module implements the ExchangeInterface for Exbitron, a Peatio-based
spot exchange.

Every operation follows the same pipeline:

    ExbitronAPIClient  (RequestSigner -> transport -> ErrorClassifier)
        -> ExbitronNormalizer (+ MarketCatalog for symbol resolution)
        -> canonical records (core/schemas.py)

API Documentation:
    https://www.exbitron.com/kb/api.html

Endpoints Used:
    Public:
        - GET markets, currencies           - catalog
        - GET markets/tickers               - all tickers
        - GET markets/{market}/tickers      - one ticker
        - GET markets/{market}/order-book   - order book snapshot
        - GET markets/{market}/trades       - public trade history
        - GET markets/{market}/k-line       - candles
        - GET timestamp, health/ready       - server time / status
    Private:
        - GET account/balances, account/deposit_address/{currency}
        - GET account/transactions, account/deposits, account/withdraws
        - GET market/orders, market/orders/{id}, market/trades
        - POST market/orders, market/orders/{id}/cancel, market/orders/cancel
        - POST account/withdraws

Structure:
    exchanges/exbitron/
    ├── __init__.py          # This file (ExbitronExchange class)
    ├── api_client.py        # Signed request pipeline
    ├── catalog.py           # Market/currency catalog
    ├── description.py       # Static venue metadata
    ├── error_classifier.py  # Status/vendor error -> fault
    ├── normalizer.py        # Raw payload -> canonical records
    └── signer.py            # URL/body/header construction, HMAC signing
"""

import json
from typing import Any, Dict, List, Optional, Sequence

import pyotp

from core.errors import AdapterFault, ArgumentFault, AuthenticationFault, OrderNotFound
from core.exchange_interface import ExchangeInterface
from core.logging import get_logger
from core.precise import Precise, decimal_to_string, to_decimal
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
from core.utils.time import current_utc_timestamp, parse8601
from .api_client import ExbitronAPIClient
from .catalog import MarketCatalog, parse_currencies, parse_markets
from .description import EXBITRON, ExchangeDescription
from .normalizer import ExbitronNormalizer

logger = get_logger(__name__)

FINISHED_ORDER_STATUSES = ("closed", "canceled")


def check_address(address: Optional[str], exchange: str) -> str:
    """Reject empty addresses and addresses containing whitespace."""
    if not address or any(ch.isspace() for ch in address):
        raise ArgumentFault(f"{exchange} address is invalid or has not been set: {address!r}", exchange=exchange)
    return address


def seconds(milliseconds: int) -> int:
    return int(milliseconds // 1000)


class ExbitronExchange(ExchangeInterface):
    """
    Exbitron Exchange Adapter

    Attributes:
        name: Exchange identifier ("exbitron")
        has: Supported operations, taken from the venue description
        description: Immutable venue metadata
        client: Signed request pipeline
        catalog: In-memory market/currency snapshot
        normalizer: Raw payload -> canonical record conversions

    Example:
        >>> async with ExbitronExchange(api_key="...", secret="...") as exchange:
        ...     await exchange.load_markets()
        ...     ticker = await exchange.fetch_ticker("LTC/USDT")
        ...     order = await exchange.create_order("LTC/USDT", "limit", "buy", "1.5", "60")

    Notes:
        - Credentials default to the values in core.config.settings
        - Operations on one instance do not lock against each other;
          serialize load_markets(reload=True) calls if symbol resolution
          must stay consistent
        - No operation retries; every fault reaches the caller once
    """

    name = EXBITRON.id
    has = dict(EXBITRON.has)

    def __init__(
        self,
        description: Optional[ExchangeDescription] = None,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        totp_secret: Optional[str] = None,
        transport: Any = None
    ):
        # Import settings here so tests can construct adapters without a .env
        from core.config import settings

        if description is None:
            description = EXBITRON.model_copy(update={
                "hostname": settings.exbitron_hostname,
                "options": EXBITRON.options.model_copy(update={
                    "order_book_limit": settings.order_book_limit,
                    "markets_limit": settings.markets_fetch_limit,
                    "currencies_limit": settings.markets_fetch_limit,
                }),
            })

        self.description = description
        self.name = description.id
        self.has = dict(description.has)
        self.totp_secret = totp_secret if totp_secret is not None else (settings.exbitron_totp_secret or None)
        self.client = ExbitronAPIClient(
            description,
            api_key=api_key if api_key is not None else settings.exbitron_api_key,
            secret=secret if secret is not None else settings.exbitron_secret,
            transport=transport,
            timeout=settings.request_timeout,
        )
        self.catalog = MarketCatalog(description)
        self.normalizer = ExbitronNormalizer(self.catalog)

        logger.debug(f"ExbitronExchange created (hostname={description.hostname})")

    # ============================================
    # Lifecycle
    # ============================================

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def initialize(self) -> None:
        await self.client.open()
        logger.info(f"{self.name} adapter initialized")

    async def shutdown(self) -> None:
        await self.client.close()
        logger.info(f"{self.name} adapter shut down")

    async def health_check(self) -> bool:
        try:
            status = await self.fetch_status()
        except AdapterFault as e:
            logger.warning(f"{self.name} health check failed: {e}")
            return False
        return status.status == "ok"

    # ============================================
    # Catalog
    # ============================================

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load the market/currency catalog once, or again when reload=True.

        Both listings are fetched before the catalog is touched, so a failed
        refresh leaves the previous snapshot in use.
        """
        if self.catalog.loaded and not reload:
            return self.catalog.markets
        raw_currencies = await self.client.public_get(
            "currencies", {"limit": self.description.options.currencies_limit}
        )
        raw_markets = await self.client.public_get("markets", {
            "type": self.description.options.fetch_markets_type,
            "limit": self.description.options.markets_limit,
        })
        self.catalog.refresh(raw_markets, raw_currencies)
        return self.catalog.markets

    def market(self, symbol: str) -> Market:
        return self.catalog.market(symbol)

    def safe_market(self, market_id: Optional[str]) -> Optional[Market]:
        return self.catalog.market_by_id(market_id)

    def currency(self, code: str) -> Currency:
        return self.catalog.currency(code)

    async def fetch_markets(self) -> List[Market]:
        response = await self.client.public_get("markets", {
            "type": self.description.options.fetch_markets_type,
            "limit": self.description.options.markets_limit,
        })
        return parse_markets(response, self.description)

    async def fetch_currencies(self) -> Dict[str, Currency]:
        response = await self.client.public_get(
            "currencies", {"limit": self.description.options.currencies_limit}
        )
        return {currency.code: currency for currency in parse_currencies(response, self.description)}

    # ============================================
    # Public Market Data
    # ============================================

    async def fetch_time(self) -> Optional[int]:
        """Server time in milliseconds (the venue returns an ISO-8601 string)."""
        response = await self.client.public_get("timestamp")
        return parse8601(response)

    async def fetch_status(self) -> ExchangeStatus:
        response = await self.client.public_get("health/ready")
        status = "ok" if str(response).strip() == "200" else "maintenance"
        return ExchangeStatus(
            exchange=self.name,
            status=status,
            updated=current_utc_timestamp(milliseconds=True),
            info=response,
        )

    async def fetch_ticker(self, symbol: str) -> Ticker:
        await self.load_markets()
        market = self.market(symbol)
        response = await self.client.public_get("markets/{market}/tickers", {"market": market.id})
        return self.normalizer.parse_ticker(response, market)

    async def fetch_tickers(self, symbols: Optional[Sequence[str]] = None) -> Dict[str, Ticker]:
        await self.load_markets()
        response = await self.client.public_get("markets/tickers")
        return self.normalizer.parse_tickers(response, symbols)

    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        await self.load_markets()
        market = self.market(symbol)
        depth = limit if limit is not None else self.description.options.order_book_limit
        response = await self.client.public_get("markets/{market}/order-book", {
            "market": market.id,
            "bids_limit": depth,
            "asks_limit": depth,
        })
        return self.normalizer.parse_order_book(response, market.symbol)

    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        """
        Public trade history.

        `since` is forwarded as the venue's `timestamp` filter (seconds); the
        venue applies it, so the result is not filtered again here.
        """
        await self.load_markets()
        market = self.market(symbol)
        request: Dict[str, Any] = {"market": market.id, "order_by": "asc"}
        if limit is not None:
            request["limit"] = limit
        if since is not None:
            request["timestamp"] = seconds(since)
        response = await self.client.public_get("markets/{market}/trades", request)
        return self.normalizer.parse_trade_history(response, market)

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Candle]:
        period = self.description.timeframes.get(timeframe)
        if period is None:
            raise ArgumentFault(
                f"{self.name} does not support timeframe {timeframe}; "
                f"use one of {', '.join(self.description.timeframes)}",
                exchange=self.name,
            )
        await self.load_markets()
        market = self.market(symbol)
        if limit is None:
            limit = self.description.options.ohlcv_limit
        request: Dict[str, Any] = {"market": market.id, "period": period, "limit": limit}
        if since is not None:
            request["time_from"] = seconds(since)
        response = await self.client.public_get("markets/{market}/k-line", request)
        return self.normalizer.parse_ohlcvs(response, since, limit)

    # ============================================
    # Account
    # ============================================

    async def fetch_balance(self) -> Balance:
        response = await self.client.private_get("account/balances")
        return self.normalizer.parse_balance(response)

    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        await self.load_markets()
        currency = self.currency(code)
        response = await self.client.private_get(
            "account/deposit_address/{currency}", {"currency": currency.id}
        )
        address = self.normalizer.parse_deposit_address(response, currency.code)
        check_address(address.address, self.name)
        return address

    async def fetch_beneficiaries(self) -> Any:
        """Raw beneficiary list; its ids are what withdraw() expects."""
        return await self.client.private_get("account/beneficiaries")

    async def _fetch_transactions_by_type(
        self,
        type_: Optional[str],
        code: Optional[str],
        since: Optional[int],
        limit: Optional[int]
    ) -> List[Transaction]:
        await self.load_markets()
        currency = None
        request: Dict[str, Any] = {"order_by": "asc"}
        if code is not None:
            currency = self.currency(code)
            request["currency"] = currency.id
        if since is not None:
            request["time_from"] = seconds(since)
        if limit is not None:
            request["limit"] = limit

        path = "account/transactions"
        if type_ == "deposit":
            path = "account/deposits"
        elif type_ == "withdrawal":
            path = "account/withdraws"

        response = await self.client.private_get(path, request)
        return self.normalizer.parse_transactions(
            response,
            type_=type_,
            currency_code=currency.code if currency is not None else None,
            since=since,
            limit=limit,
        )

    async def fetch_transactions(
        self,
        code: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        return await self._fetch_transactions_by_type(None, code, since, limit)

    async def fetch_deposits(
        self,
        code: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        return await self._fetch_transactions_by_type("deposit", code, since, limit)

    async def fetch_withdrawals(
        self,
        code: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        return await self._fetch_transactions_by_type("withdrawal", code, since, limit)

    async def withdraw(
        self,
        code: str,
        amount: Any,
        address: str,
        tag: Optional[str] = None,
        beneficiary_id: Optional[str] = None
    ) -> Transaction:
        """
        Withdraw to a pre-registered beneficiary.

        Args:
            code: Canonical currency code
            amount: Amount as string, Decimal or number
            address: Destination address (validated locally only)
            tag: Optional note attached to the withdrawal
            beneficiary_id: Id from fetch_beneficiaries()

        Raises:
            AuthenticationFault: No TOTP secret configured
            ArgumentFault: Missing beneficiary id or invalid address

        Both checks run before any network call.
        """
        if not self.totp_secret:
            raise AuthenticationFault(
                f"{self.name} requires a TOTP secret to withdraw funds", exchange=self.name
            )
        if beneficiary_id is None or beneficiary_id == "":
            raise ArgumentFault(
                f"{self.name} withdraw() requires a beneficiary_id (see fetch_beneficiaries())",
                exchange=self.name,
            )
        check_address(address, self.name)

        await self.load_markets()
        currency = self.currency(code)
        request: Dict[str, Any] = {
            "otp": pyotp.TOTP(self.totp_secret).now(),
            "beneficiary_id": beneficiary_id,
            "currency": currency.id,
            "amount": decimal_to_string(to_decimal(amount)),
            "note": tag,
        }
        response = await self.client.private_post("account/withdraws", request)
        if not isinstance(response, dict):
            return Transaction(exchange=self.name, type="withdrawal", currency=currency.code, info=response)
        prepared = self.normalizer.prepare_transaction(response, "withdrawal")
        return self.normalizer.parse_transaction(prepared, currency.code)

    # ============================================
    # Trading
    # ============================================

    def amount_to_precision(self, symbol: str, amount: Any) -> str:
        digits = self.market(symbol).precision.amount
        if digits is None:
            return decimal_to_string(to_decimal(amount))
        return Precise.string_to_precision(amount, digits, truncate=True)

    def price_to_precision(self, symbol: str, price: Any) -> str:
        digits = self.market(symbol).precision.price
        if digits is None:
            return decimal_to_string(to_decimal(price))
        return Precise.string_to_precision(price, digits, truncate=False)

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Any,
        price: Optional[Any] = None
    ) -> Order:
        await self.load_markets()
        market = self.market(symbol)
        request: Dict[str, Any] = {
            "market": market.id,
            "side": side,
            "volume": self.amount_to_precision(symbol, amount),
            "ord_type": type,
        }
        if type == "limit":
            if price is None:
                raise ArgumentFault(f"{self.name} limit orders require a price", exchange=self.name)
            request["price"] = self.price_to_precision(symbol, price)
        elif price is not None:
            request["price"] = decimal_to_string(to_decimal(price))
        response = await self.client.private_post("market/orders", request)
        return self.normalizer.parse_order(response, market)

    async def cancel_order(self, id: str, symbol: Optional[str] = None) -> Order:
        """
        Cancel one order.

        If the order the venue returns is already closed or canceled, the
        cancel had nothing to act on and OrderNotFound is raised even though
        the HTTP call succeeded.
        """
        await self.load_markets()
        market = self.market(symbol) if symbol is not None else None
        response = await self.client.private_post("market/orders/{id}/cancel", {"id": id})
        order = self.normalizer.parse_order(response, market)
        if order.status in FINISHED_ORDER_STATUSES:
            raise OrderNotFound(
                f"{self.name} {json.dumps(order.model_dump(mode='json'))}",
                exchange=self.name,
                body=response,
            )
        return order

    async def cancel_all_orders(self, symbol: Optional[str] = None) -> List[Order]:
        await self.load_markets()
        market = None
        request: Dict[str, Any] = {"market_type": "spot"}
        if symbol is not None:
            market = self.market(symbol)
            request["market"] = market.id
        response = await self.client.private_post("market/orders/cancel", request)
        return self.normalizer.parse_orders(response, market)

    async def fetch_order(self, id: str, symbol: Optional[str] = None) -> Order:
        await self.load_markets()
        market = self.market(symbol) if symbol is not None else None
        response = await self.client.private_get("market/orders/{id}", {"id": id})
        return self.normalizer.parse_order(response, market)

    async def fetch_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        state: Optional[str] = None
    ) -> List[Order]:
        """
        Order history, oldest first.

        Args:
            state: Venue order state filter ("wait", "done", "cancel")
        """
        await self.load_markets()
        market = None
        request: Dict[str, Any] = {"market_type": "spot", "order_by": "asc"}
        if symbol is not None:
            market = self.market(symbol)
            request["market"] = market.id
        if since is not None:
            request["time_from"] = seconds(since)
        if limit is not None:
            request["limit"] = limit
        if state is not None:
            request["state"] = state
        response = await self.client.private_get("market/orders", request)
        return self.normalizer.parse_orders(response, market, limit=limit)

    async def fetch_open_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Order]:
        return await self.fetch_orders(symbol, since, limit, state="wait")

    async def fetch_closed_orders(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Order]:
        return await self.fetch_orders(symbol, since, limit, state="done")

    async def fetch_my_trades(
        self,
        symbol: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        await self.load_markets()
        market = None
        request: Dict[str, Any] = {"market_type": "spot", "order_by": "asc"}
        if symbol is not None:
            market = self.market(symbol)
            request["market"] = market.id
        if since is not None:
            request["time_from"] = seconds(since)
        if limit is not None:
            request["limit"] = limit
        response = await self.client.private_get("market/trades", request)
        return self.normalizer.parse_trade_history(response, market, limit=limit)


__all__ = ["ExbitronExchange", "EXBITRON", "ExchangeDescription"]

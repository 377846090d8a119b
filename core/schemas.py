"""
Canonical Trading-Data Schemas

This module defines the Pydantic models every exchange adapter converges on.
Regardless of the venue's naming, units or encodings, normalized data is
returned in these shapes.

Models:
    - Currency / Market: catalog records (read-only once built)
    - Ticker: 24h statistics with derived change/percentage/average
    - OrderBook: full bid/ask snapshot
    - Trade, Order, Transaction: account and market activity
    - Balance: per-currency free/used amounts
    - Candle: fixed 6-tuple OHLCV row
    - DepositAddress, ExchangeStatus

Conventions:
    - Timestamps are integer milliseconds since epoch (UTC)
    - Money values are floats produced from exact decimal strings at the very
      end of normalization (see core/precise.py)
    - Any field the venue does not report is None, never a fabricated zero
    - `info` carries the raw venue payload for diagnostics
"""

from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from core.precise import Precise, parse_number
from core.utils.time import iso8601


# ============================================
# Base Model
# ============================================

class CanonicalModel(BaseModel):
    """
    Base model for all canonical records.

    Every record knows which exchange produced it and keeps the raw payload.
    """

    exchange: str = Field(
        ...,
        description="Source exchange identifier (lowercase)",
        examples=["exbitron"]
    )

    info: Any = Field(
        default=None,
        description="Raw venue payload the record was built from",
        exclude=True
    )


class TimestampedModel(CanonicalModel):
    """Records carrying an event time."""

    timestamp: Optional[int] = Field(
        default=None,
        description="Event time in milliseconds since epoch (UTC)"
    )

    @computed_field
    @property
    def datetime(self) -> Optional[str]:
        """ISO-8601 rendering of timestamp."""
        return iso8601(self.timestamp)


# ============================================
# Catalog Records
# ============================================

class MinMax(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None


class CurrencyLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: MinMax = MinMax()
    withdraw: MinMax = MinMax()


class Currency(CanonicalModel):
    """
    Currency Record

    code is derived from the venue id through the canonical alias table, so
    "usdt-trc20" and "USDT-TRC20" both become "USDT".
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Venue-native currency id")
    code: str = Field(..., description="Canonical currency code")
    name: Optional[str] = None
    type: str = Field(..., description="'fiat' or 'crypto'")
    active: bool = Field(..., description="Deposits AND withdrawals enabled")
    fee: Optional[float] = Field(None, description="Withdrawal fee")
    precision: Optional[float] = None
    limits: CurrencyLimits = CurrencyLimits()


class MarketPrecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Optional[int] = Field(None, description="Decimal places for amounts")
    price: Optional[int] = Field(None, description="Decimal places for prices")


class MarketLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: MinMax = MinMax()
    price: MinMax = MinMax()


class Market(CanonicalModel):
    """
    Market Record

    Example:
        >>> Market(exchange="exbitron", id="ltcusdt", symbol="LTC/USDT",
        ...        base="LTC", quote="USDT", base_id="ltc", quote_id="usdt",
        ...        active=True, spot=True)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Venue-native market id", examples=["ltcusdt"])
    symbol: str = Field(..., description="BASE/QUOTE", examples=["LTC/USDT"])
    base: str
    quote: str
    base_id: str
    quote_id: str
    active: bool
    spot: bool = True
    maker: Optional[float] = None
    taker: Optional[float] = None
    percentage: bool = True
    precision: MarketPrecision = MarketPrecision()
    limits: MarketLimits = MarketLimits()


# ============================================
# Market Data Records
# ============================================

class Ticker(TimestampedModel):
    """
    Ticker Record

    change, percentage and average are derived from last/open in decimal
    arithmetic by the normalizer; close always equals last.
    """

    symbol: Optional[str] = None
    high: Optional[float] = None
    low: Optional[float] = None
    bid: Optional[float] = None
    ask: Optional[float] = None
    vwap: Optional[float] = None
    open: Optional[float] = None
    close: Optional[float] = None
    last: Optional[float] = None
    change: Optional[float] = None
    percentage: Optional[float] = None
    average: Optional[float] = None
    base_volume: Optional[float] = None
    quote_volume: Optional[float] = None


class OrderBook(TimestampedModel):
    """
    Order Book Snapshot

    bids are sorted by price descending, asks ascending; each level is
    [price, remaining_volume]. A snapshot is never merged with a previous one.
    """

    symbol: Optional[str] = None
    bids: List[List[float]] = Field(default_factory=list)
    asks: List[List[float]] = Field(default_factory=list)
    nonce: Optional[int] = None


class Candle(NamedTuple):
    """One OHLCV row, column order fixed."""

    timestamp: int
    open: Optional[float]
    high: Optional[float]
    low: Optional[float]
    close: Optional[float]
    volume: Optional[float]


# ============================================
# Account Records
# ============================================

class Trade(TimestampedModel):
    id: Optional[str] = None
    symbol: Optional[str] = None
    order: Optional[str] = Field(None, description="Id of the order the trade belongs to")
    type: Optional[str] = None
    side: Optional[str] = None
    taker_or_maker: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    cost: Optional[float] = None


class Order(TimestampedModel):
    """
    Order Record

    amount, filled and remaining are reported by the venue independently and
    are not reconciled against each other.
    """

    id: Optional[str] = None
    client_order_id: Optional[str] = None
    last_trade_timestamp: Optional[int] = None
    symbol: Optional[str] = None
    type: Optional[str] = None
    side: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    filled: Optional[float] = None
    remaining: Optional[float] = None
    average: Optional[float] = None
    status: Optional[str] = Field(None, description="open | closed | canceled | raw venue state")
    trades: List[Trade] = Field(default_factory=list)


class TransactionFee(BaseModel):
    currency: Optional[str] = None
    cost: Optional[float] = None
    rate: Optional[float] = None


class Transaction(TimestampedModel):
    id: Optional[str] = None
    txid: Optional[str] = None
    type: Optional[str] = Field(None, description="deposit | withdrawal")
    address: Optional[str] = None
    tag: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[str] = Field(None, description="pending | ok | failed | canceled | raw venue state")
    updated: Optional[int] = None
    comment: Optional[str] = None
    fee: TransactionFee = Field(default_factory=TransactionFee)


class BalanceAccount(BaseModel):
    """
    Free/used amounts of one currency.

    total is always derived from free + used, summed on the values as given
    (pass the venue's decimal strings to keep every digit).
    """

    free: Optional[float] = None
    used: Optional[float] = None
    total: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def derive_total(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["total"] = parse_number(Precise.string_add(data.get("free"), data.get("used")))
        return data


class Balance(TimestampedModel):
    """
    Account Balance

    Only currencies present in the venue response appear in accounts; an
    absent currency is unknown, not zero.
    """

    accounts: Dict[str, BalanceAccount] = Field(default_factory=dict)

    @property
    def free(self) -> Dict[str, Optional[float]]:
        return {code: account.free for code, account in self.accounts.items()}

    @property
    def used(self) -> Dict[str, Optional[float]]:
        return {code: account.used for code, account in self.accounts.items()}

    @property
    def total(self) -> Dict[str, Optional[float]]:
        return {code: account.total for code, account in self.accounts.items()}


class DepositAddress(CanonicalModel):
    currency: str
    address: str
    tag: Optional[str] = None


class ExchangeStatus(CanonicalModel):
    status: str = Field(..., description="ok | maintenance")
    updated: int = Field(..., description="Time of the check in milliseconds")

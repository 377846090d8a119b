"""
Exbitron Response Normalizer

Converts each raw response shape into canonical records (core/schemas.py).
Every parse_* method is a pure function of its input, except that a record
whose market is not supplied is resolved through the MarketCatalog by the raw
`market` id. An id the catalog does not know yields symbol=None.

Money fields are read as decimal strings; derived values (ticker change,
percentage, average) are computed with Precise and only then turned into
numbers.

Timestamp conventions per response kind:
    ticker `at`           epoch seconds
    candle column 0       epoch seconds
    public trades         epoch seconds (reformatted to ISO before parsing)
    orders, private trades, transactions   ISO-8601 strings
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar

from core.logging import get_logger
from core.precise import Precise, parse_number
from core.schemas import (
    Balance,
    BalanceAccount,
    Candle,
    DepositAddress,
    Market,
    Order,
    OrderBook,
    Ticker,
    Trade,
    Transaction,
    TransactionFee,
)
from core.utils.parsing import (
    safe_number,
    safe_number_string,
    safe_string,
    safe_string_2,
    safe_value,
)
from core.utils.time import iso8601, parse8601, seconds_to_milliseconds
from exchanges.exbitron.catalog import MarketCatalog

logger = get_logger(__name__)

T = TypeVar("T")


ORDER_STATUSES: Dict[str, str] = {
    "wait": "open",
    "pending": "open",
    "done": "closed",
    "cancel": "canceled",
}

TRANSACTION_STATUSES: Dict[str, str] = {
    "accepted": "pending",
    "canceled": "canceled",
    "confirming": "pending",
    "dispatched": "ok",
    "errored": "failed",
    "failed": "failed",
    "invoiced": "pending",
    "prepared": "pending",
    "processing": "pending",
    "rejected": "failed",
    "skipped": "pending",
    "submitted": "pending",
    "succeed": "ok",
    "transfering": "pending",
}

TRANSACTION_TYPES: Dict[str, str] = {
    "Deposit": "deposit",
    "Withdraw": "withdrawal",
}


def parse_order_status(status: Optional[str]) -> Optional[str]:
    return ORDER_STATUSES.get(status, status)


def parse_transaction_status(status: Optional[str]) -> Optional[str]:
    return TRANSACTION_STATUSES.get(status, status)


def parse_transaction_type(type_: Optional[str]) -> Optional[str]:
    return TRANSACTION_TYPES.get(type_, type_)


def filter_by_since_limit(
    records: Iterable[T],
    since: Optional[int] = None,
    limit: Optional[int] = None,
    key: str = "timestamp"
) -> List[T]:
    """
    Sort records by timestamp, drop those before `since`, keep the first `limit`.

    Records without a timestamp sort first and are dropped when `since` is set.
    """
    def timestamp_of(record: T) -> Optional[int]:
        return getattr(record, key)

    result = sorted(records, key=lambda r: (timestamp_of(r) is not None, timestamp_of(r) or 0))
    if since is not None:
        result = [r for r in result if timestamp_of(r) is not None and timestamp_of(r) >= since]
    if limit is not None:
        result = result[:limit]
    return result


class ExbitronNormalizer:
    """
    Raw venue payload -> canonical record conversions.

    Args:
        catalog: MarketCatalog used to resolve market ids and currency codes
    """

    def __init__(self, catalog: MarketCatalog):
        self.catalog = catalog
        self.exchange = catalog.description.id

    def _symbol(self, raw: Any, market: Optional[Market]) -> Optional[str]:
        if market is None:
            market = self.catalog.market_by_id(safe_string(raw, "market"))
        return market.symbol if market is not None else None

    # ============================================
    # Ticker
    # ============================================

    def parse_ticker(self, raw: Any, market: Optional[Market] = None) -> Ticker:
        """
        Normalize a ticker.

        Response Format (single market; the batch endpoint maps market id -> this):
            {"at": 1666544755,
             "ticker": {"low": "90", "high": "120", "open": "100", "last": "110",
                        "avg_price": "104.2", "vol": "12.5", ...}}
        """
        timestamp = seconds_to_milliseconds(safe_value(raw, "at"))
        ticker = safe_value(raw, "ticker", raw)
        if market is None:
            market = self.catalog.market_by_id(safe_string(raw, "market"))

        last = safe_number_string(ticker, "last")
        open_ = safe_number_string(ticker, "open")
        change = Precise.string_sub(last, open_)
        average = Precise.string_div(Precise.string_add(last, open_), "2")
        percentage = None
        if change is not None:
            relative = "0"
            if not Precise.string_eq(open_, "0"):
                relative = Precise.string_div(change, open_)
            percentage = Precise.string_mul(relative, "100")

        return Ticker(
            exchange=self.exchange,
            symbol=market.symbol if market is not None else None,
            timestamp=timestamp,
            high=safe_number(ticker, "high"),
            low=safe_number(ticker, "low"),
            vwap=safe_number(ticker, "avg_price"),
            open=parse_number(open_),
            close=parse_number(last),
            last=parse_number(last),
            change=parse_number(change),
            percentage=parse_number(percentage),
            average=parse_number(average),
            info=raw,
        )

    def parse_tickers(self, response: Any, symbols: Optional[Sequence[str]] = None) -> Dict[str, Ticker]:
        """Batch tickers keyed by market id; unknown ids are dropped."""
        result: Dict[str, Ticker] = {}
        if not isinstance(response, dict):
            return result
        for market_id, raw in response.items():
            market = self.catalog.market_by_id(market_id)
            if market is None:
                logger.debug(f"Ticker for unknown {self.exchange} market {market_id} skipped")
                continue
            if symbols is not None and market.symbol not in symbols:
                continue
            result[market.symbol] = self.parse_ticker(raw, market)
        return result

    # ============================================
    # Order Book
    # ============================================

    def parse_order_book(self, response: Any, symbol: Optional[str] = None) -> OrderBook:
        """
        Normalize an order book snapshot.

        Response Format:
            {"asks": [{"price": "101", "remaining_volume": "2", ...}, ...],
             "bids": [{"price": "99", "remaining_volume": "1.5", ...}, ...]}
        """
        if isinstance(response, list):
            response = response[0] if response else {}
        return OrderBook(
            exchange=self.exchange,
            symbol=symbol,
            bids=self._parse_levels(safe_value(response, "bids", []), descending=True),
            asks=self._parse_levels(safe_value(response, "asks", []), descending=False),
            info=response,
        )

    @staticmethod
    def _parse_levels(entries: Any, descending: bool) -> List[List[float]]:
        levels = []
        for entry in entries if isinstance(entries, list) else []:
            price = safe_number(entry, "price")
            amount = safe_number(entry, "remaining_volume")
            if price is None or amount is None:
                continue
            levels.append([price, amount])
        levels.sort(key=lambda level: level[0], reverse=descending)
        return levels

    # ============================================
    # Trades
    # ============================================

    def parse_trade(self, raw: Any, market: Optional[Market] = None) -> Trade:
        """
        Normalize one trade. created_at must be an ISO-8601 string here.

        side is taken as reported; when absent it is the opposite of
        taker_type (a taker buying hits a resting sell).
        """
        side = safe_string(raw, "side")
        if side is None:
            taker_type = safe_string(raw, "taker_type")
            side = "sell" if taker_type == "buy" else "buy"
        return Trade(
            exchange=self.exchange,
            id=safe_string(raw, "id"),
            timestamp=parse8601(safe_string(raw, "created_at")),
            symbol=self._symbol(raw, market),
            order=safe_string(raw, "order_id"),
            side=side,
            price=safe_number(raw, "price"),
            amount=safe_number(raw, "amount"),
            cost=safe_number(raw, "total"),
            info=raw,
        )

    def parse_trades(
        self,
        trades: Any,
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        if not isinstance(trades, list):
            return []
        parsed = [self.parse_trade(raw, market) for raw in trades]
        return filter_by_since_limit(parsed, since, limit)

    def parse_trade_history(
        self,
        response: Any,
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        """
        Trade lists returned by the trade-history endpoints.

        The public endpoint reports created_at in epoch seconds; it is rewritten
        to ISO-8601 first so parse_trade sees the same shape as everywhere else.
        Entries already carrying an ISO string are left as they are.
        """
        if not isinstance(response, list):
            return []
        prepared = []
        for item in response:
            if not isinstance(item, dict):
                continue
            item = dict(item)
            created_at = item.get("created_at")
            if isinstance(created_at, (int, float)) and not isinstance(created_at, bool):
                item["created_at"] = iso8601(seconds_to_milliseconds(created_at))
            prepared.append(item)
        return self.parse_trades(prepared, market, since, limit)

    # ============================================
    # Candles
    # ============================================

    @staticmethod
    def parse_ohlcv(row: Sequence[Any]) -> Candle:
        """[1633392000, 0.01, 7.924, 0.001, 7.8372, 0.9783] -> Candle(ms, o, h, l, c, v)"""
        return Candle(
            seconds_to_milliseconds(safe_value(row, 0)),
            safe_number(row, 1),
            safe_number(row, 2),
            safe_number(row, 3),
            safe_number(row, 4),
            safe_number(row, 5),
        )

    def parse_ohlcvs(self, response: Any, since: Optional[int] = None, limit: Optional[int] = None) -> List[Candle]:
        if not isinstance(response, list):
            return []
        candles = [self.parse_ohlcv(row) for row in response if isinstance(row, (list, tuple))]
        # rows without an open time are dropped
        candles = [candle for candle in candles if candle.timestamp is not None]
        return filter_by_since_limit(candles, since, limit)

    # ============================================
    # Orders
    # ============================================

    def parse_order(self, raw: Any, market: Optional[Market] = None) -> Order:
        """
        Normalize an order.

        Response Format:
            {"id": 42, "side": "buy", "ord_type": "limit", "price": "100",
             "avg_price": "0", "state": "wait", "market": "ltcusdt",
             "created_at": "2022-10-23T17:05:55+02:00", "updated_at": "...",
             "origin_volume": "1", "remaining_volume": "1",
             "executed_volume": "0", "trades": [...]}
        """
        return Order(
            exchange=self.exchange,
            id=safe_string(raw, "id"),
            timestamp=parse8601(safe_string(raw, "created_at")),
            last_trade_timestamp=parse8601(safe_string(raw, "updated_at")),
            symbol=self._symbol(raw, market),
            type=safe_string(raw, "ord_type"),
            side=safe_string(raw, "side"),
            price=safe_number(raw, "price"),
            amount=safe_number(raw, "origin_volume"),
            filled=safe_number(raw, "executed_volume"),
            remaining=safe_number(raw, "remaining_volume"),
            average=safe_number(raw, "avg_price"),
            status=parse_order_status(safe_string(raw, "state")),
            trades=self.parse_trades(safe_value(raw, "trades", [])),
            info=raw,
        )

    def parse_orders(
        self,
        response: Any,
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Order]:
        if not isinstance(response, list):
            return []
        orders = [self.parse_order(raw, market) for raw in response]
        return filter_by_since_limit(orders, since, limit)

    # ============================================
    # Transactions
    # ============================================

    def parse_transaction(self, raw: Any, currency_code: Optional[str] = None) -> Transaction:
        if currency_code is None:
            currency_code = self.catalog.currency_code(safe_string(raw, "currency"))
        comment = safe_string(raw, "note")
        return Transaction(
            exchange=self.exchange,
            id=safe_string_2(raw, "id", "tid"),
            txid=safe_string(raw, "txid"),
            timestamp=parse8601(safe_string(raw, "created_at")),
            updated=parse8601(safe_string(raw, "updated_at")),
            type=parse_transaction_type(safe_string(raw, "type")),
            address=safe_string(raw, "address"),
            tag=comment,
            comment=comment,
            amount=safe_number(raw, "amount"),
            currency=currency_code,
            status=parse_transaction_status(safe_string(raw, "state")),
            fee=TransactionFee(currency=currency_code, cost=safe_number(raw, "fee")),
            info=raw,
        )

    @staticmethod
    def prepare_transaction(item: Dict[str, Any], type_: Optional[str]) -> Dict[str, Any]:
        """
        Align deposit/withdrawal history rows with the generic transaction shape.

        Deposits report completion as completed_at; withdrawals name the
        destination rid and the chain hash blockchain_txid.
        """
        item = dict(item)
        if type_ == "deposit":
            item["type"] = "deposit"
            item["updated_at"] = item.get("completed_at")
        elif type_ == "withdrawal":
            item["type"] = "withdrawal"
            item["address"] = item.get("rid")
            item["txid"] = item.get("blockchain_txid")
        return item

    def parse_transactions(
        self,
        response: Any,
        type_: Optional[str] = None,
        currency_code: Optional[str] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        if not isinstance(response, list):
            return []
        transactions = [
            self.parse_transaction(self.prepare_transaction(item, type_), currency_code)
            for item in response
            if isinstance(item, dict)
        ]
        return filter_by_since_limit(transactions, since, limit)

    # ============================================
    # Balance & Addresses
    # ============================================

    def parse_balance(self, response: Any) -> Balance:
        """
        Response Format:
            [{"currency": "usdt-trc20", "balance": "10.5", "locked": "1.5"}, ...]
        """
        accounts: Dict[str, BalanceAccount] = {}
        for entry in response if isinstance(response, list) else []:
            code = self.catalog.currency_code(safe_string(entry, "currency"))
            if code is None:
                continue
            accounts[code] = BalanceAccount(
                free=safe_number_string(entry, "balance"),
                used=safe_number_string(entry, "locked"),
            )
        return Balance(exchange=self.exchange, accounts=accounts, info=response)

    def parse_deposit_address(self, response: Any, code: str) -> DepositAddress:
        return DepositAddress(
            exchange=self.exchange,
            currency=code,
            address=safe_string(response, "address", ""),
            info=response,
        )

"""
Unit Tests for the Exbitron Response Normalizer

These tests verify that raw venue payloads become canonical records:
- Ticker change/percentage/average computed in decimal arithmetic
- Order book levels sorted per side
- Trade side inferred from the taker side
- Order and transaction states mapped to canonical statuses

Run with:
    pytest tests/unit/test_normalizer.py -v
"""

import pytest

from core.schemas import Candle, Order, Ticker, Trade
from exchanges.exbitron.normalizer import (
    ExbitronNormalizer,
    filter_by_since_limit,
    parse_order_status,
    parse_transaction_status,
)


@pytest.fixture
def normalizer(catalog):
    return ExbitronNormalizer(catalog)


# ============================================
# Tickers
# ============================================

class TestParseTicker:
    """Ticker normalization"""

    def test_derived_fields(self, normalizer, catalog):
        raw = {"at": 1666544755, "ticker": {"open": "100", "last": "110", "high": "120", "low": "90", "avg_price": "104.2"}}
        ticker = normalizer.parse_ticker(raw, catalog.market("LTC/USDT"))

        assert isinstance(ticker, Ticker)
        assert ticker.symbol == "LTC/USDT"
        assert ticker.timestamp == 1666544755000
        assert ticker.datetime == "2022-10-23T17:05:55.000Z"
        assert ticker.change == 10.0
        assert ticker.percentage == 10.0
        assert ticker.average == 105.0
        assert ticker.last == ticker.close == 110.0
        assert ticker.vwap == 104.2
        assert ticker.high == 120.0
        assert ticker.low == 90.0

    def test_zero_open_gives_zero_percentage(self, normalizer, catalog):
        raw = {"at": 1666544755, "ticker": {"open": "0", "last": "5"}}
        ticker = normalizer.parse_ticker(raw, catalog.market("LTC/USDT"))

        assert ticker.percentage == 0.0
        assert ticker.change == 5.0
        assert ticker.average == 2.5

    def test_missing_last_leaves_derived_fields_empty(self, normalizer, catalog):
        ticker = normalizer.parse_ticker({"ticker": {"open": "100"}}, catalog.market("LTC/USDT"))

        assert ticker.change is None
        assert ticker.percentage is None
        assert ticker.average is None
        assert ticker.timestamp is None

    def test_market_resolved_from_raw_id(self, normalizer):
        ticker = normalizer.parse_ticker({"market": "btcusdt", "ticker": {"last": "1"}})
        assert ticker.symbol == "BTC/USDT"

    def test_unknown_market_id_gives_no_symbol(self, normalizer):
        assert normalizer.parse_ticker({"market": "dogeusdt", "ticker": {}}).symbol is None

    def test_parse_tickers_skips_unknown_markets(self, normalizer):
        response = {
            "ltcusdt": {"at": 1, "ticker": {"last": "60"}},
            "dogeusdt": {"at": 1, "ticker": {"last": "0.1"}},
        }
        tickers = normalizer.parse_tickers(response)

        assert list(tickers) == ["LTC/USDT"]
        assert tickers["LTC/USDT"].last == 60.0

    def test_parse_tickers_symbol_filter(self, normalizer):
        response = {
            "ltcusdt": {"ticker": {"last": "60"}},
            "btcusdt": {"ticker": {"last": "20000"}},
        }
        assert list(normalizer.parse_tickers(response, ["BTC/USDT"])) == ["BTC/USDT"]


# ============================================
# Order Book
# ============================================

class TestParseOrderBook:
    """Order book snapshots"""

    def test_sides_are_sorted(self, normalizer):
        response = {
            "asks": [{"price": "102", "remaining_volume": "1"}, {"price": "101", "remaining_volume": "2"}],
            "bids": [{"price": "98", "remaining_volume": "3"}, {"price": "99", "remaining_volume": "1.5"}],
        }
        book = normalizer.parse_order_book(response, "LTC/USDT")

        assert book.symbol == "LTC/USDT"
        assert book.bids == [[99.0, 1.5], [98.0, 3.0]]
        assert book.asks == [[101.0, 2.0], [102.0, 1.0]]

    def test_empty_book(self, normalizer):
        book = normalizer.parse_order_book({}, "LTC/USDT")
        assert book.bids == []
        assert book.asks == []

    def test_list_wrapped_response(self, normalizer):
        book = normalizer.parse_order_book([{"asks": [{"price": "1", "remaining_volume": "1"}], "bids": []}])
        assert book.asks == [[1.0, 1.0]]


# ============================================
# Trades & Candles
# ============================================

class TestParseTrades:
    """Public and private trades"""

    def test_side_is_opposite_of_taker_type(self, normalizer, catalog):
        raw = {"id": 1, "price": "60", "amount": "2", "total": "120", "market": "ltcusdt",
               "created_at": "2022-10-23T17:05:55+02:00", "taker_type": "buy"}
        trade = normalizer.parse_trade(raw)

        assert isinstance(trade, Trade)
        assert trade.side == "sell"
        assert trade.symbol == "LTC/USDT"
        assert trade.timestamp == 1666537555000
        assert trade.cost == 120.0

    def test_taker_sell_means_buy(self, normalizer):
        assert normalizer.parse_trade({"taker_type": "sell"}).side == "buy"

    def test_explicit_side_is_kept(self, normalizer):
        assert normalizer.parse_trade({"side": "buy", "taker_type": "buy"}).side == "buy"

    def test_trade_history_numeric_created_at(self, normalizer, catalog):
        response = [
            {"id": 2, "price": "61", "amount": "1", "created_at": 1666544800, "taker_type": "sell"},
            {"id": 1, "price": "60", "amount": "1", "created_at": 1666544755, "taker_type": "buy"},
            "not a trade",
        ]
        trades = normalizer.parse_trade_history(response, catalog.market("LTC/USDT"))

        assert [t.id for t in trades] == ["1", "2"]
        assert trades[0].timestamp == 1666544755000
        assert trades[0].symbol == "LTC/USDT"

    def test_trade_history_iso_created_at_untouched(self, normalizer):
        trades = normalizer.parse_trade_history([{"id": 5, "created_at": "2022-10-23T15:05:55Z", "side": "buy"}])
        assert trades[0].timestamp == 1666537555000

    def test_parse_ohlcv(self, normalizer):
        candles = normalizer.parse_ohlcvs([
            [1633392060, 2, 3, 1, 2.5, 10],
            [1633392000, 1, 2, 0.5, 1.5, 7.5],
        ])

        assert candles == [
            Candle(1633392000000, 1.0, 2.0, 0.5, 1.5, 7.5),
            Candle(1633392060000, 2.0, 3.0, 1.0, 2.5, 10.0),
        ]

    def test_parse_ohlcv_since_limit(self, normalizer):
        rows = [[1000, 1, 1, 1, 1, 1], [2000, 1, 1, 1, 1, 1], [3000, 1, 1, 1, 1, 1]]
        candles = normalizer.parse_ohlcvs(rows, since=2000000, limit=1)
        assert [c.timestamp for c in candles] == [2000000]

    def test_parse_ohlcv_drops_rows_without_open_time(self, normalizer):
        candles = normalizer.parse_ohlcvs([
            [None, 1, 1, 1, 1, 1],
            ["n/a", 1, 1, 1, 1, 1],
            [1633392000, 1, 2, 0.5, 1.5, 7.5],
        ])
        assert [c.timestamp for c in candles] == [1633392000000]


# ============================================
# Orders
# ============================================

class TestParseOrder:
    """Order normalization"""

    RAW = {
        "id": 42,
        "side": "buy",
        "ord_type": "limit",
        "price": "60",
        "avg_price": "0",
        "state": "wait",
        "market": "ltcusdt",
        "created_at": "2022-10-23T17:05:55+02:00",
        "updated_at": "2022-10-23T17:06:00+02:00",
        "origin_volume": "1.5",
        "remaining_volume": "1",
        "executed_volume": "0.5",
        "trades": [{"id": 9, "price": "60", "amount": "0.5", "side": "buy", "market": "ltcusdt",
                    "created_at": "2022-10-23T17:05:58+02:00"}],
    }

    def test_fields(self, normalizer):
        order = normalizer.parse_order(self.RAW)

        assert isinstance(order, Order)
        assert order.id == "42"
        assert order.symbol == "LTC/USDT"
        assert order.type == "limit"
        assert order.status == "open"
        assert order.amount == 1.5
        assert order.filled == 0.5
        assert order.remaining == 1.0
        assert order.timestamp == 1666537555000
        assert order.last_trade_timestamp == 1666537560000
        assert len(order.trades) == 1
        assert order.trades[0].symbol == "LTC/USDT"

    @pytest.mark.parametrize("state,status", [
        ("wait", "open"),
        ("pending", "open"),
        ("done", "closed"),
        ("cancel", "canceled"),
        ("reject", "reject"),
    ])
    def test_state_mapping(self, state, status):
        assert parse_order_status(state) == status

    def test_parse_orders_sorted_by_timestamp(self, normalizer):
        later = dict(self.RAW, id=2, created_at="2022-10-24T00:00:00Z")
        earlier = dict(self.RAW, id=1, created_at="2022-10-22T00:00:00Z")
        assert [o.id for o in normalizer.parse_orders([later, earlier])] == ["1", "2"]


# ============================================
# Transactions, Balances, Addresses
# ============================================

class TestParseTransactions:
    """Deposits, withdrawals and the generic history"""

    def test_withdrawal_preparation(self, normalizer):
        raw = {"id": 7, "currency": "usdt-trc20", "type": "coin", "amount": "10", "fee": "1",
               "rid": "TXyz", "blockchain_txid": "0xabc", "state": "succeed", "note": "rent",
               "created_at": "2022-10-23T15:05:55Z", "updated_at": "2022-10-23T15:15:55Z"}
        [tx] = normalizer.parse_transactions([raw], type_="withdrawal")

        assert tx.type == "withdrawal"
        assert tx.address == "TXyz"
        assert tx.txid == "0xabc"
        assert tx.currency == "USDT"
        assert tx.status == "ok"
        assert tx.tag == tx.comment == "rent"
        assert tx.fee.cost == 1.0
        assert tx.fee.currency == "USDT"

    def test_deposit_updated_from_completed_at(self, normalizer):
        raw = {"tid": "TID1", "currency": "ltc", "amount": "2", "state": "accepted",
               "created_at": "2022-10-23T15:05:55Z", "completed_at": "2022-10-23T15:10:00Z"}
        [tx] = normalizer.parse_transactions([raw], type_="deposit", currency_code="LTC")

        assert tx.id == "TID1"
        assert tx.type == "deposit"
        assert tx.status == "pending"
        assert tx.updated == 1666537800000

    def test_generic_history_type(self, normalizer):
        [tx] = normalizer.parse_transactions([{"id": 1, "type": "Deposit", "currency": "btc"}])
        assert tx.type == "deposit"
        assert tx.currency == "BTC"

    def test_since_and_limit(self, normalizer):
        rows = [
            {"id": i, "currency": "ltc", "created_at": f"2022-10-2{i}T00:00:00Z"}
            for i in range(1, 5)
        ]
        txs = normalizer.parse_transactions(rows, since=1666483200000, limit=2)  # 2022-10-23
        assert [t.id for t in txs] == ["3", "4"]

    @pytest.mark.parametrize("state,status", [
        ("dispatched", "ok"),
        ("errored", "failed"),
        ("rejected", "failed"),
        ("transfering", "pending"),
        ("canceled", "canceled"),
        ("something_new", "something_new"),
    ])
    def test_status_mapping(self, state, status):
        assert parse_transaction_status(state) == status


class TestParseBalance:
    """Balances keyed by canonical code"""

    def test_balance(self, normalizer):
        balance = normalizer.parse_balance([
            {"currency": "usdt-trc20", "balance": "10.5", "locked": "1.5"},
            {"currency": "ltc", "balance": "0.1", "locked": "0.2"},
        ])

        assert balance.free == {"USDT": 10.5, "LTC": 0.1}
        assert balance.used == {"USDT": 1.5, "LTC": 0.2}
        assert balance.total["USDT"] == 12.0
        assert balance.total["LTC"] == 0.3

    def test_total_sums_exact_decimal_strings(self, normalizer):
        balance = normalizer.parse_balance([
            {"currency": "btc", "balance": "10000000000000001", "locked": "1"},
        ])
        assert balance.total["BTC"] == 10000000000000002.0

    def test_total_unknown_when_locked_missing(self, normalizer):
        balance = normalizer.parse_balance([{"currency": "ltc", "balance": "1"}])
        assert balance.total["LTC"] is None

    def test_non_list_response(self, normalizer):
        assert normalizer.parse_balance({"errors": []}).accounts == {}

    def test_deposit_address(self, normalizer):
        address = normalizer.parse_deposit_address({"currency": "ltc", "address": "ltc1qxyz"}, "LTC")
        assert address.address == "ltc1qxyz"
        assert address.currency == "LTC"


class TestFilterBySinceLimit:
    """Shared since/limit filter"""

    def test_records_without_timestamp_are_dropped_with_since(self):
        records = [Candle(None, 1, 1, 1, 1, 1), Candle(5, 1, 1, 1, 1, 1)]
        assert filter_by_since_limit(records, since=1) == [records[1]]

    def test_records_without_timestamp_sort_first(self):
        records = [Candle(5, 1, 1, 1, 1, 1), Candle(None, 1, 1, 1, 1, 1)]
        assert filter_by_since_limit(records)[0].timestamp is None

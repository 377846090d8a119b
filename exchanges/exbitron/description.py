"""
Exbitron Static Description

Everything about the venue that is configuration rather than logic: URL
templates, the declared endpoint table, timeframes, the fee schedule, the
canonical currency alias table and the vendor error table.

The description is an immutable value. The adapter receives it through its
constructor, so tests (or a sandbox deployment) can pass a modified copy via
`EXBITRON.model_copy(update={...})` without touching process-wide state.

API Documentation:
    https://www.exbitron.com/kb/api.html
"""

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ExchangeOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    fetch_markets_type: str = "spot"
    order_book_limit: int = 100
    ohlcv_limit: int = 100
    markets_limit: int = 500
    currencies_limit: int = 500


class TradingFees(BaseModel):
    model_config = ConfigDict(frozen=True)

    maker: float = 0.004
    taker: float = 0.004
    percentage: bool = True


class ExchangeDescription(BaseModel):
    """
    Immutable venue metadata.

    Attributes:
        id: Exchange identifier used in records and logs
        urls: api name ("public" / "private") -> URL template with {hostname}
        api: api name -> HTTP method -> declared path templates
        timeframes: canonical timeframe -> venue period code
        common_currencies: upper-cased venue currency id -> canonical code
        exceptions: vendor error token -> fault class name (core.errors)
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    countries: Tuple[str, ...] = ()
    version: str
    hostname: str
    urls: Dict[str, str]
    api: Dict[str, Dict[str, Tuple[str, ...]]]
    timeframes: Dict[str, str]
    fees: TradingFees = TradingFees()
    common_currencies: Dict[str, str] = Field(default_factory=dict)
    exceptions: Dict[str, str] = Field(default_factory=dict)
    options: ExchangeOptions = ExchangeOptions()
    has: Dict[str, bool] = Field(default_factory=dict)

    def url(self, api: str) -> str:
        return self.urls[api].format(hostname=self.hostname)

    def declares(self, api: str, method: str, path: str) -> bool:
        return path in self.api.get(api, {}).get(method.upper(), ())


EXBITRON = ExchangeDescription(
    id="exbitron",
    name="Exbitron",
    countries=("DE",),
    version="v2",
    hostname="exbitron.com",
    urls={
        "public": "https://{hostname}/api/v2/peatio/public",
        "private": "https://{hostname}/api/v2/peatio",
    },
    api={
        "public": {
            "GET": (
                "withdraw_limits",
                "trading_fees",
                "health/ready",
                "timestamp",
                "member-levels",
                "markets/{market}/tickers",
                "markets/tickers",
                "markets/{market}/k-line",
                "markets/{market}/depth",
                "markets/{market}/trades",
                "markets/{market}/order-book",
                "markets",
                "currencies",
                "currencies/{id}",
            ),
        },
        "private": {
            "GET": (
                "account/internal_transfers",
                "account/transactions",
                "account/stats/pnl",
                "account/withdraws",
                "account/withdraws/sums",
                "account/beneficiaries/{id}",
                "account/beneficiaries",
                "account/deposit_address/{currency}",
                "account/deposits/{txid}",
                "account/deposits",
                "account/balances/{currency}",
                "account/balances",
                "market/trades",
                "market/orders",
                "market/orders/{id}",
            ),
            "POST": (
                "account/internal_transfers",
                "account/withdraws",
                "account/beneficiaries",
                "account/deposits/intention",
                "market/orders/cancel",
                "market/orders/{id}/cancel",
                "market/orders",
            ),
            "PATCH": (
                "account/beneficiaries/{id}/activate",
                "account/beneficiaries/{id}/resend_pin",
            ),
            "DELETE": (
                "account/beneficiaries/{id}",
            ),
        },
    },
    timeframes={
        "1m": "1",
        "5m": "5",
        "15m": "15",
        "30m": "30",
        "1h": "60",
        "2h": "120",
        "4h": "240",
        "6h": "360",
        "12h": "720",
        "1d": "1440",
        "3d": "4320",
        "1w": "10080",
    },
    common_currencies={
        "BUSD-BEP20": "BUSD",
        "TRX-TRC20": "TRX",
        "USDT-TRC20": "USDT",
    },
    exceptions={
        "market.account.insufficient_balance": "InsufficientFunds",
        "market.order.invalid_side": "InvalidOrder",
        "market.order.invalid_type": "InvalidOrder",
        "market.order.non_positive_volume": "InvalidOrder",
        "market.order.not_positive_price": "InvalidOrder",
        # the venue misspells "invalid" in this token
        "market.order.invaild_id_or_uuid": "OrderNotFound",
    },
    has={
        "cancel_all_orders": True,
        "cancel_order": True,
        "create_order": True,
        "fetch_balance": True,
        "fetch_closed_orders": True,
        "fetch_currencies": True,
        "fetch_deposit_address": True,
        "fetch_deposits": True,
        "fetch_markets": True,
        "fetch_my_trades": True,
        "fetch_ohlcv": True,
        "fetch_open_orders": True,
        "fetch_order": True,
        "fetch_order_book": True,
        "fetch_orders": True,
        "fetch_status": True,
        "fetch_ticker": True,
        "fetch_tickers": True,
        "fetch_time": True,
        "fetch_trades": True,
        "fetch_transactions": True,
        "fetch_withdrawals": True,
        "withdraw": True,
    },
)

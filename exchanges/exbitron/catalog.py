"""
Exbitron Market Catalog

Normalizes the venue's market and currency listings into canonical Market /
Currency records and keeps the last good snapshot in memory for symbol
resolution.

Raw market (GET /public/markets):
    {"id": "ltcusdt", "base_unit": "ltc", "quote_unit": "usdt",
     "min_price": "0.00000001", "max_price": "100000.0", "min_amount": "0.01",
     "amount_precision": 2, "price_precision": 8, "state": "enabled",
     "type": "spot"}

Raw currency (GET /public/currencies):
    {"id": "usdt-trc20", "name": "Tether", "type": "coin",
     "withdraw_fee": "1.0", "min_deposit_amount": "1", "min_withdraw_amount": "5",
     "precision": 6, "deposit_enabled": true, "withdraw_enabled": true}

Entries missing their identity fields are skipped with a warning so one bad
row cannot block a catalog refresh.
"""

from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from core.errors import ArgumentFault, BadSymbol, ExchangeFault
from core.logging import get_logger
from core.precise import Precise, parse_number
from core.schemas import Currency, CurrencyLimits, Market, MarketLimits, MarketPrecision, MinMax
from core.utils.parsing import safe_integer, safe_number, safe_number_string, safe_string, safe_value
from exchanges.exbitron.description import ExchangeDescription

logger = get_logger(__name__)

ENABLED_STATE = "enabled"


def currency_code(currency_id: Optional[str], aliases: Mapping[str, str]) -> Optional[str]:
    """
    Canonical code for a venue currency id.

    Example:
        >>> currency_code("usdt-trc20", {"USDT-TRC20": "USDT"})
        'USDT'
    """
    if currency_id is None:
        return None
    upper = currency_id.upper()
    return aliases.get(upper, upper)


def _unbounded_if_zero(value: Optional[str]) -> Optional[float]:
    if value is None or Precise.string_eq(value, "0"):
        return None
    return parse_number(value)


def parse_market(raw: Any, description: ExchangeDescription) -> Optional[Market]:
    """Build a Market, or None when id/base/quote is missing."""
    market_id = safe_string(raw, "id")
    base_id = safe_string(raw, "base_unit")
    quote_id = safe_string(raw, "quote_unit")
    if market_id is None or base_id is None or quote_id is None:
        return None

    aliases = description.common_currencies
    base = currency_code(base_id, aliases)
    quote = currency_code(quote_id, aliases)
    fees = description.fees
    return Market(
        exchange=description.id,
        id=market_id,
        symbol=f"{base}/{quote}",
        base=base,
        quote=quote,
        base_id=base_id,
        quote_id=quote_id,
        active=safe_value(raw, "state") == ENABLED_STATE,
        spot=safe_string(raw, "type") == "spot",
        maker=fees.maker,
        taker=fees.taker,
        percentage=fees.percentage,
        precision=MarketPrecision(
            amount=safe_integer(raw, "amount_precision"),
            price=safe_integer(raw, "price_precision"),
        ),
        limits=MarketLimits(
            amount=MinMax(min=safe_number(raw, "min_amount")),
            price=MinMax(
                min=_unbounded_if_zero(safe_number_string(raw, "min_price")),
                max=_unbounded_if_zero(safe_number_string(raw, "max_price")),
            ),
        ),
        info=raw,
    )


def parse_currency(raw: Any, description: ExchangeDescription) -> Optional[Currency]:
    """Build a Currency, or None when the id is missing."""
    currency_id = safe_string(raw, "id")
    if currency_id is None:
        return None

    deposit_enabled = safe_value(raw, "deposit_enabled") is True
    withdraw_enabled = safe_value(raw, "withdraw_enabled") is True
    return Currency(
        exchange=description.id,
        id=currency_id,
        code=currency_code(currency_id, description.common_currencies),
        name=safe_string(raw, "name"),
        type="fiat" if safe_string(raw, "type") == "fiat" else "crypto",
        active=deposit_enabled and withdraw_enabled,
        fee=safe_number(raw, "withdraw_fee"),
        precision=safe_number(raw, "precision"),
        limits=CurrencyLimits(
            amount=MinMax(min=safe_number(raw, "min_deposit_amount")),
            withdraw=MinMax(min=safe_number(raw, "min_withdraw_amount")),
        ),
        info=raw,
    )


def parse_markets(response: Any, description: ExchangeDescription) -> List[Market]:
    if not isinstance(response, list):
        return []
    result = []
    for raw in response:
        market = parse_market(raw, description)
        if market is None:
            logger.warning(f"Skipping malformed {description.id} market entry: {raw!r}")
            continue
        result.append(market)
    return result


def parse_currencies(response: Any, description: ExchangeDescription) -> List[Currency]:
    if not isinstance(response, list):
        return []
    result = []
    for raw in response:
        currency = parse_currency(raw, description)
        if currency is None:
            logger.warning(f"Skipping malformed {description.id} currency entry: {raw!r}")
            continue
        result.append(currency)
    return result


class CatalogSnapshot(NamedTuple):
    markets: Dict[str, Market]
    markets_by_id: Dict[str, Market]
    currencies: Dict[str, Currency]
    currencies_by_id: Dict[str, Currency]


EMPTY_SNAPSHOT = CatalogSnapshot({}, {}, {}, {})


class MarketCatalog:
    """
    In-memory market/currency table of one adapter instance.

    refresh() builds a complete new snapshot before replacing the current one,
    so a failure half-way leaves the previous snapshot in place. Concurrent
    refreshes are not serialized here.

    Example:
        >>> catalog = MarketCatalog(EXBITRON)
        >>> snapshot = catalog.refresh(raw_markets, raw_currencies)
        >>> catalog.market("LTC/USDT").id
        'ltcusdt'
    """

    def __init__(self, description: ExchangeDescription):
        self.description = description
        self.snapshot: CatalogSnapshot = EMPTY_SNAPSHOT

    @property
    def loaded(self) -> bool:
        return bool(self.snapshot.markets)

    @property
    def markets(self) -> Dict[str, Market]:
        return self.snapshot.markets

    @property
    def markets_by_id(self) -> Dict[str, Market]:
        return self.snapshot.markets_by_id

    @property
    def currencies(self) -> Dict[str, Currency]:
        return self.snapshot.currencies

    def refresh(self, raw_markets: Any, raw_currencies: Any) -> CatalogSnapshot:
        """
        Normalize both listings and swap them in as the current snapshot.

        Raises:
            ExchangeFault: If either listing is not a list; the current
                snapshot stays in place
        """
        for name, listing in (("markets", raw_markets), ("currencies", raw_currencies)):
            if not isinstance(listing, list):
                raise ExchangeFault(
                    f"{self.description.id} returned a malformed {name} listing",
                    exchange=self.description.id,
                    body=listing,
                )
        self.snapshot = self.build(raw_markets, raw_currencies)
        logger.info(
            f"{self.description.id} catalog loaded: "
            f"{len(self.snapshot.markets)} markets, {len(self.snapshot.currencies)} currencies"
        )
        return self.snapshot

    def build(self, raw_markets: Any, raw_currencies: Any) -> CatalogSnapshot:
        markets: Dict[str, Market] = {}
        markets_by_id: Dict[str, Market] = {}
        for market in parse_markets(raw_markets, self.description):
            if market.symbol in markets:
                logger.warning(
                    f"Duplicate {self.description.id} symbol {market.symbol} "
                    f"(ids {markets[market.symbol].id}, {market.id}); keeping the first"
                )
            else:
                markets[market.symbol] = market
            markets_by_id.setdefault(market.id, market)

        currencies: Dict[str, Currency] = {}
        currencies_by_id: Dict[str, Currency] = {}
        for currency in parse_currencies(raw_currencies, self.description):
            currencies.setdefault(currency.code, currency)
            currencies_by_id.setdefault(currency.id, currency)

        return CatalogSnapshot(markets, markets_by_id, currencies, currencies_by_id)

    # ============================================
    # Lookups
    # ============================================

    def market(self, symbol: str) -> Market:
        market = self.snapshot.markets.get(symbol) or self.snapshot.markets_by_id.get(symbol)
        if market is None:
            raise BadSymbol(f"{self.description.id} does not have market symbol {symbol}", exchange=self.description.id)
        return market

    def market_by_id(self, market_id: Optional[str]) -> Optional[Market]:
        if market_id is None:
            return None
        return self.snapshot.markets_by_id.get(market_id)

    def currency(self, code: str) -> Currency:
        currency = self.snapshot.currencies.get(code) or self.snapshot.currencies_by_id.get(code)
        if currency is None:
            raise ArgumentFault(f"{self.description.id} does not have currency code {code}", exchange=self.description.id)
        return currency

    def currency_code(self, currency_id: Optional[str]) -> Optional[str]:
        known = self.snapshot.currencies_by_id.get(currency_id) if currency_id else None
        if known is not None:
            return known.code
        return currency_code(currency_id, self.description.common_currencies)

"""
FastAPI Application - Exchange Adapter Market Data API

Read-only REST access to the public market data of every registered venue
adapter. Symbols are passed as two path segments (base, quote) since the
canonical "BASE/QUOTE" form contains a slash.

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from core.config import validate_configuration
from core.errors import AdapterFault, ArgumentFault, BadSymbol, RateLimitFault
from core.exchange_interface import ExchangeInterface
from core.exchange_manager import ExchangeManager
from core.logging import logger
from core.schemas import Candle, Currency, ExchangeStatus, Market, OrderBook, Ticker, Trade


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await manager.initialize_all()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await manager.shutdown_all()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Exchange Adapter Market Data API",
    description=(
        "Canonical market data from spot exchange adapters.\n\n"
        "**Supported Exchanges:** Exbitron\n\n"
        "## REST Endpoints\n"
        "- `GET /{exchange}/markets` - Market catalog\n"
        "- `GET /{exchange}/currencies` - Currency catalog\n"
        "- `GET /{exchange}/ticker/{base}/{quote}` - 24h ticker\n"
        "- `GET /{exchange}/tickers` - All tickers\n"
        "- `GET /{exchange}/orderbook/{base}/{quote}` - Order book snapshot\n"
        "- `GET /{exchange}/trades/{base}/{quote}` - Public trades\n"
        "- `GET /{exchange}/ohlcv/{base}/{quote}/{timeframe}` - Candles\n"
        "- `GET /{exchange}/status` - Venue status\n"
        "- `GET /exchanges` - List supported exchanges\n"
        "- `GET /health` - Health check\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

manager = ExchangeManager()  # Global exchange manager


def get_exchange(name: str) -> ExchangeInterface:
    try:
        return manager.get_exchange(name)
    except ArgumentFault as e:
        raise HTTPException(status_code=404, detail=str(e))


def require(exchange: ExchangeInterface, feature: str) -> None:
    if not exchange.supports(feature):
        raise HTTPException(status_code=404, detail=f"{exchange.name} does not support {feature}")


# ============================================
# Error Handlers
# ============================================

@app.exception_handler(AdapterFault)
async def adapter_fault_handler(request, exc: AdapterFault):
    """Map adapter faults to HTTP errors."""
    if isinstance(exc, BadSymbol):
        status_code = 404
    elif isinstance(exc, ArgumentFault):
        status_code = 400
    elif isinstance(exc, RateLimitFault):
        status_code = 429
    else:
        status_code = 502
        logger.error(f"Upstream fault on {request.url.path}: {exc.to_dict()}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_type": exc.__class__.__name__},
    )


# ============================================
# System Endpoints
# ============================================

@app.get("/health", tags=["System"])
async def health_check():
    """Health check - tests connectivity to all exchanges."""
    health = await manager.health_check_all()
    return {
        "status": "healthy" if all(health.values()) else "degraded",
        "exchanges": health
    }


@app.get("/exchanges", tags=["System"])
async def list_exchanges():
    """List all supported exchanges and their capabilities."""
    return {
        "exchanges": [
            {
                "name": name,
                "capabilities": manager.get_exchange_capabilities(name)
            }
            for name in manager.list_exchanges()
        ]
    }


# ============================================
# Market Data Endpoints
# ============================================

@app.get("/{exchange}/markets", response_model=List[Market], tags=["Catalog"])
async def get_markets(exchange: str, reload: bool = Query(default=False, description="Refresh the catalog")):
    ex = get_exchange(exchange)
    markets = await ex.load_markets(reload=reload)
    return list(markets.values())


@app.get("/{exchange}/currencies", response_model=List[Currency], tags=["Catalog"])
async def get_currencies(exchange: str):
    ex = get_exchange(exchange)
    require(ex, "fetch_currencies")
    currencies = await ex.fetch_currencies()
    return list(currencies.values())


@app.get("/{exchange}/ticker/{base}/{quote}", response_model=Ticker, tags=["Market Data"])
async def get_ticker(exchange: str, base: str, quote: str):
    """
    Get 24h statistics for one market.

    Examples:
        GET /exbitron/ticker/LTC/USDT
    """
    ex = get_exchange(exchange)
    return await ex.fetch_ticker(f"{base.upper()}/{quote.upper()}")


@app.get("/{exchange}/tickers", response_model=Dict[str, Ticker], tags=["Market Data"])
async def get_tickers(
    exchange: str,
    symbols: Optional[str] = Query(default=None, description="Comma-separated symbols, e.g. LTC/USDT,BTC/USDT")
):
    ex = get_exchange(exchange)
    require(ex, "fetch_tickers")
    wanted = [s.strip().upper() for s in symbols.split(",") if s.strip()] if symbols else None
    return await ex.fetch_tickers(wanted)


@app.get("/{exchange}/orderbook/{base}/{quote}", response_model=OrderBook, tags=["Market Data"])
async def get_order_book(
    exchange: str,
    base: str,
    quote: str,
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Depth per side")
):
    ex = get_exchange(exchange)
    return await ex.fetch_order_book(f"{base.upper()}/{quote.upper()}", limit)


@app.get("/{exchange}/trades/{base}/{quote}", response_model=List[Trade], tags=["Market Data"])
async def get_trades(
    exchange: str,
    base: str,
    quote: str,
    since: Optional[int] = Query(default=None, ge=0, description="Start time (ms)"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Number of trades")
):
    ex = get_exchange(exchange)
    return await ex.fetch_trades(f"{base.upper()}/{quote.upper()}", since, limit)


@app.get("/{exchange}/ohlcv/{base}/{quote}/{timeframe}", response_model=List[Candle], tags=["Market Data"])
async def get_ohlcv(
    exchange: str,
    base: str,
    quote: str,
    timeframe: str,
    since: Optional[int] = Query(default=None, ge=0, description="Start time (ms)"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Number of candles")
):
    """
    Get candles as [timestamp_ms, open, high, low, close, volume].

    Examples:
        GET /exbitron/ohlcv/LTC/USDT/1h?limit=100
    """
    ex = get_exchange(exchange)
    return await ex.fetch_ohlcv(f"{base.upper()}/{quote.upper()}", timeframe, since, limit)


@app.get("/{exchange}/status", response_model=ExchangeStatus, tags=["System"])
async def get_status(exchange: str):
    ex = get_exchange(exchange)
    require(ex, "fetch_status")
    return await ex.fetch_status()

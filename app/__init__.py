"""
FastAPI Application Package

Read-only HTTP surface over the registered exchange adapters: catalog,
tickers, order books, trades, candles and venue status.
"""

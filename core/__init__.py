"""
Core Package

Contains the venue-agnostic core logic including:
- ExchangeInterface: Abstract base class every venue adapter implements
- ExchangeManager: Registry that owns adapter lifecycles
- Schemas: Pydantic models for canonical records (Market, Ticker, Order, ...)
- Precise: Decimal-string arithmetic for money values
- Errors: Fault hierarchy raised by every adapter

Venue adapters live under exchanges/ and depend only on this package.
"""

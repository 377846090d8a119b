"""
Canned Exbitron payloads shared by the unit tests.
"""

RAW_MARKETS = [
    {
        "id": "ltcusdt",
        "base_unit": "ltc",
        "quote_unit": "usdt-trc20",
        "min_price": "0.01",
        "max_price": "0",
        "min_amount": "0.001",
        "amount_precision": 3,
        "price_precision": 2,
        "state": "enabled",
        "type": "spot",
    },
    {
        "id": "btcusdt",
        "base_unit": "btc",
        "quote_unit": "usdt-trc20",
        "min_price": "0",
        "max_price": "100000",
        "min_amount": "0.0001",
        "amount_precision": 4,
        "price_precision": 2,
        "state": "disabled",
        "type": "spot",
    },
]

RAW_CURRENCIES = [
    {
        "id": "ltc",
        "name": "Litecoin",
        "type": "coin",
        "withdraw_fee": "0.001",
        "min_deposit_amount": "0.01",
        "min_withdraw_amount": "0.1",
        "precision": 8,
        "deposit_enabled": True,
        "withdraw_enabled": True,
    },
    {
        "id": "usdt-trc20",
        "name": "Tether",
        "type": "coin",
        "withdraw_fee": "1",
        "min_deposit_amount": "1",
        "min_withdraw_amount": "5",
        "precision": 6,
        "deposit_enabled": True,
        "withdraw_enabled": False,
    },
    {
        "id": "btc",
        "name": "Bitcoin",
        "type": "coin",
        "withdraw_fee": "0.0005",
        "precision": 8,
        "deposit_enabled": True,
        "withdraw_enabled": True,
    },
]

"""
Exchange Manager - Central Registry for Exchange Adapters

The ExchangeManager owns one adapter instance per venue and drives their
lifecycle (initialize/shutdown/health checks). API routes look adapters up
by name and never construct them.

Example Usage:
    manager = ExchangeManager()
    await manager.initialize_all()

    exchange = manager.get_exchange("exbitron")
    ticker = await exchange.fetch_ticker("LTC/USDT")

    # Adding a venue:
    # 1. Create exchanges/<venue>/ implementing ExchangeInterface
    # 2. Register it in ExchangeManager.__init__
"""

from typing import Dict, List, Optional

from core.errors import ArgumentFault
from core.exchange_interface import ExchangeInterface
from core.logging import logger


class ExchangeManager:
    """
    Central Manager for Exchange Adapters

    Attributes:
        exchanges: Mapping of exchange name -> adapter instance

    Args:
        exchanges: Pre-built adapters (tests pass adapters wired to a fake
                   transport); the default registry is used when None
    """

    def __init__(self, exchanges: Optional[Dict[str, ExchangeInterface]] = None):
        if exchanges is None:
            # Import here to avoid circular imports
            from exchanges.exbitron import ExbitronExchange

            exchanges = {
                "exbitron": ExbitronExchange(),
            }

        self.exchanges: Dict[str, ExchangeInterface] = {
            name.lower(): exchange for name, exchange in exchanges.items()
        }

        logger.info(f"ExchangeManager initialized with {len(self.exchanges)} exchange(s): {', '.join(self.exchanges.keys())}")

    # ============================================
    # Exchange Retrieval Methods
    # ============================================

    def get_exchange(self, name: str) -> ExchangeInterface:
        """
        Get an adapter by name (case-insensitive).

        Raises:
            ArgumentFault: If the exchange is not registered
        """
        name = name.lower()

        if name not in self.exchanges:
            available = ", ".join(self.exchanges.keys())
            logger.error(f"Exchange '{name}' not found. Available: {available}")
            raise ArgumentFault(
                f"Exchange '{name}' is not supported. "
                f"Available exchanges: {available}"
            )

        return self.exchanges[name]

    def has_exchange(self, name: str) -> bool:
        return name.lower() in self.exchanges

    def list_exchanges(self) -> List[str]:
        return list(self.exchanges.keys())

    def get_exchange_capabilities(self, name: str) -> Dict[str, bool]:
        return dict(self.get_exchange(name).has)

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize_all(self) -> None:
        """
        Initialize all registered adapters.

        A venue that fails to initialize is logged and skipped; the others
        still come up.
        """
        logger.info("Initializing all exchanges...")

        for name, exchange in self.exchanges.items():
            try:
                await exchange.initialize()
                logger.info(f"✓ {name.capitalize()} initialized successfully")
            except Exception as e:
                logger.error(f"✗ Failed to initialize {name}: {e}")

        logger.info("All exchanges initialized")

    async def shutdown_all(self) -> None:
        logger.info("Shutting down all exchanges...")

        for name, exchange in self.exchanges.items():
            try:
                await exchange.shutdown()
                logger.info(f"✓ {name.capitalize()} shut down successfully")
            except Exception as e:
                logger.error(f"✗ Error shutting down {name}: {e}")

        logger.info("All exchanges shut down")

    # ============================================
    # Health Check Methods
    # ============================================

    async def health_check_all(self) -> Dict[str, bool]:
        """
        Check health status of all exchanges.

        Returns:
            Dict[str, bool]: exchange name -> True if reachable and "ok"
        """
        health_status = {}
        for name, exchange in self.exchanges.items():
            try:
                health_status[name] = await exchange.health_check()
            except Exception as e:
                logger.error(f"Health check failed for {name}: {e}")
                health_status[name] = False

        return health_status

    def __repr__(self) -> str:
        return f"<ExchangeManager(exchanges={list(self.exchanges.keys())})>"

    def __len__(self) -> int:
        return len(self.exchanges)

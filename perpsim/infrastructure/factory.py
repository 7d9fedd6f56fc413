"""
Wiring of the engine to its concrete collaborators.
"""

from loguru import logger

from perpsim.core.config import SimulationSettings
from perpsim.core.engine.simulator import SimulationEngine
from perpsim.core.interfaces.notifier import ITradeNotifier, NullNotifier

from .market import BinancePriceSource
from .notify import TelegramNotifier
from .persistence import JsonFilePortfolioStore, JsonLinesTradeLedger


def create_notifier(settings: SimulationSettings) -> ITradeNotifier:
    """Telegram when enabled and configured, otherwise a notifier that drops messages."""
    if not settings.notifications_enabled:
        return NullNotifier()
    if not settings.telegram_configured:
        logger.info("Telegram credentials not set, trade notifications disabled")
        return NullNotifier()
    return TelegramNotifier(settings.telegram_bot_token, settings.telegram_chat_id)


def create_engine(settings: SimulationSettings | None = None) -> SimulationEngine:
    """Build an engine backed by JSON files, Binance prices and Telegram.

    Args:
        settings: Engine settings (default: read from the environment)
    """
    settings = settings or SimulationSettings.from_env()
    logger.info(f"Creating {settings.trading_mode} simulation engine, state in {settings.state_dir}")

    return SimulationEngine(
        store=JsonFilePortfolioStore(settings.state_dir),
        ledger=JsonLinesTradeLedger(settings.state_dir),
        notifier=create_notifier(settings),
        settings=settings,
        price_source=BinancePriceSource(
            base_url=settings.binance_base_url, cache_ttl=settings.price_cache_ttl_seconds
        ),
    )

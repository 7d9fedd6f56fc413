"""
Runtime settings for the paper-trading engine.

Settings are a validated pydantic model. from_env() maps PERPSIM_* variables
(and the conventional TELEGRAM_* ones) onto it.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from perpsim.core.constants import (
    BINANCE_BASE_URL,
    DEFAULT_INITIAL_BALANCE,
    DEFAULT_LEVERAGE,
    DEFAULT_STATE_DIR,
    MAX_INITIAL_BALANCE,
    MAX_LEVERAGE,
    MIN_LEVERAGE,
    PRICE_CACHE_TTL_SECONDS,
)
from perpsim.core.enums import Symbol, TradingMode
from perpsim.core.exceptions.simulation import ConfigurationError

ENV_PREFIX = "PERPSIM_"
_TRUE_VALUES = {"1", "true", "yes", "on"}


class SimulationSettings(BaseModel):
    """Configuration for the simulation engine and its collaborators."""

    model_config = ConfigDict(frozen=True)

    initial_balance: float = Field(
        default=DEFAULT_INITIAL_BALANCE,
        gt=0,
        le=MAX_INITIAL_BALANCE,
        description="Balance a new or reset portfolio starts with",
    )
    default_leverage: float = Field(
        default=DEFAULT_LEVERAGE,
        ge=MIN_LEVERAGE,
        le=MAX_LEVERAGE,
        description="Leverage applied when a decision omits it",
    )
    trading_mode: TradingMode = Field(
        default=TradingMode.PAPER, description="Portfolio document the engine trades"
    )
    tradable_symbols: tuple[Symbol, ...] = Field(
        default=tuple(Symbol.tradable()), description="Symbols fetched from the price source"
    )
    state_dir: Path = Field(
        default=Path(DEFAULT_STATE_DIR), description="Directory for JSON portfolio/ledger files"
    )
    notifications_enabled: bool = Field(default=True, description="Send trade notifications")
    telegram_bot_token: str = Field(default="", description="Telegram bot token")
    telegram_chat_id: str = Field(default="", description="Telegram chat receiving trades")
    binance_base_url: str = Field(default=BINANCE_BASE_URL, description="Binance REST endpoint")
    price_cache_ttl_seconds: float = Field(
        default=PRICE_CACHE_TTL_SECONDS, ge=0, description="Ticker cache lifetime"
    )

    @field_validator("tradable_symbols", mode="before")
    @classmethod
    def parse_symbols(cls, v: object) -> object:
        """Accept a comma-separated string of tickers."""
        if isinstance(v, str):
            return tuple(Symbol.from_string(part) for part in v.split(",") if part.strip())
        return v

    @property
    def telegram_configured(self) -> bool:
        """Check if Telegram credentials are present."""
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SimulationSettings":
        """Build settings from environment variables.

        Recognized variables: PERPSIM_INITIAL_BALANCE, PERPSIM_DEFAULT_LEVERAGE,
        PERPSIM_TEST_MODE (true -> paper, false -> live), PERPSIM_TRADING_MODE,
        PERPSIM_TRADABLE_SYMBOLS, PERPSIM_STATE_DIR, PERPSIM_NOTIFICATIONS_ENABLED,
        PERPSIM_BINANCE_BASE_URL, PERPSIM_PRICE_CACHE_TTL_SECONDS,
        TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID.

        Args:
            environ: Mapping to read from (default os.environ)

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in env:
                values[name] = env[key]

        test_mode = env.get(f"{ENV_PREFIX}TEST_MODE")
        if test_mode is not None and "trading_mode" not in values:
            values["trading_mode"] = TradingMode.from_flag(test_mode.strip().lower() in _TRUE_VALUES)

        if "notifications_enabled" in values:
            values["notifications_enabled"] = (
                str(values["notifications_enabled"]).strip().lower() in _TRUE_VALUES
            )

        for name, key in (("telegram_bot_token", "TELEGRAM_BOT_TOKEN"), ("telegram_chat_id", "TELEGRAM_CHAT_ID")):
            if name not in values and key in env:
                values[name] = env[key]

        try:
            return cls.model_validate(values)
        except (PydanticValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid simulation settings: {e}") from e

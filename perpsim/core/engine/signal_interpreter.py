"""
Signal interpretation.

LLM output is unreliable, so this is the one place that looks at raw signal
shapes. A signal is either a list of per-asset decision objects (identified
by a coin/asset/symbol field) or an object keyed by symbol. Whatever cannot be
understood is dropped; normalize_signal never raises.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from perpsim.core.enums import SignalSide, Symbol
from perpsim.core.models.intent import TradeIntent

SYMBOL_FIELDS = ("coin", "asset", "symbol")


class DecisionPayload(BaseModel):
    """One asset's decision as the LLM wrote it, with known field aliases."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    side: SignalSide = Field(validation_alias=AliasChoices("side", "action", "direction"))
    notional: float | None = Field(
        default=None,
        allow_inf_nan=False,
        validation_alias=AliasChoices(
            "notional", "allocation_usd", "notional_usd", "position_size_usd", "size"
        ),
    )
    leverage: float | None = Field(default=None, allow_inf_nan=False)
    profit_target: float | None = Field(
        default=None,
        allow_inf_nan=False,
        validation_alias=AliasChoices("profit_target", "profitTarget", "take_profit"),
    )
    stop_loss: float | None = Field(
        default=None,
        allow_inf_nan=False,
        validation_alias=AliasChoices("stop_loss", "stopLoss"),
    )

    @field_validator("side", mode="before")
    @classmethod
    def normalize_side(cls, v: Any) -> Any:
        """Accept any casing and surrounding whitespace."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("notional", "leverage", "profit_target", "stop_loss", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty strings and textual nulls as missing."""
        if isinstance(v, str) and v.strip().lower() in ("", "null", "none", "n/a"):
            return None
        return v

    @field_validator("leverage", "profit_target", "stop_loss")
    @classmethod
    def non_positive_to_none(cls, v: float | None) -> float | None:
        """A zero or negative level/leverage means "not set"."""
        if v is not None and v <= 0:
            return None
        return v

    def to_intent(self, symbol: Symbol) -> TradeIntent | None:
        """Convert to a TradeIntent, or None when the decision is not actionable."""
        if self.side.is_hold:
            return TradeIntent.hold(symbol)

        if self.notional is None or self.notional <= 0:
            logger.debug(f"Dropping {self.side} decision for {symbol}: invalid or zero notional")
            return None

        return TradeIntent(
            symbol=symbol,
            side=self.side,
            notional=self.notional,
            leverage=self.leverage,
            profit_target=self.profit_target,
            stop_loss=self.stop_loss,
        )


def normalize_signal(signal: Any) -> dict[Symbol, TradeIntent]:
    """Normalize a raw signal into canonical intents keyed by symbol.

    Args:
        signal: List of decision objects or mapping of symbol -> decision

    Returns:
        Intents for every recognizable, actionable entry (HOLD included)
    """
    intents: dict[Symbol, TradeIntent] = {}

    for key, payload in _keyed_entries(signal):
        if not payload:
            continue

        try:
            symbol = Symbol.from_string(key)
        except ValueError:
            logger.debug(f"Ignoring decision for unsupported symbol {key!r}")
            continue

        intent = _interpret_payload(symbol, payload)
        if intent is not None:
            intents[symbol] = intent

    return intents


def _keyed_entries(signal: Any) -> Iterator[tuple[str, Any]]:
    """Yield (upper-cased key, payload) pairs from either signal shape."""
    if not signal:
        return

    if isinstance(signal, list | tuple):
        for entry in signal:
            if not isinstance(entry, Mapping):
                continue
            key = next((entry.get(f) for f in SYMBOL_FIELDS if entry.get(f)), None)
            if isinstance(key, str):
                yield key.upper(), entry
        return

    if isinstance(signal, Mapping):
        for key, value in signal.items():
            if isinstance(key, str):
                yield key.upper(), value


def _interpret_payload(symbol: Symbol, payload: Any) -> TradeIntent | None:
    if isinstance(payload, str):
        payload = {"side": payload}
    if not isinstance(payload, Mapping):
        logger.debug(f"Ignoring non-object decision for {symbol}: {payload!r}")
        return None

    try:
        decision = DecisionPayload.model_validate(payload)
    except PydanticValidationError as e:
        logger.debug(f"Ignoring malformed decision for {symbol}: {e.error_count()} error(s)")
        return None

    return decision.to_intent(symbol)

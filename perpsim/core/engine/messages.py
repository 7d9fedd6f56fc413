"""Human-readable trade summaries for the notification channel."""

from perpsim.core.enums import TradeType, TradingMode
from perpsim.core.models.trade import TradeRecord


def _money(value: float | None) -> str:
    return f"${value:.2f}" if value is not None else "N/A"


def format_trade_message(trade: TradeRecord, mode: TradingMode = TradingMode.PAPER) -> str:
    """Summarize an OPEN or CLOSE record for humans.

    Args:
        trade: Ledger record
        mode: Trading mode, paper trades are prefixed with "TEST MODE: "

    Returns:
        Multi-line message
    """
    prefix = mode.notification_prefix

    if trade.type == TradeType.OPEN:
        lines = [
            f"{prefix}OPENED {trade.side} position",
            f"Symbol: {trade.symbol}",
            f"Entry: {_money(trade.entry_price)}",
            f"Notional: {_money(trade.notional)}",
            f"Leverage: {trade.leverage:g}x" if trade.leverage is not None else "Leverage: N/A",
        ]
    elif trade.type == TradeType.CLOSE:
        lines = [
            f"{prefix}CLOSED {trade.side} position",
            f"Symbol: {trade.symbol}",
            f"Entry: {_money(trade.entry_price)}",
            f"Exit: {_money(trade.exit_price)}",
            f"PnL: {_money(trade.pnl or 0.0)}",
        ]
        if trade.reason:
            lines.append(f"Reason: {trade.reason}")
    else:
        lines = [
            f"{prefix}UPDATED {trade.side} position",
            f"Symbol: {trade.symbol}",
            f"Notional: {_money(trade.notional)}",
        ]

    return "\n".join(lines)

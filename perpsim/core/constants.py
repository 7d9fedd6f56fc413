"""
Core constants and limits.

Defines system-wide defaults for the paper-trading engine.
"""

# Portfolio Defaults
DEFAULT_INITIAL_BALANCE = 10000.0  # Starting balance when none is configured
MIN_INITIAL_BALANCE = 1.0  # Smallest balance a portfolio may be reset to
MAX_INITIAL_BALANCE = 100000000.0  # Largest balance a portfolio may be reset to

# Trading Defaults
DEFAULT_LEVERAGE = 10.0  # Applied when a signal omits leverage (or sends 0)
MIN_LEVERAGE = 1.0
MAX_LEVERAGE = 125.0

# Ledger
DEFAULT_TRADE_HISTORY_LIMIT = 50  # Records returned by trade history queries
MAX_TRADE_HISTORY_LIMIT = 1000

# Market Data
BINANCE_BASE_URL = "https://api.binance.com"
PRICE_CACHE_TTL_SECONDS = 15.0  # Ticker responses are reused within a cycle
HTTP_TIMEOUT_SECONDS = 10.0

# Notifications
TELEGRAM_API_URL = "https://api.telegram.org"

# Storage
DEFAULT_STATE_DIR = "data/state"
PORTFOLIO_FILE_TEMPLATE = "{mode}_portfolio.json"
TRADE_LEDGER_FILE_TEMPLATE = "{mode}_trades.jsonl"

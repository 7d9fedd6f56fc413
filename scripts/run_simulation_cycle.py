#!/usr/bin/env python3
"""
Simulation Cycle Runner

Loads a trading signal from a JSON file, fetches live Binance prices (or reads
a market data JSON file), runs one paper-trading cycle against the JSON file
stores and prints the result.
"""

import argparse
import json
import sys
from pathlib import Path

from loguru import logger

from perpsim.core.config import SimulationSettings
from perpsim.core.exceptions.simulation import SimulationException
from perpsim.infrastructure.factory import create_engine


def setup_logging(debug: bool = False):
    """Configure logging with loguru."""
    logger.remove()

    level = "DEBUG" if debug else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )


def load_json(path: Path):
    """Read a JSON document from path."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser(
        description="Run one paper-trading cycle for an LLM trading signal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Apply a signal at live Binance prices
  python run_simulation_cycle.py --signal signal.json

  # Apply a signal at recorded prices, keeping state in a scratch directory
  python run_simulation_cycle.py --signal signal.json --market-data prices.json --state-dir /tmp/perpsim

  # Only mark open positions to market
  python run_simulation_cycle.py --prices-only
        """,
    )

    parser.add_argument("--signal", type=Path, help="Signal JSON file (list or ticker-keyed)")
    parser.add_argument(
        "--market-data", type=Path, help="Market data JSON file (default: fetch from Binance)"
    )
    parser.add_argument(
        "--state-dir", type=Path, help="Directory for portfolio and ledger files (default: settings)"
    )
    parser.add_argument(
        "--prices-only", action="store_true", help="Mark positions to market without a signal"
    )
    parser.add_argument("--reset", action="store_true", help="Reset the portfolio before running")
    parser.add_argument(
        "--no-notify", action="store_true", help="Disable trade notifications for this run"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if not args.signal and not args.prices_only and not args.reset:
        logger.error("Nothing to do: pass --signal, --prices-only or --reset")
        return 1

    setup_logging(args.debug)

    try:
        settings = SimulationSettings.from_env()
        overrides = {}
        if args.state_dir:
            overrides["state_dir"] = args.state_dir
        if args.no_notify:
            overrides["notifications_enabled"] = False
        if overrides:
            settings = settings.model_copy(update=overrides)

        engine = create_engine(settings)
        market_data = load_json(args.market_data) if args.market_data else None

        portfolio = engine.reset_portfolio() if args.reset else None

        if args.signal:
            result = engine.execute_simulated_trade(load_json(args.signal), market_data)
            print(json.dumps(result.to_dict(), indent=2))
        elif args.prices_only:
            portfolio = engine.refresh_prices(market_data)
            print(json.dumps(portfolio.to_dict(), indent=2))
        elif portfolio is not None:
            print(json.dumps(portfolio.to_dict(), indent=2))

        logger.success("Simulation cycle completed")
        return 0

    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input file: {e}")
        return 1
    except SimulationException as e:
        logger.error(f"Simulation cycle failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

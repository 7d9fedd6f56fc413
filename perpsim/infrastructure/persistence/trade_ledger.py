"""
Append-only trade ledgers.
"""

import json
from collections import deque
from pathlib import Path
from threading import RLock

from loguru import logger

from perpsim.core.constants import TRADE_LEDGER_FILE_TEMPLATE
from perpsim.core.enums import TradingMode
from perpsim.core.exceptions.simulation import TradeLedgerError, ValidationError
from perpsim.core.interfaces.store import ITradeLedger
from perpsim.core.models.trade import TradeRecord


class InMemoryTradeLedger(ITradeLedger):
    """Process-local ledger."""

    def __init__(self) -> None:
        self._records: dict[TradingMode, list[TradeRecord]] = {}
        self._lock = RLock()

    def append(self, mode: TradingMode, record: TradeRecord) -> None:
        with self._lock:
            self._records.setdefault(mode, []).append(record)

    def recent(self, mode: TradingMode, limit: int) -> list[TradeRecord]:
        with self._lock:
            records = self._records.get(mode, [])
            return list(reversed(records[-limit:])) if limit > 0 else []


class JsonLinesTradeLedger(ITradeLedger):
    """Ledger stored as one JSON object per line, one file per trading mode."""

    def __init__(self, state_dir: Path | str):
        self.state_dir = Path(state_dir)
        self._lock = RLock()

    def _path(self, mode: TradingMode) -> Path:
        return self.state_dir / TRADE_LEDGER_FILE_TEMPLATE.format(mode=mode.value)

    def append(self, mode: TradingMode, record: TradeRecord) -> None:
        self.append_many(mode, [record])

    def append_many(self, mode: TradingMode, records: list[TradeRecord]) -> None:
        """Append records with a single write."""
        if not records:
            return

        path = self._path(mode)
        payload = "".join(json.dumps(record.to_dict()) + "\n" for record in records)

        with self._lock:
            try:
                self.state_dir.mkdir(parents=True, exist_ok=True)
                with open(path, "a", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
            except OSError as e:
                logger.error(f"Failed to append to trade ledger {path}: {e}")
                raise TradeLedgerError(f"Failed to append {len(records)} {mode} trade(s)") from e

        logger.debug(f"Appended {len(records)} record(s) to {path}")

    def recent(self, mode: TradingMode, limit: int) -> list[TradeRecord]:
        if limit <= 0:
            return []

        path = self._path(mode)
        with self._lock:
            if not path.exists():
                return []
            try:
                with open(path, encoding="utf-8") as f:
                    lines = deque((line for line in f if line.strip()), maxlen=limit)
            except OSError as e:
                logger.error(f"Failed to read trade ledger {path}: {e}")
                raise TradeLedgerError(f"Failed to read {mode} trades") from e

        records: list[TradeRecord] = []
        for line in reversed(lines):
            try:
                records.append(TradeRecord.from_dict(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable ledger line in {path.name}: {e}")
        return records

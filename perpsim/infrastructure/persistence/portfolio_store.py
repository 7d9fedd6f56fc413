"""
Portfolio document stores.

One document per trading mode, replaced wholesale on every write. Each write
bumps the document version; a write that names an expected version fails
with ConcurrentModificationError when the stored version has moved on.
"""

import fcntl
import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from threading import RLock

from loguru import logger

from perpsim.core.constants import PORTFOLIO_FILE_TEMPLATE
from perpsim.core.enums import TradingMode
from perpsim.core.exceptions.simulation import (
    ConcurrentModificationError,
    PortfolioStoreError,
    ValidationError,
)
from perpsim.core.interfaces.store import IPortfolioStore
from perpsim.core.models.portfolio import Portfolio


def _check_version(mode: TradingMode, expected: int | None, current: Portfolio | None) -> int:
    """Return the version the next write should carry."""
    actual = current.version if current is not None else 0
    if expected is not None and expected != actual:
        raise ConcurrentModificationError(mode.value, expected, actual)
    return actual + 1


class InMemoryPortfolioStore(IPortfolioStore):
    """Process-local store, used by tests and throwaway runs."""

    def __init__(self) -> None:
        self._documents: dict[TradingMode, Portfolio] = {}
        self._lock = RLock()

    def get(self, mode: TradingMode) -> Portfolio | None:
        with self._lock:
            return self._documents.get(mode)

    def set(self, portfolio: Portfolio, expected_version: int | None = None) -> Portfolio:
        mode = portfolio.trading_mode
        with self._lock:
            version = _check_version(mode, expected_version, self._documents.get(mode))
            stored = replace(portfolio, version=version)
            self._documents[mode] = stored
            return stored


class JsonFilePortfolioStore(IPortfolioStore):
    """Stores each mode's portfolio as a JSON file under a state directory.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never see a half-written document.
    Writers hold an fcntl lock on a sibling .lock file, so the version
    check also holds across processes sharing the directory (POSIX only).
    """

    def __init__(self, state_dir: Path | str):
        self.state_dir = Path(state_dir)
        self._lock = RLock()

    def _path(self, mode: TradingMode) -> Path:
        return self.state_dir / PORTFOLIO_FILE_TEMPLATE.format(mode=mode.value)

    def get(self, mode: TradingMode) -> Portfolio | None:
        path = self._path(mode)
        with self._lock:
            if not path.exists():
                return None
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to read portfolio file {path}: {e}")
                raise PortfolioStoreError(f"Failed to read {mode} portfolio") from e

        try:
            return Portfolio.from_dict(data)
        except ValidationError as e:
            raise PortfolioStoreError(f"Stored {mode} portfolio is invalid: {e}") from e

    @contextmanager
    def _exclusive(self, path: Path) -> Iterator[None]:
        """Hold an OS-level lock on a sibling .lock file.

        Serializes read, version check and replace across every process
        sharing the state directory.
        """
        self.state_dir.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_name(f".{path.name}.lock")
        with open(lock_path, "a") as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)

    def set(self, portfolio: Portfolio, expected_version: int | None = None) -> Portfolio:
        mode = portfolio.trading_mode
        path = self._path(mode)

        try:
            with self._lock, self._exclusive(path):
                version = _check_version(mode, expected_version, self.get(mode))
                stored = replace(portfolio, version=version)

                fd, tmp_name = tempfile.mkstemp(
                    dir=self.state_dir, prefix=f".{path.name}.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(stored.to_dict(), f, indent=2)
                    os.replace(tmp_name, path)
                except Exception:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
        except OSError as e:
            logger.error(f"Failed to write portfolio file {path}: {e}")
            raise PortfolioStoreError(f"Failed to write {mode} portfolio") from e

        logger.debug(f"Stored {mode} portfolio version {version} at {path}")
        return stored

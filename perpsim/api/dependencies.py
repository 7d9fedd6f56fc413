"""
FastAPI dependencies.
"""

from functools import lru_cache

from perpsim.core.engine.simulator import SimulationEngine
from perpsim.infrastructure.factory import create_engine


@lru_cache(maxsize=1)
def get_engine() -> SimulationEngine:
    """Process-wide engine built from environment settings."""
    return create_engine()

"""Engine configuration."""

from __future__ import annotations
from typing import NamedTuple


class EngineConfig(NamedTuple):
    """
    Bounds and tolerances applied by the analysis engine.

    singular_tolerance is compared against the LU pivots of the
    row/column equilibrated system matrix. None uses n * machine
    epsilon, which only rejects rows dependent up to rounding.
    """
    singular_tolerance: float | None = None
    min_nodes: int = 2
    max_nodes: int = 10
    min_elements: int = 1
    max_elements: int = 20
    require_source: bool = True  # reject circuits with no V or I source


DEFAULT_CONFIG = EngineConfig()

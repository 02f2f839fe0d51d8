"""pymna - Modified Nodal Analysis for linear circuits.

Solves circuits of resistors, capacitors, inductors and independent
voltage/current sources at DC or at a single AC frequency (phasors).

Usage:
    from pymna import Circuit, R, VSource, analyze

    ckt = Circuit(node_count=3)
    ckt, v1 = VSource(ckt, 1, 0, name="V1", value=10.0)
    ckt, r1 = R(ckt, 1, 2, name="R1", value=1000.0)
    ckt, r2 = R(ckt, 2, 0, name="R2", value=1000.0)
    result = analyze(ckt)
    result.voltages[2]  # (5+0j)
"""

import jax

jax.config.update("jax_enable_x64", True)

from .elements import (  # noqa: E402
    Element, Circuit, R, C, L, VSource, ISource,
    node_index, matrix_index_to_node, validate_circuit, GROUND_INDEX,
)
from .admittance import admittance, impedance, is_dc_short  # noqa: E402
from .assembler import MNASystem, assemble  # noqa: E402
from .linalg import LinearSolution, equilibrate, solve_linear_system  # noqa: E402
from .diagnostics import diagnose_singularity, unreachable_nodes  # noqa: E402
from .results import AnalysisInfo, AnalysisResult, map_solution  # noqa: E402
from .engine import analyze, solve  # noqa: E402
from .config import EngineConfig, DEFAULT_CONFIG  # noqa: E402
from .errors import (  # noqa: E402
    CircuitError, InvalidCircuit, InvalidFrequency, DegenerateElement,
    DimensionMismatch, SingularSystem,
)

__version__ = "0.1.0"
__all__ = [
    # Circuit building
    "Element",
    "Circuit",
    "R",
    "C",
    "L",
    "VSource",
    "ISource",
    "node_index",
    "matrix_index_to_node",
    "validate_circuit",
    "GROUND_INDEX",
    # Admittance
    "admittance",
    "impedance",
    "is_dc_short",
    # Assembly and solving
    "MNASystem",
    "assemble",
    "LinearSolution",
    "equilibrate",
    "solve_linear_system",
    "diagnose_singularity",
    "unreachable_nodes",
    # Results
    "AnalysisInfo",
    "AnalysisResult",
    "map_solution",
    "analyze",
    "solve",
    # Configuration and errors
    "EngineConfig",
    "DEFAULT_CONFIG",
    "CircuitError",
    "InvalidCircuit",
    "InvalidFrequency",
    "DegenerateElement",
    "DimensionMismatch",
    "SingularSystem",
    "__version__",
]

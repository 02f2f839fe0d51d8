"""Analysis pipeline: validate, assemble, solve, map.

analyze() is a pure function of its arguments; nothing is cached or
kept between calls, so independent circuits can be analysed
concurrently.
"""

from __future__ import annotations
import logging

from .assembler import assemble
from .config import EngineConfig, DEFAULT_CONFIG
from .diagnostics import diagnose_singularity, unreachable_nodes
from .elements import Circuit, validate_circuit
from .errors import CircuitError, InvalidCircuit, SingularSystem
from .linalg import solve_linear_system
from .results import AnalysisInfo, AnalysisResult, map_solution

logger = logging.getLogger(__name__)


def check_limits(ckt: Circuit, config: EngineConfig = DEFAULT_CONFIG) -> None:
    """Reject circuits outside the configured size bounds."""
    if not config.min_nodes <= ckt.node_count <= config.max_nodes:
        raise InvalidCircuit(
            f"Node count must be between {config.min_nodes} and {config.max_nodes}, "
            f"got {ckt.node_count}")
    count = len(ckt.elements)
    if not config.min_elements <= count <= config.max_elements:
        raise InvalidCircuit(
            f"Element count must be between {config.min_elements} and {config.max_elements}, "
            f"got {count}")
    if config.require_source and not (ckt.voltage_sources or ckt.current_sources):
        raise InvalidCircuit("The circuit needs at least one voltage (V) or current (I) source")


def solve(ckt: Circuit, config: EngineConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """
    Run a full MNA analysis, raising on failure.

    Args:
        ckt: Circuit to analyse (frequency_hz == 0 for DC)
        config: Bounds and tolerances

    Returns:
        Successful AnalysisResult

    Raises:
        CircuitError: any of InvalidCircuit, InvalidFrequency,
            DegenerateElement, DimensionMismatch, SingularSystem
    """
    validate_circuit(ckt)
    check_limits(ckt, config)

    floating = unreachable_nodes(ckt)
    if floating:
        logger.warning("Nodes %s have no conductive path to reference node %d",
                       list(floating), ckt.reference_node)

    system = assemble(ckt)
    try:
        solution = solve_linear_system(system.A, system.z, tolerance=config.singular_tolerance)
    except SingularSystem as err:
        raise err.with_causes(diagnose_singularity(ckt)) from err

    voltages, currents, inductor_currents = map_solution(solution.x, ckt, system)

    return AnalysisResult(
        success=True,
        voltages=voltages,
        currents=currents,
        inductor_currents=inductor_currents,
        system=system,
        x=solution.x,
        info=AnalysisInfo.of(ckt, determinant=solution.determinant),
    )


def analyze(ckt: Circuit, config: EngineConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """
    Run a full MNA analysis and report failures as a result.

    Circuit errors never escape: the result carries success=False, the
    error category (e.g. "SingularSystem") and a readable message.
    """
    try:
        return solve(ckt, config)
    except CircuitError as err:
        logger.info("Analysis failed (%s): %s", err.category, err)
        return AnalysisResult.failure(err)

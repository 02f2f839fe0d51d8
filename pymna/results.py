"""Mapping the MNA solution vector back onto the circuit."""

from __future__ import annotations
from typing import NamedTuple

from jax import Array

from .assembler import MNASystem
from .elements import Circuit, matrix_index_to_node, CAPACITOR, CURRENT_SOURCE, INDUCTOR, RESISTOR
from .errors import CircuitError


class AnalysisInfo(NamedTuple):
    """Summary of the analysed circuit."""
    node_count: int
    reference_node: int
    frequency_hz: float
    analysis_type: str  # "DC" or "AC"
    num_voltage_sources: int
    num_current_sources: int
    num_resistors: int
    num_capacitors: int
    num_inductors: int
    determinant: complex | None = None

    @classmethod
    def of(cls, ckt: Circuit, determinant: complex | None = None) -> AnalysisInfo:
        return cls(
            node_count=ckt.node_count,
            reference_node=ckt.reference_node,
            frequency_hz=ckt.frequency_hz,
            analysis_type="DC" if ckt.is_dc else "AC",
            num_voltage_sources=len(ckt.voltage_sources),
            num_current_sources=len(ckt.of_kind(CURRENT_SOURCE)),
            num_resistors=len(ckt.of_kind(RESISTOR)),
            num_capacitors=len(ckt.of_kind(CAPACITOR)),
            num_inductors=len(ckt.of_kind(INDUCTOR)),
            determinant=determinant,
        )


class AnalysisResult(NamedTuple):
    """
    Outcome of one analysis.

    On failure only success, error and message are meaningful; every
    numeric field is empty or None.
    """
    success: bool
    voltages: dict  # {node: complex voltage}, reference node is exactly 0
    currents: dict  # {voltage source name: complex branch current}
    inductor_currents: dict  # {inductor name: complex current}, DC only
    system: MNASystem | None = None
    x: Array | None = None
    info: AnalysisInfo | None = None
    error: str | None = None  # error category on failure
    message: str = ""

    @classmethod
    def failure(cls, error: CircuitError) -> AnalysisResult:
        return cls(
            success=False,
            voltages={},
            currents={},
            inductor_currents={},
            error=error.category,
            message=str(error),
        )

    def voltage(self, node: int) -> complex:
        """Voltage of a node relative to the reference."""
        return self.voltages[node]

    def voltage_between(self, node_a: int, node_b: int) -> complex:
        """V(node_a) - V(node_b)."""
        return self.voltages[node_a] - self.voltages[node_b]

    def current(self, name: str) -> complex:
        """Branch current of a voltage source (or of an inductor at DC)."""
        if name in self.currents:
            return self.currents[name]
        if name in self.inductor_currents:
            return self.inductor_currents[name]
        raise KeyError(f"Element {name} has no branch current")


def map_solution(x: Array, ckt: Circuit, system: MNASystem) -> tuple[dict, dict, dict]:
    """
    Split the solution vector into node voltages and branch currents.

    Args:
        x: Solution of A x = z
        ckt: Circuit the system was assembled from
        system: The assembled system (for branch ordering)

    Returns:
        (voltages, currents, inductor_currents)
    """
    values = [complex(v) for v in x.reshape(-1).tolist()]
    n = system.num_nodes

    voltages = {ckt.reference_node: 0j}
    for index in range(n):
        voltages[matrix_index_to_node(index, ckt.reference_node)] = values[index]
    voltages = dict(sorted(voltages.items()))

    currents = {}
    inductor_currents = {}
    for k, name in enumerate(system.branch_names):
        if k < system.num_voltage_sources:
            currents[name] = values[n + k]
        else:
            inductor_currents[name] = values[n + k]

    return voltages, currents, inductor_currents

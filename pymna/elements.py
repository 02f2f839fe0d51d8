"""Circuit elements and topology (immutable/functional style).

Build a circuit the same way for every element kind:

    ckt = Circuit(node_count=3)
    ckt, v1 = VSource(ckt, 1, 0, name="V1", value=10.0)
    ckt, r1 = R(ckt, 1, 2, name="R1", value=1000.0)
    ckt, r2 = R(ckt, 2, 0, name="R2", value=1000.0)

Node numbers are plain integers in [0, node_count). One of them is the
reference node (ground), which is excluded from the MNA unknowns; see
node_index() for how the remaining nodes are compacted into matrix rows.
"""

from __future__ import annotations
import math
from numbers import Integral, Real
from typing import NamedTuple, Iterable

from .errors import InvalidCircuit, InvalidFrequency

RESISTOR = "R"
CAPACITOR = "C"
INDUCTOR = "L"
VOLTAGE_SOURCE = "V"
CURRENT_SOURCE = "I"

PASSIVE_KINDS = (RESISTOR, CAPACITOR, INDUCTOR)
SOURCE_KINDS = (VOLTAGE_SOURCE, CURRENT_SOURCE)
ELEMENT_KINDS = PASSIVE_KINDS + SOURCE_KINDS

GROUND_INDEX = -1  # compacted index of the reference node (absent from the matrix)


class Element(NamedTuple):
    """One two-terminal circuit component."""
    name: str
    kind: str  # "R", "C", "L", "V", "I"
    node_a: int  # positive terminal for sources
    node_b: int  # negative terminal for sources
    value: float  # ohms, farads, henrys, volts or amperes

    @property
    def nodes(self) -> tuple[int, int]:
        return (self.node_a, self.node_b)


class Circuit(NamedTuple):
    """
    Immutable circuit description handed to the engine.

    Build using functional style:
        ckt = Circuit(node_count=3, reference_node=0)
        ckt, r1 = R(ckt, 1, 2, name="R1", value=1000.0)

    frequency_hz == 0 selects DC analysis, anything positive is a
    single-frequency AC (phasor) analysis.
    """
    node_count: int
    reference_node: int = 0
    frequency_hz: float = 0.0
    elements: tuple[Element, ...] = ()

    @classmethod
    def from_elements(
        cls,
        elements: Iterable[Element],
        node_count: int,
        reference_node: int = 0,
        frequency_hz: float = 0.0,
    ) -> Circuit:
        """Build a validated circuit from a sequence of elements."""
        ckt = cls(node_count=node_count, reference_node=reference_node,
                  frequency_hz=frequency_hz)
        _check_topology(ckt)
        for element in elements:
            ckt, _ = ckt.add(element)
        return ckt

    @property
    def is_dc(self) -> bool:
        return self.frequency_hz == 0

    @property
    def passives(self) -> tuple[Element, ...]:
        return tuple(e for e in self.elements if e.kind in PASSIVE_KINDS)

    @property
    def voltage_sources(self) -> tuple[Element, ...]:
        """Voltage sources in declaration order (the branch-current order)."""
        return tuple(e for e in self.elements if e.kind == VOLTAGE_SOURCE)

    @property
    def current_sources(self) -> tuple[Element, ...]:
        return tuple(e for e in self.elements if e.kind == CURRENT_SOURCE)

    def of_kind(self, kind: str) -> tuple[Element, ...]:
        return tuple(e for e in self.elements if e.kind == kind)

    def with_frequency(self, frequency_hz: float) -> Circuit:
        """Same topology analysed at another frequency."""
        return self._replace(frequency_hz=frequency_hz)

    def add(self, element: Element) -> tuple[Circuit, Element]:
        """
        Add an element.

        Returns (new_circuit, element).
        """
        _check_element(self, element)
        taken = {e.name.upper() for e in self.elements}
        if element.name.upper() in taken:
            raise InvalidCircuit(f"Duplicate element name '{element.name}'")
        return self._replace(elements=self.elements + (element,)), element


def _make(ckt: Circuit, kind: str, node_a: int, node_b: int, name: str,
          value: float) -> tuple[Circuit, Element]:
    return ckt.add(Element(name=name, kind=kind, node_a=node_a, node_b=node_b,
                           value=value))


def R(ckt: Circuit, node_a: int, node_b: int, *, name: str,
      value: float) -> tuple[Circuit, Element]:
    """
    Add a resistor.

    Args:
        ckt: Circuit to add to
        node_a: First terminal
        node_b: Second terminal
        name: Element name (unique within the circuit)
        value: Resistance in Ohms

    Returns:
        (new_circuit, element)

    Example:
        ckt, r1 = R(ckt, 1, 2, name="R1", value=1000.0)  # 1 kOhm
    """
    return _make(ckt, RESISTOR, node_a, node_b, name, value)


def C(ckt: Circuit, node_a: int, node_b: int, *, name: str,
      value: float) -> tuple[Circuit, Element]:
    """
    Add a capacitor (value in Farads).

    Example:
        ckt, c1 = C(ckt, 2, 0, name="C1", value=1e-6)  # 1 uF
    """
    return _make(ckt, CAPACITOR, node_a, node_b, name, value)


def L(ckt: Circuit, node_a: int, node_b: int, *, name: str,
      value: float) -> tuple[Circuit, Element]:
    """
    Add an inductor (value in Henrys).

    Example:
        ckt, l1 = L(ckt, 1, 2, name="L1", value=1e-3)  # 1 mH
    """
    return _make(ckt, INDUCTOR, node_a, node_b, name, value)


def VSource(ckt: Circuit, node_p: int, node_n: int, *, name: str,
            value: float) -> tuple[Circuit, Element]:
    """
    Add an independent voltage source: V(node_p) - V(node_n) = value.

    Its branch current is an extra MNA unknown, reported as the current
    flowing into the positive terminal through the source. A source
    delivering power therefore reports a negative current.

    Example:
        ckt, v1 = VSource(ckt, 1, 0, name="V1", value=10.0)
    """
    return _make(ckt, VOLTAGE_SOURCE, node_p, node_n, name, value)


def ISource(ckt: Circuit, node_p: int, node_n: int, *, name: str,
            value: float) -> tuple[Circuit, Element]:
    """
    Add an independent current source.

    A positive value injects current into node_p and draws it from
    node_n (through the external circuit).

    Example:
        ckt, i1 = ISource(ckt, 1, 0, name="I1", value=1e-3)  # 1 mA into node 1
    """
    return _make(ckt, CURRENT_SOURCE, node_p, node_n, name, value)


def node_index(node: int, reference_node: int) -> int:
    """
    Map a circuit node number to its compacted matrix row/column.

    The reference node maps to GROUND_INDEX (-1), nodes below it keep
    their number and nodes above it shift down by one.
    """
    if node == reference_node:
        return GROUND_INDEX
    if node < reference_node:
        return node
    return node - 1


def matrix_index_to_node(index: int, reference_node: int) -> int:
    """Inverse of node_index() for a present (non-ground) index."""
    if index < 0:
        raise ValueError(f"Index {index} has no node (reference is not in the matrix)")
    return index if index < reference_node else index + 1


def validate_frequency(frequency_hz: float) -> float:
    """Return the frequency as float, rejecting negative or non-finite values."""
    if isinstance(frequency_hz, bool) or not isinstance(frequency_hz, Real):
        raise InvalidFrequency(f"Frequency must be a number, got {frequency_hz!r}")
    if not math.isfinite(frequency_hz):
        raise InvalidFrequency(f"Frequency must be finite, got {frequency_hz}")
    if frequency_hz < 0:
        raise InvalidFrequency(
            f"Frequency cannot be negative ({frequency_hz} Hz); use 0 for DC analysis")
    return float(frequency_hz)


def validate_circuit(ckt: Circuit) -> Circuit:
    """
    Re-check every structural invariant of a circuit.

    Circuits built with the factory functions are already valid; this
    covers circuits constructed directly as Circuit(...).
    """
    _check_topology(ckt)
    validate_frequency(ckt.frequency_hz)
    seen = set()
    for element in ckt.elements:
        _check_element(ckt, element)
        key = element.name.upper()
        if key in seen:
            raise InvalidCircuit(f"Duplicate element name '{element.name}'")
        seen.add(key)
    return ckt


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _check_topology(ckt: Circuit) -> None:
    if not _is_int(ckt.node_count) or ckt.node_count < 2:
        raise InvalidCircuit(
            f"A circuit needs at least 2 nodes (including the reference), got {ckt.node_count!r}")
    if not _is_int(ckt.reference_node) or not 0 <= ckt.reference_node < ckt.node_count:
        raise InvalidCircuit(
            f"Reference node must be in [0, {ckt.node_count - 1}], got {ckt.reference_node!r}")


def _check_element(ckt: Circuit, element: Element) -> None:
    if not isinstance(element.name, str) or not element.name.strip():
        raise InvalidCircuit(f"Element name must be a non-empty string, got {element.name!r}")
    if element.kind not in ELEMENT_KINDS:
        raise InvalidCircuit(
            f"{element.name}: unknown element kind {element.kind!r} "
            f"(expected one of {', '.join(ELEMENT_KINDS)})")
    for node in element.nodes:
        if not _is_int(node) or not 0 <= node < ckt.node_count:
            raise InvalidCircuit(
                f"{element.name}: node {node!r} is outside [0, {ckt.node_count - 1}]")
    if element.node_a == element.node_b:
        raise InvalidCircuit(
            f"{element.name}: both terminals are connected to node {element.node_a}")
    if isinstance(element.value, bool) or not isinstance(element.value, Real):
        raise InvalidCircuit(f"{element.name}: value must be a real number, got {element.value!r}")

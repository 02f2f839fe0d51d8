"""MNA system assembly.

The system A x = z is built from four blocks:

    A = [G  B]      z = [i]
        [C  D]          [e]

where:
    G (n x n) is the complex admittance matrix of the passive elements
    B (n x m) is the incidence of the branch-current unknowns
    C = B^T, D = 0 (independent sources only)
    i (n) holds current-source injections, e (m) the branch voltages

n = node_count - 1 (the reference node is elided through node_index) and
m counts the branch unknowns: every voltage source in declaration order,
then, at DC only, every inductor as a 0 V branch.

All blocks are complex128 JAX arrays; DC systems have zero imaginary parts.
"""

from __future__ import annotations
import logging
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .admittance import admittance, check_value, is_dc_short
from .elements import Circuit, Element, node_index, validate_frequency, CAPACITOR, INDUCTOR

logger = logging.getLogger(__name__)

DTYPE = jnp.complex128


class MNASystem(NamedTuple):
    """Assembled MNA blocks for one analysis."""
    G: Array
    B: Array
    C: Array
    D: Array
    A: Array
    z: Array
    branch_names: tuple[str, ...]  # branch-current unknowns, in row order
    num_nodes: int  # non-reference nodes (n)
    num_voltage_sources: int  # leading entries of branch_names that are V sources

    @property
    def size(self) -> int:
        return self.A.shape[0]

    def shapes(self) -> dict[str, tuple[int, ...]]:
        """Dimensions of every block, keyed by block name."""
        return {name: tuple(getattr(self, name).shape) for name in ("G", "B", "C", "D", "A", "z")}


def branch_elements(ckt: Circuit) -> tuple[Element, ...]:
    """Elements that own a branch-current unknown, in column order."""
    branches = ckt.voltage_sources
    if ckt.is_dc:
        branches = branches + ckt.of_kind(INDUCTOR)
    return branches


def build_conductance(ckt: Circuit) -> Array:
    """Stamp every passive element's admittance into G."""
    n = ckt.node_count - 1
    G = jnp.zeros((n, n), dtype=DTYPE)
    for element in ckt.passives:
        if is_dc_short(element, ckt.frequency_hz):
            continue  # stamped as a branch in B
        y = admittance(element, ckt.frequency_hz)
        if y == 0:
            continue  # DC capacitor: open circuit
        i = node_index(element.node_a, ckt.reference_node)
        j = node_index(element.node_b, ckt.reference_node)
        G = _stamp_admittance(G, i, j, y)
    return G


def build_incidence(ckt: Circuit, branches: tuple[Element, ...] | None = None) -> Array:
    """B[node, k] = +1 at the positive terminal and -1 at the negative one."""
    if branches is None:
        branches = branch_elements(ckt)
    n = ckt.node_count - 1
    B = jnp.zeros((n, len(branches)), dtype=DTYPE)
    for k, element in enumerate(branches):
        i_pos = node_index(element.node_a, ckt.reference_node)
        i_neg = node_index(element.node_b, ckt.reference_node)
        if i_pos >= 0:
            B = B.at[i_pos, k].set(1.0)
        if i_neg >= 0:
            B = B.at[i_neg, k].set(-1.0)
    return B


def build_current_vector(ckt: Circuit) -> Array:
    """Current-source injections: +value at node_a, -value at node_b."""
    n = ckt.node_count - 1
    i = jnp.zeros(n, dtype=DTYPE)
    for source in ckt.current_sources:
        i_pos = node_index(source.node_a, ckt.reference_node)
        i_neg = node_index(source.node_b, ckt.reference_node)
        if i_pos >= 0:
            i = i.at[i_pos].add(source.value)
        if i_neg >= 0:
            i = i.at[i_neg].add(-source.value)
    return i


def build_source_vector(ckt: Circuit, branches: tuple[Element, ...] | None = None) -> Array:
    """Branch voltages: the source value for V sources, 0 for DC inductors."""
    if branches is None:
        branches = branch_elements(ckt)
    values = [b.value if b.kind != INDUCTOR else 0.0 for b in branches]
    return jnp.asarray(values, dtype=DTYPE).reshape(len(branches))


def assemble(ckt: Circuit) -> MNASystem:
    """
    Build the full MNA system for a circuit.

    Every element value is checked before any stamp is applied, so a
    DegenerateElement never leaves a partially stamped system behind.

    Args:
        ckt: Structurally valid circuit

    Returns:
        MNASystem with G, B, C, D, A and z
    """
    validate_frequency(ckt.frequency_hz)
    for element in ckt.elements:
        check_value(element)

    branches = branch_elements(ckt)
    n = ckt.node_count - 1
    m = len(branches)

    if ckt.is_dc:
        for element in ckt.passives:
            if element.kind == INDUCTOR:
                logger.info("DC analysis: inductor %s is a short (0 V branch)", element.name)
            elif element.kind == CAPACITOR:
                logger.info("DC analysis: capacitor %s is an open circuit", element.name)

    G = build_conductance(ckt)
    B = build_incidence(ckt, branches)
    C = B.T
    D = jnp.zeros((m, m), dtype=DTYPE)

    top = jnp.concatenate([G, B], axis=1)
    bottom = jnp.concatenate([C, D], axis=1)
    A = jnp.concatenate([top, bottom], axis=0)

    i = build_current_vector(ckt)
    e = build_source_vector(ckt, branches)
    z = jnp.concatenate([i, e], axis=0)

    logger.debug("Assembled MNA system: n=%d nodes, m=%d branches, A is %dx%d",
                 n, m, A.shape[0], A.shape[1])

    return MNASystem(
        G=G,
        B=B,
        C=C,
        D=D,
        A=A,
        z=z,
        branch_names=tuple(b.name for b in branches),
        num_nodes=n,
        num_voltage_sources=len(ckt.voltage_sources),
    )


def _stamp_admittance(Y: Array, i: int, j: int, y) -> Array:
    """Stamp admittance y between compacted indices i and j (-1 = reference)."""
    if i >= 0:
        Y = Y.at[i, i].add(y)
    if j >= 0:
        Y = Y.at[j, j].add(y)
    if i >= 0 and j >= 0:
        Y = Y.at[i, j].add(-y)
        Y = Y.at[j, i].add(-y)
    return Y

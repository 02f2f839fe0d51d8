"""Topology checks that explain a singular MNA system.

The solver only knows that A has no unique inverse. These helpers look
at the circuit itself to name the likely culprit: a node with no
conductive path to ground, a loop of ideal voltage branches, or voltage
sources wired directly in parallel.
"""

from __future__ import annotations
from collections import defaultdict, deque

from .admittance import is_dc_short
from .elements import Circuit, Element, CAPACITOR, CURRENT_SOURCE, INDUCTOR, VOLTAGE_SOURCE
from .errors import GENERIC_SINGULAR_CAUSES


def _conducts(element: Element, frequency_hz: float) -> bool:
    # Current sources and DC capacitors fix no node voltage.
    if element.kind == CURRENT_SOURCE:
        return False
    return not (element.kind == CAPACITOR and frequency_hz == 0)


def _is_ideal_branch(element: Element, frequency_hz: float) -> bool:
    return element.kind == VOLTAGE_SOURCE or is_dc_short(element, frequency_hz)


def unreachable_nodes(ckt: Circuit) -> tuple[int, ...]:
    """Nodes with no conductive element path to the reference node."""
    neighbours = defaultdict(set)
    for element in ckt.elements:
        if _conducts(element, ckt.frequency_hz):
            neighbours[element.node_a].add(element.node_b)
            neighbours[element.node_b].add(element.node_a)

    reached = {ckt.reference_node}
    queue = deque([ckt.reference_node])
    while queue:
        node = queue.popleft()
        for other in neighbours[node]:
            if other not in reached:
                reached.add(other)
                queue.append(other)

    return tuple(n for n in range(ckt.node_count) if n not in reached)


def voltage_source_loops(ckt: Circuit) -> tuple[str, ...]:
    """
    Names of ideal branches that close a loop of ideal branches.

    Ideal branches are voltage sources and, at DC, inductors. Each name
    returned is the element whose addition (in declaration order) closed
    a loop.
    """
    parent = list(range(ckt.node_count))

    def find(node: int) -> int:
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    closing = []
    for element in ckt.elements:
        if not _is_ideal_branch(element, ckt.frequency_hz):
            continue
        root_a, root_b = find(element.node_a), find(element.node_b)
        if root_a == root_b:
            closing.append(element.name)
        else:
            parent[root_a] = root_b
    return tuple(closing)


def conflicting_sources(ckt: Circuit) -> tuple[tuple[str, ...], ...]:
    """Groups of voltage sources connected directly across the same node pair."""
    groups = defaultdict(list)
    for source in ckt.voltage_sources:
        groups[frozenset(source.nodes)].append(source.name)
    return tuple(tuple(names) for names in groups.values() if len(names) > 1)


def diagnose_singularity(ckt: Circuit) -> tuple[str, ...]:
    """
    Likely circuit-level causes of a singular system.

    Falls back to the generic list when no specific cause is found.
    """
    causes = []

    floating = unreachable_nodes(ckt)
    if floating:
        listed = ", ".join(str(n) for n in floating)
        noun = "Node" if len(floating) == 1 else "Nodes"
        causes.append(
            f"{noun} {listed} {'has' if len(floating) == 1 else 'have'} no conductive path "
            f"to the reference node {ckt.reference_node} (floating)")

    parallel = conflicting_sources(ckt)
    in_parallel = set()
    for names in parallel:
        in_parallel.update(names)
        first = next(s for s in ckt.voltage_sources if s.name == names[0])
        causes.append(
            f"Voltage sources {', '.join(names)} are connected directly in parallel "
            f"across nodes {first.node_a} and {first.node_b} (conflicting voltage constraints)")

    for name in voltage_source_loops(ckt):
        if name in in_parallel:
            continue
        causes.append(
            f"{name} closes a loop made only of ideal voltage sources"
            + (" and DC inductors" if ckt.is_dc and ckt.of_kind(INDUCTOR) else ""))

    return tuple(causes) or GENERIC_SINGULAR_CAUSES

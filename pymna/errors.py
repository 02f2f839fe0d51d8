"""Exception taxonomy for circuit analysis.

Every error raised by the engine derives from CircuitError and carries a
``category`` tag. ``analyze()`` converts these into failure results; the
lower-level functions simply raise them.
"""

from __future__ import annotations


GENERIC_SINGULAR_CAUSES = (
    "a node has no path to the reference node (floating node)",
    "a closed loop made only of ideal voltage sources",
    "two ideal voltage sources shorted together force conflicting voltages",
)


class CircuitError(ValueError):
    """Base class for all analysis failures."""
    category = "CircuitError"


class InvalidCircuit(CircuitError):
    """Circuit violates a structural invariant (node range, names, bounds)."""
    category = "InvalidCircuit"


class InvalidFrequency(CircuitError):
    """Analysis frequency is negative or not finite."""
    category = "InvalidFrequency"


class DegenerateElement(CircuitError):
    """Element value makes its admittance undefined."""
    category = "DegenerateElement"

    def __init__(self, element_name: str, message: str):
        super().__init__(f"{element_name}: {message}")
        self.element_name = element_name


class DimensionMismatch(CircuitError):
    """A and z do not describe a square, consistent linear system."""
    category = "DimensionMismatch"


class SingularSystem(CircuitError):
    """The assembled system has no unique solution."""
    category = "SingularSystem"

    def __init__(self, causes: tuple[str, ...] = GENERIC_SINGULAR_CAUSES, detail: str = ""):
        self.causes = tuple(causes) or GENERIC_SINGULAR_CAUSES
        self.detail = detail
        lines = ["Singular MNA system: the circuit has no unique solution."]
        if detail:
            lines.append(detail)
        lines.append("Likely causes:")
        lines.extend(f"  - {cause}" for cause in self.causes)
        super().__init__("\n".join(lines))

    def with_causes(self, causes: tuple[str, ...]) -> SingularSystem:
        """Copy of this error with a more specific list of causes."""
        return SingularSystem(causes or self.causes, self.detail)

"""Frequency-dependent admittance of passive elements.

With omega = 2*pi*f:
- R has admittance Y = 1/R (real)
- C has admittance Y = j*omega*C (positive imaginary), 0 at DC (open)
- L has admittance Y = 1/(j*omega*L) = -j/(omega*L) (negative imaginary)

An inductor at DC is a short circuit with no finite admittance. Instead
of approximating it with a huge conductance, the assembler gives it its
own branch-current unknown, exactly like a 0 V source (see is_dc_short).

Values are always returned as Python complex so DC and AC share one
code path; at DC every imaginary part is exactly zero.
"""

from __future__ import annotations
import math

from .elements import Element, RESISTOR, CAPACITOR, INDUCTOR, PASSIVE_KINDS, validate_frequency
from .errors import DegenerateElement


def check_value(element: Element) -> None:
    """Raise DegenerateElement if the element's value cannot be stamped."""
    value = element.value
    if not math.isfinite(value):
        raise DegenerateElement(element.name, f"value must be finite, got {value}")
    if element.kind in PASSIVE_KINDS and value <= 0:
        what = {RESISTOR: "resistance", CAPACITOR: "capacitance", INDUCTOR: "inductance"}
        raise DegenerateElement(
            element.name, f"{what[element.kind]} must be greater than zero, got {value}")


def is_dc_short(element: Element, frequency_hz: float) -> bool:
    """True if the element is an ideal short at this frequency (DC inductor)."""
    return element.kind == INDUCTOR and frequency_hz == 0


def admittance(element: Element, frequency_hz: float) -> complex:
    """
    Complex admittance of a resistor, capacitor or inductor.

    Args:
        element: Passive element
        frequency_hz: Analysis frequency in Hz (0 for DC)

    Returns:
        Admittance in Siemens

    Raises:
        InvalidFrequency: negative or non-finite frequency
        DegenerateElement: zero, negative or non-finite element value
        ValueError: element is not passive, or is a DC inductor
    """
    frequency_hz = validate_frequency(frequency_hz)
    if element.kind not in PASSIVE_KINDS:
        raise ValueError(f"{element.name}: sources have no admittance")
    check_value(element)

    omega = 2 * math.pi * frequency_hz
    if element.kind == RESISTOR:
        return complex(1.0 / element.value, 0.0)
    if element.kind == CAPACITOR:
        # DC: open circuit, no stamp contribution
        return complex(0.0, omega * element.value)
    if frequency_hz == 0:
        raise ValueError(
            f"{element.name}: an inductor is a short at DC and has no finite admittance; "
            "stamp it as a zero-volt branch instead")
    return complex(0.0, -1.0 / (omega * element.value))


def impedance(element: Element, frequency_hz: float) -> complex:
    """
    Complex impedance Z = 1/Y of a passive element.

    DC capacitors are open (infinite impedance) and DC inductors are
    shorts (zero impedance).
    """
    frequency_hz = validate_frequency(frequency_hz)
    check_value(element)
    if element.kind == RESISTOR:
        return complex(element.value, 0.0)
    if frequency_hz == 0:
        if element.kind == CAPACITOR:
            return complex(math.inf, 0.0)
        if element.kind == INDUCTOR:
            return 0j
    return 1.0 / admittance(element, frequency_hz)

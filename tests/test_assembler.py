"""Tests for MNA matrix assembly."""

import math
import pytest
import jax.numpy as jnp


def _divider(reference_node=0):
    from pymna import Circuit, R, VSource

    ckt = Circuit(node_count=3, reference_node=reference_node)
    ckt, _ = VSource(ckt, 1, 0, name="V1", value=10.0)
    ckt, _ = R(ckt, 1, 2, name="R1", value=1000.0)
    ckt, _ = R(ckt, 2, 0, name="R2", value=1000.0)
    return ckt


def test_divider_blocks():
    """G, B, C, D, A and z of the resistor divider, entry by entry."""
    from pymna import assemble

    system = assemble(_divider())
    g = 1e-3

    expected_G = jnp.array([[g, -g], [-g, 2 * g]])
    expected_B = jnp.array([[1.0], [0.0]])

    assert jnp.allclose(system.G, expected_G, rtol=0, atol=1e-18)
    assert jnp.array_equal(system.B, expected_B)
    assert jnp.array_equal(system.C, expected_B.T)
    assert jnp.array_equal(system.D, jnp.zeros((1, 1)))
    assert jnp.array_equal(system.z, jnp.array([0.0, 0.0, 10.0]))
    assert system.A.shape == (3, 3)
    assert jnp.array_equal(system.A[:2, :2], system.G)
    assert jnp.array_equal(system.A[:2, 2:], system.B)
    assert jnp.array_equal(system.A[2:, :2], system.C)


def test_shapes_tagged():
    from pymna import assemble

    system = assemble(_divider())
    assert system.shapes() == {
        "G": (2, 2), "B": (2, 1), "C": (1, 2), "D": (1, 1), "A": (3, 3), "z": (3,),
    }
    assert system.size == 3
    assert system.branch_names == ("V1",)


def test_all_entries_complex_with_zero_imaginary_at_dc():
    """DC uses the same complex path; every imaginary part is exactly zero."""
    from pymna import assemble

    system = assemble(_divider())
    assert system.A.dtype == jnp.complex128
    assert system.z.dtype == jnp.complex128
    assert bool(jnp.all(system.A.imag == 0))
    assert bool(jnp.all(system.z.imag == 0))


def test_reference_node_terminals_contribute_nothing():
    """With reference 2, stamps touching node 2 are dropped."""
    from pymna import assemble

    system = assemble(_divider(reference_node=2))
    g = 1e-3
    # rows are nodes 0 and 1; R1 and R2 each have one terminal on node 2
    assert jnp.array_equal(system.G, jnp.array([[g, 0.0], [0.0, g]]))
    assert jnp.array_equal(system.B, jnp.array([[-1.0], [1.0]]))


def test_capacitor_open_at_dc_leaves_g_unchanged():
    """G is identical with and without a capacitor at DC."""
    from pymna import C
    from pymna.assembler import build_conductance

    ckt = _divider()
    with_cap, _ = C(ckt, 2, 0, name="C1", value=1e-6)
    assert jnp.array_equal(build_conductance(ckt), build_conductance(with_cap))


def test_capacitor_stamp_at_ac():
    from pymna import Circuit, C
    from pymna.assembler import build_conductance

    freq = 1000.0
    ckt = Circuit(node_count=3, frequency_hz=freq)
    ckt, _ = C(ckt, 1, 2, name="C1", value=1e-6)
    y = 1j * 2 * math.pi * freq * 1e-6

    G = build_conductance(ckt)
    assert jnp.allclose(G, jnp.array([[y, -y], [-y, y]]))


def test_dc_inductor_becomes_zero_volt_branch():
    """At DC an inductor gets its own branch column after the voltage sources."""
    from pymna import L, assemble

    ckt, _ = L(_divider(), 2, 0, name="L1", value=1e-3)
    system = assemble(ckt)

    assert system.branch_names == ("V1", "L1")
    assert system.num_voltage_sources == 1
    assert system.A.shape == (4, 4)
    assert jnp.array_equal(system.B[:, 1], jnp.array([0.0, 1.0]))
    assert complex(system.z[3]) == 0
    # no large-conductance stand-in anywhere in the matrix
    assert float(jnp.max(jnp.abs(system.A))) <= 1.0


def test_ac_inductor_is_an_admittance():
    """At AC the system size is (nodes - 1) + voltage sources."""
    from pymna import L, assemble

    ckt, _ = L(_divider(), 2, 0, name="L1", value=1e-3)
    system = assemble(ckt.with_frequency(50.0))

    assert system.branch_names == ("V1",)
    assert system.A.shape == (3, 3)
    y = -1j / (2 * math.pi * 50.0 * 1e-3)
    assert abs(complex(system.G[1, 1]) - (2e-3 + y)) < 1e-12


def test_current_source_injection_sign():
    """The value is added at node_a and subtracted at node_b."""
    from pymna import Circuit, ISource, R
    from pymna.assembler import build_current_vector

    ckt = Circuit(node_count=3)
    ckt, _ = ISource(ckt, 1, 2, name="I1", value=2e-3)
    ckt, _ = R(ckt, 1, 0, name="R1", value=1.0)
    assert jnp.array_equal(build_current_vector(ckt), jnp.array([2e-3, -2e-3]))

    grounded = Circuit(node_count=3)
    grounded, _ = ISource(grounded, 0, 2, name="I1", value=2e-3)
    assert jnp.array_equal(build_current_vector(grounded), jnp.array([0.0, -2e-3]))


def test_source_vector_follows_declaration_order():
    from pymna import Circuit, R, VSource
    from pymna.assembler import build_source_vector, build_incidence

    ckt = Circuit(node_count=3)
    ckt, _ = VSource(ckt, 2, 0, name="Vb", value=3.0)
    ckt, _ = R(ckt, 1, 2, name="R1", value=1.0)
    ckt, _ = VSource(ckt, 1, 0, name="Va", value=7.0)

    assert jnp.array_equal(build_source_vector(ckt), jnp.array([3.0, 7.0]))
    assert jnp.array_equal(build_incidence(ckt), jnp.array([[0.0, 1.0], [1.0, 0.0]]))


def test_no_voltage_sources_gives_empty_blocks():
    from pymna import Circuit, ISource, R, assemble

    ckt = Circuit(node_count=2)
    ckt, _ = ISource(ckt, 1, 0, name="I1", value=1.0)
    ckt, _ = R(ckt, 1, 0, name="R1", value=2.0)
    system = assemble(ckt)

    assert system.shapes()["B"] == (1, 0)
    assert system.shapes()["D"] == (0, 0)
    assert system.A.shape == (1, 1)


def test_degenerate_value_fails_before_stamping():
    from pymna import Circuit, Element, DegenerateElement, assemble

    ckt = Circuit(node_count=2, elements=(
        Element("V1", "V", 1, 0, 1.0),
        Element("R1", "R", 1, 0, 0.0),
    ))
    with pytest.raises(DegenerateElement, match="R1"):
        assemble(ckt)


def test_non_finite_source_rejected():
    from pymna import Circuit, Element, DegenerateElement, assemble

    ckt = Circuit(node_count=2, elements=(
        Element("V1", "V", 1, 0, math.inf),
        Element("R1", "R", 1, 0, 1.0),
    ))
    with pytest.raises(DegenerateElement, match="V1"):
        assemble(ckt)


def test_negative_source_values_allowed():
    from pymna import Circuit, ISource, R, VSource, assemble

    ckt = Circuit(node_count=3)
    ckt, _ = VSource(ckt, 1, 0, name="V1", value=-5.0)
    ckt, _ = ISource(ckt, 2, 0, name="I1", value=-1.0)
    ckt, _ = R(ckt, 1, 2, name="R1", value=1.0)
    system = assemble(ckt)
    assert complex(system.z[2]) == -5.0
    assert complex(system.z[1]) == -1.0

# tests/test_truss.py
"""
TRUSS TESTS: Element Stiffness and Space Truss Validation
=========================================================

1. The small-strain bar stiffness is the classical (EA/L) direction-cosine
   matrix.
2. The large-displacement tangent matches finite differences of the
   internal forces.
3. A regular tetrahedron of bars (3 at the base, 3 legs to the apex), base
   pinned, vertical load at the apex:
   - EQUILIBRIUM: Σ vertical reactions = -P
   - SYMMETRY: all three legs carry the same force
"""

import numpy as np
import pytest

from mini_static.analysis import LinearStaticAnalysis, solve
from mini_static.boundary_conditions import FixedDofBoundaryCondition, GlobalLoadBoundaryCondition
from mini_static.materials import SVK, IsotropicLinearElastic
from mini_static.model import Mesh, Node
from mini_static.sections import Circle, Square
from mini_static.structure import StructuralBoundaryConditions, StructuralMaterials, Structure
from mini_static.v3d.model import Truss
from mini_static.v3d.truss import truss_axial_force, truss_geometry, truss_internal_forces

E = 210e9
SECTION = Square(0.05)


def direction_cosine_stiffness(E, A, X_i, X_j):
    """(EA/L) [[nn^T, -nn^T], [-nn^T, nn^T]]"""
    X21 = np.asarray(X_j, dtype=float) - np.asarray(X_i, dtype=float)
    L = np.linalg.norm(X21)
    n = X21 / L
    B = np.outer(n, n)
    return E * A / L * np.block([[B, -B], [-B, B]])


def make_regular_tetrahedron_truss(base_radius: float = 1.0, height: float = 1.0, P: float = -10000.0):
    """
    Space truss shaped as a regular tetrahedron.

    Returns:
    --------
    structure, base nodes, apex node, legs
    """
    angles = [0, 2 * np.pi / 3, 4 * np.pi / 3]
    base = [Node((base_radius * np.cos(a), base_radius * np.sin(a), 0.0)) for a in angles]
    apex = Node((0.0, 0.0, height))

    bars = [Truss((base[i], base[(i + 1) % 3]), SECTION, label=f"base{i}") for i in range(3)]
    legs = [Truss((base[i], apex), SECTION, label=f"leg{i}") for i in range(3)]

    mesh = Mesh(base + [apex], bars + legs)
    materials = StructuralMaterials({IsotropicLinearElastic(E=E, nu=0.3, label='steel'): bars + legs})
    pinned = FixedDofBoundaryCondition(['u'], [0, 1, 2], 'pinned')
    load = GlobalLoadBoundaryCondition(['u'], [0.0, 0.0, P], 'apex_load')
    bcs = StructuralBoundaryConditions(node_bcs={pinned: base, load: [apex]})

    return Structure(mesh, materials, bcs), base, apex, legs


class TestTrussElement:

    def test_geometry(self):
        bar = Truss((Node((0.0, 0.0, 0.0)), Node((1.0, 2.0, 2.0))), SECTION)
        L, n = truss_geometry(bar)
        assert np.isclose(L, 3.0)
        np.testing.assert_allclose(n, [1 / 3, 2 / 3, 2 / 3])

    def test_zero_length_raises(self):
        bar = Truss((Node((1.0, 1.0, 1.0)), Node((1.0, 1.0, 1.0))), SECTION)
        with pytest.raises(ValueError):
            truss_geometry(bar)

    def test_mismatched_dimensions_raise(self):
        with pytest.raises(ValueError):
            Truss((Node((0.0, 0.0)), Node((1.0, 0.0, 0.0))), SECTION)

    @pytest.mark.parametrize("material", [
        IsotropicLinearElastic(E=E, nu=0.3),
        SVK(E=E, nu=0.3),
    ])
    def test_stiffness_is_direction_cosine_matrix(self, material):
        X_i, X_j = (0.0, 0.0, 0.0), (1.0, 2.0, 2.0)
        bar = Truss((Node(X_i), Node(X_j)), SECTION)
        K = truss_internal_forces(material, bar, np.zeros(6)).stiffness

        np.testing.assert_allclose(K, direction_cosine_stiffness(E, SECTION.area, X_i, X_j), rtol=1e-12)

    def test_axial_stiffness_along_x(self):
        bar = Truss((Node((0.0, 0.0)), Node((2.0, 0.0))), Circle(0.02))
        K = truss_internal_forces(IsotropicLinearElastic(E=E, nu=0.3), bar, np.zeros(4)).stiffness
        assert np.isclose(K[0, 0], E * Circle(0.02).area / 2.0)

    def test_tension_is_positive(self):
        bar = Truss((Node((0.0, 0.0, 0.0)), Node((1.0, 0.0, 0.0))), SECTION)
        u = np.array([0.0, 0.0, 0.0, 1e-3, 0.0, 0.0])
        N = truss_axial_force(IsotropicLinearElastic(E=E, nu=0.3), bar, u)
        assert np.isclose(N, E * SECTION.area * 1e-3)

    def test_tangent_matches_finite_differences(self):
        material = SVK(E=1.0, nu=0.0)
        bar = Truss((Node((0.0, 0.0, 0.0)), Node((1.0, 0.5, -0.3))), Square(1.0))
        u = np.array([0.01, -0.02, 0.03, 0.05, 0.1, -0.04])
        K = truss_internal_forces(material, bar, u).stiffness

        h = 1e-6
        K_fd = np.zeros((6, 6))
        for j in range(6):
            du = np.zeros(6)
            du[j] = h
            K_fd[:, j] = (
                truss_internal_forces(material, bar, u + du).forces
                - truss_internal_forces(material, bar, u - du).forces
            ) / (2 * h)

        np.testing.assert_allclose(K, K_fd, rtol=1e-6, atol=1e-9)


class TestSpaceTrussEquilibrium:

    def test_vertical_reactions_balance_load(self):
        P = -10000.0
        structure, base, apex, legs = make_regular_tetrahedron_truss(P=P)
        solution = solve(LinearStaticAnalysis(structure, [1.0]))

        # Reactions are the internal forces at the supports
        reactions_z = sum(solution.internal_forces(node)[-1][2] for node in base)
        assert np.isclose(reactions_z, -P, rtol=1e-8), \
            f"Vertical equilibrium violated: ΣRz={reactions_z:.2f}, P={P:.2f}"

    def test_legs_carry_equal_force(self):
        structure, base, apex, legs = make_regular_tetrahedron_truss()
        solution = solve(LinearStaticAnalysis(structure, [1.0]))

        forces = [solution.stress(leg)[-1] * SECTION.area for leg in legs]
        np.testing.assert_allclose(forces, forces[0], rtol=1e-6)
        assert forces[0] < 0, "Legs under a downward apex load are in compression"

    def test_apex_moves_down(self):
        structure, base, apex, legs = make_regular_tetrahedron_truss()
        u_apex = solve(LinearStaticAnalysis(structure, [1.0])).displacements(apex)[-1]
        assert u_apex[2] < 0
        np.testing.assert_allclose(u_apex[:2], 0.0, atol=1e-12)

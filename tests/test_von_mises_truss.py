# tests/test_von_mises_truss.py
"""
VON MISES TRUSS: End-to-End Validation
======================================

Two bars meeting at an apex, both ends pinned, vertical load P at the apex:

            (d, h)
             /\\
            /  \\
           /    \\
    (0,0) ●      ● (2d, 0)

With bar length L and inclination θ, the linear apex deflection is

    v = P L / (2 E A sin²θ)

The 3D version fixes the out-of-plane apex displacement, without which the
planar truss is a mechanism.

With a Saint-Venant-Kirchhoff material and large displacements the vertical
equilibrium of the deformed apex is

    2 S A (h - v) / L + P = 0,   S = E (l² - L²) / (2 L²),   l² = d² + (h - v)²

which is solved here with a scalar root finder and compared to Newton-Raphson.
"""

import numpy as np
import pytest
from scipy.optimize import brentq

from mini_static.analysis import LinearStaticAnalysis, NewtonRaphson, NonlinearStaticAnalysis, solve
from mini_static.boundary_conditions import FixedDofBoundaryCondition, GlobalLoadBoundaryCondition
from mini_static.config import ConvergenceSettings
from mini_static.materials import SVK, IsotropicLinearElastic
from mini_static.model import Mesh, Node
from mini_static.sections import Square
from mini_static.structure import StructuralBoundaryConditions, StructuralMaterials, Structure
from mini_static.state import ConvergenceCriterion
from mini_static.v3d.model import Truss

THETA = np.deg2rad(65.0)


def make_von_mises_truss(E=210e9, width=0.05, d=1.0, P=1000.0, material_kind=IsotropicLinearElastic,
                         dimension=3):
    """
    Build the two-bar truss.

    Returns:
    --------
    structure, apex node
    """
    h = d * np.tan(THETA)
    pad = (0.0,) * (dimension - 2)
    left_support = Node((0.0, 0.0) + pad)
    apex = Node((d, h) + pad)
    right_support = Node((2 * d, 0.0) + pad)

    section = Square(width)
    left = Truss((left_support, apex), section, label='left')
    right = Truss((apex, right_support), section, label='right')

    mesh = Mesh([left_support, apex, right_support], [left, right])
    materials = StructuralMaterials({material_kind(E=E, nu=0.0, label='steel'): [left, right]})

    load = [0.0, -P] + [0.0] * (dimension - 2)
    node_bcs = {
        FixedDofBoundaryCondition(['u'], None, 'supports'): [left_support, right_support],
        GlobalLoadBoundaryCondition(['u'], load, 'apex_load'): [apex],
    }
    if dimension == 3:
        node_bcs[FixedDofBoundaryCondition(['u'], [2], 'out_of_plane')] = [apex]

    return Structure(mesh, materials, StructuralBoundaryConditions(node_bcs=node_bcs)), apex


def linear_apex_deflection(E, A, d, P):
    L = d / np.cos(THETA)
    return P * L / (2 * E * A * np.sin(THETA)**2)


def nonlinear_apex_deflection(E, A, d, P):
    h = d * np.tan(THETA)
    L = d / np.cos(THETA)

    def vertical_balance(v):
        S = E * (d**2 + (h - v)**2 - L**2) / (2 * L**2)
        return 2 * S * A * (h - v) / L + P

    return brentq(vertical_balance, 0.0, h / 2, xtol=1e-14)


class TestLinear:

    @pytest.mark.parametrize("dimension", [2, 3])
    def test_apex_deflection_matches_closed_form(self, dimension):
        E, width, d, P = 210e9, 0.05, 1.0, 1000.0
        structure, apex = make_von_mises_truss(E, width, d, P, dimension=dimension)

        solution = solve(LinearStaticAnalysis(structure, [1.0]))
        u_apex = solution.displacements(apex)[-1]

        expected = linear_apex_deflection(E, width**2, d, P)
        assert np.isclose(u_apex[1], -expected, rtol=1e-8), \
            f"Apex deflection {u_apex[1]:.6e}, expected {-expected:.6e}"
        assert abs(u_apex[0]) < 1e-6 * expected, "Symmetric truss must not sway"

    def test_deflection_scales_with_load_factor(self):
        structure, apex = make_von_mises_truss()
        solution = solve(LinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=4))

        uy = np.array([u[1] for u in solution.displacements(apex)])
        np.testing.assert_allclose(uy / uy[-1], solution.load_factors(), rtol=1e-8)

    def test_supports_do_not_move(self):
        structure, apex = make_von_mises_truss()
        solution = solve(LinearStaticAnalysis(structure, [1.0]))
        U = solution.displacements()[-1]
        np.testing.assert_array_equal(U[structure.dof_manager.positions(structure.fixed_dofs)], 0.0)


class TestNonlinear:

    def test_small_load_matches_linear(self):
        E, width, d, P = 210e9, 0.05, 1.0, 1000.0
        structure, apex = make_von_mises_truss(E, width, d, P, material_kind=SVK)

        solution = solve(NonlinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=2))
        u_apex = solution.displacements(apex)[-1]

        assert np.isclose(u_apex[1], -linear_apex_deflection(E, width**2, d, P), rtol=1e-4)
        assert all(r.is_converged for r in solution.iteration_residuals())

    def test_large_load_matches_deformed_equilibrium(self):
        E, width, d, P = 1.0, 1.0, 1.0, 0.05
        structure, apex = make_von_mises_truss(E, width, d, P, material_kind=SVK)

        solver = NewtonRaphson(ConvergenceSettings(stop_tol_disps=1e-10, stop_tol_force=1e-10))
        solution = solve(NonlinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=5), solver)

        v = nonlinear_apex_deflection(E, width**2, d, P)
        v_linear = linear_apex_deflection(E, width**2, d, P)
        u_apex = solution.displacements(apex)[-1]

        assert np.isclose(u_apex[1], -v, rtol=1e-6)
        assert not np.isclose(v, v_linear, rtol=1e-3), "Load should be large enough to be nonlinear"

    def test_each_step_converges_within_limit(self):
        structure, apex = make_von_mises_truss(E=1.0, width=1.0, P=0.05, material_kind=SVK)
        solution = solve(NonlinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=5))

        for residuals in solution.iteration_residuals():
            assert residuals.criterion == ConvergenceCriterion.BOTH
            assert residuals.iteration <= 20

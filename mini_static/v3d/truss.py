# mini_static/v3d/truss.py
"""
TRUSS ELEMENT: Total-Lagrangian Axial Bar
=========================================

PURPOSE:
--------
This module computes the internal force vector and tangent stiffness of a
2-node bar in 2D or 3D (d = node dimension, 2d element DOFs).

ENGINEERING DERIVATION:
-----------------------
With X21 = X_j - X_i, u21 = u_j - u_i and the reference length L0 = |X21|,
the difference operator

    Bdif = [ -I   I ]        (d × 2d)

maps element displacements to u21.

LARGE DISPLACEMENTS (hyperelastic material):
    Green-Lagrange axial strain   ε = (l² - L0²) / (2 L0²),   l = |X21 + u21|
    strain variation              B = (X21 + u21)^T Bdif / L0²
    (S, E_t) = material.uniaxial_stress(ε)

    f = S A L0 B^T
    K = E_t A L0 B^T B  +  (S A / L0) Bdif^T Bdif
        └ material ┘       └ geometric (initial stress) ┘

SMALL STRAINS:
    ε = X21 · u21 / L0²,   B = X21^T Bdif / L0²

    f = σ A L0 B^T
    K = E A L0 B^T B

The small-strain K is the classical direction-cosine matrix

    K = (EA/L) × [  n n^T   -n n^T ]        n = X21 / L0
                 [ -n n^T    n n^T ]

so a bar along x has K[0,0] = EA/L.

Sign convention: positive strain / stress = tension.
"""

from typing import Tuple

import numpy as np

from ..materials import is_hyperelastic
from .model import ElementResponse, Truss


def truss_geometry(element: Truss) -> Tuple[float, np.ndarray]:
    """
    Reference length and direction cosines of a truss element.

    Properties:
    - the cosines form a unit vector (l² + m² + n² = 1 in 3D)
    - they can be negative depending on the element direction

    Returns:
    --------
    (L, cosines)
        L: element length
        cosines: (d,) unit vector from node i to node j

    Raises:
    -------
    ValueError
        If the element has zero length (both nodes at the same location)

    Example:
    --------
    >>> bar = Truss([Node((0, 0, 0)), Node((2, 0, 0))], Square(0.1))
    >>> L, n = truss_geometry(bar)
    >>> L, n.tolist()
    (2.0, [1.0, 0.0, 0.0])
    """
    X21 = _reference_difference(element)
    L = float(np.linalg.norm(X21))
    if L <= 0.0:
        raise ValueError(
            f"Truss {element.label!r} has zero length "
            f"(both nodes at {element.nodes[0].coordinates})"
        )
    return L, X21 / L


def _reference_difference(element: Truss) -> np.ndarray:
    i, j = element.nodes
    return np.array(j.coordinates, dtype=float) - np.array(i.coordinates, dtype=float)


def truss_internal_forces(material, element: Truss, u_e: np.ndarray) -> ElementResponse:
    """
    Internal forces, tangent stiffness, axial stress and strain of a bar.

    Parameters:
    -----------
    material : IsotropicLinearElastic or SVK
        Only `uniaxial_stress` is used.
    element : Truss
    u_e : np.ndarray
        2d nodal displacements [u_i, u_j], node-major.

    Returns:
    --------
    ElementResponse
        Scalar stress and strain (second Piola-Kirchhoff / Green-Lagrange on
        the large-displacement path).
    """
    d = element.dimension
    u_e = np.asarray(u_e, dtype=float)
    if u_e.shape != (2 * d,):
        raise ValueError(f"Truss expects {2 * d} displacements, got shape {u_e.shape}")

    L0, _ = truss_geometry(element)
    A = element.cross_section.area
    X21 = _reference_difference(element)
    u21 = u_e[d:] - u_e[:d]
    Bdif = np.hstack((-np.eye(d), np.eye(d)))

    if is_hyperelastic(material) and element.large_displacements:
        x21 = X21 + u21
        strain = (x21 @ x21 - L0**2) / (2 * L0**2)
        B = x21 @ Bdif / L0**2
        stress, Et = material.uniaxial_stress(strain)

        forces = stress * A * L0 * B
        K = Et * A * L0 * np.outer(B, B) + (stress * A / L0) * (Bdif.T @ Bdif)
        return ElementResponse(forces, K, stress, strain)

    strain = (X21 @ u21) / L0**2
    B = X21 @ Bdif / L0**2
    stress, Et = material.uniaxial_stress(strain)

    forces = stress * A * L0 * B
    K = Et * A * L0 * np.outer(B, B)
    return ElementResponse(forces, K, stress, strain)


def truss_axial_force(material, element: Truss, u_e: np.ndarray) -> float:
    """
    Axial force N = stress × A.

    Positive = tension, negative = compression.
    """
    return truss_internal_forces(material, element, u_e).stress * element.cross_section.area

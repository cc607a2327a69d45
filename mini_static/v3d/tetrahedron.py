# mini_static/v3d/tetrahedron.py
"""
LINEAR TETRAHEDRON: Internal Forces and Tangent Stiffness
=========================================================

PURPOSE:
--------
Given a material, a 4-node tetrahedron and its 12 nodal displacements
(node-major: [u1x u1y u1z u2x ... u4z]), compute

    f   internal force vector (12,)
    K   tangent stiffness (12×12)
    stress, strain of the (constant-strain) element

ALGORITHM:
----------
The shape-function derivatives with respect to the reference coordinates are
constant (one column per node):

    dN = [ 1  -1   0   0 ]
         [ 0  -1   0   1 ]
         [ 0  -1   1   0 ]

    X     = node coordinates as columns (3×4)
    J     = X dN^T                      (3×3)
    vol   = det(J) / 6                  (must be > 0)
    grad  = J^-T dN                     spatial derivatives (3×4)
    U     = nodal displacements as columns (3×4)
    H     = U grad^T                    displacement gradient

Large displacements (hyperelastic material):
    F = H + I,  E = (H + H^T + H^T H) / 2,  (S, C) = material.cosserat_stress(E)
    f = B^T S_voigt vol,  K = B^T C B vol + K_geo

Small strains:
    ε = (H + H^T) / 2,  (σ, C) = material.cauchy_stress(ε),  B built with F = I
    f = B^T σ_voigt vol,  K = B^T C B vol

B (6×12) maps nodal displacement variations to the Voigt strain variation
[11, 22, 33, 23, 13, 12] with engineering shear. For node k:

    rows 0-2:  diag(grad[:, k]) F^T
    row 3:     grad[1,k] F[:,2] + grad[2,k] F[:,1]
    row 4:     grad[0,k] F[:,2] + grad[2,k] F[:,0]
    row 5:     grad[0,k] F[:,1] + grad[1,k] F[:,0]

Geometric stiffness:
    K_geo = kron(grad^T S grad vol, I3)

NODE ORDERING:
--------------
With the derivatives above, vol equals det[X2-X1, X3-X1, X4-X1] / 6, so the
ordering (0,0,0), (1,0,0), (0,1,0), (0,0,1) has volume +1/6. Swapping any
two nodes flips the sign and the element is rejected.
"""

import numpy as np

from ..materials import is_hyperelastic, voigt
from .model import ElementResponse, Tetrahedron


class NegativeVolumeError(ValueError):
    """Raised when a tetrahedron has zero or negative reference volume."""
    pass


_DN = np.array([
    [1.0, -1.0, 0.0, 0.0],
    [0.0, -1.0, 0.0, 1.0],
    [0.0, -1.0, 1.0, 0.0],
])


def shape_function_derivatives() -> np.ndarray:
    """∂N/∂ξ for the 4 nodes (3×4)."""
    return _DN.copy()


def _coordinates_matrix(t: Tetrahedron) -> np.ndarray:
    return np.array([node.coordinates for node in t.nodes], dtype=float).T


def jacobian(t: Tetrahedron) -> np.ndarray:
    return _coordinates_matrix(t) @ _DN.T


def volume(t: Tetrahedron) -> float:
    """Signed reference volume det(J)/6."""
    return float(np.linalg.det(jacobian(t))) / 6.0


def _B_mat(grad: np.ndarray, F: np.ndarray) -> np.ndarray:
    B = np.zeros((6, 12), dtype=float)
    for k in range(4):
        g = grad[:, k]
        cols = slice(3 * k, 3 * k + 3)
        B[0:3, cols] = np.diag(g) @ F.T
        B[3, cols] = g[1] * F[:, 2] + g[2] * F[:, 1]
        B[4, cols] = g[0] * F[:, 2] + g[2] * F[:, 0]
        B[5, cols] = g[0] * F[:, 1] + g[1] * F[:, 0]
    return B


def tetrahedron_internal_forces(material, element: Tetrahedron, u_e: np.ndarray) -> ElementResponse:
    """
    Internal forces, tangent stiffness, stress and strain of a tetrahedron.

    Parameters:
    -----------
    material : IsotropicLinearElastic or SVK
    element : Tetrahedron
    u_e : np.ndarray
        12 nodal displacements, node-major.

    Returns:
    --------
    ElementResponse
        Hyperelastic large-displacement path: stress is the first
        Piola-Kirchhoff tensor F S, strain the right Cauchy-Green tensor F^T F.
        Small-strain path: Cauchy stress σ and strain ε.

    Raises:
    -------
    NegativeVolumeError
        If the reference volume is not positive.
    """
    u_e = np.asarray(u_e, dtype=float)
    if u_e.shape != (12,):
        raise ValueError(f"Tetrahedron expects 12 displacements, got shape {u_e.shape}")

    J = jacobian(element)
    vol = np.linalg.det(J) / 6.0
    if vol <= 0.0:
        raise NegativeVolumeError(
            f"Tetrahedron {element.label!r} has non-positive volume {vol:.3e}; check node ordering"
        )

    grad = np.linalg.inv(J).T @ _DN
    U = u_e.reshape(4, 3).T
    H = U @ grad.T

    if is_hyperelastic(material) and element.large_displacements:
        F = H + np.eye(3)
        E = 0.5 * (H + H.T + H.T @ H)
        S, C = material.cosserat_stress(E)

        B = _B_mat(grad, F)
        forces = B.T @ voigt(S) * vol
        K_mat = B.T @ C @ B * vol
        K_geo = np.kron(grad.T @ S @ grad * vol, np.eye(3))
        return ElementResponse(forces, K_mat + K_geo, F @ S, F.T @ F)

    eps = 0.5 * (H + H.T)
    sigma, C = material.stress(eps)
    B = _B_mat(grad, np.eye(3))
    forces = B.T @ voigt(sigma) * vol
    K = B.T @ C @ B * vol
    return ElementResponse(forces, K, sigma, eps)


def interpolation_matrix(t: Tetrahedron) -> np.ndarray:
    """
    4×4 matrix M with M @ w = [1, x, y, z] for barycentric weights w.

    Row 0 enforces the partition of unity, rows 1-3 reproduce the
    coordinates of the point.
    """
    M = np.ones((4, 4), dtype=float)
    M[1:, :] = _coordinates_matrix(t)
    return M


def weights(t: Tetrahedron, p) -> np.ndarray:
    """
    Interpolation weights of the 4 nodes at point `p`.

    The weights sum to 1 and are all non-negative when `p` lies inside
    the tetrahedron. A field with nodal values v is interpolated as w @ v.
    """
    rhs = np.concatenate(([1.0], np.asarray(p, dtype=float)))
    return np.linalg.solve(interpolation_matrix(t), rhs)


def contains(t: Tetrahedron, p, atol: float = 1e-10) -> bool:
    return bool(np.all(weights(t, p) >= -atol))

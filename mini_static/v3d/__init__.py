# mini_static/v3d - 3D element kinds
"""
V3D: STRUCTURAL ELEMENTS
========================

This package provides the element kinds that carry stiffness:
- Tetrahedron: 4-node linear solid (12×12 tangent, 3 DOF/node)
- Truss: 2-node axial bar in 2D or 3D (2d×2d tangent, d DOF/node)

Both have a small-strain path and a total-Lagrangian large-displacement path
selected by the material and the element's `large_displacements` flag.

USAGE:
------
    from mini_static.v3d import Tetrahedron, internal_forces

    tet = Tetrahedron(nodes)
    response = internal_forces(SVK(E=210e9, nu=0.3), tet, u_e)
    response.forces, response.stiffness
"""

from .model import ElementResponse, Tetrahedron, Truss
from .elements import internal_forces
from .tetrahedron import NegativeVolumeError, tetrahedron_internal_forces, volume, weights
from .truss import truss_axial_force, truss_geometry, truss_internal_forces

__all__ = [
    'ElementResponse',
    'Tetrahedron',
    'Truss',
    'internal_forces',
    'NegativeVolumeError',
    'tetrahedron_internal_forces',
    'volume',
    'weights',
    'truss_axial_force',
    'truss_geometry',
    'truss_internal_forces',
]

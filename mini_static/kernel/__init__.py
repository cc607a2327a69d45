# mini_static/kernel - Dimension-agnostic structural analysis core
"""
KERNEL: THE DIMENSION-AGNOSTIC FOUNDATION
==========================================

This package contains the plumbing that works for ANY discretization:
trusses, tetrahedra, mixed meshes, several fields on the same nodes.

Assembly and solving don't care about element kinds. They just need:
- A way to map (node, field, component) → global DOF index
- Element matrices and vectors (any size)
- The free DOF positions
- Load vectors

The ELEMENT implementations (Tetrahedron, Truss) live in `mini_static.v3d`.
"""

from .dof import Dof, DOFManager, DofSymbolError
from .assemble import assemble_global_K, assemble_global_F, add_nodal_load
from .solve import solve_free, condition_estimate, MechanismError, LinearSolverError, ConvergenceError

__all__ = [
    'Dof',
    'DOFManager',
    'DofSymbolError',
    'assemble_global_K',
    'assemble_global_F',
    'add_nodal_load',
    'solve_free',
    'condition_estimate',
    'MechanismError',
    'LinearSolverError',
    'ConvergenceError',
]

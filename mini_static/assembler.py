# assembler.py - Global internal forces, tangent matrix and external loads
"""
GLOBAL ASSEMBLY
===============

PURPOSE:
--------
Bridges the structure (elements, materials, Dofs) and the dimension-agnostic
kernel:

    assemble(structure, state)
        for every element: gather u_e through its Dofs, evaluate the element,
        scatter f_e into Fint and K_e into K, keep its stress / strain

    apply_loads(structure, state, t)
        Fext = sum of every load bc at load factor t

Both overwrite what they write, so calling them again with the same state
gives the same result (this is what makes them safe inside a Newton loop).
"""

import logging

import numpy as np

from .kernel.assemble import add_nodal_load, assemble_global_F, assemble_global_K
from .kernel.dof import DOFManager
from .v3d.elements import internal_forces

logger = logging.getLogger(__name__)


def element_positions(element) -> np.ndarray:
    """0-based global positions of the element Dofs."""
    return DOFManager.positions(element.dofs(element.local_dof_symbol))


def assemble(structure, state) -> None:
    """
    Recompute Fint, K and per-element stress / strain from state.displacements.

    Raises:
    -------
    NegativeVolumeError, ValueError
        From element evaluation on invalid geometry.
    TypeError
        On an unsupported element kind.
    """
    state.reset_assembled()
    ndof = state.num_dofs
    U = state.displacements

    k_contributions = []
    f_contributions = []
    for element in structure.elements:
        positions = element_positions(element)
        response = internal_forces(structure.material(element), element, U[positions])

        k_contributions.append((positions, response.stiffness))
        f_contributions.append((positions, response.forces))
        state.stress[element] = response.stress
        state.strain[element] = response.strain

    state.internal_forces = assemble_global_F(ndof, f_contributions)
    state.tangent_matrix = assemble_global_K(ndof, k_contributions)
    logger.debug("Assembled %d elements into %d Dofs", len(k_contributions), ndof)


def apply_loads(structure, state, t: float) -> None:
    """Set Fext to the sum of all load boundary conditions at load factor t."""
    state.external_forces = np.zeros(state.num_dofs)
    bcs = structure.boundary_conditions
    for bc in bcs.load_bcs():
        dofs, values = bcs.load_dofs(bc, t)
        add_nodal_load(state.external_forces, DOFManager.positions(dofs), values)
    state.load_factor = t

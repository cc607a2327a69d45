# mini_static/kernel/assemble.py
"""
ASSEMBLY: Dimension-Agnostic Global Matrix Assembly
===================================================

PURPOSE:
--------
This module handles the assembly of element contributions into global arrays.
This is the scatter-add operation that builds K and F from element-level data.

Assembly doesn't care about element TYPE. It just needs:
- Total number of DOFs
- For each element: its DOF positions and its local matrix / vector

Whether the element is a 2-node truss (6×6 ke) or a 4-node tetrahedron
(12×12 ke), the assembly logic is identical.

SPARSE STORAGE:
---------------
The tangent matrix is built in COO (coordinate) form, one (row, col, value)
triplet per local entry, then converted to CSR. Duplicate triplets (DOFs
shared by several elements) are summed during the conversion. A new matrix
is built on every call, so nothing from a previous assembly can leak in.

USAGE:
------
    contributions = []
    for element in elements:
        positions = dof.positions(dof.element_dof_map(element.nodes, 'u'))
        response = internal_forces(material, element, u[positions])
        contributions.append((positions, response.stiffness))

    K = assemble_global_K(ndof, contributions)
"""

from typing import List, Sequence, Tuple

import numpy as np
import scipy.sparse as sp


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]]
) -> sp.csr_matrix:
    """
    Assemble the global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    rows, cols, vals = [], [], []
    for each element:
        for each (a, b) in element ke:
            rows += dof_map[a]; cols += dof_map[b]; vals += ke[a, b]
    K = coo(vals, (rows, cols)).tocsr()     # duplicates are summed

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system (size of K)

    contributions : List[Tuple[Sequence[int], np.ndarray]]
        List of (dof_map, ke) tuples, one per element:
        - dof_map: 0-based global positions of the element DOFs
        - ke: element matrix, shape (len(dof_map), len(dof_map))

    Returns:
    --------
    scipy.sparse.csr_matrix
        Global matrix K, shape (ndof, ndof)
    """
    rows = []
    cols = []
    vals = []

    for dof_map, ke in contributions:
        dof_map = np.asarray(dof_map, dtype=int)
        n_element_dofs = len(dof_map)

        # Sanity check: ke must match dof_map size
        assert ke.shape == (n_element_dofs, n_element_dofs), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"

        rows.append(np.repeat(dof_map, n_element_dofs))
        cols.append(np.tile(dof_map, n_element_dofs))
        vals.append(np.asarray(ke, dtype=float).ravel())

    if not rows:
        return sp.csr_matrix((ndof, ndof), dtype=float)

    K = sp.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(ndof, ndof),
    )
    return K.tocsr()


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global vector from element contributions.

    Same scatter-add logic as assemble_global_K, but for vectors
    (internal forces, equivalent nodal loads).

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system

    contributions : List[Tuple[Sequence[int], np.ndarray]]
        List of (dof_map, fe) tuples with fe of shape (len(dof_map),)

    Returns:
    --------
    np.ndarray
        Global vector F, shape (ndof,)
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        dof_map = np.asarray(dof_map, dtype=int)
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        # np.add.at accumulates repeated positions instead of overwriting them
        np.add.at(F, dof_map, fe)

    return F


def add_nodal_load(
    F: np.ndarray,
    dof_map: Sequence[int],
    load_vector: np.ndarray
) -> None:
    """
    Add loads to the global load vector (in-place).

    Loads are summed, so several boundary conditions targeting the same DOF
    add up instead of replacing each other.

    Example:
    --------
    >>> F = np.zeros(9)
    >>> add_nodal_load(F, [3, 4, 5], np.array([0.0, -1000.0, 0.0]))
    >>> F[4]
    -1000.0
    """
    np.add.at(F, np.asarray(dof_map, dtype=int), np.asarray(load_vector, dtype=float))

# mini_static/v3d/model.py
"""
3D ELEMENT DEFINITIONS: Tetrahedron and Truss
=============================================

PURPOSE:
--------
This module defines the element kinds that carry stiffness:
- Tetrahedron: a 4-node linear solid (3 displacement DOFs per node, 12×12 tangent)
- Truss: a 2-node axial-only bar (d DOFs per node, 2d×2d tangent)

Elements only hold topology (the Node objects they connect) plus the few
properties that are specific to the element rather than to the material:
the cross section of a bar, and the geometric nonlinearity switch.

GEOMETRIC NONLINEARITY:
-----------------------
`large_displacements=True` (default) makes a hyperelastic material see the
Green-Lagrange strain and the element contribute a geometric stiffness.
With `large_displacements=False`, or with a linear elastic material, the
element uses the small-strain path.

Nodes are shared by identity with the mesh. The node tuple is fixed at
construction; coordinates live on the nodes.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, List, NamedTuple, Tuple

import numpy as np


class ElementResponse(NamedTuple):
    """
    What an element returns for a given displacement.

    forces     internal force vector (n_element_dofs,)
    stiffness  tangent matrix (n_element_dofs, n_element_dofs)
    stress     3×3 tensor for solids, scalar axial stress for bars
    strain     3×3 tensor for solids, scalar axial strain for bars
    """
    forces: np.ndarray
    stiffness: np.ndarray
    stress: Any
    strain: Any


@dataclass(eq=False)
class _Element:
    nodes: Tuple

    local_dof_symbol: ClassVar[str] = "u"

    def dofs(self, symbol: str = "u") -> List:
        """Dofs of the element nodes under `symbol`, node-major then component-minor."""
        result = []
        for node in self.nodes:
            result.extend(node.dofs[symbol])
        return result

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)


@dataclass(eq=False)
class Tetrahedron(_Element):
    """
    A 4-node linear tetrahedron.

    Parameters:
    -----------
    nodes : sequence of 4 Node
        Corner nodes, each with 3 coordinates. The ordering must give a
        positive reference volume (see `v3d.tetrahedron.volume`).

    label : str
        Optional name.

    large_displacements : bool
        Use the Green-Lagrange kinematics with a hyperelastic material.

    Examples:
    ---------
    >>> nodes = [Node((0, 0, 0)), Node((1, 0, 0)), Node((0, 1, 0)), Node((0, 0, 1))]
    >>> tet = Tetrahedron(nodes)
    >>> tet.num_nodes
    4
    """
    label: str = ""
    large_displacements: bool = True

    def __post_init__(self):
        self.nodes = tuple(self.nodes)
        if len(self.nodes) != 4:
            raise ValueError(f"Tetrahedron needs exactly 4 nodes, got {len(self.nodes)}")
        for node in self.nodes:
            if node.dimension != 3:
                raise ValueError("Tetrahedron nodes must be 3-dimensional")


@dataclass(eq=False)
class Truss(_Element):
    """
    A truss element (axial-only bar) connecting two nodes.

    A truss element:
    - Carries only axial force (tension/compression)
    - Has no bending or torsional stiffness
    - Has a uniform cross section (only its area is used)

    Works in 2D or 3D: the DOFs per node follow the node dimension.

    Parameters:
    -----------
    nodes : sequence of 2 Node
        End nodes (i, j). The direction i → j sets the sign of the
        direction cosines but not the stiffness.

    cross_section : CrossSection
        Any object with an `area` attribute (see `mini_static.sections`).

    label : str
        Optional name.

    large_displacements : bool
        Use the Green-Lagrange axial strain with a hyperelastic material.
    """
    cross_section: object = None
    label: str = ""
    large_displacements: bool = True

    def __post_init__(self):
        self.nodes = tuple(self.nodes)
        if len(self.nodes) != 2:
            raise ValueError(f"Truss needs exactly 2 nodes, got {len(self.nodes)}")
        if self.nodes[0].dimension != self.nodes[1].dimension:
            raise ValueError("Truss nodes must have the same dimension")
        if self.cross_section is None:
            raise ValueError("Truss needs a cross section")

    @property
    def dimension(self) -> int:
        return self.nodes[0].dimension

# boundary_conditions.py - Fixed Dofs and load-factor dependent loads
"""
BOUNDARY CONDITIONS
===================

Two kinds of boundary condition can be attached to nodes, faces or elements:

    FixedDofBoundaryCondition     prescribes zero displacement on selected
                                  components of the entity nodes
    GlobalLoadBoundaryCondition   adds a force to the entity Dofs, as a
                                  function of the load factor t

A boundary condition does not know which entities it is attached to; that
mapping lives in `Structure`. The functions here turn (bc, entity) into the
Dofs it targets.

LOAD VALUES:
------------
`values` is either a callable t -> sequence, or a constant sequence that is
scaled by t (so the full load is reached at t = 1). The values are repeated
to fill the targeted Dofs:

    values [0, 0, -1000] on a node with 3 'u' Dofs    -> [0, 0, -1000]
    values [0, 0, -1000] on a face (3 nodes, 9 Dofs)  -> repeated 3 times
    values [0, 0, -1000] on something with 8 Dofs     -> BoundaryConditionError

Loads on a Dof shared by several entities (or several bcs) are summed.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np


class BoundaryConditionError(ValueError):
    """Raised when a boundary condition does not fit the Dofs it targets."""
    pass


def entity_nodes(entity) -> Tuple:
    """Nodes of a node, face or element (a node is its own single node)."""
    nodes = getattr(entity, "nodes", None)
    return tuple(nodes) if nodes is not None else (entity,)


def entity_dofs(entity, dof_symbols: Sequence[str]) -> List:
    """Dofs of `entity` for each symbol, node-major then symbol then component."""
    result = []
    for node in entity_nodes(entity):
        for symbol in dof_symbols:
            if symbol not in node.dofs:
                raise BoundaryConditionError(f"Node has no Dofs with symbol '{symbol}'")
            result.extend(node.dofs[symbol])
    return result


def distribute(values: Sequence[float], n_dofs: int, label: str = "") -> np.ndarray:
    """
    Repeat `values` to cover `n_dofs` Dofs.

    Raises:
    -------
    BoundaryConditionError
        If `n_dofs` is not a multiple of the number of values.
    """
    values = np.atleast_1d(np.asarray(values, dtype=float))
    if values.size == 0 or n_dofs % values.size != 0:
        raise BoundaryConditionError(
            f"Load {label!r} has {values.size} values, which does not divide the "
            f"{n_dofs} targeted Dofs"
        )
    return np.tile(values, n_dofs // values.size)


@dataclass(eq=False)
class FixedDofBoundaryCondition:
    """
    Fix components of one or more Dof symbols.

    Parameters:
    -----------
    dof_symbols : sequence of str
        Fields to act on, e.g. ['u'].
    components : sequence of int, optional
        0-based components of each symbol to fix (0 = x, 1 = y, 2 = z).
        None fixes every component.
    label : str

    Examples:
    ---------
    >>> pin = FixedDofBoundaryCondition(['u'], [0, 1, 2], 'pin')
    >>> roller_z = FixedDofBoundaryCondition(['u'], [2], 'roller')
    """
    dof_symbols: Sequence[str] = ("u",)
    components: Optional[Sequence[int]] = None
    label: str = ""

    def dofs(self, entity) -> List:
        result = []
        for node in entity_nodes(entity):
            for symbol in self.dof_symbols:
                if symbol not in node.dofs:
                    raise BoundaryConditionError(f"Node has no Dofs with symbol '{symbol}'")
                node_dofs = node.dofs[symbol]
                comps = range(len(node_dofs)) if self.components is None else self.components
                for c in comps:
                    if not 0 <= c < len(node_dofs):
                        raise BoundaryConditionError(
                            f"Boundary condition {self.label!r}: component {c} out of range "
                            f"for symbol '{symbol}' with {len(node_dofs)} components"
                        )
                    result.append(node_dofs[c])
        return result


@dataclass(eq=False)
class GlobalLoadBoundaryCondition:
    """
    Load in global axes, applied to every Dof of the targeted entities.

    Parameters:
    -----------
    dof_symbols : sequence of str
        Fields the load acts on, e.g. ['u'].
    values : callable or sequence of float
        t -> values, or constant values scaled by the load factor t.
    label : str

    Examples:
    ---------
    >>> load = GlobalLoadBoundaryCondition(['u'], [0.0, 0.0, -1e3], 'snow')
    >>> load(0.5).tolist()
    [0.0, 0.0, -500.0]
    """
    dof_symbols: Sequence[str] = ("u",)
    values: Union[Callable[[float], Sequence[float]], Sequence[float]] = field(default_factory=list)
    label: str = ""

    def __call__(self, t: float) -> np.ndarray:
        if callable(self.values):
            return np.atleast_1d(np.asarray(self.values(t), dtype=float))
        return t * np.atleast_1d(np.asarray(self.values, dtype=float))

    def dofs(self, entity) -> List:
        return entity_dofs(entity, self.dof_symbols)

    def loads(self, entity, t: float) -> Tuple[List, np.ndarray]:
        """(Dofs, values) of this load on `entity` at load factor t."""
        dofs = self.dofs(entity)
        return dofs, distribute(self(t), len(dofs), self.label)

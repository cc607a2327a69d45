# mini_static/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Bookkeeping
==========================================

PURPOSE:
--------
This module owns the mapping between "node 5, y-displacement" and the global
equation number of that unknown. Every scalar unknown is a `Dof` object with:

    symbol    the field it belongs to ('u' for displacements, 'T' for temperature, ...)
    index     1-based global index, None until assigned
    is_fixed  True when a boundary condition prescribes it

Nodes own their Dofs (one ordered list per field symbol). The DOFManager
attaches Dofs to a container of nodes and answers questions about the
numbering: how many unknowns, which are free, which are fixed.

NUMBERING:
----------
Indices are 1-based and contiguous across all symbols:

    apply('u', 3) on 4 nodes  ->  node 0: 1 2 3 | node 1: 4 5 6 | ... | node 3: 10 11 12
    apply('T', 1) afterwards  ->  node 0: 13    | node 1: 14    | ... | node 3: 16

Array positions are 0-based (`Dof.position == index - 1`), which is what the
assembler uses to scatter into numpy / scipy arrays.

USAGE:
------
    dof = DOFManager(nodes)
    dof.apply('u', 3)
    dof.ndof()                                   # -> 3 * len(nodes)
    dof.positions(dof.element_dof_map([n0, n1], 'u'))
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


class DofSymbolError(ValueError):
    """Raised when Dofs are attached twice under one symbol or a symbol is missing."""
    pass


@dataclass(eq=False)
class Dof:
    """
    A single scalar unknown.

    Two Dofs are the same unknown only if they are the same object: nodes
    share their Dof instances with elements and boundary conditions, so
    identity is what ties them together.

    Examples:
    ---------
    >>> ux = Dof('u', 1)
    >>> ux.position
    0
    >>> ux.fix()
    >>> ux.is_fixed
    True
    """
    symbol: str
    index: Optional[int] = None
    is_fixed: bool = False

    def fix(self) -> None:
        self.is_fixed = True

    def set_index(self, index: int) -> None:
        if index < 1:
            raise ValueError(f"Dof indices are 1-based, got {index}")
        self.index = int(index)

    @property
    def position(self) -> int:
        """0-based position of this Dof in global arrays."""
        if self.index is None:
            raise ValueError(f"Dof '{self.symbol}' has no index assigned yet")
        return self.index - 1

    def __repr__(self) -> str:
        fixed = ", fixed" if self.is_fixed else ""
        return f"Dof({self.symbol!r}, {self.index}{fixed})"


@dataclass
class DOFManager:
    """
    Attaches and indexes Dofs over an ordered container of nodes.

    The nodes must expose a `dofs` dict (symbol -> list of Dof) and an
    `apply(symbol, dofs)` method, which is what `mini_static.model.Node` does.

    Attributes:
    -----------
    nodes : Sequence
        Nodes in mesh order. Numbering is node-major in this order.

    Examples:
    ---------
    >>> dof = DOFManager(nodes)       # 4 nodes, no dofs yet
    >>> dof.apply('u', 3)
    >>> dof.ndof()
    12
    >>> [d.index for d in dof.node_dofs(nodes[1], 'u')]
    [4, 5, 6]
    """
    nodes: Sequence

    def symbols(self) -> List[str]:
        """All field symbols present on at least one node."""
        found = []
        for node in self.nodes:
            for symbol in node.dofs:
                if symbol not in found:
                    found.append(symbol)
        return found

    def apply(self, symbol: str, dofs_per_node: int) -> None:
        """
        Attach `dofs_per_node` new Dofs with `symbol` to every node.

        When Dofs already exist for other symbols, the new ones continue from
        the current maximum index so numbering stays unique over all fields.

        Raises:
        -------
        DofSymbolError
            If `symbol` has already been attached to any node.
        """
        if dofs_per_node < 1:
            raise ValueError(f"dofs_per_node must be positive, got {dofs_per_node}")
        if symbol in self.symbols():
            raise DofSymbolError(f"Dof symbol '{symbol}' already exists.")

        offset = self.ndof()
        for i, node in enumerate(self.nodes):
            first = offset + i * dofs_per_node + 1
            node.apply(symbol, [Dof(symbol, first + k) for k in range(dofs_per_node)])

    def ndof(self) -> int:
        """
        Total number of Dofs.

        Assumes 1-based contiguous numbering, so the count is the maximum
        assigned index. Returns 0 if no Dofs have been attached.
        """
        max_index = 0
        for node in self.nodes:
            for dofs in node.dofs.values():
                for d in dofs:
                    if d.index is not None and d.index > max_index:
                        max_index = d.index
        return max_index

    def all_dofs(self) -> List[Dof]:
        """Every Dof in the container, sorted by global index."""
        result = [d for node in self.nodes for dofs in node.dofs.values() for d in dofs]
        return sorted(result, key=lambda d: d.index)

    def node_dofs(self, node, symbol: str) -> List[Dof]:
        try:
            return list(node.dofs[symbol])
        except KeyError:
            raise DofSymbolError(f"Node has no Dofs with symbol '{symbol}'") from None

    def element_dof_map(self, nodes: Sequence, symbol: str) -> List[Dof]:
        """
        Dofs of an element connecting `nodes`, node-major then component-minor.

        This is the gather/scatter map between element vectors and global ones.
        """
        result = []
        for node in nodes:
            result.extend(self.node_dofs(node, symbol))
        return result

    def free(self) -> List[Dof]:
        return [d for d in self.all_dofs() if not d.is_fixed]

    def fixed(self) -> List[Dof]:
        return [d for d in self.all_dofs() if d.is_fixed]

    @staticmethod
    def positions(dofs: Sequence[Dof]) -> np.ndarray:
        """0-based array positions of `dofs`, in the given order."""
        return np.array([d.position for d in dofs], dtype=int)

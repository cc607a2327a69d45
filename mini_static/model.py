# Node, TriangularFace, Mesh

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .kernel.dof import Dof, DOFManager, DofSymbolError
from .v3d.model import Tetrahedron
from .v3d.tetrahedron import weights


@dataclass(eq=False)
class Node:
    """
    A point of the discretized body.

    Coordinates are fixed at mesh-build time (2 or 3 components). Dofs are
    attached lazily per field symbol by `DOFManager.apply` / `Mesh.apply_dofs`.
    Nodes compare by identity so they can be used as dict keys and shared
    between elements, faces and boundary conditions.
    """
    coordinates: Tuple[float, ...]
    index: Optional[int] = None
    dofs: Dict[str, List[Dof]] = field(default_factory=dict)

    def __post_init__(self):
        coords = tuple(float(c) for c in self.coordinates)
        if len(coords) not in (2, 3):
            raise ValueError(f"Nodes must have 2 or 3 coordinates, got {len(coords)}")
        self.coordinates = coords

    @property
    def dimension(self) -> int:
        return len(self.coordinates)

    @property
    def x(self) -> float:
        return self.coordinates[0]

    @property
    def y(self) -> float:
        return self.coordinates[1]

    @property
    def z(self) -> float:
        return self.coordinates[2] if self.dimension == 3 else 0.0

    def __getitem__(self, i: int) -> float:
        return self.coordinates[i]

    def as_array(self) -> np.ndarray:
        return np.array(self.coordinates, dtype=float)

    def apply(self, symbol: str, dofs: Sequence[Dof]) -> None:
        """Attach an ordered list of Dofs under `symbol`."""
        if symbol in self.dofs:
            raise DofSymbolError(f"Dof symbol '{symbol}' already exists on this node.")
        self.dofs[symbol] = list(dofs)

    def all_dofs(self) -> List[Dof]:
        return [d for dofs in self.dofs.values() for d in dofs]

    def fix(self) -> None:
        for d in self.all_dofs():
            d.fix()

    def set_index(self, index: int) -> None:
        self.index = index


@dataclass(eq=False)
class TriangularFace:
    """
    A 3-node surface entity.

    Faces carry no stiffness; they exist so that loads can be attached to a
    boundary patch and distributed over the Dofs of its nodes.
    """
    nodes: Tuple[Node, ...]
    label: str = ""

    def __post_init__(self):
        self.nodes = tuple(self.nodes)
        if len(self.nodes) != 3:
            raise ValueError(f"TriangularFace needs exactly 3 nodes, got {len(self.nodes)}")

    def dofs(self, symbol: str = "u") -> List[Dof]:
        result = []
        for node in self.nodes:
            result.extend(node.dofs.get(symbol, []))
        return result


@dataclass
class Mesh:
    """
    Nodes, elements and faces covering the discretized domain.

    Named sets hold integer positions into the node / element / face lists,
    not the entities themselves.
    """
    nodes: List[Node]
    elements: List = field(default_factory=list)
    faces: List[TriangularFace] = field(default_factory=list)
    node_sets: Dict[str, Set[int]] = field(default_factory=dict)
    element_sets: Dict[str, Set[int]] = field(default_factory=dict)
    face_sets: Dict[str, Set[int]] = field(default_factory=dict)

    def __post_init__(self):
        self.nodes = list(self.nodes)
        self.elements = list(self.elements)
        self.faces = list(self.faces)

    @property
    def dof_manager(self) -> DOFManager:
        return DOFManager(self.nodes)

    @property
    def dimension(self) -> int:
        return self.nodes[0].dimension if self.nodes else 0

    def num_nodes(self) -> int:
        return len(self.nodes)

    def num_elements(self) -> int:
        return len(self.elements)

    def num_faces(self) -> int:
        return len(self.faces)

    def num_dofs(self) -> int:
        return self.dof_manager.ndof()

    def apply_dofs(self, symbol: str, dofs_per_node: int) -> None:
        self.dof_manager.apply(symbol, dofs_per_node)

    def add_node(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def add_element(self, element) -> int:
        self.elements.append(element)
        return len(self.elements) - 1

    def add_face(self, face: TriangularFace) -> int:
        self.faces.append(face)
        return len(self.faces) - 1

    # Sets

    def add_node_to_set(self, name: str, node_id: int) -> Dict[str, Set[int]]:
        self.node_sets.setdefault(name, set()).add(node_id)
        return self.node_sets

    def add_element_to_set(self, name: str, element_id: int) -> Dict[str, Set[int]]:
        self.element_sets.setdefault(name, set()).add(element_id)
        return self.element_sets

    def add_face_to_set(self, name: str, face_id: int) -> Dict[str, Set[int]]:
        self.face_sets.setdefault(name, set()).add(face_id)
        return self.face_sets

    def node_set(self, name: str) -> List[Node]:
        return [self.nodes[i] for i in sorted(self.node_sets[name])]

    def element_set(self, name: str) -> List:
        return [self.elements[i] for i in sorted(self.element_sets[name])]

    def face_set(self, name: str) -> List[TriangularFace]:
        return [self.faces[i] for i in sorted(self.face_sets[name])]

    def locate(self, point: Sequence[float], atol: float = 1e-10):
        """
        Find the first tetrahedron containing `point`.

        Returns:
        --------
        (element, weights) with weights the barycentric interpolation weights
        of the element nodes, or (None, None) if no tetrahedron contains it.
        """
        p = np.asarray(point, dtype=float)
        for element in self.elements:
            if not isinstance(element, Tetrahedron):
                continue
            w = weights(element, p)
            if np.all(w >= -atol):
                return element, w
        return None, None

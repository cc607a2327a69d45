# structure.py - Mesh + materials + boundary conditions
"""
STRUCTURE
=========

A Structure bundles everything an analysis needs and never changes during
one:

    mesh                  nodes, elements, faces (with their Dofs)
    materials             which material each element uses
    boundary_conditions   which bc acts on which node / face / element

On construction the displacement Dofs 'u' are attached to the mesh nodes
(one per coordinate) if they are not there yet, and every Dof targeted by a
FixedDofBoundaryCondition is fixed. From then on the free / fixed partition
of the Dofs is constant.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .boundary_conditions import (
    BoundaryConditionError,
    FixedDofBoundaryCondition,
    GlobalLoadBoundaryCondition,
    entity_nodes,
)
from .kernel.dof import DOFManager
from .model import Mesh, Node, TriangularFace

logger = logging.getLogger(__name__)


def _has_dofs(entity, dof_symbols) -> bool:
    return all(symbol in node.dofs for node in entity_nodes(entity) for symbol in dof_symbols)


class StructuralMaterials:
    """
    Material → elements mapping, with lookup in every direction.

        materials[element]   -> material of that element
        materials['steel']   -> material labelled 'steel'
        materials[material]  -> elements using it

    Every element appears under exactly one material.
    """

    def __init__(self, mapping: Dict[object, Sequence] = None):
        self._elements: Dict[object, List] = {}
        self._material_of: Dict[int, object] = {}
        for material, elements in (mapping or {}).items():
            self.insert(material, elements)

    def insert(self, material, elements: Sequence) -> None:
        for element in elements:
            if id(element) in self._material_of:
                raise ValueError(f"Element {element.label!r} already has a material")
        self._elements.setdefault(material, []).extend(elements)
        for element in elements:
            self._material_of[id(element)] = material

    def delete(self, material) -> None:
        for element in self._elements.pop(material):
            del self._material_of[id(element)]

    def replace(self, new_material, label_to_replace: str) -> None:
        """Swap the material labelled `label_to_replace`, keeping its elements."""
        old = self[label_to_replace]
        elements = self._elements[old]
        self.delete(old)
        self.insert(new_material, elements)

    def materials(self) -> List:
        return list(self._elements)

    def elements(self, material) -> List:
        return list(self._elements[material])

    def __contains__(self, element) -> bool:
        return id(element) in self._material_of

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements.items())

    def __getitem__(self, key):
        if isinstance(key, str):
            for material in self._elements:
                if material.label == key:
                    return material
            raise KeyError(f"No material labelled {key!r}")
        if key in self._elements:
            return self.elements(key)
        try:
            return self._material_of[id(key)]
        except KeyError:
            raise KeyError(f"No material assigned to {key!r}") from None


@dataclass
class StructuralBoundaryConditions:
    """
    Boundary conditions and the entities they act on.

    Each dict maps a bc to the nodes / faces / elements it is attached to.
    """
    node_bcs: Dict[object, List[Node]] = field(default_factory=dict)
    face_bcs: Dict[object, List[TriangularFace]] = field(default_factory=dict)
    element_bcs: Dict[object, List] = field(default_factory=dict)

    def _groups(self) -> Tuple[Dict, Dict, Dict]:
        return self.node_bcs, self.face_bcs, self.element_bcs

    def all_bcs(self) -> List:
        result = []
        for group in self._groups():
            for bc in group:
                if bc not in result:
                    result.append(bc)
        return result

    def load_bcs(self) -> List[GlobalLoadBoundaryCondition]:
        return [bc for bc in self.all_bcs() if isinstance(bc, GlobalLoadBoundaryCondition)]

    def fixed_dof_bcs(self) -> List[FixedDofBoundaryCondition]:
        return [bc for bc in self.all_bcs() if isinstance(bc, FixedDofBoundaryCondition)]

    def __getitem__(self, label: str):
        for bc in self.all_bcs():
            if bc.label == label:
                return bc
        raise KeyError(f"No boundary condition labelled {label!r}")

    def entities(self, bc) -> List:
        """Nodes, faces and elements `bc` is attached to."""
        result = []
        for group in self._groups():
            result.extend(group.get(bc, []))
        return result

    def bcs_of(self, entity) -> List:
        """Boundary conditions attached to `entity`."""
        return [bc for bc in self.all_bcs() if any(e is entity for e in self.entities(bc))]

    def push(self, bc, entity) -> None:
        """
        Attach `bc` to one more entity.

        A fixed-Dof bc fixes its Dofs on the spot when the entity already
        carries them, so pushing a support onto a built Structure takes
        effect in the next analysis. Otherwise `Structure` fixes them when
        it applies the Dofs.
        """
        if isinstance(entity, Node):
            group = self.node_bcs
        elif isinstance(entity, TriangularFace):
            group = self.face_bcs
        else:
            group = self.element_bcs
        if isinstance(bc, FixedDofBoundaryCondition) and _has_dofs(entity, bc.dof_symbols):
            for dof in bc.dofs(entity):
                dof.fix()
        group.setdefault(bc, []).append(entity)

    def fixed_dofs(self, bc: FixedDofBoundaryCondition) -> List:
        dofs = []
        for entity in self.entities(bc):
            dofs.extend(bc.dofs(entity))
        return dofs

    def load_dofs(self, bc: GlobalLoadBoundaryCondition, t: float) -> Tuple[List, np.ndarray]:
        """
        Dofs loaded by `bc` at load factor t, each once, with summed values.

        A Dof reached through several entities (e.g. a node shared by two
        loaded faces) gets the sum of its contributions.
        """
        dofs: List = []
        totals: Dict[int, float] = {}
        for entity in self.entities(bc):
            entity_dofs, values = bc.loads(entity, t)
            for dof, value in zip(entity_dofs, values):
                if id(dof) not in totals:
                    dofs.append(dof)
                    totals[id(dof)] = 0.0
                totals[id(dof)] += value
        return dofs, np.array([totals[id(d)] for d in dofs], dtype=float)


@dataclass
class Structure:
    """
    Mesh, materials and boundary conditions of one analysis.

    Parameters:
    -----------
    mesh : Mesh
    materials : StructuralMaterials
    boundary_conditions : StructuralBoundaryConditions

    Raises:
    -------
    ValueError
        If an element of the mesh has no material.
    """
    mesh: Mesh
    materials: StructuralMaterials
    boundary_conditions: StructuralBoundaryConditions = field(
        default_factory=StructuralBoundaryConditions
    )

    def __post_init__(self):
        if "u" not in self.dof_manager.symbols():
            self.mesh.apply_dofs("u", self.mesh.dimension)

        for element in self.mesh.elements:
            if element not in self.materials:
                raise ValueError(f"Element {element.label!r} has no material")

        for bc in self.boundary_conditions.fixed_dof_bcs():
            for dof in self.boundary_conditions.fixed_dofs(bc):
                dof.fix()

        logger.debug(
            "Structure with %d nodes, %d elements, %d Dofs (%d free)",
            self.mesh.num_nodes(), self.mesh.num_elements(),
            self.num_dofs, len(self.free_dofs),
        )

    @property
    def dof_manager(self) -> DOFManager:
        return self.mesh.dof_manager

    @property
    def nodes(self) -> List[Node]:
        return self.mesh.nodes

    @property
    def elements(self) -> List:
        return self.mesh.elements

    @property
    def faces(self) -> List[TriangularFace]:
        return self.mesh.faces

    @property
    def num_dofs(self) -> int:
        return self.dof_manager.ndof()

    @property
    def free_dofs(self) -> List:
        return self.dof_manager.free()

    @property
    def fixed_dofs(self) -> List:
        return self.dof_manager.fixed()

    @property
    def free_positions(self) -> np.ndarray:
        return DOFManager.positions(self.free_dofs)

    def material(self, element):
        return self.materials[element]

    def replace_material(self, new_material, label_to_replace: str) -> None:
        self.materials.replace(new_material, label_to_replace)

    def validate_loads(self, t: float = 1.0) -> None:
        """
        Check every load boundary condition against the Dofs it targets.

        Raises:
        -------
        BoundaryConditionError
            If a load does not fit its Dofs, or is attached to nothing.
        """
        for bc in self.boundary_conditions.load_bcs():
            if not self.boundary_conditions.entities(bc):
                raise BoundaryConditionError(f"Load {bc.label!r} is not attached to any entity")
            self.boundary_conditions.load_dofs(bc, t)

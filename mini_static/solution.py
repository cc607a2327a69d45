# solution.py - Recorded states of an analysis and read-only accessors

"""
SOLUTION
========

A StatesSolution is the ordered list of states recorded at the end of each
load step (plus, for a failed Newton step, its last iterate). Accessors
return one value per recorded state:

    solution.displacements(node)      -> [array(3), array(3), ...]
    solution.displacements(dof)       -> [float, float, ...]
    solution.stress(element)          -> [3×3 or scalar, ...]
    solution.to_dataframe()           -> one row per step

Targets can be a Dof, a Node, a list of Dofs, or an element (one row per
element node).
"""

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .kernel.dof import Dof, DOFManager
from .model import Node


class StatesSolution:
    """
    States recorded by an analysis run.

    Parameters:
    -----------
    analysis : StaticAnalysis
        The analysis that produced the states (its structure is used to
        resolve targets).
    solver : NewtonRaphson
        Solver settings the analysis ran with.
    """

    def __init__(self, analysis, solver, states: Optional[Sequence] = None):
        self.analysis = analysis
        self.solver = solver
        self.states: List = list(states) if states is not None else []

    @property
    def structure(self):
        return self.analysis.structure

    def push(self, state) -> None:
        self.states.append(state)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, i):
        return self.states[i]

    def __iter__(self):
        return iter(self.states)

    # Targets

    def _select(self, vector: np.ndarray, target):
        if target is None:
            return vector.copy()
        if isinstance(target, Dof):
            return float(vector[target.position])
        if isinstance(target, Node):
            return vector[DOFManager.positions(target.dofs["u"])]
        if isinstance(target, (list, tuple)):
            return vector[DOFManager.positions(target)]
        # element: one row per node
        return np.array([vector[DOFManager.positions(node.dofs["u"])] for node in target.nodes])

    def displacements(self, target=None) -> List:
        return [self._select(s.displacements, target) for s in self.states]

    def internal_forces(self, target=None) -> List:
        return [self._select(s.internal_forces, target) for s in self.states]

    def external_forces(self, target=None) -> List:
        return [self._select(s.external_forces, target) for s in self.states]

    def stress(self, element=None) -> List:
        if element is None:
            return [dict(s.stress) for s in self.states]
        return [s.stress[element] for s in self.states]

    def strain(self, element=None) -> List:
        if element is None:
            return [dict(s.strain) for s in self.states]
        return [s.strain[element] for s in self.states]

    def load_factors(self) -> np.ndarray:
        return np.array([s.load_factor for s in self.states], dtype=float)

    def iteration_residuals(self) -> List:
        return [s.iteration_residuals for s in self.states]

    def displacements_at(self, point: Sequence[float], atol: float = 1e-10) -> List[np.ndarray]:
        """
        Displacement at an arbitrary point, interpolated inside the
        tetrahedron that contains it.

        Raises:
        -------
        ValueError
            If no tetrahedron of the mesh contains the point.
        """
        element, w = self.structure.mesh.locate(point, atol)
        if element is None:
            raise ValueError(f"Point {tuple(point)} is not inside any tetrahedron")
        return [w @ self._select(s.displacements, element) for s in self.states]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Summary of the run, one row per recorded state.

        Columns: step, load_factor, iterations, criterion, converged,
        residual_force_rel, displacement_rel, max_abs_displacement.
        """
        rows = []
        for step, state in enumerate(self.states, start=1):
            residuals = state.iteration_residuals
            rows.append({
                'step': step,
                'load_factor': state.load_factor,
                'iterations': residuals.iteration,
                'criterion': residuals.criterion.value,
                'converged': residuals.is_converged,
                'residual_force_rel': residuals.residual_force_rel,
                'displacement_rel': residuals.displacement_rel,
                'max_abs_displacement': float(np.max(np.abs(state.displacements), initial=0.0)),
            })
        return pd.DataFrame(rows)

# state.py - Structural state of a static analysis
"""
STATIC STATE
============

Everything that changes while an analysis runs:

    displacements         U      (ndof,)   all Dofs, fixed ones stay 0
    delta_displacements   ΔU     (nfree,)  last increment on the free Dofs
    external_forces       Fext   (ndof,)
    internal_forces       Fint   (ndof,)
    tangent_matrix        K      (ndof, ndof) CSR, rebuilt by every assembly
    stress, strain        per element
    load_factor           t of the current step
    iteration_residuals   norms and convergence flag of the Newton loop

NORMS:
------
    residual forces     r = (Fint - Fext)[free]
    force norm          |r|,  |r| / |Fext[free]|
    displacement norm   |ΔU|, |ΔU| / |U[free]|

A zero reference norm makes the relative norm fall back to the absolute one.
"""

import copy
import enum
from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np
import scipy.sparse as sp


class ConvergenceCriterion(enum.Enum):
    NOT_COMPUTED = "not_computed"
    RESIDUAL_FORCE = "residual_force"
    DISPLACEMENT_INCREMENT = "displacement_increment"
    BOTH = "both"
    MAX_ITERATIONS = "max_iterations"
    LINEAR = "linear"


@dataclass
class ResidualsIterationStep:
    """Bookkeeping of one load step (Newton iterations, or a single linear solve)."""
    iteration: int = 0
    residual_force_abs: float = np.inf
    residual_force_rel: float = np.inf
    displacement_abs: float = np.inf
    displacement_rel: float = np.inf
    criterion: ConvergenceCriterion = ConvergenceCriterion.NOT_COMPUTED

    @property
    def is_converged(self) -> bool:
        return self.criterion in (
            ConvergenceCriterion.RESIDUAL_FORCE,
            ConvergenceCriterion.DISPLACEMENT_INCREMENT,
            ConvergenceCriterion.BOTH,
            ConvergenceCriterion.LINEAR,
        )

    def reset(self) -> None:
        self.iteration = 0
        self.residual_force_abs = self.residual_force_rel = np.inf
        self.displacement_abs = self.displacement_rel = np.inf
        self.criterion = ConvergenceCriterion.NOT_COMPUTED


def _copy(value):
    return value.copy() if isinstance(value, np.ndarray) else value


def _norms(value: np.ndarray, reference: np.ndarray) -> Tuple[float, float]:
    absolute = float(np.linalg.norm(value))
    ref = float(np.linalg.norm(reference))
    return absolute, (absolute / ref if ref > 0.0 else absolute)


@dataclass
class StaticState:
    """
    Mutable state of a structure under static loading.

    Create it with `StaticState.for_structure(structure)`; the arrays are
    sized from the structure's Dof numbering.
    """
    free_positions: np.ndarray
    displacements: np.ndarray
    delta_displacements: np.ndarray
    external_forces: np.ndarray
    internal_forces: np.ndarray
    tangent_matrix: sp.csr_matrix
    stress: Dict = field(default_factory=dict)
    strain: Dict = field(default_factory=dict)
    load_factor: float = 0.0
    iteration_residuals: ResidualsIterationStep = field(default_factory=ResidualsIterationStep)

    @classmethod
    def for_structure(cls, structure) -> "StaticState":
        ndof = structure.num_dofs
        free = structure.free_positions
        return cls(
            free_positions=free,
            displacements=np.zeros(ndof),
            delta_displacements=np.zeros(free.size),
            external_forces=np.zeros(ndof),
            internal_forces=np.zeros(ndof),
            tangent_matrix=sp.csr_matrix((ndof, ndof), dtype=float),
        )

    @property
    def num_dofs(self) -> int:
        return self.displacements.size

    def residual_forces(self) -> np.ndarray:
        """Out-of-balance forces on the free Dofs: (Fint - Fext)[free]."""
        return (self.internal_forces - self.external_forces)[self.free_positions]

    def residual_forces_norms(self) -> Tuple[float, float]:
        """(absolute, relative) norm of the residual forces."""
        return _norms(self.residual_forces(), self.external_forces[self.free_positions])

    def residual_displacements_norms(self) -> Tuple[float, float]:
        """(absolute, relative) norm of the last displacement increment."""
        return _norms(self.delta_displacements, self.displacements[self.free_positions])

    def reduced_tangent_matrix(self) -> sp.csr_matrix:
        free = self.free_positions
        return self.tangent_matrix[free][:, free]

    def update(self, delta: np.ndarray) -> None:
        """U[free] += ΔU. Fixed Dofs are never touched."""
        delta = np.asarray(delta, dtype=float)
        if delta.shape != self.free_positions.shape:
            raise ValueError(
                f"Increment has shape {delta.shape}, expected {self.free_positions.shape}"
            )
        self.delta_displacements = delta.copy()
        self.displacements[self.free_positions] += delta

    def reset_displacements(self) -> None:
        self.displacements[:] = 0.0
        self.delta_displacements[:] = 0.0

    def sync_free_positions(self, free_positions: np.ndarray) -> bool:
        """
        Follow a change of the structure's free Dofs.

        Dofs that became fixed get zero displacement. Returns True if the
        free set changed.
        """
        free_positions = np.asarray(free_positions, dtype=int)
        if np.array_equal(free_positions, self.free_positions):
            return False
        now_fixed = np.setdiff1d(self.free_positions, free_positions)
        self.displacements[now_fixed] = 0.0
        self.free_positions = free_positions
        self.delta_displacements = np.zeros(free_positions.size)
        return True

    def reset_assembled(self) -> None:
        """Zero everything an assembly writes."""
        ndof = self.num_dofs
        self.internal_forces = np.zeros(ndof)
        self.tangent_matrix = sp.csr_matrix((ndof, ndof), dtype=float)
        self.stress = {}
        self.strain = {}

    def snapshot(self) -> "StaticState":
        """
        Copy used to record the state at the end of a step.

        Arrays and residuals are copied; the element keys of stress / strain
        stay the structure's own elements so they can still be looked up.
        """
        return StaticState(
            free_positions=self.free_positions,
            displacements=self.displacements.copy(),
            delta_displacements=self.delta_displacements.copy(),
            external_forces=self.external_forces.copy(),
            internal_forces=self.internal_forces.copy(),
            tangent_matrix=self.tangent_matrix.copy(),
            stress={e: _copy(v) for e, v in self.stress.items()},
            strain={e: _copy(v) for e, v in self.strain.items()},
            load_factor=self.load_factor,
            iteration_residuals=copy.copy(self.iteration_residuals),
        )

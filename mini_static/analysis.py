# analysis.py - Static analysis driver
"""
STATIC ANALYSIS: Load Stepping and Newton-Raphson
=================================================

PURPOSE:
--------
Drives a Structure through an increasing sequence of load factors
t_1 < t_2 < ... < t_N, recording the state at the end of every step.

STAGES:
-------
Every step walks through

    INITIALIZED → APPLYING_LOADS → ASSEMBLING → SOLVING_INCREMENT → UPDATING
                                       ↑                                │
                                       └──────── (not converged) ───────┘
                → CONVERGED → STEP_COMPLETE → (next step | FINISHED)

and a Newton step that runs out of iterations ends in NOT_CONVERGED.
The current stage is kept on the analysis (`analysis.stage`).

LINEAR ANALYSIS:
----------------
One pass per load factor, starting from U = 0:

    Fext = loads(t);  K = assemble(U=0);  K_ff ΔU = Fext_f;  U = ΔU;  reassemble

The final reassembly only refreshes Fint, stress and strain for reporting.

NONLINEAR ANALYSIS (Newton-Raphson):
------------------------------------
Per load factor, starting from the previous step's displacements:

    repeat:
        assemble Fint(U), K(U)
        r = (Fint - Fext)_f
        if |r|/|Fext_f| <= stop_tol_force and |ΔU|/|U_f| <= stop_tol_disps: converged
        K_ff ΔU = -r
        U_f += ΔU

A step that is not converged after `stop_tol_iters` increments is fatal:
the last iterate is pushed to the solution and ConvergenceError is raised
carrying that partial solution.

USAGE:
------
    analysis = NonlinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=10)
    solution = solve(analysis, NewtonRaphson())
    solution.displacements(node)
"""

import abc
import enum
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from tqdm import tqdm

from .assembler import apply_loads, assemble
from .config import DEFAULT_CONFIG, AnalysisConfig, ConvergenceSettings, LinearSolverSettings
from .kernel.solve import ConvergenceError, solve_free
from .solution import StatesSolution
from .state import ConvergenceCriterion, StaticState

logger = logging.getLogger(__name__)


class AnalysisStage(enum.Enum):
    INITIALIZED = "initialized"
    APPLYING_LOADS = "applying_loads"
    ASSEMBLING = "assembling"
    SOLVING_INCREMENT = "solving_increment"
    UPDATING = "updating"
    CONVERGED = "converged"
    STEP_COMPLETE = "step_complete"
    FINISHED = "finished"
    NOT_CONVERGED = "not_converged"


@dataclass
class NewtonRaphson:
    """Newton-Raphson solver settings for nonlinear analyses."""
    convergence: ConvergenceSettings = field(default_factory=ConvergenceSettings)


def _linear_increment(state: StaticState, rhs: np.ndarray, settings: LinearSolverSettings) -> np.ndarray:
    return solve_free(
        state.tangent_matrix, rhs, state.free_positions,
        method=settings.method,
        rtol=settings.rtol,
        atol=settings.atol,
        maxiter=settings.maxiter,
        cond_limit=settings.cond_limit,
    )


class StaticAnalysis(abc.ABC):
    """
    Structure + load factors + current step + current state.

    Parameters:
    -----------
    structure : Structure
    load_factors : sequence of float
        Non-empty and strictly increasing.
    initial_step : int
        0-based index of the first load factor to run.
    """

    def __init__(self, structure, load_factors: Sequence[float], initial_step: int = 0):
        load_factors = np.atleast_1d(np.asarray(load_factors, dtype=float))
        if load_factors.size == 0:
            raise ValueError("An analysis needs at least one load factor")
        if np.any(np.diff(load_factors) <= 0):
            raise ValueError(f"Load factors must be strictly increasing, got {load_factors}")
        if not 0 <= initial_step < load_factors.size:
            raise ValueError(f"initial_step {initial_step} out of range for {load_factors.size} steps")

        self.structure = structure
        self.load_factors = load_factors
        self.initial_step = initial_step
        self.reset()

    @classmethod
    def from_final_factor(cls, structure, final_load_factor: float = 1.0, nsteps: int = 10):
        """Equally spaced load factors t1/N, 2 t1/N, ..., t1."""
        if nsteps < 1:
            raise ValueError(f"nsteps must be at least 1, got {nsteps}")
        return cls(structure, np.linspace(final_load_factor / nsteps, final_load_factor, nsteps))

    def reset(self) -> None:
        self.current_step = self.initial_step
        self.state = StaticState.for_structure(self.structure)
        self.stage = AnalysisStage.INITIALIZED

    @property
    def num_steps(self) -> int:
        return self.load_factors.size

    @property
    def current_load_factor(self) -> float:
        return float(self.load_factors[self.current_step])

    @property
    def is_done(self) -> bool:
        return self.current_step >= self.num_steps

    def next_step(self) -> None:
        self.current_step += 1
        if self.is_done:
            self._set_stage(AnalysisStage.FINISHED)

    def _set_stage(self, stage: AnalysisStage) -> None:
        logger.debug("Step %d: %s -> %s", self.current_step + 1, self.stage.value, stage.value)
        self.stage = stage

    def _apply_loads(self) -> None:
        self._set_stage(AnalysisStage.APPLYING_LOADS)
        apply_loads(self.structure, self.state, self.current_load_factor)

    def _assemble(self) -> None:
        self._set_stage(AnalysisStage.ASSEMBLING)
        assemble(self.structure, self.state)

    def validate(self) -> None:
        """
        Check every load at every load factor before running any step, and
        pick up supports pushed onto the structure since the state was built.
        """
        for t in self.load_factors[self.current_step:]:
            self.structure.validate_loads(float(t))
        if self.state.sync_free_positions(self.structure.free_positions):
            logger.info("Free Dofs changed since the analysis was built: %d now free",
                        self.state.free_positions.size)

    @abc.abstractmethod
    def solve_step(self, solution: StatesSolution, solver, linear_solver: LinearSolverSettings) -> None:
        """Run the current load step and push its state to `solution`."""


class LinearStaticAnalysis(StaticAnalysis):
    """One linear solve per load factor, each starting from U = 0."""

    def solve_step(self, solution: StatesSolution, solver, linear_solver: LinearSolverSettings) -> None:
        state = self.state
        state.reset_displacements()
        state.iteration_residuals.reset()

        self._apply_loads()
        self._assemble()

        self._set_stage(AnalysisStage.SOLVING_INCREMENT)
        delta = _linear_increment(state, state.external_forces[state.free_positions], linear_solver)

        self._set_stage(AnalysisStage.UPDATING)
        state.update(delta)
        self._assemble()

        residuals = state.iteration_residuals
        residuals.iteration = 1
        residuals.residual_force_abs, residuals.residual_force_rel = state.residual_forces_norms()
        residuals.displacement_abs, residuals.displacement_rel = state.residual_displacements_norms()
        residuals.criterion = ConvergenceCriterion.LINEAR

        self._set_stage(AnalysisStage.STEP_COMPLETE)
        solution.push(state.snapshot())


class NonlinearStaticAnalysis(StaticAnalysis):
    """Newton-Raphson per load factor, continuing from the previous step."""

    def solve_step(self, solution: StatesSolution, solver, linear_solver: LinearSolverSettings) -> None:
        settings = solver.convergence
        state = self.state
        residuals = state.iteration_residuals
        residuals.reset()
        state.delta_displacements[:] = 0.0

        self._apply_loads()

        while True:
            self._assemble()
            force_abs, force_rel = state.residual_forces_norms()
            residuals.residual_force_abs, residuals.residual_force_rel = force_abs, force_rel

            if residuals.iteration > 0:
                disp_abs, disp_rel = state.residual_displacements_norms()
                residuals.displacement_abs, residuals.displacement_rel = disp_abs, disp_rel
                logger.debug(
                    "  iteration %d: |r|/|F| = %.3e, |dU|/|U| = %.3e",
                    residuals.iteration, force_rel, disp_rel,
                )
                force_ok = force_rel <= settings.stop_tol_force
                disp_ok = disp_rel <= settings.stop_tol_disps
                if force_ok and disp_ok:
                    residuals.criterion = ConvergenceCriterion.BOTH
                    self._set_stage(AnalysisStage.CONVERGED)
                    break

            if residuals.iteration >= settings.stop_tol_iters:
                residuals.criterion = ConvergenceCriterion.MAX_ITERATIONS
                self._set_stage(AnalysisStage.NOT_CONVERGED)
                solution.push(state.snapshot())
                message = (
                    f"Newton-Raphson did not converge at step {self.current_step + 1} "
                    f"(load factor {self.current_load_factor:.4g}) after {residuals.iteration} "
                    f"iterations: |r|/|F| = {residuals.residual_force_rel:.3e}, "
                    f"|dU|/|U| = {residuals.displacement_rel:.3e}"
                )
                logger.error(message)
                raise ConvergenceError(message, solution=solution, step=self.current_step)

            self._set_stage(AnalysisStage.SOLVING_INCREMENT)
            delta = _linear_increment(state, -state.residual_forces(), linear_solver)

            self._set_stage(AnalysisStage.UPDATING)
            state.update(delta)
            residuals.iteration += 1

        self._set_stage(AnalysisStage.STEP_COMPLETE)
        solution.push(state.snapshot())


def solve(
    analysis: StaticAnalysis,
    solver: Optional[NewtonRaphson] = None,
    linear_solver: Optional[LinearSolverSettings] = None,
    show_progress: bool = False,
) -> StatesSolution:
    """
    Run every remaining step of `analysis`.

    Parameters:
    -----------
    analysis : LinearStaticAnalysis or NonlinearStaticAnalysis
    solver : NewtonRaphson, optional
        Convergence settings for nonlinear analyses (defaults used if None).
        Ignored by linear analyses.
    linear_solver : LinearSolverSettings, optional
        Reduced-system solver settings.
    show_progress : bool
        Show a tqdm progress bar over the load steps.

    Returns:
    --------
    StatesSolution
        One recorded state per load step.

    Raises:
    -------
    BoundaryConditionError
        Before any step, if a load does not fit its Dofs.
    ConvergenceError
        If a Newton-Raphson step does not converge.
    MechanismError, LinearSolverError
        From the reduced linear solve.
    """
    if solver is None:
        solver = NewtonRaphson()
    if linear_solver is None:
        linear_solver = LinearSolverSettings()

    analysis.validate()
    solution = StatesSolution(analysis, solver)

    steps = range(analysis.current_step, analysis.num_steps)
    iterator = tqdm(steps, desc="Load steps") if show_progress else steps

    for _ in iterator:
        logger.info(
            "Step %d/%d, load factor %.4g",
            analysis.current_step + 1, analysis.num_steps, analysis.current_load_factor,
        )
        analysis.solve_step(solution, solver, linear_solver)
        logger.info(
            "Step %d done in %d iterations, max |U| = %.4e",
            analysis.current_step + 1,
            analysis.state.iteration_residuals.iteration,
            float(np.max(np.abs(analysis.state.displacements), initial=0.0)),
        )
        analysis.next_step()

    return solution


def run(structure, config: AnalysisConfig = DEFAULT_CONFIG, nonlinear: bool = True) -> StatesSolution:
    """
    Build and solve an analysis from an AnalysisConfig.

    Example:
    --------
    >>> solution = run(structure, AnalysisConfig(nsteps=5))
    >>> solution.displacements(apex)[-1]
    """
    kind = NonlinearStaticAnalysis if nonlinear else LinearStaticAnalysis
    analysis = kind(structure, config.load_factors())
    return solve(
        analysis,
        NewtonRaphson(config.convergence),
        config.linear_solver,
        show_progress=config.show_progress,
    )

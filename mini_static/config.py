# config.py
"""
Analysis configuration and defaults.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class ConvergenceSettings:
    """Newton-Raphson stopping criteria."""

    # Relative displacement increment |ΔU| / |U|
    stop_tol_disps: float = 1e-6
    # Relative residual force |r| / |Fext|
    stop_tol_force: float = 1e-6
    # Maximum iterations per load step
    stop_tol_iters: int = 20

    def __post_init__(self):
        if self.stop_tol_disps <= 0 or self.stop_tol_force <= 0:
            raise ValueError("Convergence tolerances must be positive")
        if self.stop_tol_iters < 1:
            raise ValueError(f"stop_tol_iters must be at least 1, got {self.stop_tol_iters}")


@dataclass
class LinearSolverSettings:
    """Reduced-system solver: 'cg' (conjugate gradient) or 'direct' (sparse LU)."""

    method: str = "cg"
    rtol: float = 1e-10
    atol: float = 0.0
    maxiter: Optional[int] = None
    # None disables the conditioning check
    cond_limit: Optional[float] = 1e12

    def __post_init__(self):
        if self.method not in ("cg", "direct"):
            raise ValueError(f"Unknown linear solver method: {self.method}")


@dataclass
class AnalysisConfig:
    """Load stepping plus solver settings for `analysis.run`."""

    final_load_factor: float = 1.0
    nsteps: int = 10
    convergence: ConvergenceSettings = field(default_factory=ConvergenceSettings)
    linear_solver: LinearSolverSettings = field(default_factory=LinearSolverSettings)
    show_progress: bool = False

    def __post_init__(self):
        if self.nsteps < 1:
            raise ValueError(f"nsteps must be at least 1, got {self.nsteps}")
        if self.final_load_factor <= 0:
            raise ValueError(f"final_load_factor must be positive, got {self.final_load_factor}")

    def load_factors(self) -> np.ndarray:
        """Equally spaced factors t1/N, 2 t1/N, ..., t1."""
        return np.linspace(self.final_load_factor / self.nsteps, self.final_load_factor, self.nsteps)


# Global config instance
DEFAULT_CONFIG = AnalysisConfig()

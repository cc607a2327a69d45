"""Reduced linear solve over free DOFs, with mechanism detection and solver failure reporting."""

import logging
from typing import Optional

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

logger = logging.getLogger(__name__)


class MechanismError(RuntimeError):
    """Raised when structure is unstable or ill-conditioned."""
    pass


class LinearSolverError(RuntimeError):
    """Raised when the iterative linear solver does not converge."""
    pass


class ConvergenceError(RuntimeError):
    """
    Raised when a Newton-Raphson load step does not converge.

    The partial solution (including the last, non-converged iterate) is kept
    on the exception so callers can inspect it.
    """

    def __init__(self, message: str, solution=None, step: Optional[int] = None):
        super().__init__(message)
        self.solution = solution
        self.step = step


def _factorize(Kff: sp.csr_matrix):
    """Sparse LU of the reduced tangent; a zero pivot means a mechanism."""
    try:
        return spla.splu(Kff.tocsc())
    except RuntimeError as exc:
        raise MechanismError(f"Unstable system: {exc}. Check supports.") from exc


def condition_estimate(Kff: sp.spmatrix, lu=None) -> float:
    """
    1-norm condition number estimate ||K||_1 · ||K^-1||_1 of a sparse matrix.

    ||K^-1||_1 comes from Higham's block estimator (`spla.onenormest`) driven
    by solves against the LU factor, so K^-1 is never formed.
    """
    Kff = sp.csr_matrix(Kff)
    if lu is None:
        lu = _factorize(Kff)
    n = Kff.shape[0]
    inverse = spla.LinearOperator(
        (n, n),
        matvec=lu.solve,
        rmatvec=lambda b: lu.solve(b, trans="T"),
        dtype=float,
    )
    return float(spla.norm(Kff, 1) * spla.onenormest(inverse))


def solve_free(
    K: sp.spmatrix,
    F: np.ndarray,
    free: np.ndarray,
    method: str = "cg",
    rtol: float = 1e-10,
    atol: float = 0.0,
    maxiter: Optional[int] = None,
    cond_limit: Optional[float] = 1e12
) -> np.ndarray:
    """
    Solve K_ff · d_f = F_f restricted to the free DOFs.

    Args:
        K: Global tangent matrix (ndof x ndof), sparse or dense
        F: Right-hand side restricted to the free DOFs (len(free),)
        free: 0-based positions of the free DOFs
        method: 'cg' (conjugate gradient) or 'direct' (sparse LU)
        rtol, atol, maxiter: Iterative solver controls
        cond_limit: Max estimated 1-norm condition number of K_ff before raising
            MechanismError (None skips the check). The estimate reuses a sparse
            LU of K_ff, which the direct method then solves with.

    Returns:
        d_f: Solution over the free DOFs (len(free),)

    Raises:
        MechanismError: If K_ff is singular, ill-conditioned or the solution is not finite
        LinearSolverError: If CG does not converge
    """
    free = np.asarray(free, dtype=int)
    if free.size == 0:
        return np.zeros(0, dtype=float)

    Kff = sp.csr_matrix(K)[free][:, free]
    Ff = np.asarray(F, dtype=float)

    if Ff.shape != (free.size,):
        raise ValueError(f"Right-hand side has shape {Ff.shape}, expected ({free.size},)")

    if method not in ("cg", "direct"):
        raise ValueError(f"Unknown linear solver method: {method}")

    # Check conditioning (1-norm estimate, K_ff stays sparse)
    lu = None
    if cond_limit is not None:
        lu = _factorize(Kff)
        cond = condition_estimate(Kff, lu)
        if not np.isfinite(cond) or cond > cond_limit:
            raise MechanismError(
                f"Unstable system (cond~{cond:.2e}). Check supports. Need cond < {cond_limit:.0e}."
            )

    if method == "cg":
        df, info = spla.cg(Kff, Ff, rtol=rtol, atol=atol, maxiter=maxiter)
        if info > 0:
            raise LinearSolverError(
                f"Conjugate gradient did not converge after {info} iterations (rtol={rtol:.1e})"
            )
        if info < 0:
            raise LinearSolverError(f"Conjugate gradient failed with illegal input (info={info})")
    elif lu is not None:
        df = lu.solve(Ff)
    else:
        df = spla.spsolve(Kff.tocsc(), Ff)

    df = np.atleast_1d(np.asarray(df, dtype=float))
    if not np.all(np.isfinite(df)):
        raise MechanismError("Linear solve produced non-finite displacements. Check supports.")

    logger.debug("Solved %d free DOFs with %s", free.size, method)
    return df

"""
Stationary and Krylov iterative solvers.

All start from x = 0. Jacobi, Gauss-Seidel and SOR stop when the relative
change ||x_new - x||_1 / ||x_new||_1 drops below tol; conjugate gradient
stops when the residual 2-norm does. Hitting max_iter is not an error:
the last iterate comes back with converged=False.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import NumericalError


@dataclass(frozen=True)
class IterativeOutcome:
    x: NDArray[np.floating[Any]]
    converged: bool
    iterations: int
    final_change: float


def _relative_change(x_new: NDArray[Any], x_old: NDArray[Any]) -> float:
    step = float(np.sum(np.abs(x_new - x_old)))
    scale = float(np.sum(np.abs(x_new)))
    # x_new == 0 happens for b == 0; fall back to the absolute step
    return step / scale if scale > 0.0 else step


def _diagonal(a: NDArray[Any], method: str) -> NDArray[Any]:
    d = np.diag(a).copy()
    zero = np.flatnonzero(d == 0)
    if zero.size:
        raise NumericalError(
            f"{method}: zero on the diagonal at row {int(zero[0])}; "
            f"reorder the equations or use a direct method"
        )
    return d


def jacobi(
    a: NDArray[Any], b: NDArray[Any], tol: float, max_iter: int
) -> IterativeOutcome:
    d = _diagonal(a, 'jacobi')
    off = a - np.diag(d)
    x = np.zeros_like(b, dtype=np.float64)
    change = float('inf')
    for iteration in range(1, max_iter + 1):
        x_new = (b - off @ x) / d[:, None]
        change = _relative_change(x_new, x)
        x = x_new
        if change < tol:
            return IterativeOutcome(x, True, iteration, change)
    return IterativeOutcome(x, False, max_iter, change)


def sor(
    a: NDArray[Any], b: NDArray[Any], tol: float, max_iter: int, omega: float = 1.0
) -> IterativeOutcome:
    """
    Successive over-relaxation; omega == 1 is Gauss-Seidel.
    
    Each row update uses the entries of x already refreshed in this sweep.
    """
    n = a.shape[0]
    d = _diagonal(a, 'sor' if omega != 1.0 else 'gauss_seidel')
    x = np.zeros_like(b, dtype=np.float64)
    change = float('inf')
    for iteration in range(1, max_iter + 1):
        x_old = x.copy()
        for i in range(n):
            sigma = a[i, :i] @ x[:i] + a[i, i + 1:] @ x_old[i + 1:]
            x[i] = (1.0 - omega) * x_old[i] + omega * (b[i] - sigma) / d[i]
        change = _relative_change(x, x_old)
        if change < tol:
            return IterativeOutcome(x, True, iteration, change)
    return IterativeOutcome(x, False, max_iter, change)


def gauss_seidel(
    a: NDArray[Any], b: NDArray[Any], tol: float, max_iter: int
) -> IterativeOutcome:
    return sor(a, b, tol, max_iter, omega=1.0)


def conjugate_gradient(
    a: NDArray[Any], b: NDArray[Any], tol: float, max_iter: int
) -> IterativeOutcome:
    """
    Conjugate gradient for symmetric positive-definite A.
    
    Right-hand side columns are solved independently; iterations is the
    largest count over the columns and converged requires all of them.
    """
    n, k = b.shape
    x = np.zeros((n, k), dtype=np.float64)
    worst_iterations = 0
    worst_change = 0.0
    all_converged = True
    
    for j in range(k):
        xj = x[:, j]
        r = b[:, j] - a @ xj
        p = r.copy()
        rs_old = float(r @ r)
        converged = np.sqrt(rs_old) < tol
        iterations = 0
        while not converged and iterations < max_iter:
            iterations += 1
            ap = a @ p
            curvature = float(p @ ap)
            if curvature <= 0.0:
                raise NumericalError(
                    f"conjugate_gradient: p^T A p = {curvature:.3g} <= 0, "
                    f"matrix is not positive definite"
                )
            alpha = rs_old / curvature
            xj += alpha * p
            r -= alpha * ap
            rs_new = float(r @ r)
            if np.sqrt(rs_new) < tol:
                converged = True
                rs_old = rs_new
                break
            p = r + (rs_new / rs_old) * p
            rs_old = rs_new
        worst_iterations = max(worst_iterations, iterations)
        worst_change = max(worst_change, float(np.sqrt(rs_old)))
        all_converged = all_converged and converged
    
    return IterativeOutcome(x, all_converged, worst_iterations, worst_change)


SOLVERS = {
    'jacobi': jacobi,
    'gauss_seidel': gauss_seidel,
    'conjugate_gradient': conjugate_gradient,
}

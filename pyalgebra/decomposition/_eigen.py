"""
Eigenvalues by unshifted QR iteration, and the real Schur form.

A_{k+1} = R_k Q_k with A_k = Q_k R_k (Householder). The accumulated
product of the Q_k is the Schur basis. Iteration stops once every
entry below the diagonal is under tol; real matrices with complex
eigenvalues never reach that and raise ConvergenceError.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import ConvergenceError
from pyalgebra.decomposition._qr import householder


def qr_iteration(
    a: NDArray[Any],
    tol: float,
    max_iter: int,
) -> tuple[NDArray[Any], NDArray[Any], int]:
    """
    Returns (T, Q, iterations) with A = Q T Q^T and T upper triangular.
    
    Raises:
        ConvergenceError: If the subdiagonal does not vanish within max_iter
    """
    n = a.shape[0]
    ak = np.array(a, dtype=np.float64)
    q = np.eye(n)
    change = float(np.max(np.abs(np.tril(ak, -1)))) if n > 1 else 0.0
    for iteration in range(1, max_iter + 1):
        if change < tol:
            return ak, q, iteration - 1
        qk, rk = householder(ak)
        ak = rk @ qk
        q = q @ qk
        change = float(np.max(np.abs(np.tril(ak, -1))))
    if change < tol:
        return ak, q, max_iter
    raise ConvergenceError(
        f"QR iteration: subdiagonal still {change:.3g} after {max_iter} iterations "
        f"(complex or equal-magnitude eigenvalues?)",
        iterations=max_iter,
        final_change=change,
        reason='max_iterations',
        threshold=tol,
    )


def triangular_eigenvectors(T: NDArray[Any]) -> NDArray[Any]:
    """
    Eigenvectors of an upper-triangular matrix, one per column.
    
    For eigenvalue t_kk the vector has y_k = 1, zeros below, and the
    entries above come from back substitution on (T - t_kk I) y = 0.
    Repeated eigenvalues that would divide by zero get a zero entry.
    """
    n = T.shape[0]
    Y = np.zeros((n, n))
    for k in range(n):
        lam = T[k, k]
        Y[k, k] = 1.0
        for i in range(k - 1, -1, -1):
            denom = T[i, i] - lam
            s = float(T[i, i + 1:k + 1] @ Y[i + 1:k + 1, k])
            Y[i, k] = -s / denom if abs(denom) > 1e-14 else 0.0
        Y[:, k] /= np.linalg.norm(Y[:, k])
    return Y
